# ConfManager - conference registration and on-site operations
# Copyright (C) 2025 ConfManager contributors
#
# This file is part of ConfManager and is dual-licensed:
#
# 1. Under the terms of the GNU Affero General Public License (AGPL) version 3,
#    as published by the Free Software Foundation. You may use, modify, and
#    distribute this file under those terms.
#
# 2. Under a commercial license, allowing use in closed-source or proprietary
#    environments without the obligations of the AGPL.
#
# If you have obtained this file under the AGPL, and you make it available over
# a network, you must also make the complete source code available under the same license.
#
# SPDX-License-Identifier: AGPL-3.0-or-later OR Proprietary

"""Tests for bed assignment, auto-assign and housing lock"""

import pytest
from django.utils import timezone

from confmanager.housing.allocation import (
    AutoAssignResult,
    approve_housing_unlock,
    assign_bed,
    auto_assign_category,
    get_housing_overview,
    plan_first_fit,
    request_housing_unlock,
    submit_housing,
    unassign_bed,
)
from confmanager.models.housing import Room, RoomAssignment
from confmanager.models.registration import Participant
from confmanager.tests.unit.base import BaseTestCase
from confmanager.utils.core.exceptions import (
    BedOccupiedError,
    CategoryMismatchError,
    HousingLockedError,
    NotAssignedError,
    NotFoundError,
    UserPermissionError,
    ValidationFailedError,
)


def test_plan_first_fit_pairs_in_order() -> None:
    plan = plan_first_fit(["a", "b", "c"], [("r1", 1), ("r1", 2)])
    assert plan == [("a", "r1", 1), ("b", "r1", 2)]


class TestAssignBed(BaseTestCase):
    def setUp(self) -> None:
        self.group = self.create_group()
        self.room = self.create_room(room_number="101", capacity=2)
        self.john = self.create_participant(first_name="John")
        self.paul = self.create_participant(first_name="Paul")

    def test_assign_bed(self) -> None:
        assignment = assign_bed(self.group, self.john.uuid, self.room.uuid, 1)

        assert assignment.room == self.room
        assert assignment.bed_number == 1
        assert RoomAssignment.objects.get(participant=self.john).bed_number == 1

    def test_bed_occupied(self) -> None:
        assign_bed(self.group, self.john.uuid, self.room.uuid, 1)

        with pytest.raises(BedOccupiedError):
            assign_bed(self.group, self.paul.uuid, self.room.uuid, 1)

        assert not RoomAssignment.objects.filter(participant=self.paul).exists()

    def test_same_bed_again_is_a_no_op(self) -> None:
        first = assign_bed(self.group, self.john.uuid, self.room.uuid, 1)
        second = assign_bed(self.group, self.john.uuid, self.room.uuid, 1)
        assert first.pk == second.pk

    def test_move_to_another_bed(self) -> None:
        assign_bed(self.group, self.john.uuid, self.room.uuid, 1)
        assign_bed(self.group, self.john.uuid, self.room.uuid, 2)

        assignments = RoomAssignment.objects.filter(participant=self.john)
        assert assignments.count() == 1
        assert assignments.first().bed_number == 2

    def test_category_mismatch(self) -> None:
        girl = self.create_participant(first_name="Lucy", gender="female")

        with pytest.raises(CategoryMismatchError):
            assign_bed(self.group, girl.uuid, self.room.uuid, 1)

    def test_adult_cannot_sleep_in_youth_room(self) -> None:
        chaperone = self.create_participant(first_name="Mark", age=40, participant_type="chaperone")

        with pytest.raises(CategoryMismatchError):
            assign_bed(self.group, chaperone.uuid, self.room.uuid, 1)

    def test_priest_is_never_eligible(self) -> None:
        priest = self.create_participant(first_name="Fr. Tom", age=50, participant_type="priest")
        clergy_room = self.create_room(room_number="C1", capacity=1, housing_type="clergy")

        with pytest.raises(CategoryMismatchError):
            assign_bed(self.group, priest.uuid, clergy_room.uuid, 1)

    def test_bed_number_out_of_range(self) -> None:
        with pytest.raises(ValidationFailedError):
            assign_bed(self.group, self.john.uuid, self.room.uuid, 3)
        with pytest.raises(ValidationFailedError):
            assign_bed(self.group, self.john.uuid, self.room.uuid, 0)

    def test_room_of_another_group(self) -> None:
        other = self.create_group(group_name="St. Joseph")
        room = self.create_room(room_number="102", allocated_to=other)

        with pytest.raises(UserPermissionError):
            assign_bed(self.group, self.john.uuid, room.uuid, 1)

    def test_participant_of_another_group(self) -> None:
        other = self.create_group(group_name="St. Joseph")
        stranger = self.create_participant(group=other, first_name="Luke")

        with pytest.raises(NotFoundError):
            assign_bed(self.group, stranger.uuid, self.room.uuid, 1)

    def test_unknown_room(self) -> None:
        with pytest.raises(NotFoundError):
            assign_bed(self.group, self.john.uuid, "missing", 1)

    def test_locked_group_leaves_rows_unchanged(self) -> None:
        assign_bed(self.group, self.john.uuid, self.room.uuid, 1)
        submit_housing(self.group)

        with pytest.raises(HousingLockedError):
            assign_bed(self.group, self.paul.uuid, self.room.uuid, 2)
        with pytest.raises(HousingLockedError):
            unassign_bed(self.group, self.john.uuid)

        assert list(RoomAssignment.objects.values_list("participant_id", "bed_number")) == [(self.john.id, 1)]


class TestUnassignBed(BaseTestCase):
    def setUp(self) -> None:
        self.group = self.create_group()
        self.room = self.create_room()
        self.john = self.create_participant()

    def test_unassign(self) -> None:
        assign_bed(self.group, self.john.uuid, self.room.uuid, 1)

        assert unassign_bed(self.group, self.john.uuid) is True
        assert not RoomAssignment.objects.exists()

    def test_unassign_twice_is_a_no_op(self) -> None:
        assign_bed(self.group, self.john.uuid, self.room.uuid, 1)

        assert unassign_bed(self.group, self.john.uuid) is True
        assert unassign_bed(self.group, self.john.uuid) is False

    def test_strict_unassign_without_bed(self) -> None:
        with pytest.raises(NotAssignedError):
            unassign_bed(self.group, self.john.uuid, strict=True)


class TestAutoAssign(BaseTestCase):
    def setUp(self) -> None:
        self.group = self.create_group()
        self.first = self.create_room(room_number="201", capacity=2)
        self.second = self.create_room(room_number="202", capacity=2)
        self.boys = [self.create_participant(first_name=f"Boy{i}") for i in range(3)]

    def test_fills_rooms_in_display_order(self) -> None:
        result = auto_assign_category(self.group, "male_u18")

        assert result == AutoAssignResult(assigned=3, unassigned=0)
        placed = list(
            RoomAssignment.objects.order_by("participant_id").values_list("participant_id", "room_id", "bed_number")
        )
        assert placed == [
            (self.boys[0].id, self.first.id, 1),
            (self.boys[1].id, self.first.id, 2),
            (self.boys[2].id, self.second.id, 1),
        ]

    def test_room_order_wins_over_room_number(self) -> None:
        Room.objects.filter(pk__in=[self.first.pk, self.second.pk]).update(allocated_to=None)
        south = self.create_building(name="South Hall")
        south_room = self.create_room(building=south, room_number="1", capacity=1)
        ten = self.create_room(room_number="10", capacity=1)
        two = self.create_room(room_number="2", capacity=1)

        auto_assign_category(self.group, "male_u18")

        rooms = [RoomAssignment.objects.get(participant=boy).room for boy in self.boys]
        assert rooms == [ten, two, south_room]

    def test_skips_occupied_beds(self) -> None:
        assign_bed(self.group, self.boys[2].uuid, self.first.uuid, 1)

        result = auto_assign_category(self.group, "male_u18")

        assert result.assigned == 2
        assert RoomAssignment.objects.get(participant=self.boys[0]).room == self.first
        assert RoomAssignment.objects.get(participant=self.boys[0]).bed_number == 2
        assert RoomAssignment.objects.get(participant=self.boys[1]).room == self.second

    def test_reports_participants_left_without_bed(self) -> None:
        Room.objects.filter(pk=self.second.pk).update(allocated_to=None)
        extra = self.create_participant(first_name="Boy3")

        result = auto_assign_category(self.group, "male_u18")

        assert result == AutoAssignResult(assigned=2, unassigned=2)
        assert not RoomAssignment.objects.filter(participant=extra).exists()

    def test_other_categories_untouched(self) -> None:
        self.create_participant(first_name="Lucy", gender="female")
        self.create_room(room_number="301", gender="female", capacity=1)

        result = auto_assign_category(self.group, "male_u18")

        assert result.assigned == 3
        assert not RoomAssignment.objects.filter(participant__gender="female").exists()

    def test_unknown_category(self) -> None:
        with pytest.raises(ValidationFailedError):
            auto_assign_category(self.group, "clergy")

    def test_locked(self) -> None:
        submit_housing(self.group)

        with pytest.raises(HousingLockedError):
            auto_assign_category(self.group, "male_u18")
        assert not RoomAssignment.objects.exists()


class TestDeletedParticipants(BaseTestCase):
    def setUp(self) -> None:
        self.group = self.create_group()
        self.room = self.create_room(room_number="101", capacity=1)
        self.john = self.create_participant(first_name="John")
        self.paul = self.create_participant(first_name="Paul")
        assign_bed(self.group, self.john.uuid, self.room.uuid, 1)

    def test_soft_delete_frees_the_bed(self) -> None:
        self.john.delete()

        assert not RoomAssignment.objects.filter(room=self.room).exists()
        assignment = assign_bed(self.group, self.paul.uuid, self.room.uuid, 1)
        assert assignment.participant == self.paul

    def test_auto_assign_takes_the_freed_bed(self) -> None:
        self.john.delete()

        result = auto_assign_category(self.group, "male_u18")

        assert result == AutoAssignResult(assigned=1, unassigned=0)
        assert RoomAssignment.objects.get(room=self.room).participant == self.paul

    def test_stale_bed_of_deleted_participant_is_released(self) -> None:
        Participant.objects.filter(pk=self.john.pk).update(deleted=timezone.now())

        assign_bed(self.group, self.paul.uuid, self.room.uuid, 1)

        assert list(RoomAssignment.objects.values_list("participant_id", flat=True)) == [self.paul.id]

    def test_overview_ignores_stale_beds(self) -> None:
        Participant.objects.filter(pk=self.john.pk).update(deleted=timezone.now())

        overview = get_housing_overview(self.group)

        assert [participant["firstName"] for participant in overview["participants"]] == ["Paul"]
        assert overview["rooms"][0]["beds"][0]["participantId"] is None
        assert overview["stats"]["male_u18"] == {"total": 1, "assigned": 0}

    def test_soft_deleted_room_releases_its_beds(self) -> None:
        self.room.delete()

        assert not RoomAssignment.objects.exists()


class TestHousingLock(BaseTestCase):
    def test_submit_request_and_approve(self) -> None:
        group = self.create_group()

        group = submit_housing(group)
        assert group.housing_locked
        assert group.housing_submitted_at is not None

        group = request_housing_unlock(group)
        assert group.housing_unlock_requested
        assert group.housing_unlock_requested_at is not None

        group = approve_housing_unlock(group)
        assert not group.housing_locked
        assert not group.housing_unlock_requested

    def test_submit_twice(self) -> None:
        group = submit_housing(self.create_group())

        with pytest.raises(HousingLockedError):
            submit_housing(group)

    def test_request_unlock_when_open(self) -> None:
        with pytest.raises(ValidationFailedError):
            request_housing_unlock(self.create_group())


class TestHousingOverview(BaseTestCase):
    def test_overview(self) -> None:
        group = self.create_group()
        room = self.create_room(capacity=3)
        john = self.create_participant(first_name="John")
        self.create_participant(first_name="Paul")
        self.create_participant(first_name="Fr. Tom", age=50, participant_type="priest")
        assign_bed(group, john.uuid, room.uuid, 2)

        overview = get_housing_overview(group)

        assert overview["isLocked"] is False
        assert len(overview["participants"]) == 2
        beds = overview["rooms"][0]["beds"]
        assert [bed["bedLetter"] for bed in beds] == ["A", "B", "C"]
        assert beds[1]["participantId"] == john.uuid
        assert beds[0]["participantId"] is None
        assert overview["stats"]["male_u18"] == {"total": 2, "assigned": 1}
