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

"""Tests for the group leader and organizer housing endpoints"""

from django.urls import reverse

from confmanager.models.housing import RoomAssignment
from confmanager.tests.unit.base import BaseTestCase


class TestGroupHousingViews(BaseTestCase):
    def setUp(self) -> None:
        self.leader = self.get_user()
        self.group = self.create_group()
        self.room = self.create_room(capacity=2)
        self.john = self.create_participant(first_name="John")
        self.client.force_login(self.leader)

    def url(self, name: str) -> str:
        return reverse(name, kwargs={"g": self.group.uuid})

    def assign(self, participant, bed_number=1):
        return self.post_json(
            self.url("group_housing_assign"),
            {"participantId": participant.uuid, "roomId": self.room.uuid, "bedNumber": bed_number},
        )

    def test_overview(self) -> None:
        response = self.client.get(self.url("group_housing"))

        assert response.status_code == 200
        data = response.json()
        assert data["groupId"] == self.group.uuid
        assert data["rooms"][0]["id"] == self.room.uuid
        assert data["participants"][0]["id"] == self.john.uuid

    def test_assign(self) -> None:
        response = self.assign(self.john, 2)

        assert response.status_code == 200
        assert response.json()["assignment"]["bedLetter"] == "B"
        assert RoomAssignment.objects.get(participant=self.john).bed_number == 2

    def test_assign_occupied_bed(self) -> None:
        paul = self.create_participant(first_name="Paul")
        self.assign(self.john, 1)

        response = self.assign(paul, 1)

        assert response.status_code == 400
        assert "occupied" in response.json()["message"]

    def test_assign_missing_field(self) -> None:
        response = self.post_json(self.url("group_housing_assign"), {"participantId": self.john.uuid})

        assert response.status_code == 400
        assert response.json()["message"] == "Missing required field: roomId"

    def test_fractional_bed_number(self) -> None:
        for bed_number in (1.7, "2.5", True):
            with self.subTest(bed_number=bed_number):
                response = self.assign(self.john, bed_number)

                assert response.status_code == 400
                assert response.json()["message"] == "Field bedNumber must be an integer"
        assert not RoomAssignment.objects.exists()

    def test_whole_float_bed_number(self) -> None:
        response = self.assign(self.john, 2.0)

        assert response.status_code == 200
        assert RoomAssignment.objects.get(participant=self.john).bed_number == 2

    def test_malformed_body(self) -> None:
        response = self.client.post(
            self.url("group_housing_assign"), data="not json", content_type="application/json"
        )
        assert response.status_code == 400

    def test_unassign_is_idempotent(self) -> None:
        self.assign(self.john)

        first = self.post_json(self.url("group_housing_unassign"), {"participantId": self.john.uuid})
        second = self.post_json(self.url("group_housing_unassign"), {"participantId": self.john.uuid})

        assert first.json()["removed"] is True
        assert second.status_code == 200
        assert second.json()["removed"] is False

    def test_auto_assign(self) -> None:
        self.create_participant(first_name="Paul")

        response = self.post_json(self.url("group_housing_auto_assign"), {"category": "male_u18"})

        assert response.status_code == 200
        assert response.json() == {"assigned": 2, "unassigned": 0}

    def test_submit_then_locked(self) -> None:
        response = self.post_json(self.url("group_housing_submit"))
        assert response.status_code == 200
        assert response.json()["isLocked"] is True

        response = self.assign(self.john)
        assert response.status_code == 423
        assert not RoomAssignment.objects.exists()

    def test_request_unlock_when_open(self) -> None:
        response = self.post_json(self.url("group_housing_request_unlock"))
        assert response.status_code == 400

    def test_other_user_is_forbidden(self) -> None:
        stranger = self.create_user(username="stranger", email="stranger@example.com")
        self.client.force_login(stranger)

        response = self.client.get(self.url("group_housing"))

        assert response.status_code == 403

    def test_unknown_group(self) -> None:
        response = self.client.get(reverse("group_housing", kwargs={"g": "missing"}))
        assert response.status_code == 404

    def test_get_not_allowed_on_mutations(self) -> None:
        response = self.client.get(self.url("group_housing_assign"))
        assert response.status_code == 405

    def test_anonymous_is_redirected(self) -> None:
        self.client.logout()
        response = self.client.get(self.url("group_housing"))
        assert response.status_code == 302


class TestOrgaHousingUnlock(BaseTestCase):
    def setUp(self) -> None:
        self.group = self.create_group(housing_locked=True, housing_unlock_requested=True)
        self.organizer = self.create_organizer()
        self.url = reverse("orga_housing_unlock", kwargs={"e": self.get_event().slug, "g": self.group.uuid})

    def test_organizer_unlocks(self) -> None:
        self.client.force_login(self.organizer)

        response = self.post_json(self.url)

        assert response.status_code == 200
        assert response.json() == {"isLocked": False, "unlockRequested": False}
        self.group.refresh_from_db()
        assert not self.group.housing_locked

    def test_group_leader_cannot_unlock(self) -> None:
        self.client.force_login(self.group.leader)

        response = self.post_json(self.url)

        assert response.status_code == 403
        self.group.refresh_from_db()
        assert self.group.housing_locked

    def test_organizer_can_edit_group_housing(self) -> None:
        self.client.force_login(self.organizer)
        response = self.client.get(reverse("group_housing", kwargs={"g": self.group.uuid}))
        assert response.status_code == 200
