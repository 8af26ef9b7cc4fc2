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

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from django.db import IntegrityError, transaction
from django.utils import timezone

from confmanager.housing.category import HousingCategory, get_category, parse_category
from confmanager.models.housing import Room, RoomAssignment, bed_letter
from confmanager.models.registration import GroupRegistration, Participant, ParticipantType
from confmanager.utils.core.exceptions import (
    BedOccupiedError,
    CategoryMismatchError,
    HousingLockedError,
    NotAssignedError,
    NotFoundError,
    UserPermissionError,
    ValidationFailedError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutoAssignResult:
    assigned: int
    unassigned: int


def plan_first_fit(participants: Sequence[Any], free_beds: Iterable[tuple[Any, int]]) -> list[tuple[Any, Any, int]]:
    """Pair participants with free beds in the order both are given.

    Args:
        participants: Participants waiting for a bed, already in priority order
        free_beds: (room, bed_number) slots in room display order then bed order

    Returns:
        List of (participant, room, bed_number); its length is the smaller of
        the two inputs

    """
    return [(participant, room, bed) for participant, (room, bed) in zip(participants, free_beds)]


def _lock_group(group: GroupRegistration) -> GroupRegistration:
    """Reload the group row under lock and reject mutations once housing is submitted."""
    locked = GroupRegistration.objects.select_for_update().get(pk=group.pk)
    if locked.housing_locked:
        logger.warning("Housing mutation refused for locked group %s", locked.uuid)
        raise HousingLockedError(
            "Housing assignments have been submitted and are locked. Request an unlock to make changes."
        )
    return locked


def _release_stale_beds(rooms: Iterable[Room]) -> None:
    """Free beds still held by soft-deleted participants."""
    released, _detail = RoomAssignment.objects.filter(room__in=rooms, participant__deleted__isnull=False).delete()
    if released:
        logger.warning("Released %s beds held by deleted participants", released)


def _get_participant(group: GroupRegistration, participant_uuid: str) -> Participant:
    participant = (
        Participant.objects.select_for_update().filter(uuid=participant_uuid, group_registration=group).first()
    )
    if not participant:
        raise NotFoundError("Participant not found in this group")
    return participant


def assign_bed(group: GroupRegistration, participant_uuid: str, room_uuid: str, bed_number: int) -> RoomAssignment:
    """Place a participant of the group in a bed of one of the group's rooms.

    A participant already sleeping elsewhere is moved: the previous
    assignment is removed in the same transaction.

    Raises:
        HousingLockedError: If the group already submitted housing
        NotFoundError: If the room or the participant cannot be found
        UserPermissionError: If the room is not allocated to the group
        ValidationFailedError: If the bed number is outside the room capacity
        CategoryMismatchError: If participant and room categories differ
        BedOccupiedError: If someone else already sleeps in the bed

    """
    with transaction.atomic():
        group = _lock_group(group)

        room = (
            Room.objects.select_for_update()
            .select_related("building")
            .filter(uuid=room_uuid, building__event_id=group.event_id)
            .first()
        )
        if not room:
            raise NotFoundError("Room not found")
        if room.allocated_to_id != group.id:
            raise UserPermissionError("Room is not allocated to your group")
        if bed_number < 1 or bed_number > room.capacity:
            raise ValidationFailedError(f"Invalid bed number, the room has {room.capacity} beds")

        participant = _get_participant(group, participant_uuid)

        participant_category = get_category(participant)
        room_category = get_category(room)
        if participant_category is None or participant_category != room_category:
            raise CategoryMismatchError(
                f"{participant} ({participant_category or 'not eligible'}) cannot be placed "
                f"in room {room.room_number} ({room_category or 'not eligible'})"
            )

        _release_stale_beds([room])
        occupant = (
            RoomAssignment.objects.select_for_update()
            .filter(room=room, bed_number=bed_number, participant__deleted__isnull=True)
            .first()
        )
        if occupant:
            if occupant.participant_id == participant.id:
                return occupant
            raise BedOccupiedError(f"Bed {bed_letter(bed_number)} in room {room.room_number} is already occupied")

        RoomAssignment.objects.filter(participant=participant).delete()
        try:
            with transaction.atomic():
                assignment = RoomAssignment.objects.create(
                    room=room,
                    participant=participant,
                    group_registration=group,
                    bed_number=bed_number,
                )
        except IntegrityError as err:
            raise BedOccupiedError(
                f"Bed {bed_letter(bed_number)} in room {room.room_number} is already occupied"
            ) from err

    logger.info("Assigned %s to room %s bed %s (group %s)", participant, room, bed_number, group.uuid)
    return assignment


def unassign_bed(group: GroupRegistration, participant_uuid: str, *, strict: bool = False) -> bool:
    """Remove the participant from their bed.

    Returns:
        True if an assignment was removed, False if the participant had none

    Raises:
        NotAssignedError: If strict and the participant had no bed

    """
    with transaction.atomic():
        group = _lock_group(group)
        participant = _get_participant(group, participant_uuid)
        deleted, _detail = RoomAssignment.objects.filter(participant=participant).delete()

    if not deleted:
        if strict:
            raise NotAssignedError
        return False

    logger.info("Unassigned %s from housing (group %s)", participant, group.uuid)
    return True


def auto_assign_category(group: GroupRegistration, category: HousingCategory | str) -> AutoAssignResult:
    """Fill the free beds of the group's rooms in one category, first fit.

    Rooms are visited in display order and beds in ascending number;
    participants without a free bed stay unassigned and are only counted.
    """
    parsed = parse_category(category)
    if parsed is None:
        raise ValidationFailedError(f"Unknown housing category: {category}")

    with transaction.atomic():
        group = _lock_group(group)

        candidates = (
            group.participants.select_for_update(of=("self",)).filter(room_assignment__isnull=True).order_by("id")
        )
        waiting = [participant for participant in candidates if get_category(participant) == parsed]

        rooms = [
            room
            for room in Room.objects.select_for_update().filter(allocated_to=group).select_related("building")
            if get_category(room) == parsed
        ]
        _release_stale_beds(rooms)
        occupied = set(
            RoomAssignment.objects.filter(room__in=rooms, participant__deleted__isnull=True).values_list(
                "room_id", "bed_number"
            )
        )
        free_beds = [(room, bed) for room in rooms for bed in room.bed_numbers() if (room.id, bed) not in occupied]

        plan = plan_first_fit(waiting, free_beds)
        try:
            with transaction.atomic():
                RoomAssignment.objects.bulk_create(
                    [
                        RoomAssignment(room=room, participant=participant, group_registration=group, bed_number=bed)
                        for participant, room, bed in plan
                    ]
                )
        except IntegrityError as err:
            raise BedOccupiedError("Beds changed while auto-assigning, please retry") from err

    result = AutoAssignResult(assigned=len(plan), unassigned=len(waiting) - len(plan))
    logger.info(
        "Auto-assigned %s %s participants for group %s (%s left)",
        result.assigned,
        parsed,
        group.uuid,
        result.unassigned,
    )
    return result


def submit_housing(group: GroupRegistration) -> GroupRegistration:
    """Lock the group's housing; unassigned participants are completed on site."""
    with transaction.atomic():
        group = _lock_group(group)
        group.housing_locked = True
        group.housing_submitted_at = timezone.now()
        group.housing_unlock_requested = False
        group.housing_unlock_requested_at = None
        group.save()

    logger.info("Housing submitted for group %s", group.uuid)
    return group


def request_housing_unlock(group: GroupRegistration) -> GroupRegistration:
    with transaction.atomic():
        group = GroupRegistration.objects.select_for_update().get(pk=group.pk)
        if not group.housing_locked:
            raise ValidationFailedError("Housing is not locked")
        group.housing_unlock_requested = True
        group.housing_unlock_requested_at = timezone.now()
        group.save()

    logger.info("Housing unlock requested for group %s", group.uuid)
    return group


def approve_housing_unlock(group: GroupRegistration) -> GroupRegistration:
    """Organizer action: reopen housing for edits and clear any pending request."""
    with transaction.atomic():
        group = GroupRegistration.objects.select_for_update().get(pk=group.pk)
        if not group.housing_locked:
            raise ValidationFailedError("Housing is not locked")
        group.housing_locked = False
        group.housing_unlock_requested = False
        group.housing_unlock_requested_at = None
        group.save()

    logger.info("Housing unlocked for group %s", group.uuid)
    return group


def get_housing_overview(group: GroupRegistration) -> dict:
    """Build the group leader's housing page data.

    Returns:
        Dictionary with lock state, rooms and their bed slots, participants
        (clergy excluded) with their bed, and per category stats

    """
    current = RoomAssignment.objects.filter(group_registration=group, participant__deleted__isnull=True)
    assignments = {assignment.participant_id: assignment for assignment in current.select_related("room")}

    participants = []
    stats = {category: {"total": 0, "assigned": 0} for category in HousingCategory.values}
    names = {}
    for participant in group.participants.exclude(participant_type=ParticipantType.PRIEST):
        names[participant.id] = (participant.uuid, str(participant))
        category = get_category(participant)
        assignment = assignments.get(participant.id)
        if category:
            stats[category]["total"] += 1
            if assignment:
                stats[category]["assigned"] += 1
        participants.append(
            {
                "id": participant.uuid,
                "firstName": participant.first_name,
                "lastName": participant.last_name,
                "age": participant.age,
                "gender": participant.gender,
                "participantType": participant.participant_type,
                "category": category,
                "roomId": assignment.room.uuid if assignment else None,
                "bedNumber": assignment.bed_number if assignment else None,
                "bedLetter": bed_letter(assignment.bed_number) if assignment else None,
            }
        )

    by_bed = {(assignment.room_id, assignment.bed_number): assignment for assignment in assignments.values()}
    rooms = []
    for room in Room.objects.filter(allocated_to=group).select_related("building"):
        beds = []
        for bed in room.bed_numbers():
            assignment = by_bed.get((room.id, bed))
            uuid, name = names.get(assignment.participant_id, (None, None)) if assignment else (None, None)
            beds.append(
                {"bedNumber": bed, "bedLetter": bed_letter(bed), "participantId": uuid, "participantName": name}
            )
        rooms.append(
            {
                "id": room.uuid,
                "building": room.building.name,
                "roomNumber": room.room_number,
                "floor": room.floor,
                "capacity": room.capacity,
                "gender": room.gender,
                "housingType": room.housing_type,
                "category": get_category(room),
                "beds": beds,
            }
        )

    return {
        "groupId": group.uuid,
        "groupName": group.group_name,
        "housingType": group.housing_type,
        "isLocked": group.housing_locked,
        "submittedAt": group.housing_submitted_at,
        "unlockRequested": group.housing_unlock_requested,
        "unlockRequestedAt": group.housing_unlock_requested_at,
        "rooms": rooms,
        "participants": participants,
        "stats": stats,
    }
