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
from collections import defaultdict
from typing import TYPE_CHECKING, Any

from django.conf import settings as conf_settings
from django.db import transaction

from confmanager.models.meal import MealGroup, MealGroupAssignment
from confmanager.models.registration import GroupRegistration, HousingType, IndividualRegistration
from confmanager.utils.core.exceptions import ValidationFailedError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from django.contrib.auth.models import User
    from django.db.models import QuerySet

    from confmanager.models.event import Event

logger = logging.getLogger(__name__)

Registration = GroupRegistration | IndividualRegistration


def get_weight(registration: Registration) -> int:
    """Headcount a registration adds to its meal group."""
    if isinstance(registration, GroupRegistration):
        return max(1, registration.total_participants)
    return 1


def get_accommodation(registration: Registration) -> str | None:
    """Meal group accommodation matching the registration housing, None when any group fits."""
    if registration.housing_type in (HousingType.ON_CAMPUS, HousingType.OFF_CAMPUS):
        return registration.housing_type
    return None


def _active(assignments: QuerySet) -> QuerySet:
    # Rows of soft-deleted registrations no longer count
    return assignments.filter(
        group_registration__deleted__isnull=True, individual_registration__deleted__isnull=True
    ).select_related("group_registration")


def get_meal_group_sizes(event: Event) -> dict[int, int]:
    """Compute the headcount of every meal group of the event from its assignment rows."""
    sizes = defaultdict(int)
    assignments = _active(MealGroupAssignment.objects.filter(meal_group__event=event))
    for assignment in assignments:
        sizes[assignment.meal_group_id] += assignment.headcount
    return sizes


def current_size(meal_group: MealGroup) -> int:
    return sum(assignment.headcount for assignment in _active(meal_group.assignments.all()))


def _refresh_size_cache(meal_group: MealGroup) -> None:
    MealGroup.objects.filter(pk=meal_group.pk).update(size_cache=current_size(meal_group))


def recalculate_meal_group_sizes(event: Event) -> list[dict[str, Any]]:
    """Rewrite the stored sizes of the event's meal groups where they drifted.

    Returns:
        One entry per corrected meal group with its old and new size

    """
    sizes = get_meal_group_sizes(event)
    fixed = []
    with transaction.atomic():
        for meal_group in MealGroup.objects.select_for_update().filter(event=event):
            new_size = sizes.get(meal_group.id, 0)
            if meal_group.size_cache == new_size:
                continue
            fixed.append(
                {"id": meal_group.uuid, "name": meal_group.name, "oldSize": meal_group.size_cache, "newSize": new_size}
            )
            meal_group.size_cache = new_size
            meal_group.save(update_fields=["size_cache", "updated"])

    if fixed:
        logger.info("Fixed %s meal group sizes for event %s", len(fixed), event.slug)
    return fixed


def _target_field(registration: Registration) -> str:
    if isinstance(registration, GroupRegistration):
        return "group_registration"
    return "individual_registration"


def assign_meal_group(
    meal_group: MealGroup, registration: Registration, user: User | None = None
) -> tuple[MealGroupAssignment, bool]:
    """Attach a registration to a meal group, moving it if it already had one.

    Returns:
        Tuple of (assignment, created), created False when an existing row moved

    """
    if registration.event_id != meal_group.event_id:
        raise ValidationFailedError("Registration and meal group belong to different events")

    field = _target_field(registration)
    with transaction.atomic():
        # serialize concurrent moves into the same meal group
        MealGroup.objects.select_for_update().filter(pk=meal_group.pk).first()
        assignment = MealGroupAssignment.objects.select_for_update().filter(**{field: registration}).first()
        previous = None
        if assignment:
            if assignment.meal_group_id == meal_group.id:
                return assignment, False
            previous = assignment.meal_group
            assignment.meal_group = meal_group
            assignment.assigned_by = user
            assignment.save()
            created = False
        else:
            assignment = MealGroupAssignment.objects.create(
                meal_group=meal_group, assigned_by=user, **{field: registration}
            )
            created = True

        _refresh_size_cache(meal_group)
        if previous:
            _refresh_size_cache(previous)

    logger.info("Assigned %s to meal group %s", registration, meal_group)
    return assignment, created


def unassign_meal_group(registration: Registration) -> bool:
    """Detach a registration from its meal group, False if it had none."""
    field = _target_field(registration)
    with transaction.atomic():
        assignment = (
            MealGroupAssignment.objects.select_for_update()
            .select_related("meal_group")
            .filter(**{field: registration})
            .first()
        )
        if not assignment:
            return False
        meal_group = assignment.meal_group
        assignment.delete()
        _refresh_size_cache(meal_group)

    logger.info("Removed %s from meal group %s", registration, meal_group)
    return True


def plan_balanced(
    meal_groups: Sequence[MealGroup], sizes: dict[int, int], registrations: Iterable[Registration]
) -> list[tuple[Registration, MealGroup]]:
    """Greedily send each registration to the currently smallest eligible meal group.

    Eligibility follows accommodation: meal groups reserved for on or off
    campus only take matching registrations, falling back to every group when
    none matches. Ties go to the first group in display order.

    Args:
        meal_groups: Active meal groups in display order
        sizes: Current headcount per meal group id, updated in place
        registrations: Registrations to place, in placement order

    Returns:
        List of (registration, meal_group) pairs

    """
    plan = []
    for registration in registrations:
        accommodation = get_accommodation(registration)
        eligible = [meal_group for meal_group in meal_groups if meal_group.accepts(accommodation)] or list(meal_groups)

        best = eligible[0]
        for meal_group in eligible[1:]:
            if sizes.get(meal_group.id, 0) < sizes.get(best.id, 0):
                best = meal_group

        plan.append((registration, best))
        sizes[best.id] = sizes.get(best.id, 0) + get_weight(registration)
    return plan


def auto_assign_meal_groups(event: Event, user: User | None = None) -> int:
    """Place every unassigned registration of the event in a meal group.

    Group registrations go first, ordered by name, then individual
    registrations. Already assigned registrations are never moved.

    Returns:
        Number of registrations assigned

    Raises:
        ValidationFailedError: If the event has no active meal group

    """
    with transaction.atomic():
        meal_groups = list(
            MealGroup.objects.select_for_update().filter(event=event, is_active=True).order_by("order", "id")
        )
        if not meal_groups:
            raise ValidationFailedError("No active meal groups available")

        sizes = get_meal_group_sizes(event)
        groups = GroupRegistration.objects.filter(event=event, meal_assignment__isnull=True).order_by(
            "group_name", "id"
        )
        individuals = IndividualRegistration.objects.filter(event=event, meal_assignment__isnull=True).order_by(
            "last_name", "first_name", "id"
        )
        plan = plan_balanced(meal_groups, sizes, [*groups, *individuals])

        MealGroupAssignment.objects.bulk_create(
            [
                MealGroupAssignment(
                    meal_group=meal_group, assigned_by=user, **{_target_field(registration): registration}
                )
                for registration, meal_group in plan
            ]
        )
        for meal_group in meal_groups:
            MealGroup.objects.filter(pk=meal_group.pk).update(size_cache=sizes.get(meal_group.id, 0))

    logger.info("Auto-assigned %s registrations to meal groups for event %s", len(plan), event.slug)
    return len(plan)


def get_meal_balance(event: Event) -> dict[str, Any]:
    """Balance dashboard: share of the headcount per active meal group.

    A group is flagged low when its size is below MEAL_BALANCE_LOW_RATIO
    times the mean size of active groups.
    """
    meal_groups = list(MealGroup.objects.filter(event=event, is_active=True).order_by("order", "id"))
    sizes = get_meal_group_sizes(event)

    total = sum(sizes.get(meal_group.id, 0) for meal_group in meal_groups)
    average = total / len(meal_groups) if meal_groups else 0
    threshold = average * conf_settings.MEAL_BALANCE_LOW_RATIO

    groups = []
    for meal_group in meal_groups:
        size = sizes.get(meal_group.id, 0)
        groups.append(
            {
                "id": meal_group.uuid,
                "name": meal_group.name,
                "color": meal_group.color,
                "capacity": meal_group.capacity,
                "breakfastTime": meal_group.breakfast_time,
                "lunchTime": meal_group.lunch_time,
                "dinnerTime": meal_group.dinner_time,
                "accommodationType": meal_group.accommodation_type,
                "currentSize": size,
                "percentage": round(size * 100 / total, 1) if total else 0,
                "low": total > 0 and size < threshold,
                "full": bool(meal_group.capacity) and size >= meal_group.capacity,
            }
        )

    unassigned = {"event": event, "meal_assignment__isnull": True}
    return {
        "groups": groups,
        "totalAssigned": total,
        "average": round(average, 1),
        "unassignedGroups": GroupRegistration.objects.filter(**unassigned).count(),
        "unassignedIndividuals": IndividualRegistration.objects.filter(**unassigned).count(),
    }
