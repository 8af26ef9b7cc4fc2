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

from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from confmanager.meals.balancer import (
    assign_meal_group,
    auto_assign_meal_groups,
    get_meal_balance,
    recalculate_meal_group_sizes,
    unassign_meal_group,
)
from confmanager.models.event import Event
from confmanager.models.meal import MealGroup
from confmanager.models.registration import GroupRegistration, IndividualRegistration
from confmanager.utils.core.base import check_event_context, get_json_body, get_required
from confmanager.utils.core.exceptions import ValidationFailedError


def _get_registration(event: Event, body: dict) -> GroupRegistration | IndividualRegistration:
    """Resolve the registration named in the body, exactly one of the two ids."""
    group_uuid = body.get("groupRegistrationId")
    individual_uuid = body.get("individualRegistrationId")
    if bool(group_uuid) == bool(individual_uuid):
        raise ValidationFailedError("Provide either groupRegistrationId or individualRegistrationId")

    if group_uuid:
        return get_object_or_404(GroupRegistration, event=event, uuid=group_uuid)
    return get_object_or_404(IndividualRegistration, event=event, uuid=individual_uuid)


@login_required
@require_GET
def orga_meal_groups(request: HttpRequest, e: str) -> JsonResponse:
    """Balance dashboard of the event's active meal groups."""
    context = check_event_context(request, e)
    return JsonResponse(get_meal_balance(context["event"]))


@login_required
@require_POST
def orga_meal_group_assign(request: HttpRequest, e: str) -> JsonResponse:
    context = check_event_context(request, e)
    body = get_json_body(request)

    meal_group = get_object_or_404(MealGroup, event=context["event"], uuid=get_required(body, "mealGroupId"))
    registration = _get_registration(context["event"], body)

    assignment, created = assign_meal_group(meal_group, registration, request.user)
    return JsonResponse(
        {
            "mealGroupId": meal_group.uuid,
            "groupRegistrationId": assignment.group_registration.uuid if assignment.group_registration_id else None,
            "individualRegistrationId": (
                assignment.individual_registration.uuid if assignment.individual_registration_id else None
            ),
            "created": created,
        },
        status=201 if created else 200,
    )


@login_required
@require_POST
def orga_meal_group_unassign(request: HttpRequest, e: str) -> JsonResponse:
    context = check_event_context(request, e)
    registration = _get_registration(context["event"], get_json_body(request))
    return JsonResponse({"removed": unassign_meal_group(registration)})


@login_required
@require_POST
def orga_meal_groups_auto_assign(request: HttpRequest, e: str) -> JsonResponse:
    context = check_event_context(request, e)
    assigned = auto_assign_meal_groups(context["event"], request.user)
    return JsonResponse({"assigned": assigned})


@login_required
@require_POST
def orga_meal_groups_recalculate(request: HttpRequest, e: str) -> JsonResponse:
    context = check_event_context(request, e)
    fixed = recalculate_meal_group_sizes(context["event"])
    return JsonResponse({"fixed": len(fixed), "groups": fixed})
