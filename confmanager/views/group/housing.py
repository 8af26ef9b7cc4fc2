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

from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from confmanager.housing.allocation import (
    assign_bed,
    auto_assign_category,
    get_housing_overview,
    request_housing_unlock,
    submit_housing,
    unassign_bed,
)
from confmanager.models.housing import bed_letter
from confmanager.utils.core.base import check_group_context, get_int, get_json_body, get_required


@login_required
@require_GET
def group_housing(request: HttpRequest, g: str) -> JsonResponse:
    """Rooms allocated to the group, their beds and the participants to place."""
    context = check_group_context(request, g)
    return JsonResponse(get_housing_overview(context["group"]))


@login_required
@require_POST
def group_housing_assign(request: HttpRequest, g: str) -> JsonResponse:
    context = check_group_context(request, g)
    body = get_json_body(request)

    assignment = assign_bed(
        context["group"],
        get_required(body, "participantId"),
        get_required(body, "roomId"),
        get_int(body, "bedNumber"),
    )
    return JsonResponse(
        {
            "assignment": {
                "participantId": assignment.participant.uuid,
                "roomId": assignment.room.uuid,
                "bedNumber": assignment.bed_number,
                "bedLetter": bed_letter(assignment.bed_number),
            },
            "housing": get_housing_overview(context["group"]),
        }
    )


@login_required
@require_POST
def group_housing_unassign(request: HttpRequest, g: str) -> JsonResponse:
    context = check_group_context(request, g)
    body = get_json_body(request)

    removed = unassign_bed(context["group"], get_required(body, "participantId"))
    return JsonResponse({"removed": removed, "housing": get_housing_overview(context["group"])})


@login_required
@require_POST
def group_housing_auto_assign(request: HttpRequest, g: str) -> JsonResponse:
    """Fill the free beds of one category; participants left over are only counted."""
    context = check_group_context(request, g)
    body = get_json_body(request)

    result = auto_assign_category(context["group"], get_required(body, "category"))
    return JsonResponse({"assigned": result.assigned, "unassigned": result.unassigned})


@login_required
@require_POST
def group_housing_submit(request: HttpRequest, g: str) -> JsonResponse:
    context = check_group_context(request, g)
    group = submit_housing(context["group"])
    return JsonResponse({"isLocked": group.housing_locked, "submittedAt": group.housing_submitted_at})


@login_required
@require_POST
def group_housing_request_unlock(request: HttpRequest, g: str) -> JsonResponse:
    context = check_group_context(request, g)
    group = request_housing_unlock(context["group"])
    return JsonResponse(
        {"unlockRequested": group.housing_unlock_requested, "unlockRequestedAt": group.housing_unlock_requested_at}
    )
