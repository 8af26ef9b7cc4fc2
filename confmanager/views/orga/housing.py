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
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_POST

from confmanager.housing.allocation import approve_housing_unlock
from confmanager.models.registration import GroupRegistration
from confmanager.utils.core.base import check_event_context


@login_required
@require_POST
def orga_housing_unlock(request: HttpRequest, e: str, g: str) -> JsonResponse:
    """Approve a group's unlock request and reopen its housing."""
    context = check_event_context(request, e)
    group = get_object_or_404(GroupRegistration, event=context["event"], uuid=g)

    group = approve_housing_unlock(group)
    return JsonResponse({"isLocked": group.housing_locked, "unlockRequested": group.housing_unlock_requested})
