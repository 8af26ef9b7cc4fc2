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

import json
from typing import TYPE_CHECKING, Any

from django.core.exceptions import ObjectDoesNotExist

from confmanager.models.event import Event
from confmanager.models.registration import GroupRegistration
from confmanager.utils.core.exceptions import NotFoundError, UserPermissionError, ValidationFailedError

if TYPE_CHECKING:
    from django.http import HttpRequest


def check_event_context(request: HttpRequest, event_slug: str) -> dict:
    """Check organizer permissions on an event and prepare the context.

    Args:
        request: Django HTTP request object containing the authenticated user
        event_slug: Event slug identifier for the target event

    Returns:
        Dictionary with the event and its organization

    Raises:
        NotFoundError: If the event does not exist
        UserPermissionError: If the user does not administer the event's organization

    """
    try:
        event = Event.objects.select_related("organization").get(slug=event_slug)
    except ObjectDoesNotExist as err:
        raise NotFoundError("Event not found") from err

    if not event.organization.is_admin(request.user):
        raise UserPermissionError

    return {"event": event, "organization": event.organization}


def check_group_context(request: HttpRequest, group_uuid: str) -> dict:
    """Check that the user leads the group registration (or administers its event).

    Raises:
        NotFoundError: If the registration does not exist
        UserPermissionError: If the user is neither the leader nor an organizer

    """
    try:
        group = GroupRegistration.objects.select_related("event__organization").get(uuid=group_uuid)
    except ObjectDoesNotExist as err:
        raise NotFoundError("Group registration not found") from err

    user = request.user
    is_leader = group.leader_id is not None and group.leader_id == user.id
    is_organizer = group.event.organization.is_admin(user)
    if not (is_leader or is_organizer):
        raise UserPermissionError

    return {"group": group, "event": group.event, "organizer": is_organizer}


def get_json_body(request: HttpRequest) -> dict[str, Any]:
    """Parse the JSON request body, an empty body counts as an empty object."""
    if not request.body:
        return {}
    try:
        body = json.loads(request.body)
    except (ValueError, UnicodeDecodeError) as err:
        raise ValidationFailedError("Malformed JSON body") from err
    if not isinstance(body, dict):
        raise ValidationFailedError("JSON body must be an object")
    return body


def get_required(body: dict, key: str) -> Any:
    """Return a required body value or fail with a message naming the field."""
    value = body.get(key)
    if value is None or value == "":
        raise ValidationFailedError(f"Missing required field: {key}")
    return value


def get_int(body: dict, key: str) -> int:
    value = get_required(body, key)
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationFailedError(f"Field {key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as err:
        raise ValidationFailedError(f"Field {key} must be an integer") from err
