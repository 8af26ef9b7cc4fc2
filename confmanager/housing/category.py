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

from typing import TYPE_CHECKING

from django.db import models
from django.utils.translation import gettext_lazy as _

from confmanager.models.housing import Room, RoomHousingType
from confmanager.models.registration import Gender, ParticipantType

if TYPE_CHECKING:
    from confmanager.models.registration import IndividualRegistration, Participant

ADULT_AGE = 18


class HousingCategory(models.TextChoices):
    MALE_U18 = "male_u18", _("Male youth under 18")
    FEMALE_U18 = "female_u18", _("Female youth under 18")
    MALE_CHAPERONE = "male_chaperone", _("Male chaperone / 18+")
    FEMALE_CHAPERONE = "female_chaperone", _("Female chaperone / 18+")


def get_category(entity: Participant | IndividualRegistration | Room) -> HousingCategory | None:
    """Derive the housing category of a participant or a room.

    Both sides of a bed assignment go through this function, so a participant
    fits a room exactly when the two categories are equal.

    Args:
        entity: A participant (or individual registration) or a room

    Returns:
        The category, or None for clergy and for entities without a gender

    """
    if isinstance(entity, Room):
        return _room_category(entity)
    return _person_category(entity)


def _person_category(person: Participant | IndividualRegistration) -> HousingCategory | None:
    if person.participant_type == ParticipantType.PRIEST:
        return None
    if person.gender not in Gender.values:
        return None

    is_minor = person.participant_type == ParticipantType.YOUTH_U18 or (
        person.age is not None and person.age < ADULT_AGE
    )
    if is_minor:
        return HousingCategory(f"{person.gender}_u18")
    return HousingCategory(f"{person.gender}_chaperone")


def _room_category(room: Room) -> HousingCategory | None:
    if room.housing_type == RoomHousingType.CLERGY:
        return None
    if room.gender not in Gender.values:
        return None

    if room.housing_type == RoomHousingType.YOUTH_U18:
        return HousingCategory(f"{room.gender}_u18")
    # chaperone_18plus and general rooms both host adults
    return HousingCategory(f"{room.gender}_chaperone")


def parse_category(value: str | None) -> HousingCategory | None:
    """Convert a raw string into a category, None if it is not a known tag."""
    if value not in HousingCategory.values:
        return None
    return HousingCategory(value)
