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

from typing import ClassVar

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models.constraints import CheckConstraint, UniqueConstraint
from django.utils.translation import gettext_lazy as _

from confmanager.models.base import BaseModel, JoinModel, UuidMixin
from confmanager.models.event import Event
from confmanager.models.registration import Gender, GroupRegistration, Participant

BED_LETTERS = "ABCDEFGH"


class RoomHousingType(models.TextChoices):
    YOUTH_U18 = "youth_u18", _("Youth under 18")
    CHAPERONE_18PLUS = "chaperone_18plus", _("Chaperone 18+")
    GENERAL = "general", _("General")
    CLERGY = "clergy", _("Clergy")


class Building(BaseModel):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="buildings")

    name = models.CharField(max_length=100)

    order = models.IntegerField(default=0)

    class Meta:
        ordering: ClassVar[list] = ["order", "name"]


class Room(UuidMixin, BaseModel):
    building = models.ForeignKey(Building, on_delete=models.CASCADE, related_name="rooms")

    room_number = models.CharField(max_length=20)

    floor = models.IntegerField(default=1)

    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True, null=True)

    housing_type = models.CharField(
        max_length=20,
        choices=RoomHousingType.choices,
        default=RoomHousingType.GENERAL,
    )

    allocated_to = models.ForeignKey(
        GroupRegistration,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="allocated_rooms",
    )

    order = models.IntegerField(default=0)

    class Meta:
        ordering: ClassVar[list] = ["building__order", "order", "room_number", "id"]

    def __str__(self) -> str:
        return f"{self.building.name} {self.room_number}"

    def bed_numbers(self) -> range:
        """Addressable bed slots, numbered from 1."""
        return range(1, self.capacity + 1)


def bed_letter(bed_number: int) -> str:
    """Printable label for a bed (A-H, falls back to the number)."""
    if 1 <= bed_number <= len(BED_LETTERS):
        return BED_LETTERS[bed_number - 1]
    return str(bed_number)


class RoomAssignment(JoinModel):
    """A participant sleeping in a bed; at most one per bed and one per participant."""

    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name="assignments")

    participant = models.OneToOneField(Participant, on_delete=models.CASCADE, related_name="room_assignment")

    group_registration = models.ForeignKey(
        GroupRegistration,
        on_delete=models.CASCADE,
        related_name="room_assignments",
    )

    bed_number = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    class Meta:
        ordering: ClassVar[list] = ["room", "bed_number"]
        constraints: ClassVar[list] = [
            UniqueConstraint(fields=["room", "bed_number"], name="unique_bed_per_room"),
            CheckConstraint(condition=models.Q(bed_number__gte=1), name="bed_number_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.participant} - {self.room} {bed_letter(self.bed_number)}"
