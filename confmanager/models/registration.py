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

from django.contrib.auth.models import User
from django.db import models
from django.utils.translation import gettext_lazy as _

from confmanager.models.base import BaseModel, UuidMixin
from confmanager.models.event import Event


class HousingType(models.TextChoices):
    ON_CAMPUS = "on_campus", _("On campus")
    OFF_CAMPUS = "off_campus", _("Off campus")
    DAY_PASS = "day_pass", _("Day pass")


class Gender(models.TextChoices):
    MALE = "male", _("Male")
    FEMALE = "female", _("Female")


class ParticipantType(models.TextChoices):
    YOUTH_U18 = "youth_u18", _("Youth under 18")
    YOUTH_O18 = "youth_o18", _("Youth 18 and over")
    CHAPERONE = "chaperone", _("Chaperone")
    PRIEST = "priest", _("Priest")


class GroupRegistration(UuidMixin, BaseModel):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="group_registrations")

    group_name = models.CharField(max_length=200)

    leader = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="led_groups",
    )

    leader_email = models.EmailField(blank=True, null=True)

    housing_type = models.CharField(max_length=20, choices=HousingType.choices, default=HousingType.ON_CAMPUS)

    youth_count_male_u18 = models.PositiveIntegerField(default=0)

    youth_count_female_u18 = models.PositiveIntegerField(default=0)

    youth_count_male_o18 = models.PositiveIntegerField(default=0)

    youth_count_female_o18 = models.PositiveIntegerField(default=0)

    chaperone_count_male = models.PositiveIntegerField(default=0)

    chaperone_count_female = models.PositiveIntegerField(default=0)

    priest_count = models.PositiveIntegerField(default=0)

    housing_locked = models.BooleanField(default=False)

    housing_submitted_at = models.DateTimeField(null=True, blank=True)

    housing_unlock_requested = models.BooleanField(default=False)

    housing_unlock_requested_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering: ClassVar[list] = ["group_name"]

    def __str__(self) -> str:
        return f"{self.group_name} ({self.event})"

    @property
    def total_participants(self) -> int:
        """Headcount declared at registration time."""
        return (
            self.youth_count_male_u18
            + self.youth_count_female_u18
            + self.youth_count_male_o18
            + self.youth_count_female_o18
            + self.chaperone_count_male
            + self.chaperone_count_female
            + self.priest_count
        )

    def get_counts(self) -> dict[str, int]:
        """Participant counts keyed by participant type, for pricing."""
        return {
            ParticipantType.YOUTH_U18: self.youth_count_male_u18 + self.youth_count_female_u18,
            ParticipantType.YOUTH_O18: self.youth_count_male_o18 + self.youth_count_female_o18,
            ParticipantType.CHAPERONE: self.chaperone_count_male + self.chaperone_count_female,
            ParticipantType.PRIEST: self.priest_count,
        }


class IndividualRegistration(UuidMixin, BaseModel):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="individual_registrations")

    first_name = models.CharField(max_length=100)

    last_name = models.CharField(max_length=100)

    email = models.EmailField(blank=True, null=True)

    age = models.PositiveIntegerField(null=True, blank=True)

    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True, null=True)

    participant_type = models.CharField(
        max_length=20, choices=ParticipantType.choices, default=ParticipantType.YOUTH_O18
    )

    housing_type = models.CharField(max_length=20, choices=HousingType.choices, default=HousingType.ON_CAMPUS)

    class Meta:
        ordering: ClassVar[list] = ["last_name", "first_name"]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Participant(UuidMixin, BaseModel):
    """Person attending with a group, the unit of bed assignment."""

    group_registration = models.ForeignKey(GroupRegistration, on_delete=models.CASCADE, related_name="participants")

    first_name = models.CharField(max_length=100)

    last_name = models.CharField(max_length=100)

    age = models.PositiveIntegerField()

    gender = models.CharField(max_length=10, choices=Gender.choices)

    participant_type = models.CharField(max_length=20, choices=ParticipantType.choices)

    class Meta:
        ordering: ClassVar[list] = ["last_name", "first_name", "id"]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"
