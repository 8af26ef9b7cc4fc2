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

from colorfield.fields import ColorField
from django.contrib.auth.models import User
from django.db import models
from django.db.models import Q
from django.db.models.constraints import CheckConstraint
from django.utils.translation import gettext_lazy as _

from confmanager.models.base import BaseModel, JoinModel, UuidMixin
from confmanager.models.event import Event
from confmanager.models.registration import GroupRegistration, IndividualRegistration


class AccommodationType(models.TextChoices):
    ON_CAMPUS = "on_campus", _("On campus")
    OFF_CAMPUS = "off_campus", _("Off campus")
    ALL = "all", _("All")


class MealGroup(UuidMixin, BaseModel):
    """Colored cohort used to stagger dining times."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="meal_groups")

    name = models.CharField(max_length=50)

    color = ColorField(
        default="#1E88E5",
        verbose_name=_("Color"),
        help_text=_("Color printed on name tags and meal tickets"),
    )

    capacity = models.PositiveIntegerField(default=0, help_text=_("Optional - Maximum headcount (0 = unlimited)"))

    breakfast_time = models.CharField(max_length=50, blank=True, null=True)

    lunch_time = models.CharField(max_length=50, blank=True, null=True)

    dinner_time = models.CharField(max_length=50, blank=True, null=True)

    is_active = models.BooleanField(default=True)

    accommodation_type = models.CharField(
        max_length=20,
        choices=AccommodationType.choices,
        default=AccommodationType.ALL,
    )

    order = models.IntegerField(default=0)

    # Denormalised headcount, kept for reporting and rewritten by the balancer
    size_cache = models.PositiveIntegerField(default=0, editable=False)

    class Meta:
        ordering: ClassVar[list] = ["order", "id"]

    def accepts(self, accommodation: str | None) -> bool:
        """Check if registrations housed as `accommodation` may eat in this group."""
        if accommodation is None or self.accommodation_type == AccommodationType.ALL:
            return True
        return self.accommodation_type == accommodation


class MealGroupAssignment(JoinModel):
    """Attach a group or an individual registration to a meal group (at most one each)."""

    meal_group = models.ForeignKey(MealGroup, on_delete=models.CASCADE, related_name="assignments")

    group_registration = models.OneToOneField(
        GroupRegistration,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="meal_assignment",
    )

    individual_registration = models.OneToOneField(
        IndividualRegistration,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="meal_assignment",
    )

    assigned_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)

    class Meta:
        constraints: ClassVar[list] = [
            CheckConstraint(
                condition=(
                    Q(group_registration__isnull=False, individual_registration__isnull=True)
                    | Q(group_registration__isnull=True, individual_registration__isnull=False)
                ),
                name="meal_assignment_single_target",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.target} -> {self.meal_group}"

    @property
    def target(self) -> GroupRegistration | IndividualRegistration:
        return self.group_registration or self.individual_registration

    @property
    def headcount(self) -> int:
        """Group registrations weigh their participants, individuals weigh one."""
        if self.group_registration_id:
            return max(1, self.group_registration.total_participants)
        return 1
