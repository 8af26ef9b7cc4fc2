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

from typing import ClassVar

from django.conf import settings as conf_settings
from django.contrib.auth.models import User
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from confmanager.models.base import AlphanumericValidator, BaseModel


class Organization(BaseModel):
    """Tenant owning events: a diocese, a ministry office, a camp."""

    name = models.CharField(max_length=100)

    slug = models.SlugField(max_length=100, validators=[AlphanumericValidator], db_index=True, unique=True)

    email = models.EmailField(blank=True, null=True)

    admins = models.ManyToManyField(User, related_name="organizations", blank=True)

    def is_admin(self, user: User) -> bool:
        """Check if the user can operate the organization's events."""
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True
        return self.admins.filter(pk=user.pk).exists()


class Event(BaseModel):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="events")

    name = models.CharField(max_length=100)

    slug = models.SlugField(max_length=100, validators=[AlphanumericValidator], db_index=True, unique=True)

    start = models.DateField(blank=True, null=True)

    end = models.DateField(blank=True, null=True)

    deposit_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=conf_settings.DEFAULT_DEPOSIT_PERCENT,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        verbose_name=_("Deposit"),
        help_text=_("Percentage of the total collected as deposit at registration"),
    )

    class Meta:
        ordering: ClassVar[list] = ["-start"]


class EventPricing(BaseModel):
    """Per-event pricing table.

    Housing overrides (on campus, off campus, day pass) win over the tier
    prices; when neither is set the regular price applies.
    """

    event = models.OneToOneField(Event, on_delete=models.CASCADE, related_name="pricing")

    youth_early_bird_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    youth_regular_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    youth_late_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    chaperone_early_bird_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    chaperone_regular_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    chaperone_late_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    priest_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    on_campus_youth_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    off_campus_youth_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    day_pass_youth_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    on_campus_chaperone_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    off_campus_chaperone_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    day_pass_chaperone_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    early_bird_deadline = models.DateTimeField(null=True, blank=True)

    regular_deadline = models.DateTimeField(null=True, blank=True)

    full_payment_deadline = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"Pricing {self.event}"
