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

from django.db import models
from django.utils.translation import gettext_lazy as _

from confmanager.models.base import BaseModel, UuidMixin
from confmanager.models.event import Event
from confmanager.models.registration import Participant


class LiabilityFormType(models.TextChoices):
    YOUTH_U18 = "youth_u18", _("Youth under 18")
    YOUTH_O18_CHAPERONE = "youth_o18_chaperone", _("Youth 18+ / chaperone")
    CLERGY = "clergy", _("Clergy")


class LiabilityForm(UuidMixin, BaseModel):
    """Completed liability release, already validated when it was collected."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="liability_forms")

    participant = models.ForeignKey(
        Participant,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="liability_forms",
    )

    form_type = models.CharField(max_length=30, choices=LiabilityFormType.choices)

    participant_first_name = models.CharField(max_length=100)

    participant_last_name = models.CharField(max_length=100)

    participant_preferred_name = models.CharField(max_length=100, blank=True, null=True)

    participant_age = models.PositiveIntegerField(null=True, blank=True)

    participant_gender = models.CharField(max_length=10, blank=True, null=True)

    participant_email = models.EmailField(blank=True, null=True)

    participant_phone = models.CharField(max_length=30, blank=True, null=True)

    participant_type = models.CharField(max_length=20, blank=True, null=True)

    t_shirt_size = models.CharField(max_length=10, blank=True, null=True)

    clergy_title = models.CharField(max_length=50, blank=True, null=True)

    diocese_of_incardination = models.CharField(max_length=200, blank=True, null=True)

    current_assignment = models.CharField(max_length=200, blank=True, null=True)

    faculty_information = models.TextField(blank=True, null=True)

    medical_conditions = models.TextField(blank=True, null=True)

    medications = models.TextField(blank=True, null=True)

    allergies = models.TextField(blank=True, null=True)

    dietary_restrictions = models.TextField(blank=True, null=True)

    ada_accommodations = models.TextField(blank=True, null=True)

    emergency_contact_1_name = models.CharField(max_length=200, blank=True, null=True)

    emergency_contact_1_phone = models.CharField(max_length=30, blank=True, null=True)

    emergency_contact_1_relation = models.CharField(max_length=50, blank=True, null=True)

    emergency_contact_2_name = models.CharField(max_length=200, blank=True, null=True)

    emergency_contact_2_phone = models.CharField(max_length=30, blank=True, null=True)

    emergency_contact_2_relation = models.CharField(max_length=50, blank=True, null=True)

    insurance_provider = models.CharField(max_length=200, blank=True, null=True)

    insurance_policy_number = models.CharField(max_length=100, blank=True, null=True)

    insurance_group_number = models.CharField(max_length=100, blank=True, null=True)

    signature = models.JSONField(
        default=dict,
        blank=True,
        help_text=_("full_legal_name, initials, date_signed, sections_initialed"),
    )

    completed_by_email = models.EmailField(blank=True, null=True)

    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering: ClassVar[list] = ["participant_last_name", "participant_first_name"]

    def __str__(self) -> str:
        return f"{self.get_form_type_display()} - {self.participant_first_name} {self.participant_last_name}"


class SafeEnvironmentCertificate(BaseModel):
    form = models.ForeignKey(LiabilityForm, on_delete=models.CASCADE, related_name="certificates")

    program_name = models.CharField(max_length=200, blank=True, null=True)

    completion_date = models.DateField(null=True, blank=True)

    expiration_date = models.DateField(null=True, blank=True)

    status = models.CharField(max_length=20, blank=True, null=True)

    def __str__(self) -> str:
        return f"{self.program_name} ({self.status})"
