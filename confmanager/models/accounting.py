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

from decimal import Decimal
from typing import ClassVar

from django.contrib.auth.models import User
from django.db import models
from django.db.models import Q
from django.db.models.constraints import CheckConstraint
from django.utils.translation import gettext_lazy as _

from confmanager.models.base import BaseModel, UuidMixin
from confmanager.models.event import Event, Organization
from confmanager.models.registration import GroupRegistration, IndividualRegistration


class BalanceStatus(models.TextChoices):
    UNPAID = "unpaid", _("Unpaid")
    PARTIAL = "partial", _("Partial")
    PAID_FULL = "paid_full", _("Paid in full")
    OVERPAID = "overpaid", _("Overpaid")


class PaymentMethodChoices(models.TextChoices):
    CARD = "card", _("Credit card")
    CHECK = "check", _("Check")
    CASH = "cash", _("Cash")
    BANK_TRANSFER = "bank_transfer", _("Wire transfer")
    OTHER = "other", _("Other")


class PaymentType(models.TextChoices):
    PAYMENT = "p", _("Payment")
    REFUND = "r", _("Refund")


class PaymentBalance(UuidMixin, BaseModel):
    """Amount due and collected for one registration."""

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="balances")

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="balances")

    group_registration = models.OneToOneField(
        GroupRegistration,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="balance",
    )

    individual_registration = models.OneToOneField(
        IndividualRegistration,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="balance",
    )

    total_amount_due = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    amount_paid = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    payment_status = models.CharField(
        max_length=10,
        choices=BalanceStatus.choices,
        default=BalanceStatus.UNPAID,
        db_index=True,
    )

    last_payment_date = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints: ClassVar[list] = [
            CheckConstraint(
                condition=(
                    Q(group_registration__isnull=False, individual_registration__isnull=True)
                    | Q(group_registration__isnull=True, individual_registration__isnull=False)
                ),
                name="balance_single_registration",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.registration} - {self.amount_paid}/{self.total_amount_due} ({self.payment_status})"

    @property
    def registration(self) -> GroupRegistration | IndividualRegistration:
        return self.group_registration or self.individual_registration

    @property
    def amount_remaining(self) -> Decimal:
        """Total due minus paid; negative only when the balance is overpaid."""
        return self.total_amount_due - self.amount_paid


class Payment(BaseModel):
    balance = models.ForeignKey(PaymentBalance, on_delete=models.CASCADE, related_name="payments")

    typ = models.CharField(max_length=1, choices=PaymentType.choices, default=PaymentType.PAYMENT)

    amount = models.DecimalField(max_digits=10, decimal_places=2, help_text=_("Always positive, see type"))

    method = models.CharField(max_length=20, choices=PaymentMethodChoices.choices)

    check_number = models.CharField(max_length=50, blank=True, null=True)

    card_last4 = models.CharField(max_length=4, blank=True, null=True)

    transaction_reference = models.CharField(max_length=200, blank=True, null=True)

    notes = models.TextField(blank=True, null=True)

    processed_at = models.DateTimeField()

    recorded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)

    class Meta:
        ordering: ClassVar[list] = ["processed_at", "id"]

    def __str__(self) -> str:
        return f"{self.get_typ_display()} {self.amount} ({self.get_method_display()})"

    @property
    def signed_amount(self) -> Decimal:
        if self.typ == PaymentType.REFUND:
            return -self.amount
        return self.amount
