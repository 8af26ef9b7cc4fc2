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

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from django.db import transaction
from django.utils import timezone

from confmanager.accounting.pricing import quote_registration
from confmanager.models.accounting import BalanceStatus, Payment, PaymentBalance, PaymentMethodChoices, PaymentType
from confmanager.models.registration import GroupRegistration
from confmanager.models.utils import get_sum, round_currency
from confmanager.utils.core.exceptions import ValidationFailedError

if TYPE_CHECKING:
    from django.contrib.auth.models import User

    from confmanager.models.event import Event
    from confmanager.models.registration import IndividualRegistration

logger = logging.getLogger(__name__)


def compute_payment_status(total_due: Decimal, amount_paid: Decimal) -> BalanceStatus:
    """Derive the balance status, overpaid being the only negative remaining."""
    remaining = total_due - amount_paid
    if remaining == 0:
        return BalanceStatus.PAID_FULL
    if remaining < 0:
        return BalanceStatus.OVERPAID
    if amount_paid > 0:
        return BalanceStatus.PARTIAL
    return BalanceStatus.UNPAID


def parse_amount(value: Any) -> Decimal:
    """Convert a user supplied amount into a positive currency value."""
    try:
        amount = round_currency(value)
    except (InvalidOperation, ValueError, TypeError) as err:
        raise ValidationFailedError("Invalid amount") from err
    if not amount.is_finite() or amount <= 0:
        raise ValidationFailedError("Amount must be greater than zero")
    return amount


def get_or_create_balance(registration: GroupRegistration | IndividualRegistration) -> PaymentBalance:
    """Return the registration balance, opening it at the quoted total when missing."""
    field = "group_registration" if isinstance(registration, GroupRegistration) else "individual_registration"
    balance = PaymentBalance.objects.filter(**{field: registration}).first()
    if balance:
        return balance

    quote = quote_registration(registration)
    balance = PaymentBalance.objects.create(
        organization_id=registration.event.organization_id,
        event=registration.event,
        total_amount_due=quote.total,
        **{field: registration},
    )
    logger.info("Opened balance %s for %s at %s", balance.uuid, registration, quote.total)
    return balance


def recalculate_balance(balance: PaymentBalance) -> PaymentBalance:
    """Recompute paid amount and status from the payment rows."""
    payments = Payment.objects.filter(balance=balance)
    paid = get_sum(payments.filter(typ=PaymentType.PAYMENT)) - get_sum(payments.filter(typ=PaymentType.REFUND))
    last = payments.filter(typ=PaymentType.PAYMENT).order_by("-processed_at").first()

    balance.amount_paid = round_currency(paid)
    balance.payment_status = compute_payment_status(balance.total_amount_due, balance.amount_paid)
    balance.last_payment_date = last.processed_at if last else None
    balance.save(update_fields=["amount_paid", "payment_status", "last_payment_date", "updated"])
    return balance


def _record(
    balance: PaymentBalance,
    typ: str,
    amount: Any,
    method: str,
    processed_at: datetime | None = None,
    user: User | None = None,
    **details: Any,
) -> Payment:
    amount = parse_amount(amount)
    if method not in PaymentMethodChoices.values:
        raise ValidationFailedError(f"Unknown payment method: {method}")

    processed_at = processed_at or timezone.now()
    if processed_at > timezone.now():
        raise ValidationFailedError("Payment date cannot be in the future")

    with transaction.atomic():
        balance = PaymentBalance.objects.select_for_update().get(pk=balance.pk)
        if typ == PaymentType.REFUND and amount > balance.amount_paid:
            raise ValidationFailedError("Refund cannot exceed the amount paid")
        payment = Payment.objects.create(
            balance=balance,
            typ=typ,
            amount=amount,
            method=method,
            processed_at=processed_at,
            recorded_by=user,
            **details,
        )

    return payment


def record_payment(
    balance: PaymentBalance,
    amount: Any,
    method: str,
    processed_at: datetime | None = None,
    user: User | None = None,
    **details: Any,
) -> Payment:
    """Record money received against a balance.

    Extra keyword arguments (check_number, card_last4, transaction_reference,
    notes) are stored on the payment row.

    Raises:
        ValidationFailedError: If the amount is not positive, the method is
            unknown or the date is in the future

    """
    payment = _record(balance, PaymentType.PAYMENT, amount, method, processed_at, user, **details)
    logger.info("Recorded payment of %s on balance %s", payment.amount, balance.uuid)
    return payment


def record_refund(
    balance: PaymentBalance,
    amount: Any,
    method: str,
    processed_at: datetime | None = None,
    user: User | None = None,
    **details: Any,
) -> Payment:
    payment = _record(balance, PaymentType.REFUND, amount, method, processed_at, user, **details)
    logger.info("Recorded refund of %s on balance %s", payment.amount, balance.uuid)
    return payment


def update_total_due(balance: PaymentBalance, new_total: Any) -> PaymentBalance:
    """Change the amount due (price change, discount) and refresh the status."""
    try:
        total = round_currency(new_total)
    except (InvalidOperation, ValueError, TypeError) as err:
        raise ValidationFailedError("Invalid amount") from err
    if not total.is_finite() or total < 0:
        raise ValidationFailedError("Total due cannot be negative")

    with transaction.atomic():
        balance = PaymentBalance.objects.select_for_update().get(pk=balance.pk)
        previous = balance.total_amount_due
        balance.total_amount_due = total
        balance.save(update_fields=["total_amount_due", "updated"])
        balance = recalculate_balance(balance)

    logger.info("Total due of balance %s changed from %s to %s", balance.uuid, previous, total)
    return balance


def recalculate_event_balances(event: Event | None = None) -> int:
    """Recompute every balance (of one event when given); returns how many changed."""
    balances = PaymentBalance.objects.all()
    if event is not None:
        balances = balances.filter(event=event)

    changed = 0
    for balance in balances:
        before = (balance.amount_paid, balance.payment_status)
        with transaction.atomic():
            balance = recalculate_balance(PaymentBalance.objects.select_for_update().get(pk=balance.pk))
        if before != (balance.amount_paid, balance.payment_status):
            changed += 1
    return changed
