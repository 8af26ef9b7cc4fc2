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

from datetime import datetime

from django.contrib.auth.decorators import login_required
from django.core.exceptions import ObjectDoesNotExist
from django.http import HttpRequest, JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from django.views.decorators.http import require_GET, require_POST

from confmanager.accounting.payment import record_payment, record_refund, update_total_due
from confmanager.accounting.pricing import calculate_registration_price
from confmanager.models.accounting import PaymentBalance
from confmanager.models.registration import HousingType, ParticipantType
from confmanager.utils.core.base import check_event_context, get_json_body, get_required
from confmanager.utils.core.exceptions import ValidationFailedError

QUOTE_PARAMS = {
    "youthU18": ParticipantType.YOUTH_U18,
    "youthO18": ParticipantType.YOUTH_O18,
    "chaperones": ParticipantType.CHAPERONE,
    "priests": ParticipantType.PRIEST,
}

PAYMENT_DETAILS = {
    "checkNumber": "check_number",
    "cardLast4": "card_last4",
    "transactionReference": "transaction_reference",
    "notes": "notes",
}


def _parse_when(value: str | None) -> datetime | None:
    if not value:
        return None
    when = parse_datetime(value)
    if when is None:
        raise ValidationFailedError(f"Invalid date: {value}")
    if timezone.is_naive(when):
        when = timezone.make_aware(when)
    return when


def balance_as_json(balance: PaymentBalance) -> dict:
    return {
        "id": balance.uuid,
        "totalAmountDue": str(balance.total_amount_due),
        "amountPaid": str(balance.amount_paid),
        "amountRemaining": str(balance.amount_remaining),
        "paymentStatus": balance.payment_status,
        "lastPaymentDate": balance.last_payment_date,
    }


@login_required
@require_GET
def orga_pricing_quote(request: HttpRequest, e: str) -> JsonResponse:
    """Price participant counts against the event pricing table."""
    context = check_event_context(request, e)
    event = context["event"]

    counts = {}
    for param, participant_type in QUOTE_PARAMS.items():
        try:
            counts[participant_type] = int(request.GET.get(param, 0) or 0)
        except ValueError as err:
            raise ValidationFailedError(f"Field {param} must be an integer") from err
        if counts[participant_type] < 0:
            raise ValidationFailedError(f"Field {param} cannot be negative")

    housing_type = request.GET.get("housingType", HousingType.ON_CAMPUS)
    if housing_type not in HousingType.values:
        raise ValidationFailedError(f"Unknown housing type: {housing_type}")

    try:
        pricing = event.pricing
    except ObjectDoesNotExist:
        pricing = None

    quote = calculate_registration_price(
        pricing, counts, housing_type, _parse_when(request.GET.get("date")), event.deposit_percent
    )
    return JsonResponse(quote.as_json())


@login_required
@require_POST
def orga_payment_record(request: HttpRequest, e: str, b: str) -> JsonResponse:
    """Record a payment (or a refund when type is "refund") on a balance."""
    context = check_event_context(request, e)
    balance = get_object_or_404(PaymentBalance, event=context["event"], uuid=b)
    body = get_json_body(request)

    details = {field: body[key] for key, field in PAYMENT_DETAILS.items() if body.get(key)}
    record = record_refund if body.get("type") == "refund" else record_payment
    payment = record(
        balance,
        get_required(body, "amount"),
        get_required(body, "method"),
        processed_at=_parse_when(body.get("processedAt")),
        user=request.user,
        **details,
    )

    balance.refresh_from_db()
    return JsonResponse(
        {
            "payment": {
                "type": payment.get_typ_display(),
                "amount": str(payment.amount),
                "method": payment.method,
                "processedAt": payment.processed_at,
            },
            "balance": balance_as_json(balance),
        },
        status=201,
    )


@login_required
@require_POST
def orga_payment_total_due(request: HttpRequest, e: str, b: str) -> JsonResponse:
    context = check_event_context(request, e)
    balance = get_object_or_404(PaymentBalance, event=context["event"], uuid=b)
    body = get_json_body(request)

    balance = update_total_due(balance, get_required(body, "totalAmountDue"))
    return JsonResponse({"balance": balance_as_json(balance)})
