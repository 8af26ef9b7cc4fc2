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
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from django.core.exceptions import ObjectDoesNotExist
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from confmanager.models.registration import GroupRegistration, ParticipantType
from confmanager.models.utils import round_currency

if TYPE_CHECKING:
    from collections.abc import Mapping

    from confmanager.models.event import EventPricing
    from confmanager.models.registration import IndividualRegistration

logger = logging.getLogger(__name__)


class PricingTier(models.TextChoices):
    EARLY_BIRD = "early_bird", _("Early bird")
    REGULAR = "regular", _("Regular")
    LATE = "late", _("Late")


@dataclass(frozen=True)
class PriceLine:
    participant_type: str
    count: int
    unit_price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class PriceQuote:
    total: Decimal
    deposit: Decimal
    balance: Decimal
    tier: str
    breakdown: list[PriceLine] = field(default_factory=list)

    def as_json(self) -> dict:
        return {
            "total": str(self.total),
            "deposit": str(self.deposit),
            "balance": str(self.balance),
            "tier": self.tier,
            "breakdown": [
                {
                    "participantType": line.participant_type,
                    "count": line.count,
                    "unitPrice": str(line.unit_price),
                    "subtotal": str(line.subtotal),
                }
                for line in self.breakdown
            ],
        }


def get_pricing_tier(pricing: EventPricing | None, when: datetime | None = None) -> PricingTier:
    """Return the tier in force at `when` (now by default).

    Early bird runs up to its deadline included, regular up to the regular
    deadline included (or forever when it is not set), late afterwards.
    """
    when = when or timezone.now()
    if pricing is None:
        return PricingTier.REGULAR
    if pricing.early_bird_deadline and when <= pricing.early_bird_deadline:
        return PricingTier.EARLY_BIRD
    if pricing.regular_deadline is None or when <= pricing.regular_deadline:
        return PricingTier.REGULAR
    return PricingTier.LATE


def _price_role(participant_type: str) -> str:
    if participant_type in (ParticipantType.YOUTH_U18, ParticipantType.YOUTH_O18):
        return "youth"
    return "chaperone"


def get_participant_price(
    pricing: EventPricing | None, participant_type: str, housing_type: str, tier: str = PricingTier.REGULAR
) -> Decimal:
    """Unit price of one participant.

    Lookup order: housing type override, tier price, regular price, zero.
    Priests pay the priest price (free when unset).

    Args:
        pricing: Event pricing table, None prices everything at zero
        participant_type: One of ParticipantType values
        housing_type: One of HousingType values
        tier: One of PricingTier values

    Returns:
        Unit price rounded to the currency precision

    """
    if pricing is None:
        return round_currency(0)

    if participant_type == ParticipantType.PRIEST:
        return round_currency(pricing.priest_price)

    role = _price_role(participant_type)
    for price_field in (f"{housing_type}_{role}_price", f"{role}_{tier}_price", f"{role}_regular_price"):
        value = getattr(pricing, price_field, None)
        if value is not None:
            return round_currency(value)
    return round_currency(0)


def calculate_registration_price(
    pricing: EventPricing | None,
    counts: Mapping[str, int],
    housing_type: str,
    when: datetime | None = None,
    deposit_percent: Decimal | int | None = None,
) -> PriceQuote:
    """Price a registration from its participant counts.

    Args:
        pricing: Event pricing table
        counts: Number of participants keyed by participant type
        housing_type: Housing type chosen for the registration
        when: Moment used to pick the pricing tier, now by default
        deposit_percent: Share of the total due as deposit, 0 when None

    Returns:
        PriceQuote with total, deposit, balance, tier and one line per
        participant type with a positive count

    """
    tier = get_pricing_tier(pricing, when)
    breakdown = []
    for participant_type in ParticipantType.values:
        count = int(counts.get(participant_type, 0) or 0)
        if count <= 0:
            continue
        unit_price = get_participant_price(pricing, participant_type, housing_type, tier)
        breakdown.append(PriceLine(participant_type, count, unit_price, round_currency(unit_price * count)))

    total = round_currency(sum((line.subtotal for line in breakdown), Decimal(0)))
    deposit = round_currency(total * Decimal(str(deposit_percent or 0)) / Decimal(100))
    return PriceQuote(total=total, deposit=deposit, balance=total - deposit, tier=tier, breakdown=breakdown)


def quote_registration(
    registration: GroupRegistration | IndividualRegistration, when: datetime | None = None
) -> PriceQuote:
    """Price an existing registration with its event's pricing table and deposit."""
    event = registration.event
    try:
        pricing = event.pricing
    except ObjectDoesNotExist:
        logger.warning("Event %s has no pricing table, quoting zero", event.slug)
        pricing = None

    if isinstance(registration, GroupRegistration):
        counts = registration.get_counts()
    else:
        counts = {registration.participant_type: 1}

    return calculate_registration_price(pricing, counts, registration.housing_type, when, event.deposit_percent)
