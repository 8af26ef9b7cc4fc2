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

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING
from uuid import uuid4

from django.conf import settings as conf_settings
from django.db.models import Sum

if TYPE_CHECKING:
    from django.db.models import QuerySet


def my_uuid_short():
    """Generate short UUID string of 12 characters.

    Returns:
        str: 12-character UUID string

    """
    return my_uuid(12)


def my_uuid(length: int | None = None) -> str:
    """Generate a UUID hex string, optionally truncated to specified length."""
    uuid_hex_string = uuid4().hex
    if length is None:
        return uuid_hex_string
    return uuid_hex_string[:length]


def get_sum(queryset: QuerySet, field: str = "amount") -> Decimal:
    """Sum a decimal field from a queryset, returning 0 if empty or None."""
    aggregation_result = queryset.aggregate(total=Sum(field))
    if not aggregation_result or not aggregation_result["total"]:
        return Decimal(0)
    return aggregation_result["total"]


def round_currency(value: Decimal | float | int | str | None) -> Decimal:
    """Quantize a money amount to the configured currency precision.

    Args:
        value: Amount in any numeric representation (None counts as zero)

    Returns:
        Decimal rounded half-up to two decimals (or CURRENCY_QUANTUM)

    """
    if value is None:
        value = 0
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(conf_settings.CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)
