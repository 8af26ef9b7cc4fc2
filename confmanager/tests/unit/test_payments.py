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

"""Tests for payment balances"""

from datetime import timedelta
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import CommandError, call_command
from django.urls import reverse
from django.utils import timezone

from confmanager.accounting.payment import (
    compute_payment_status,
    get_or_create_balance,
    record_payment,
    record_refund,
    update_total_due,
)
from confmanager.models.accounting import BalanceStatus, Payment, PaymentBalance
from confmanager.tests.unit.base import BaseTestCase
from confmanager.utils.core.exceptions import ValidationFailedError


@pytest.mark.parametrize(
    ("due", "paid", "status"),
    [
        ("100", "0", BalanceStatus.UNPAID),
        ("100", "40", BalanceStatus.PARTIAL),
        ("100", "100", BalanceStatus.PAID_FULL),
        ("100", "120", BalanceStatus.OVERPAID),
        ("0", "0", BalanceStatus.PAID_FULL),
    ],
)
def test_compute_payment_status(due, paid, status) -> None:
    assert compute_payment_status(Decimal(due), Decimal(paid)) == status


class BalanceTestCase(BaseTestCase):
    def setUp(self) -> None:
        self.create_pricing(on_campus_youth_price=Decimal("200"))
        self.group = self.create_group(youth_count_male_u18=5, youth_count_female_u18=3)
        self.balance = get_or_create_balance(self.group)


class TestBalance(BalanceTestCase):
    def test_opened_at_quote(self) -> None:
        assert self.balance.total_amount_due == Decimal("1600.00")
        assert self.balance.payment_status == BalanceStatus.UNPAID
        assert get_or_create_balance(self.group).pk == self.balance.pk

    def test_partial_then_full(self) -> None:
        record_payment(self.balance, "400", "check", check_number="1042")
        self.balance.refresh_from_db()
        assert self.balance.amount_paid == Decimal("400.00")
        assert self.balance.payment_status == BalanceStatus.PARTIAL
        assert self.balance.amount_remaining == Decimal("1200.00")

        record_payment(self.balance, Decimal("1200"), "card", card_last4="4242")
        self.balance.refresh_from_db()
        assert self.balance.payment_status == BalanceStatus.PAID_FULL
        assert self.balance.last_payment_date is not None

    def test_overpaid_then_refund(self) -> None:
        record_payment(self.balance, "1700", "bank_transfer")
        self.balance.refresh_from_db()
        assert self.balance.payment_status == BalanceStatus.OVERPAID
        assert self.balance.amount_remaining == Decimal("-100.00")

        record_refund(self.balance, "100", "bank_transfer")
        self.balance.refresh_from_db()
        assert self.balance.amount_paid == Decimal("1600.00")
        assert self.balance.payment_status == BalanceStatus.PAID_FULL

    def test_refund_larger_than_paid(self) -> None:
        record_payment(self.balance, "50", "cash")

        with pytest.raises(ValidationFailedError, match="Refund"):
            record_refund(self.balance, "60", "cash")

    def test_invalid_amount(self) -> None:
        for amount in ("0", "-10", "abc", None):
            with self.subTest(amount=amount), pytest.raises(ValidationFailedError):
                record_payment(self.balance, amount, "cash")

    def test_unknown_method(self) -> None:
        with pytest.raises(ValidationFailedError):
            record_payment(self.balance, "10", "bitcoin")

    def test_future_date(self) -> None:
        with pytest.raises(ValidationFailedError):
            record_payment(self.balance, "10", "cash", processed_at=timezone.now() + timedelta(days=1))
        assert not Payment.objects.exists()

    def test_deleting_payment_updates_balance(self) -> None:
        payment = record_payment(self.balance, "400", "cash")

        payment.delete()

        self.balance.refresh_from_db()
        assert self.balance.amount_paid == Decimal("0.00")
        assert self.balance.payment_status == BalanceStatus.UNPAID

    def test_update_total_due(self) -> None:
        record_payment(self.balance, "400", "cash")

        balance = update_total_due(self.balance, "400")

        assert balance.total_amount_due == Decimal("400.00")
        assert balance.payment_status == BalanceStatus.PAID_FULL

    def test_negative_total_due(self) -> None:
        with pytest.raises(ValidationFailedError):
            update_total_due(self.balance, "-1")


class TestRecalculateCommand(BalanceTestCase):
    def test_fixes_drift(self) -> None:
        record_payment(self.balance, "400", "cash")
        PaymentBalance.objects.filter(pk=self.balance.pk).update(amount_paid=0, payment_status=BalanceStatus.UNPAID)

        out = StringIO()
        call_command("recalculate_balances", "--event", "summer", stdout=out)

        assert "Balances updated: 1" in out.getvalue()
        self.balance.refresh_from_db()
        assert self.balance.amount_paid == Decimal("400.00")
        assert self.balance.payment_status == BalanceStatus.PARTIAL

    def test_unknown_event(self) -> None:
        with pytest.raises(CommandError):
            call_command("recalculate_balances", "--event", "missing", stdout=StringIO())


class TestPaymentViews(BalanceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client.force_login(self.create_organizer())

    def url(self, name: str) -> str:
        return reverse(name, kwargs={"e": "summer", "b": self.balance.uuid})

    def test_record_payment(self) -> None:
        response = self.post_json(
            self.url("orga_payment_record"), {"amount": "400", "method": "check", "checkNumber": "1042"}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["balance"]["amountPaid"] == "400.00"
        assert data["balance"]["paymentStatus"] == "partial"
        assert Payment.objects.get().check_number == "1042"

    def test_record_refund(self) -> None:
        record_payment(self.balance, "400", "cash")

        response = self.post_json(
            self.url("orga_payment_record"), {"amount": "100", "method": "cash", "type": "refund"}
        )

        assert response.status_code == 201
        assert response.json()["balance"]["amountPaid"] == "300.00"

    def test_missing_method(self) -> None:
        response = self.post_json(self.url("orga_payment_record"), {"amount": "10"})
        assert response.status_code == 400

    def test_total_due(self) -> None:
        response = self.post_json(self.url("orga_payment_total_due"), {"totalAmountDue": "1500"})

        assert response.status_code == 200
        assert response.json()["balance"]["totalAmountDue"] == "1500.00"

    def test_unknown_balance(self) -> None:
        url = reverse("orga_payment_record", kwargs={"e": "summer", "b": "missing"})
        response = self.post_json(url, {"amount": "10", "method": "cash"})
        assert response.status_code == 404
