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

from django.contrib import admin

from confmanager.admin.base import DefModelAdmin, EventFilter
from confmanager.models.accounting import Payment, PaymentBalance
from confmanager.models.housing import Building, Room, RoomAssignment
from confmanager.models.liability import LiabilityForm, SafeEnvironmentCertificate
from confmanager.models.meal import MealGroup, MealGroupAssignment


@admin.register(Building)
class BuildingAdmin(DefModelAdmin):
    list_display = ("name", "event", "order")
    search_fields: ClassVar[tuple] = ("id", "name")
    list_filter = (EventFilter,)
    autocomplete_fields: ClassVar[list] = ["event"]


@admin.register(Room)
class RoomAdmin(DefModelAdmin):
    list_display = ("room_number", "building", "capacity", "gender", "housing_type", "allocated_to")
    search_fields: ClassVar[tuple] = ("id", "uuid", "room_number")
    list_filter = ("housing_type", "gender")
    autocomplete_fields: ClassVar[list] = ["building", "allocated_to"]


@admin.register(RoomAssignment)
class RoomAssignmentAdmin(DefModelAdmin):
    list_display = ("participant", "room", "bed_number", "group_registration")
    autocomplete_fields: ClassVar[list] = ["room", "participant", "group_registration"]


@admin.register(MealGroup)
class MealGroupAdmin(DefModelAdmin):
    list_display = ("name", "event", "color", "capacity", "size_cache", "is_active", "accommodation_type", "order")
    search_fields: ClassVar[tuple] = ("id", "uuid", "name")
    list_filter = (EventFilter, "is_active", "accommodation_type")
    autocomplete_fields: ClassVar[list] = ["event"]


@admin.register(MealGroupAssignment)
class MealGroupAssignmentAdmin(DefModelAdmin):
    list_display = ("meal_group", "group_registration", "individual_registration", "assigned_by")
    autocomplete_fields: ClassVar[list] = ["meal_group", "group_registration", "individual_registration"]


class PaymentInline(admin.TabularInline):
    model = Payment
    fields = ("typ", "amount", "method", "processed_at", "transaction_reference")
    extra = 0


@admin.register(PaymentBalance)
class PaymentBalanceAdmin(DefModelAdmin):
    list_display = ("uuid", "event", "total_amount_due", "amount_paid", "payment_status", "last_payment_date")
    search_fields: ClassVar[tuple] = ("id", "uuid")
    list_filter = (EventFilter, "payment_status")
    autocomplete_fields: ClassVar[list] = ["organization", "event", "group_registration", "individual_registration"]
    readonly_fields = ("amount_paid", "payment_status", "last_payment_date")
    inlines: ClassVar[list] = [PaymentInline]


@admin.register(Payment)
class PaymentAdmin(DefModelAdmin):
    list_display = ("balance", "typ", "amount", "method", "processed_at")
    list_filter = ("typ", "method")
    autocomplete_fields: ClassVar[list] = ["balance"]


class CertificateInline(admin.TabularInline):
    model = SafeEnvironmentCertificate
    extra = 0


@admin.register(LiabilityForm)
class LiabilityFormAdmin(DefModelAdmin):
    list_display = ("participant_last_name", "participant_first_name", "event", "form_type", "completed_at")
    search_fields: ClassVar[tuple] = ("id", "uuid", "participant_first_name", "participant_last_name")
    list_filter = (EventFilter, "form_type")
    autocomplete_fields: ClassVar[list] = ["event", "participant"]
    inlines: ClassVar[list] = [CertificateInline]
