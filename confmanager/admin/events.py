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

from confmanager.admin.base import DefModelAdmin, EventFilter, OrganizationFilter
from confmanager.models.event import Event, EventPricing, Organization
from confmanager.models.registration import GroupRegistration, IndividualRegistration, Participant


@admin.register(Organization)
class OrganizationAdmin(DefModelAdmin):
    list_display = ("name", "slug", "email")
    search_fields: ClassVar[tuple] = ("id", "name", "slug")
    filter_horizontal = ("admins",)

    def get_queryset(self, request):
        qs = admin.ModelAdmin.get_queryset(self, request)
        if request.user.is_superuser:
            return qs
        return qs.filter(pk__in=self._get_organization_ids(request))

    def _get_organization_lookup(self) -> str:
        return "id"


@admin.register(Event)
class EventAdmin(DefModelAdmin):
    list_display = ("name", "slug", "organization", "start", "end")
    search_fields: ClassVar[tuple] = ("id", "name", "slug")
    list_filter = (OrganizationFilter,)
    autocomplete_fields: ClassVar[list] = ["organization"]


@admin.register(EventPricing)
class EventPricingAdmin(DefModelAdmin):
    list_display = ("event", "youth_regular_price", "chaperone_regular_price", "early_bird_deadline")
    list_filter = (EventFilter,)
    autocomplete_fields: ClassVar[list] = ["event"]


class ParticipantInline(admin.TabularInline):
    model = Participant
    fields = ("first_name", "last_name", "age", "gender", "participant_type")
    extra = 0


@admin.register(GroupRegistration)
class GroupRegistrationAdmin(DefModelAdmin):
    list_display = ("group_name", "event", "housing_type", "total_participants", "housing_locked")
    search_fields: ClassVar[tuple] = ("id", "uuid", "group_name", "leader_email")
    list_filter = (EventFilter, "housing_type", "housing_locked", "housing_unlock_requested")
    autocomplete_fields: ClassVar[list] = ["event", "leader"]
    inlines: ClassVar[list] = [ParticipantInline]


@admin.register(IndividualRegistration)
class IndividualRegistrationAdmin(DefModelAdmin):
    list_display = ("first_name", "last_name", "event", "participant_type", "housing_type")
    search_fields: ClassVar[tuple] = ("id", "uuid", "first_name", "last_name", "email")
    list_filter = (EventFilter, "participant_type", "housing_type")
    autocomplete_fields: ClassVar[list] = ["event"]


@admin.register(Participant)
class ParticipantAdmin(DefModelAdmin):
    list_display = ("first_name", "last_name", "group_registration", "age", "gender", "participant_type")
    search_fields: ClassVar[tuple] = ("id", "uuid", "first_name", "last_name")
    list_filter = ("participant_type", "gender")
    autocomplete_fields: ClassVar[list] = ["group_registration"]
