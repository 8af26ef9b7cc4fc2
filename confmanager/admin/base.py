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

from typing import TYPE_CHECKING, ClassVar

from admin_auto_filters.filters import AutocompleteFilter
from django.contrib import admin

if TYPE_CHECKING:
    from django.db.models import QuerySet
    from django.http import HttpRequest

# Lookup from a model to its organization, first matching field wins
ORGANIZATION_PATHS = (
    ("organization", "organization_id"),
    ("event", "event__organization_id"),
    ("building", "building__event__organization_id"),
    ("room", "room__building__event__organization_id"),
    ("meal_group", "meal_group__event__organization_id"),
    ("group_registration", "group_registration__event__organization_id"),
    ("balance", "balance__event__organization_id"),
    ("form", "form__event__organization_id"),
)


class DefModelAdmin(admin.ModelAdmin):
    """Base admin class for ConfManager models with organization filtering.

    For non-superuser users, this admin class:
    1. Checks if the user administers any organization
    2. Filters the queryset to only show objects of those organizations,
       following the first relation listed in ORGANIZATION_PATHS
    3. Denies access if the model has no organization relationship
    """

    ordering: ClassVar[list] = ["-id"]

    def _get_organization_lookup(self) -> str | None:
        """Detect which organization-related field exists in the model."""
        model_fields = {f.name for f in self.model._meta.get_fields()}  # noqa: SLF001
        for field, lookup in ORGANIZATION_PATHS:
            if field in model_fields:
                return lookup
        return None

    @staticmethod
    def _get_organization_ids(request: HttpRequest) -> list[int]:
        return list(request.user.organizations.values_list("id", flat=True))

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        """Filter queryset based on user's organization access."""
        qs = super().get_queryset(request)

        if request.user.is_superuser:
            return qs

        organization_ids = self._get_organization_ids(request)
        lookup = self._get_organization_lookup()
        if not organization_ids or not lookup:
            return qs.none()

        return qs.filter(**{f"{lookup}__in": organization_ids})

    def has_module_permission(self, request: HttpRequest) -> bool:
        if request.user.is_superuser:
            return super().has_module_permission(request)

        if not self._get_organization_ids(request) or not self._get_organization_lookup():
            return False

        return super().has_module_permission(request)


class OrganizationFilter(AutocompleteFilter):
    """Admin filter for Organization autocomplete."""

    title = "Organization"
    field_name = "organization"


class EventFilter(AutocompleteFilter):
    """Admin filter for Event autocomplete."""

    title = "Event"
    field_name = "event"
