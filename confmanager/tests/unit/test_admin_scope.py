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

"""Tests for organization scoping of the admin"""

from django.contrib import admin
from django.test import RequestFactory

from confmanager.models.housing import Room
from confmanager.models.meal import MealGroup
from confmanager.tests.unit.base import BaseTestCase


class TestAdminScope(BaseTestCase):
    def setUp(self) -> None:
        self.own_room = self.create_room(room_number="101")
        self.own_meal_group = self.create_meal_group()

        other_organization = self.create_organization(name="Other Diocese", slug="other-diocese")
        other_event = self.create_event(organization=other_organization, slug="other")
        building = self.create_building(event=other_event, name="South Hall")
        self.other_room = self.create_room(building=building, room_number="201", allocated_to=None)

        self.organizer = self.create_organizer()

    def request_for(self, user):
        request = RequestFactory().get("/admin/")
        request.user = user
        return request

    def test_organizer_sees_own_organization_only(self) -> None:
        room_admin = admin.site._registry[Room]  # noqa: SLF001

        rooms = room_admin.get_queryset(self.request_for(self.organizer))

        assert list(rooms) == [self.own_room]

    def test_meal_groups_are_scoped_through_event(self) -> None:
        meal_admin = admin.site._registry[MealGroup]  # noqa: SLF001

        meal_groups = meal_admin.get_queryset(self.request_for(self.organizer))

        assert list(meal_groups) == [self.own_meal_group]

    def test_user_without_organization_sees_nothing(self) -> None:
        room_admin = admin.site._registry[Room]  # noqa: SLF001
        request = self.request_for(self.get_user())

        assert not room_admin.get_queryset(request).exists()
        assert not room_admin.has_module_permission(request)

    def test_superuser_sees_everything(self) -> None:
        superuser = self.create_user(username="root", email="root@example.com", is_superuser=True, is_staff=True)
        room_admin = admin.site._registry[Room]  # noqa: SLF001

        assert room_admin.get_queryset(self.request_for(superuser)).count() == 2
