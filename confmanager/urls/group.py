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

from django.urls import (
    path,
)

from confmanager.views.group import housing as views_gh

urlpatterns = [
    path(
        "api/group/<slug:g>/housing/",
        views_gh.group_housing,
        name="group_housing",
    ),
    path(
        "api/group/<slug:g>/housing/assign/",
        views_gh.group_housing_assign,
        name="group_housing_assign",
    ),
    path(
        "api/group/<slug:g>/housing/unassign/",
        views_gh.group_housing_unassign,
        name="group_housing_unassign",
    ),
    path(
        "api/group/<slug:g>/housing/auto-assign/",
        views_gh.group_housing_auto_assign,
        name="group_housing_auto_assign",
    ),
    path(
        "api/group/<slug:g>/housing/submit/",
        views_gh.group_housing_submit,
        name="group_housing_submit",
    ),
    path(
        "api/group/<slug:g>/housing/request-unlock/",
        views_gh.group_housing_request_unlock,
        name="group_housing_request_unlock",
    ),
]
