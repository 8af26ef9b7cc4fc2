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

from confmanager.views.orga import accounting as views_oa
from confmanager.views.orga import housing as views_oh
from confmanager.views.orga import meal as views_om
from confmanager.views.orga import pdf as views_op

urlpatterns = [
    path(
        "api/orga/<slug:e>/housing/<slug:g>/unlock/",
        views_oh.orga_housing_unlock,
        name="orga_housing_unlock",
    ),
    path(
        "api/orga/<slug:e>/meal-groups/",
        views_om.orga_meal_groups,
        name="orga_meal_groups",
    ),
    path(
        "api/orga/<slug:e>/meal-groups/auto-assign/",
        views_om.orga_meal_groups_auto_assign,
        name="orga_meal_groups_auto_assign",
    ),
    path(
        "api/orga/<slug:e>/meal-groups/recalculate/",
        views_om.orga_meal_groups_recalculate,
        name="orga_meal_groups_recalculate",
    ),
    path(
        "api/orga/<slug:e>/meal-group-assignments/",
        views_om.orga_meal_group_assign,
        name="orga_meal_group_assign",
    ),
    path(
        "api/orga/<slug:e>/meal-group-assignments/delete/",
        views_om.orga_meal_group_unassign,
        name="orga_meal_group_unassign",
    ),
    path(
        "api/orga/<slug:e>/pricing/quote/",
        views_oa.orga_pricing_quote,
        name="orga_pricing_quote",
    ),
    path(
        "api/orga/<slug:e>/payments/<slug:b>/record/",
        views_oa.orga_payment_record,
        name="orga_payment_record",
    ),
    path(
        "api/orga/<slug:e>/payments/<slug:b>/total-due/",
        views_oa.orga_payment_total_due,
        name="orga_payment_total_due",
    ),
    path(
        "api/orga/<slug:e>/liability/<slug:f>/pdf/",
        views_op.orga_liability_pdf,
        name="orga_liability_pdf",
    ),
]
