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

from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, HttpResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET

from confmanager.models.liability import LiabilityForm
from confmanager.utils.core.base import check_event_context
from confmanager.utils.io.pdf import print_liability_form, return_pdf


@login_required
@require_GET
def orga_liability_pdf(request: HttpRequest, e: str, f: str) -> HttpResponse:
    """Serve a liability form as an inline PDF."""
    context = check_event_context(request, e)
    form = get_object_or_404(LiabilityForm, event=context["event"], uuid=f)

    file_path = print_liability_form(form)
    return return_pdf(file_path, f"{form.participant_last_name} {form.participant_first_name} {form.form_type}")
