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

"""Tests for liability form PDF rendering"""

import os
from datetime import date, timedelta
from unittest.mock import patch

import pytest
from django.template.loader import get_template
from django.urls import reverse
from django.utils import timezone

from confmanager.models.event import Event
from confmanager.models.liability import LiabilityForm, SafeEnvironmentCertificate
from confmanager.tests.unit.base import BaseTestCase
from confmanager.utils.core.exceptions import ValidationFailedError
from confmanager.utils.io.pdf import (
    LIABILITY_TEMPLATES,
    fix_filename,
    get_liability_context,
    print_liability_form,
    render_liability_form,
)


def test_fix_filename() -> None:
    assert fix_filename("O'Brien, Sean / youth_u18") == "OBrien Sean  youthu18"


class TestLiabilityContext(BaseTestCase):
    def test_chaperone_gets_safe_environment_block(self) -> None:
        form = self.create_liability_form(
            form_type="youth_o18_chaperone", participant_type="chaperone", participant_age=40
        )
        SafeEnvironmentCertificate.objects.create(
            form=form, program_name="VIRTUS", completion_date=date(2025, 3, 1), status="verified"
        )

        context = get_liability_context(form)

        assert context["is_chaperone"]
        assert context["certificate"].program_name == "VIRTUS"
        assert context["form_code"] == form.uuid[:8].upper()
        html = get_template(LIABILITY_TEMPLATES[form.form_type]).render(context)
        assert "SAFE ENVIRONMENT CERTIFICATION" in html
        assert "VIRTUS" in html

    def test_adult_youth_has_no_safe_environment_block(self) -> None:
        form = self.create_liability_form(
            form_type="youth_o18_chaperone", participant_type="youth_o18", participant_age=19
        )

        context = get_liability_context(form)

        assert not context["is_chaperone"]
        assert context["certificate"] is None
        html = get_template(LIABILITY_TEMPLATES[form.form_type]).render(context)
        assert "SAFE ENVIRONMENT CERTIFICATION" not in html

    def test_clergy_block(self) -> None:
        form = self.create_liability_form(
            form_type="clergy", participant_type="priest", clergy_title="Rev.", diocese_of_incardination="Dallas"
        )

        context = get_liability_context(form)

        assert context["is_clergy"]
        html = get_template(LIABILITY_TEMPLATES[form.form_type]).render(context)
        assert "CLERGY INFORMATION" in html
        assert "Dallas" in html


class TestRenderLiabilityForm(BaseTestCase):
    def test_render_youth_form(self) -> None:
        form = self.create_liability_form(allergies="Peanuts", emergency_contact_1_name="Mary Doe")

        pdf = render_liability_form(form)

        assert pdf.startswith(b"%PDF")

    def test_missing_signature(self) -> None:
        form = self.create_liability_form(signature={})

        with pytest.raises(ValidationFailedError, match="signature full legal name"):
            render_liability_form(form)

    def test_missing_name(self) -> None:
        form = self.create_liability_form(participant_last_name="  ")

        with pytest.raises(ValidationFailedError, match="participant last name"):
            render_liability_form(form)

    def test_unknown_form_type(self) -> None:
        form = self.create_liability_form(form_type="visitor")

        with pytest.raises(ValidationFailedError):
            render_liability_form(form)

    def test_cached_file_is_reused(self) -> None:
        form = self.create_liability_form()
        path = print_liability_form(form, force=True)

        with patch("confmanager.utils.io.pdf.render_liability_form") as render:
            assert print_liability_form(form) == path
            render.assert_not_called()

        assert path.read_bytes().startswith(b"%PDF")

    def test_new_certificate_reprints_cached_file(self) -> None:
        form = self.create_liability_form(
            form_type="youth_o18_chaperone", participant_type="chaperone", participant_age=40
        )
        path = print_liability_form(form, force=True)
        hours_ago = timezone.now() - timedelta(hours=2)
        LiabilityForm.objects.filter(pk=form.pk).update(updated=hours_ago)
        Event.objects.filter(pk=form.event_id).update(updated=hours_ago)
        form = LiabilityForm.objects.get(pk=form.pk)
        printed = (timezone.now() - timedelta(hours=1)).timestamp()
        os.utime(path, (printed, printed))

        with patch("confmanager.utils.io.pdf.render_liability_form", return_value=b"%PDF-1.4") as render:
            print_liability_form(form)
            render.assert_not_called()

            SafeEnvironmentCertificate.objects.create(
                form=form, program_name="VIRTUS", completion_date=date(2025, 3, 1), status="verified"
            )
            print_liability_form(form)
            render.assert_called_once_with(form)

        assert path.read_bytes() == b"%PDF-1.4"


class TestLiabilityView(BaseTestCase):
    def setUp(self) -> None:
        self.form = self.create_liability_form()
        self.url = reverse("orga_liability_pdf", kwargs={"e": "summer", "f": self.form.uuid})

    def test_organizer_downloads_pdf(self) -> None:
        self.client.force_login(self.create_organizer())

        response = self.client.get(self.url)

        assert response.status_code == 200
        assert response["Content-Type"] == "application/pdf"
        assert response["Content-Disposition"] == "inline;filename=Doe John youthu18.pdf"
        assert response.content.startswith(b"%PDF")

    def test_invalid_form_is_rejected(self) -> None:
        self.form.signature = {}
        self.form.save()
        self.client.force_login(self.create_organizer())

        response = self.client.get(self.url)

        assert response.status_code == 400
        assert "signature" in response.json()["message"]

    def test_other_user_is_forbidden(self) -> None:
        self.client.force_login(self.create_user())

        response = self.client.get(self.url)

        assert response.status_code == 403
