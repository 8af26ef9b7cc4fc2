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

import io
import logging
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from django.conf import settings as conf_settings
from django.db.models import Max
from django.http import Http404, HttpResponse
from django.template.loader import get_template
from django.utils import timezone
from xhtml2pdf import pisa

from confmanager.models.liability import LiabilityFormType, SafeEnvironmentCertificate
from confmanager.models.registration import ParticipantType
from confmanager.utils.core.exceptions import ValidationFailedError

if TYPE_CHECKING:
    from confmanager.models.liability import LiabilityForm

logger = logging.getLogger(__name__)

LIABILITY_TEMPLATES = {
    LiabilityFormType.YOUTH_U18: "pdf/liability/youth_u18.html",
    LiabilityFormType.YOUTH_O18_CHAPERONE: "pdf/liability/youth_o18_chaperone.html",
    LiabilityFormType.CLERGY: "pdf/liability/clergy.html",
}


def fix_filename(filename: Any) -> Any:
    """Remove special characters from filename for safe PDF generation.

    Args:
        filename (str): Original filename string

    Returns:
        str: Sanitized filename with only alphanumeric characters and spaces

    """
    return re.sub(r"[^A-Za-z0-9 ]+", "", filename)


def link_callback(uri: str, rel: str) -> str:  # noqa: ARG001
    """Convert HTML URIs to absolute system paths for xhtml2pdf.

    Args:
        uri: URI from HTML content (e.g., '/static/css/style.css')
        rel: Relative URI reference (currently unused)

    Returns:
        Absolute file path if file exists, empty string otherwise

    """
    static_url = conf_settings.STATIC_URL
    if not uri.startswith(static_url) or not conf_settings.STATIC_ROOT:
        return ""

    path = Path(conf_settings.STATIC_ROOT) / uri.replace(static_url, "")
    if not path.is_file():
        return ""
    return str(path)


def xhtml_pdf(context: dict, template_path: str) -> bytes:
    """Render a Django template and convert it to a PDF document.

    Raises:
        Http404: If xhtml2pdf reports errors while converting

    """
    html_content = get_template(template_path).render(context)

    buffer = io.BytesIO()
    pdf_result = pisa.CreatePDF(html_content, dest=buffer, link_callback=link_callback)
    if pdf_result.err:
        logger.error("PDF generation failed for template %s", template_path)
        msg = "Error while generating the document"
        raise Http404(msg)
    return buffer.getvalue()


def check_liability_form(form: LiabilityForm) -> None:
    """Check the fields every liability document prints.

    Raises:
        ValidationFailedError: If a name or the signer's full legal name is missing

    """
    missing = [
        label
        for label, value in (
            ("participant first name", form.participant_first_name),
            ("participant last name", form.participant_last_name),
            ("signature full legal name", (form.signature or {}).get("full_legal_name")),
        )
        if not value or not str(value).strip()
    ]
    if missing:
        raise ValidationFailedError("Missing required fields: " + ", ".join(missing))

    if form.form_type not in LIABILITY_TEMPLATES:
        raise ValidationFailedError(f"Unknown form type: {form.form_type}")


def get_liability_context(form: LiabilityForm) -> dict:
    is_chaperone = (
        form.form_type == LiabilityFormType.YOUTH_O18_CHAPERONE and form.participant_type == ParticipantType.CHAPERONE
    )
    signature = form.signature or {}
    return {
        "form": form,
        "event": form.event,
        "form_code": form.uuid[:8].upper(),
        "signature": signature,
        "sections_initialed": signature.get("sections_initialed") or [],
        "is_chaperone": is_chaperone,
        "is_clergy": form.form_type == LiabilityFormType.CLERGY,
        "certificate": form.certificates.order_by("-completion_date").first() if is_chaperone else None,
        "generated": timezone.now(),
    }


def render_liability_form(form: LiabilityForm) -> bytes:
    """Render a completed liability form into its PDF layout.

    The layout depends on the form type: minors, adults and chaperones,
    clergy. The safe environment block is printed only for chaperones, the
    faculties block only for clergy.

    Returns:
        The PDF document

    """
    check_liability_form(form)
    pdf = xhtml_pdf(get_liability_context(form), LIABILITY_TEMPLATES[form.form_type])
    logger.info("Rendered %s liability form %s (%s bytes)", form.form_type, form.uuid, len(pdf))
    return pdf


def get_liability_path(form: LiabilityForm) -> Path:
    return Path(conf_settings.PDF_ROOT) / form.event.slug / "liability" / f"{form.uuid}.pdf"


def reprint(file_path: Path, updated: datetime) -> bool:
    """Check if the cached PDF must be regenerated (debug, missing or older than its content)."""
    if conf_settings.DEBUG or not file_path.is_file():
        return True
    modification_time = datetime.fromtimestamp(file_path.stat().st_mtime, tz=UTC)
    return modification_time < updated


def get_liability_updated(form: LiabilityForm) -> datetime:
    """Latest change to anything the document prints: the form, its event, its certificates."""
    certificates = SafeEnvironmentCertificate.all_objects.filter(form=form).aggregate(
        updated=Max("updated"), deleted=Max("deleted")
    )
    return max(value for value in (form.updated, form.event.updated, *certificates.values()) if value)


def print_liability_form(form: LiabilityForm, *, force: bool = False) -> Path:
    """Write the liability PDF under PDF_ROOT, reusing the file while what it prints is unchanged."""
    file_path = get_liability_path(form)
    if force or reprint(file_path, get_liability_updated(form)):
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(render_liability_form(form))
    return file_path


def return_pdf(file_path: Path, filename: str) -> HttpResponse:
    """Return PDF file as HTTP response.

    Raises:
        Http404: If PDF file is not found

    """
    try:
        response = HttpResponse(file_path.read_bytes(), content_type="application/pdf")
    except FileNotFoundError as err:
        msg = "File not found"
        raise Http404(msg) from err
    response["Content-Disposition"] = f"inline;filename={fix_filename(filename)}.pdf"
    return response
