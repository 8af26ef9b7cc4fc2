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

from typing import Any, ClassVar

from django.core.validators import RegexValidator
from django.db import models, transaction
from django.utils import timezone
from safedelete.models import SOFT_DELETE_CASCADE, SafeDeleteModel

from confmanager.models.utils import my_uuid_short

AlphanumericValidator = RegexValidator(r"^[0-9a-z_-]*$", "Only characters allowed are: 0-9, a-z, _, -.")


class BaseModel(SafeDeleteModel):
    """Represents BaseModel model."""

    created = models.DateTimeField(default=timezone.now, editable=False)

    updated = models.DateTimeField(auto_now=True)

    _safedelete_policy = SOFT_DELETE_CASCADE

    class Meta:
        abstract = True
        ordering: ClassVar[list] = ["-updated"]

    def __str__(self) -> str:
        """Return the 'name' attribute if present, else the default representation."""
        if hasattr(self, "name"):
            return self.name

        return super().__str__()


class JoinModel(models.Model):
    """Base for assignment join rows, always hard deleted so unique constraints hold."""

    created = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        abstract = True


class UuidMixin(models.Model):
    """Adds an uuid field to the model."""

    uuid = models.CharField(
        max_length=12,
        unique=True,
        db_index=True,
        editable=False,
    )

    class Meta:
        abstract = True


def auto_assign_sequential_numbers(instance: Any) -> None:
    """Auto-populate the display order field for model instances scoped by event or building."""
    if not hasattr(instance, "order") or getattr(instance, "order"):
        return

    queryset = None
    for scope in ("building", "event", "organization"):
        if getattr(instance, f"{scope}_id", None):
            queryset = instance.__class__.objects.filter(**{f"{scope}_id": getattr(instance, f"{scope}_id")})
            break

    if queryset is None:
        return

    # Lock rows to prevent two concurrent inserts from picking the same order
    with transaction.atomic():
        max_instance = queryset.select_for_update().order_by("-order").first()
        instance.order = max_instance.order + 1 if max_instance else 1


def auto_set_uuid(instance: Any) -> None:
    """Set uuid field if missing value."""
    if not hasattr(instance, "uuid") or instance.uuid:
        return

    instance.uuid = my_uuid_short()
