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


class ConfManagerError(Exception):
    """Base for errors surfaced to the caller as a JSON message.

    Attributes:
        message (str): Human readable description of the failure
        status (int): HTTP status code used by the middleware

    """

    status = 400
    default_message = "Request could not be completed"

    def __init__(self, message: str | None = None) -> None:
        """Initialize with an optional message, falling back to the class default."""
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailedError(ConfManagerError):
    """Exception raised when input fails a precondition."""

    default_message = "Invalid data"


class BedOccupiedError(ValidationFailedError):
    """Exception raised when the target bed already holds someone."""

    default_message = "Bed is already occupied"


class CategoryMismatchError(ValidationFailedError):
    """Exception raised when a participant does not fit the room category."""

    default_message = "Participant category does not match the room"


class NotAssignedError(ValidationFailedError):
    default_message = "Participant is not assigned to a bed"


class HousingLockedError(ConfManagerError):
    """Exception raised on housing mutations after the group submitted."""

    status = 423
    default_message = "Housing assignments are locked"


class UserPermissionError(ConfManagerError):
    """Exception raised when user lacks required permissions."""

    status = 403
    default_message = "Permission denied"


class NotFoundError(ConfManagerError):
    """Generic exception for content not found scenarios."""

    status = 404
    default_message = "Not found"
