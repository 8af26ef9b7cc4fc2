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

import logging
from typing import TYPE_CHECKING

from django.core.exceptions import ObjectDoesNotExist
from django.http import Http404, HttpRequest, HttpResponse, JsonResponse

from confmanager.utils.core.exceptions import ConfManagerError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class ExceptionHandlingMiddleware:
    """Turn domain errors raised by views into JSON error bodies."""

    def __init__(self, get_response: Callable) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        return self.get_response(request)

    def process_exception(self, request: HttpRequest, exception: Exception) -> HttpResponse | None:
        """Process exceptions raised by views and route them to a JSON response.

        Args:
            request: The HTTP request object that triggered the exception
            exception: The exception instance that was raised

        Returns:
            JsonResponse with a message and status for handled exceptions, None
            for exceptions outside the API to keep Django's default handling

        """
        if not request.path.startswith("/api/"):
            return None

        handlers = [
            (ConfManagerError, lambda ex: self._json_error(ex.message, ex.status)),
            (ObjectDoesNotExist, lambda ex: self._json_error("Not found", 404)),
            (Http404, lambda ex: self._json_error(str(ex) or "Not found", 404)),
        ]

        for exc_type, handler in handlers:
            if isinstance(exception, exc_type):
                if isinstance(exception, ConfManagerError):
                    logger.warning("Request %s %s failed: %s", request.method, request.path, exception.message)
                return handler(exception)

        logger.exception("Unexpected error on %s %s", request.method, request.path)
        return self._json_error("Internal server error", 500)

    @staticmethod
    def _json_error(message: str, status: int) -> JsonResponse:
        return JsonResponse({"message": message}, status=status)
