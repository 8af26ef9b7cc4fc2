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

from argparse import ArgumentParser

from django.core.exceptions import ObjectDoesNotExist
from django.core.management import BaseCommand, CommandError

from confmanager.accounting.payment import recalculate_event_balances
from confmanager.models.event import Event


class Command(BaseCommand):
    """Django management command."""

    help = "Recompute paid amounts and payment status of balances from their payments"

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument("--event", type=str, help="Event slug (all events when omitted)")

    def handle(self, *args: tuple, **options: dict) -> None:  # noqa: ARG002
        event = None
        if options.get("event"):
            try:
                event = Event.objects.get(slug=options["event"])
            except ObjectDoesNotExist as err:
                msg = f"Event not found: {options['event']}"
                raise CommandError(msg) from err

        changed = recalculate_event_balances(event)
        self.stdout.write(f"Balances updated: {changed}")
