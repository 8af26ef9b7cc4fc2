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

from django.core.management import BaseCommand

from confmanager.meals.balancer import recalculate_meal_group_sizes
from confmanager.models.event import Event


class Command(BaseCommand):
    """Django management command."""

    help = "Rewrite stored meal group sizes from the assignment rows"

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument("--event", type=str, help="Event slug (all events when omitted)")

    def handle(self, *args: tuple, **options: dict) -> None:  # noqa: ARG002
        events = Event.objects.all()
        if options.get("event"):
            events = events.filter(slug=options["event"])

        for event in events:
            for fixed in recalculate_meal_group_sizes(event):
                self.stdout.write(f"{event.slug} {fixed['name']}: {fixed['oldSize']} -> {fixed['newSize']}")
