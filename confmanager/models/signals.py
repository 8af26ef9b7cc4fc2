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
import logging
from typing import Any

from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver
from safedelete.signals import post_softdelete

from confmanager.accounting.payment import recalculate_balance
from confmanager.meals.balancer import unassign_meal_group
from confmanager.models.accounting import Payment, PaymentBalance
from confmanager.models.base import auto_assign_sequential_numbers, auto_set_uuid
from confmanager.models.housing import Room, RoomAssignment
from confmanager.models.meal import MealGroup, MealGroupAssignment
from confmanager.models.registration import GroupRegistration, IndividualRegistration, Participant

log = logging.getLogger(__name__)


@receiver(pre_save)
def pre_save_callback(sender: type, instance: object, *args: Any, **kwargs: Any) -> None:
    """Fill display order and uuid of models that carry them."""
    auto_assign_sequential_numbers(instance)

    auto_set_uuid(instance)


def _refresh_payment_balance(instance: Payment) -> None:
    balance = PaymentBalance.objects.filter(pk=instance.balance_id).first()
    if not balance:
        return
    recalculate_balance(balance)
    log.debug("Balance %s now %s (%s)", balance.uuid, balance.amount_paid, balance.payment_status)


@receiver(post_save, sender=Payment)
def post_save_payment_balance(sender: type, instance: Payment, created: bool, **kwargs: Any) -> None:
    _refresh_payment_balance(instance)


@receiver(post_softdelete, sender=Payment)
def post_softdelete_payment_balance(sender: type, instance: Payment, **kwargs: Any) -> None:
    _refresh_payment_balance(instance)


@receiver(post_delete, sender=Payment)
def post_delete_payment_balance(sender: type, instance: Payment, **kwargs: Any) -> None:
    _refresh_payment_balance(instance)


# Assignment rows are hard deleted, the safedelete cascade does not reach them
@receiver(post_softdelete, sender=Participant)
def post_softdelete_participant_bed(sender: type, instance: Participant, **kwargs: Any) -> None:
    RoomAssignment.objects.filter(participant=instance).delete()


@receiver(post_softdelete, sender=Room)
def post_softdelete_room_beds(sender: type, instance: Room, **kwargs: Any) -> None:
    RoomAssignment.objects.filter(room=instance).delete()


@receiver(post_softdelete, sender=GroupRegistration)
def post_softdelete_group_registration(sender: type, instance: GroupRegistration, **kwargs: Any) -> None:
    """Release the beds and the meal group of a cancelled group."""
    RoomAssignment.objects.filter(group_registration=instance).delete()
    unassign_meal_group(instance)


@receiver(post_softdelete, sender=IndividualRegistration)
def post_softdelete_individual_registration(sender: type, instance: IndividualRegistration, **kwargs: Any) -> None:
    unassign_meal_group(instance)


@receiver(post_softdelete, sender=MealGroup)
def post_softdelete_meal_group(sender: type, instance: MealGroup, **kwargs: Any) -> None:
    released, _detail = MealGroupAssignment.objects.filter(meal_group=instance).delete()
    if released:
        log.info("Meal group %s removed, %s registrations to reassign", instance.uuid, released)
