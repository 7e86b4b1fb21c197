"""
Application Use Case — Energy Intake & Conversion

log_energy() upserts the caller's EnergyLog row for today.
earn_credits() turns that day's surplus into credits exactly once.

The conversion is a read-check-flip-credit sequence. It runs as one
atomic block with the account row locked, and the flip itself is a
conditional UPDATE (credits_converted=False -> True) whose row count
decides the winner. On backends without row locks the conditional UPDATE
alone still lets only one of two concurrent requests through.
"""

import logging

from django.db import transaction
from django.utils import timezone

from ledger.application.accounts import apply_delta, lock_account, open_account
from ledger.domain.exceptions import AlreadyConverted, NothingToConvert
from ledger.domain.values import ENERGY_DIGITS, ZERO, to_decimal
from ledger.models import EnergyLog

logger = logging.getLogger(__name__)


def log_energy(user, generated, used, log_date=None):
    """
    Record today's generation and usage for the caller.

    Re-logging the same day overwrites the figures, recomputes sent_to_grid
    and clears credits_converted. Values never accumulate.
    """
    generated = to_decimal(generated, "generated", max_digits=ENERGY_DIGITS)
    used = to_decimal(used, "used", max_digits=ENERGY_DIGITS)
    log_date = log_date or timezone.localdate()
    sent_to_grid = max(ZERO, generated - used)

    with transaction.atomic():
        account = lock_account(user)
        energy_log, created = EnergyLog.objects.update_or_create(
            account=account,
            log_date=log_date,
            defaults={
                "generated": generated,
                "used": used,
                "sent_to_grid": sent_to_grid,
                "credits_converted": False,
            },
        )

    logger.info(
        "Logged energy: account=%s date=%s generated=%s used=%s sent_to_grid=%s created=%s",
        account.pk, log_date, generated, used, sent_to_grid, created,
    )
    return {
        "message": "Energy logged successfully.",
        "sent_to_grid": energy_log.sent_to_grid,
    }


def _claim_conversion(energy_log_id):
    """Flip credits_converted from False to True. Returns False if another request got there first."""
    claimed = (
        EnergyLog.objects
        .filter(pk=energy_log_id, credits_converted=False)
        .update(credits_converted=True, updated_at=timezone.now())
    )
    return claimed == 1


def earn_credits(user, log_date=None):
    """Convert the day's sent_to_grid surplus into credits at 1 kWh : 1 credit."""
    log_date = log_date or timezone.localdate()

    with transaction.atomic():
        account = lock_account(user)
        energy_log = (
            EnergyLog.objects
            .select_for_update()
            .filter(account=account, log_date=log_date)
            .first()
        )

        if energy_log is not None and energy_log.credits_converted:
            logger.warning("Already converted: account=%s date=%s", account.pk, log_date)
            raise AlreadyConverted(log_date)

        if energy_log is None or energy_log.sent_to_grid <= 0:
            logger.warning("Nothing to convert: account=%s date=%s", account.pk, log_date)
            raise NothingToConvert(log_date)

        if not _claim_conversion(energy_log.pk):
            logger.warning("Conversion lost race: account=%s date=%s", account.pk, log_date)
            raise AlreadyConverted(log_date)

        credits_earned = energy_log.sent_to_grid
        account = apply_delta(account, delta_credits=credits_earned)

    logger.info(
        "Converted energy: account=%s date=%s credits_earned=%s credits=%s",
        account.pk, log_date, credits_earned, account.credits,
    )
    return {
        "message": f"Converted {credits_earned} kWh into credits.",
        "credits_earned": credits_earned,
        "credits": account.credits,
    }


def today_energy(user, log_date=None):
    """Snapshot of the caller's log for the day; zeros when nothing was logged."""
    log_date = log_date or timezone.localdate()
    account = open_account(user)
    energy_log = EnergyLog.objects.filter(account=account, log_date=log_date).first()
    if energy_log is None:
        return {
            "log_date": log_date,
            "generated": ZERO,
            "used": ZERO,
            "sent_to_grid": ZERO,
            "credits_converted": False,
        }
    return {
        "log_date": energy_log.log_date,
        "generated": energy_log.generated,
        "used": energy_log.used,
        "sent_to_grid": energy_log.sent_to_grid,
        "credits_converted": energy_log.credits_converted,
    }
