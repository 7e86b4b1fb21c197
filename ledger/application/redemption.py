"""
Application Use Case — Direct Credit Redemption

Converts credits straight into cash at the configured savings rate, for
callers that have no formal bill to settle.
"""

import logging

from django.db import transaction

from ledger.application.accounts import apply_delta, lock_account
from ledger.conf import ledger_settings
from ledger.domain.exceptions import InvalidAmount
from ledger.domain.values import quantize, to_decimal

logger = logging.getLogger(__name__)


def redeem_credits(user, credits):
    credits = to_decimal(credits, "credits", allow_negative=True)
    if credits <= 0:
        raise InvalidAmount("credits", credits)

    savings = quantize(credits * ledger_settings().savings_rate)

    with transaction.atomic():
        account = lock_account(user)
        # Re-checked under the row lock.
        if credits > account.credits:
            logger.warning(
                "Redemption exceeds balance: account=%s credits=%s available=%s",
                account.pk, credits, account.credits,
            )
            raise InvalidAmount(
                "credits",
                credits,
                message=f"Cannot redeem {credits} credits; only {account.credits} available.",
            )
        account = apply_delta(account, delta_credits=-credits, delta_cash=savings)

    logger.info(
        "Redeemed credits: account=%s credits=%s savings=%s",
        account.pk, credits, savings,
    )
    return {
        "message": f"Redeemed {credits} credits for {savings} in savings.",
        "savings": savings,
        "credits": account.credits,
        "cash": account.cash,
    }
