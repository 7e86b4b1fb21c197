"""
Application Use Case — Bill Settlement

pay_bill() settles an electricity bill with an optional credit discount:

    credit_savings = credits_to_use * savings_rate
    cash_due       = max(0, bill_amount - credit_savings)

Both debits and the BillPayment receipt are written in one atomic block
with the payer's account row locked. The savings rate always comes from
ledger_settings(), never from the caller.
"""

import logging
import math
import uuid
from decimal import Decimal

from django.db import transaction

from ledger.application.accounts import apply_delta, lock_account, open_account
from ledger.conf import ledger_settings
from ledger.domain.exceptions import InsufficientCash, InsufficientCredits, InvalidAmount, ReceiptNotFound
from ledger.domain.values import BillMetadata, BillQuote, bill_breakdown, quantize, to_decimal
from ledger.models import BillPayment

logger = logging.getLogger(__name__)


def _validated_amounts(bill_amount, credits_to_use):
    bill_amount = to_decimal(bill_amount, "bill_amount", allow_negative=True)
    if bill_amount <= 0:
        raise InvalidAmount("bill_amount", bill_amount, message="Please enter a valid electricity bill amount.")
    credits_to_use = to_decimal(credits_to_use if credits_to_use not in (None, "") else 0, "credits_to_use")
    return bill_amount, credits_to_use


def pay_bill(user, bill_amount, credits_to_use, metadata=None):
    """
    Pay a bill using ``credits_to_use`` credits as a discount and cash for the rest.

    ``metadata`` is a BillMetadata (or a mapping accepted by
    BillMetadata.from_mapping) describing the bill; it is recorded on the
    receipt and never affects the arithmetic.
    """
    bill_amount, credits_to_use = _validated_amounts(bill_amount, credits_to_use)
    if not isinstance(metadata, BillMetadata):
        metadata = BillMetadata.from_mapping(metadata)
    savings_rate = ledger_settings().savings_rate
    credit_savings, cash_due = bill_breakdown(bill_amount, credits_to_use, savings_rate)
    rate_per_unit = metadata.rate_per_unit(bill_amount)

    with transaction.atomic():
        account = lock_account(user)

        if credits_to_use > account.credits:
            logger.warning(
                "Insufficient credits for bill: account=%s requested=%s available=%s",
                account.pk, credits_to_use, account.credits,
            )
            raise InsufficientCredits(account.pk, credits_to_use, account.credits)
        if cash_due > account.cash:
            logger.warning(
                "Insufficient cash for bill: account=%s due=%s available=%s",
                account.pk, cash_due, account.cash,
            )
            raise InsufficientCash(account.pk, cash_due, account.cash)

        account = apply_delta(account, delta_credits=-credits_to_use, delta_cash=-cash_due)
        receipt = BillPayment.objects.create(
            account=account,
            bill_amount=bill_amount,
            credits_used=credits_to_use,
            credit_savings=credit_savings,
            cash_paid=cash_due,
            savings_rate=savings_rate,
            provider=metadata.provider,
            consumer_number=metadata.consumer_number,
            consumer_name=metadata.consumer_name,
            billing_month=metadata.billing_month,
            meter_number=metadata.meter_number,
            units_consumed=metadata.units_consumed,
            rate_per_unit=rate_per_unit,
        )

    logger.info(
        "Paid bill: account=%s receipt=%s bill=%s credits_used=%s savings=%s cash_paid=%s",
        account.pk, receipt.pk, bill_amount, credits_to_use, credit_savings, cash_due,
    )
    if credit_savings > 0:
        message = f"Bill paid. You saved {credit_savings} using {credits_to_use} credits."
    else:
        message = "Your electricity bill has been paid."
    return {
        "message": message,
        "receipt_id": str(receipt.pk),
        "credit_savings": credit_savings,
        "cash_paid": cash_due,
        "cash_remaining": account.cash,
        "credits_remaining": account.credits,
    }


def get_receipt(user, receipt_id):
    """Return one of the caller's own BillPayment rows."""
    try:
        receipt_pk = uuid.UUID(str(receipt_id))
    except ValueError:
        raise ReceiptNotFound(receipt_id)
    account = open_account(user)
    receipt = BillPayment.objects.filter(pk=receipt_pk, account=account).first()
    if receipt is None:
        raise ReceiptNotFound(receipt_id)
    return receipt


def bill_quote(user, bill_amount, credits_to_use=0):
    """
    Preview what pay_bill() would charge, for forms.

    Not authoritative: balances may change before the bill is paid, and
    pay_bill() re-checks everything under lock.
    """
    bill_amount, credits_to_use = _validated_amounts(bill_amount, credits_to_use)
    account = open_account(user)
    savings_rate = ledger_settings().savings_rate
    credit_savings, cash_due = bill_breakdown(bill_amount, credits_to_use, savings_rate)
    max_credits_for_bill = min(account.credits, quantize(Decimal(math.floor(bill_amount / savings_rate))))
    return BillQuote(
        bill_amount=bill_amount,
        credits_to_use=credits_to_use,
        credit_savings=credit_savings,
        cash_due=cash_due,
        max_credits_for_bill=max_credits_for_bill,
        can_afford=credits_to_use <= account.credits and cash_due <= account.cash,
    )
