"""
Read-side queries over the append-only audit rows.

Nothing here writes. Results may be slightly stale relative to a
concurrent mutation; every authoritative decision is re-checked inside
the mutating use case.
"""

from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Q, Sum

from ledger.application.accounts import open_account
from ledger.conf import ledger_settings
from ledger.domain.values import ZERO, LifetimeImpact, quantize
from ledger.models import Account, BillPayment, EnergyLog, Transaction


def transaction_history(user, limit=None):
    """Bill payments and marketplace trades for the caller, newest first."""
    account = open_account(user)
    entries = []

    for payment in BillPayment.objects.filter(account=account):
        entries.append({
            "id": payment.pk,
            "type": "bill_payment",
            "amount": payment.bill_amount,
            "credits": payment.credits_used,
            "savings": payment.credit_savings,
            "cash_paid": payment.cash_paid,
            "created_at": payment.created_at,
            "description": (
                f"Bill payment - Used {payment.credits_used} credits, saved {payment.credit_savings}"
            ),
        })

    trades = Transaction.objects.filter(Q(buyer=account) | Q(seller=account))
    for trade in trades:
        is_purchase = trade.buyer_id == account.pk
        entries.append({
            "id": trade.pk,
            "type": "purchase" if is_purchase else "sale",
            "amount": trade.total_price,
            "credits": trade.credits_amount,
            "savings": ZERO,
            "cash_paid": trade.total_price if is_purchase else ZERO,
            "created_at": trade.created_at,
            "description": (
                f"Bought {trade.credits_amount} credits"
                if is_purchase
                else f"Sold {trade.credits_amount} credits"
            ),
        })

    entries.sort(key=lambda entry: entry["created_at"], reverse=True)
    if limit is not None:
        entries = entries[:limit]
    return entries


def lifetime_impact(user):
    """
    Lifetime clean-energy counters for the caller.

    Producers are credited with everything they ever sent to the grid,
    consumers with every credit they bought on the marketplace.
    """
    account = open_account(user)
    if account.role == Account.PRODUCER:
        total = EnergyLog.objects.filter(account=account).aggregate(total=Sum("sent_to_grid"))["total"]
    else:
        total = Transaction.objects.filter(buyer=account).aggregate(total=Sum("credits_amount"))["total"]

    units = quantize(total or ZERO)
    co2 = (units * ledger_settings().co2_kg_per_kwh).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return LifetimeImpact(
        role=account.role,
        lifetime_units=units,
        co2_avoided_kg=int(co2),
    )
