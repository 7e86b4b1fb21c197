from decimal import Decimal

from django.contrib.auth import get_user_model

from ledger.models import Account


def make_account(username, credits="0.00", cash="0.00", role=Account.CONSUMER):
    """Create a user with an opened ledger account holding the given balances."""
    user = get_user_model().objects.create_user(username=username, password="solar-pass-123")
    account = Account.objects.create(
        user=user,
        credits=Decimal(credits),
        cash=Decimal(cash),
        role=role,
        role_selected=True,
    )
    return user, account


def total_cash():
    return sum((account.cash for account in Account.objects.all()), Decimal("0.00"))
