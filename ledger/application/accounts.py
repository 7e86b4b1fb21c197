"""
Application Use Case — Account Ledger

Every balance mutation in the system goes through apply_delta(), called
on an Account row that the current transaction has locked with
select_for_update(). That gives the one guarantee the rest of the ledger
builds on: two concurrent debits of the same account serialize, and the
second one checks its balance against the value the first one left.

Core guarantees:

- Atomicity: callers run inside transaction.atomic(); a raised domain
  exception rolls back everything written so far.
- Row-level locking: lock_account() takes the account row lock before any
  balance is read for a decision.
- Race-condition safety: the UPDATE uses F() expressions, so it applies
  the delta to the database value rather than a Python-cached one.
"""

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ledger.conf import ledger_settings
from ledger.domain.exceptions import (
    AccountNotFound,
    InvalidAmount,
    InvalidInput,
    InvalidRole,
    InsufficientCash,
    InsufficientCredits,
    RoleAlreadySelected,
)
from ledger.domain.values import MAX_AMOUNT, ZERO, BalanceSnapshot, optional_text, quantize, to_decimal
from ledger.models import Account

logger = logging.getLogger(__name__)


def open_account(user):
    """Return the user's account, opening it with the starting cash on first use."""
    account, created = Account.objects.get_or_create(
        user=user,
        defaults={
            "cash": ledger_settings().starting_cash,
            "full_name": user.get_full_name() if hasattr(user, "get_full_name") else "",
        },
    )
    if created:
        logger.info("Opened account: user=%s account=%s", user.pk, account.pk)
    return account


def lock_account(user):
    """Open (if needed) and row-lock the user's account. Must run inside an atomic block."""
    account_id = open_account(user).pk
    return Account.objects.select_for_update().get(pk=account_id)


def lock_accounts(*account_ids):
    """Row-lock several accounts in primary-key order and return them keyed by id.

    A fixed lock order keeps two transfers between the same pair of
    accounts from deadlocking each other.
    """
    accounts = Account.objects.select_for_update().filter(pk__in=set(account_ids)).order_by("pk")
    locked = {account.pk: account for account in accounts}
    for account_id in account_ids:
        if account_id not in locked:
            raise AccountNotFound(account_id)
    return locked


def apply_delta(account, delta_credits=ZERO, delta_cash=ZERO):
    """Apply signed deltas to a locked account and return it refreshed.

    Raises InsufficientCredits / InsufficientCash (both InsufficientBalance)
    if either balance would go negative, and InvalidAmount if either would
    overflow its column. Nothing is written in those cases.
    """
    if account.credits + delta_credits < 0:
        logger.warning(
            "Insufficient credits: account=%s requested=%s available=%s",
            account.pk, -delta_credits, account.credits,
        )
        raise InsufficientCredits(account.pk, -delta_credits, account.credits)
    if account.cash + delta_cash < 0:
        logger.warning(
            "Insufficient cash: account=%s requested=%s available=%s",
            account.pk, -delta_cash, account.cash,
        )
        raise InsufficientCash(account.pk, -delta_cash, account.cash)
    if account.credits + delta_credits > MAX_AMOUNT:
        raise InvalidAmount("credits", delta_credits, message="This would exceed the maximum credit balance.")
    if account.cash + delta_cash > MAX_AMOUNT:
        raise InvalidAmount("cash", delta_cash, message="This would exceed the maximum cash balance.")

    Account.objects.filter(pk=account.pk).update(
        credits=F("credits") + delta_credits,
        cash=F("cash") + delta_cash,
        updated_at=timezone.now(),
    )
    account.refresh_from_db(fields=["credits", "cash", "updated_at"])
    return account


def adjust(user, delta_credits, delta_cash):
    """
    Apply a signed credits/cash delta to the user's account in one transaction.

    This is the general-purpose entry point (administrative grants, demo
    top-ups). The marketplace, bill and energy use cases call apply_delta()
    directly inside their own atomic blocks.
    """
    delta_credits = to_decimal(delta_credits, "delta_credits", allow_negative=True)
    delta_cash = to_decimal(delta_cash, "delta_cash", allow_negative=True)

    with transaction.atomic():
        account = apply_delta(lock_account(user), delta_credits, delta_cash)

    logger.info(
        "Adjusted account: account=%s delta_credits=%s delta_cash=%s",
        account.pk, delta_credits, delta_cash,
    )
    return BalanceSnapshot(credits=account.credits, cash=account.cash)


def get_account(user):
    """Read-only snapshot of the caller's account for dashboards."""
    account = open_account(user)
    savings_rate = ledger_settings().savings_rate
    return {
        "credits": account.credits,
        "cash": account.cash,
        "role": account.role,
        "role_selected": account.role_selected,
        "full_name": account.full_name,
        "savings_rate": savings_rate,
        "potential_savings": quantize(account.credits * savings_rate),
    }


def select_role(user, role, full_name=None):
    """Record the one-time producer/consumer choice made after sign-up."""
    valid_roles = {choice for choice, _ in Account.ROLE_CHOICES}
    if not isinstance(role, str) or role not in valid_roles:
        raise InvalidRole(role)

    with transaction.atomic():
        account = lock_account(user)
        if account.role_selected:
            logger.warning("Role already selected: account=%s role=%s", account.pk, account.role)
            raise RoleAlreadySelected(account.role)

        account.role = role
        account.role_selected = True
        update_fields = ["role", "role_selected", "updated_at"]
        name = optional_text(full_name, 150)
        if name:
            account.full_name = name
            update_fields.append("full_name")
        account.save(update_fields=update_fields)

    logger.info("Selected role: account=%s role=%s", account.pk, role)
    return {
        "message": f"You're now set up as a {role}.",
        "role": role,
    }


def update_profile(user, full_name):
    """Change the caller's display name. Unlike the role, it can be edited any time."""
    if not isinstance(full_name, str) or not full_name.strip():
        raise InvalidInput("full_name", full_name, message="Please enter your name.")
    name = optional_text(full_name, 150)

    with transaction.atomic():
        account = lock_account(user)
        account.full_name = name
        account.save(update_fields=["full_name", "updated_at"])

    logger.info("Updated profile: account=%s", account.pk)
    return {
        "message": "Profile updated successfully!",
        "full_name": name,
    }
