"""
Persistence Models — Solar Credit Ledger (Django ORM)

Shared mutable state lives in exactly two places: Account balances and
Listing status. Both are only ever written by the use cases in
ledger.application, each inside one transaction.atomic() block.

Key decisions:

- Account holds both balances (credits and cash). CHECK constraints keep
  them non-negative at the database level as a last line behind the
  row-locked balance checks.
- EnergyLog is unique per (account, log_date), which makes daily logging
  an upsert and gives the conversion flag a single row to guard.
- Listing credits are escrowed out of the seller's Account when the
  listing is created, so an active listing always represents credits the
  seller no longer holds.
- Transaction and BillPayment are append-only audit rows. Their UUID
  primary keys double as receipt identifiers.
"""

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

ZERO = Decimal("0.00")


class Account(models.Model):
    """Credits and cash held by one user."""

    PRODUCER = "producer"
    CONSUMER = "consumer"
    ROLE_CHOICES = [
        (PRODUCER, "Producer"),
        (CONSUMER, "Consumer"),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="ledger_account",
    )
    full_name = models.CharField(max_length=150, blank=True, default="")
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=CONSUMER)
    role_selected = models.BooleanField(default=False)

    credits = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    cash = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(condition=Q(credits__gte=0), name="account_credits_non_negative"),
            models.CheckConstraint(condition=Q(cash__gte=0), name="account_cash_non_negative"),
        ]

    def __str__(self):
        return f"Account {self.id} - Credits: {self.credits} Cash: {self.cash}"


class EnergyLog(models.Model):
    """
    One day of generation and self-consumption for one account.

    sent_to_grid is derived on every write. credits_converted guards the
    day's surplus against being converted twice.
    """

    account = models.ForeignKey(
        Account,
        on_delete=models.CASCADE,
        related_name="energy_logs",
    )
    log_date = models.DateField()

    generated = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    used = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    sent_to_grid = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    credits_converted = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-log_date"]
        constraints = [
            models.UniqueConstraint(fields=["account", "log_date"], name="energy_log_one_per_day"),
            models.CheckConstraint(condition=Q(generated__gte=0), name="energy_log_generated_non_negative"),
            models.CheckConstraint(condition=Q(used__gte=0), name="energy_log_used_non_negative"),
            models.CheckConstraint(condition=Q(sent_to_grid__gte=0), name="energy_log_sent_non_negative"),
        ]

    def __str__(self):
        return f"EnergyLog {self.account_id} {self.log_date} - Sent: {self.sent_to_grid}"


class Listing(models.Model):
    """A seller's standing offer of a fixed block of credits, bought whole."""

    ACTIVE = "active"
    SOLD = "sold"
    STATUS_CHOICES = [
        (ACTIVE, "Active"),
        (SOLD, "Sold"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    seller = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="listings",
    )
    credits_available = models.DecimalField(max_digits=14, decimal_places=2)
    price_per_credit = models.DecimalField(max_digits=8, decimal_places=2)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    sold_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="listing_status_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(credits_available__gt=0), name="listing_credits_positive"),
        ]

    @property
    def total_price(self):
        return (self.credits_available * self.price_per_credit).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def __str__(self):
        return f"Listing {self.id} - {self.credits_available} @ {self.price_per_credit} ({self.status})"


class Transaction(models.Model):
    """Immutable record of one settled marketplace trade."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    buyer = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="purchases",
    )
    seller = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="sales",
    )
    listing = models.OneToOneField(
        Listing,
        on_delete=models.PROTECT,
        related_name="trade",
    )
    credits_amount = models.DecimalField(max_digits=14, decimal_places=2)
    total_price = models.DecimalField(max_digits=14, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Transaction {self.id} - {self.credits_amount} credits for {self.total_price}"


class BillPayment(models.Model):
    """
    Immutable record of one settled electricity bill.

    The id is the receipt identifier returned to the payer.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="bill_payments",
    )
    bill_amount = models.DecimalField(max_digits=14, decimal_places=2)
    credits_used = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    credit_savings = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    cash_paid = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    savings_rate = models.DecimalField(max_digits=8, decimal_places=2)

    provider = models.CharField(max_length=100, blank=True, default="")
    consumer_number = models.CharField(max_length=50, blank=True, default="")
    consumer_name = models.CharField(max_length=150, blank=True, default="")
    billing_month = models.CharField(max_length=20, blank=True, default="")
    meter_number = models.CharField(max_length=50, blank=True, default="")
    units_consumed = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    rate_per_unit = models.DecimalField(max_digits=10, decimal_places=2, default=ZERO)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"BillPayment {self.id} - {self.bill_amount}"
