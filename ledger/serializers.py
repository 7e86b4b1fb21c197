from rest_framework import serializers

from ledger.models import BillPayment, Listing


class AccountSnapshotSerializer(serializers.Serializer):
    credits = serializers.DecimalField(max_digits=14, decimal_places=2)
    cash = serializers.DecimalField(max_digits=14, decimal_places=2)
    escrowed_credits = serializers.DecimalField(max_digits=14, decimal_places=2)
    role = serializers.CharField()
    role_selected = serializers.BooleanField()
    full_name = serializers.CharField(allow_blank=True)
    savings_rate = serializers.DecimalField(max_digits=8, decimal_places=2)
    potential_savings = serializers.DecimalField(max_digits=16, decimal_places=2)


class EnergyLogSnapshotSerializer(serializers.Serializer):
    log_date = serializers.DateField()
    generated = serializers.DecimalField(max_digits=12, decimal_places=2)
    used = serializers.DecimalField(max_digits=12, decimal_places=2)
    sent_to_grid = serializers.DecimalField(max_digits=12, decimal_places=2)
    credits_converted = serializers.BooleanField()


class MarketListingSerializer(serializers.Serializer):
    """Public view of an active listing. The seller is never exposed."""

    id = serializers.UUIDField()
    credits_available = serializers.DecimalField(max_digits=14, decimal_places=2)
    price_per_credit = serializers.DecimalField(max_digits=8, decimal_places=2)
    total_price = serializers.DecimalField(max_digits=16, decimal_places=2)
    created_at = serializers.DateTimeField()
    is_own = serializers.BooleanField()


class OwnListingSerializer(serializers.ModelSerializer):
    total_price = serializers.DecimalField(max_digits=16, decimal_places=2, read_only=True)

    class Meta:
        model = Listing
        fields = ["id", "credits_available", "price_per_credit", "total_price", "status", "created_at", "sold_at"]
        read_only_fields = fields


class HistoryEntrySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    type = serializers.ChoiceField(choices=["bill_payment", "purchase", "sale"])
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    credits = serializers.DecimalField(max_digits=14, decimal_places=2)
    savings = serializers.DecimalField(max_digits=14, decimal_places=2)
    cash_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    created_at = serializers.DateTimeField()
    description = serializers.CharField()


class BillReceiptSerializer(serializers.ModelSerializer):
    receipt_id = serializers.UUIDField(source="id", read_only=True)

    class Meta:
        model = BillPayment
        fields = [
            "receipt_id",
            "bill_amount",
            "credits_used",
            "credit_savings",
            "cash_paid",
            "savings_rate",
            "provider",
            "consumer_number",
            "consumer_name",
            "billing_month",
            "meter_number",
            "units_consumed",
            "rate_per_unit",
            "created_at",
        ]
        read_only_fields = fields


class BillQuoteSerializer(serializers.Serializer):
    bill_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    credits_to_use = serializers.DecimalField(max_digits=14, decimal_places=2)
    credit_savings = serializers.DecimalField(max_digits=14, decimal_places=2)
    cash_due = serializers.DecimalField(max_digits=14, decimal_places=2)
    max_credits_for_bill = serializers.DecimalField(max_digits=14, decimal_places=2)
    can_afford = serializers.BooleanField()


class LifetimeImpactSerializer(serializers.Serializer):
    role = serializers.CharField()
    lifetime_units = serializers.DecimalField(max_digits=16, decimal_places=2)
    co2_avoided_kg = serializers.IntegerField()
