import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("full_name", models.CharField(blank=True, default="", max_length=150)),
                ("role", models.CharField(choices=[("producer", "Producer"), ("consumer", "Consumer")], default="consumer", max_length=10)),
                ("role_selected", models.BooleanField(default=False)),
                ("credits", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("cash", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="ledger_account", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("credits__gte", 0)), name="account_credits_non_negative"),
                    models.CheckConstraint(condition=models.Q(("cash__gte", 0)), name="account_cash_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="EnergyLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("log_date", models.DateField()),
                ("generated", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("used", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("sent_to_grid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("credits_converted", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="energy_logs", to="ledger.account")),
            ],
            options={
                "ordering": ["-log_date"],
                "constraints": [
                    models.UniqueConstraint(fields=("account", "log_date"), name="energy_log_one_per_day"),
                    models.CheckConstraint(condition=models.Q(("generated__gte", 0)), name="energy_log_generated_non_negative"),
                    models.CheckConstraint(condition=models.Q(("used__gte", 0)), name="energy_log_used_non_negative"),
                    models.CheckConstraint(condition=models.Q(("sent_to_grid__gte", 0)), name="energy_log_sent_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Listing",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("credits_available", models.DecimalField(decimal_places=2, max_digits=14)),
                ("price_per_credit", models.DecimalField(decimal_places=2, max_digits=8)),
                ("status", models.CharField(choices=[("active", "Active"), ("sold", "Sold")], default="active", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("sold_at", models.DateTimeField(blank=True, null=True)),
                ("seller", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="listings", to="ledger.account")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="listing_status_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("credits_available__gt", 0)), name="listing_credits_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("credits_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=14)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("buyer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="purchases", to="ledger.account")),
                ("seller", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="sales", to="ledger.account")),
                ("listing", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="trade", to="ledger.listing")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="BillPayment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("bill_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("credits_used", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("credit_savings", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("cash_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("savings_rate", models.DecimalField(decimal_places=2, max_digits=8)),
                ("provider", models.CharField(blank=True, default="", max_length=100)),
                ("consumer_number", models.CharField(blank=True, default="", max_length=50)),
                ("consumer_name", models.CharField(blank=True, default="", max_length=150)),
                ("billing_month", models.CharField(blank=True, default="", max_length=20)),
                ("meter_number", models.CharField(blank=True, default="", max_length=50)),
                ("units_consumed", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("rate_per_unit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="bill_payments", to="ledger.account")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
