from decimal import Decimal

from django.test import TestCase, override_settings

from ledger.application.bills import bill_quote, get_receipt, pay_bill
from ledger.domain.exceptions import (
    InsufficientCash,
    InsufficientCredits,
    InvalidAmount,
    InvalidInput,
    ReceiptNotFound,
)
from ledger.domain.values import BillMetadata
from ledger.models import BillPayment
from ledger.tests.helpers import make_account


class PayBillTest(TestCase):

    def setUp(self):
        self.user, self.account = make_account("meera", credits="150.00", cash="400.00")

    def test_credits_discount_the_bill(self):
        result = pay_bill(self.user, 500, 100)

        self.assertEqual(result["credit_savings"], Decimal("200.00"))
        self.assertEqual(result["cash_paid"], Decimal("300.00"))
        self.assertEqual(result["cash_remaining"], Decimal("100.00"))
        self.assertEqual(result["credits_remaining"], Decimal("50.00"))

        receipt = BillPayment.objects.get(pk=result["receipt_id"])
        self.assertEqual(receipt.bill_amount, Decimal("500.00"))
        self.assertEqual(receipt.credits_used, Decimal("100.00"))
        self.assertEqual(receipt.credit_savings, Decimal("200.00"))
        self.assertEqual(receipt.cash_paid, Decimal("300.00"))
        self.assertEqual(receipt.savings_rate, Decimal("2.00"))

    def test_cash_due_never_goes_negative(self):
        result = pay_bill(self.user, 100, 100)

        self.assertEqual(result["credit_savings"], Decimal("200.00"))
        self.assertEqual(result["cash_paid"], Decimal("0.00"))
        self.account.refresh_from_db()
        self.assertEqual(self.account.cash, Decimal("400.00"))
        self.assertEqual(self.account.credits, Decimal("50.00"))

    def test_bill_without_credits_is_paid_in_cash(self):
        result = pay_bill(self.user, "250.75", None)

        self.assertEqual(result["credit_savings"], Decimal("0.00"))
        self.assertEqual(result["cash_paid"], Decimal("250.75"))
        self.assertEqual(result["cash_remaining"], Decimal("149.25"))

    @override_settings(SOLAR_LEDGER={"SAVINGS_RATE": "3.00"})
    def test_savings_rate_comes_from_settings(self):
        result = pay_bill(self.user, 500, 100)

        self.assertEqual(result["credit_savings"], Decimal("300.00"))
        self.assertEqual(result["cash_paid"], Decimal("200.00"))

    def test_using_more_credits_than_held_fails(self):
        with self.assertRaises(InsufficientCredits):
            pay_bill(self.user, 500, 151)

        self.assertFalse(BillPayment.objects.exists())
        self.account.refresh_from_db()
        self.assertEqual(self.account.credits, Decimal("150.00"))

    def test_cash_shortfall_fails_without_spending_credits(self):
        with self.assertRaises(InsufficientCash):
            pay_bill(self.user, 1000, 100)

        self.assertFalse(BillPayment.objects.exists())
        self.account.refresh_from_db()
        self.assertEqual(self.account.credits, Decimal("150.00"))
        self.assertEqual(self.account.cash, Decimal("400.00"))

    def test_non_positive_bill_is_invalid_amount(self):
        for amount in [0, -10]:
            with self.assertRaises(InvalidAmount):
                pay_bill(self.user, amount, 0)

    def test_malformed_values_are_invalid_input(self):
        with self.assertRaises(InvalidInput):
            pay_bill(self.user, "a lot", 0)
        with self.assertRaises(InvalidInput):
            pay_bill(self.user, 100, -1)

    def test_metadata_is_recorded_on_the_receipt(self):
        metadata = BillMetadata.from_mapping({
            "provider": "BESCOM",
            "consumer_number": "CN-42",
            "consumer_name": "Meera Rao",
            "billing_month": "2026-09",
            "meter_number": "MTR-7",
            "units_consumed": "300",
        })

        result = pay_bill(self.user, 600, 100, metadata=metadata)

        receipt = BillPayment.objects.get(pk=result["receipt_id"])
        self.assertEqual(receipt.provider, "BESCOM")
        self.assertEqual(receipt.consumer_number, "CN-42")
        self.assertEqual(receipt.consumer_name, "Meera Rao")
        self.assertEqual(receipt.billing_month, "2026-09")
        self.assertEqual(receipt.meter_number, "MTR-7")
        self.assertEqual(receipt.units_consumed, Decimal("300.00"))
        self.assertEqual(receipt.rate_per_unit, Decimal("2.00"))
        self.assertEqual(receipt.cash_paid, Decimal("400.00"))

    def test_metadata_defaults_to_blank(self):
        result = pay_bill(self.user, 50, 0)

        receipt = BillPayment.objects.get(pk=result["receipt_id"])
        self.assertEqual(receipt.provider, "")
        self.assertEqual(receipt.units_consumed, Decimal("0.00"))
        self.assertEqual(receipt.rate_per_unit, Decimal("0.00"))

    def test_values_wider_than_their_columns_are_rejected(self):
        with self.assertRaises(InvalidAmount):
            pay_bill(self.user, 500, "999999999999.99")
        with self.assertRaises(InvalidInput):
            pay_bill(self.user, 50, 0, metadata={"units_consumed": "10000000000"})
        with self.assertRaises(InvalidAmount):
            pay_bill(self.user, 1000000, 0, metadata={"units_consumed": "0.01"})

        self.assertFalse(BillPayment.objects.exists())
        self.account.refresh_from_db()
        self.assertEqual(self.account.cash, Decimal("400.00"))

    def test_high_unit_rate_is_recorded_on_the_receipt(self):
        result = pay_bill(self.user, "399.99", 0, metadata={"units_consumed": "0.01"})

        receipt = BillPayment.objects.get(pk=result["receipt_id"])
        self.assertEqual(receipt.rate_per_unit, Decimal("39999.00"))

    def test_malformed_receipt_id_is_not_found(self):
        with self.assertRaises(ReceiptNotFound):
            get_receipt(self.user, "not-a-uuid")
        with self.assertRaises(ReceiptNotFound):
            get_receipt(self.user, None)

    def test_receipt_is_scoped_to_payer(self):
        result = pay_bill(self.user, 100, 10)
        other_user, _ = make_account("stranger")

        receipt = get_receipt(self.user, result["receipt_id"])

        self.assertEqual(receipt.bill_amount, Decimal("100.00"))
        with self.assertRaises(ReceiptNotFound):
            get_receipt(other_user, result["receipt_id"])


class BillQuoteTest(TestCase):

    def test_quote_caps_usable_credits(self):
        user, _ = make_account("quote", credits="80.00", cash="10.00")

        quote = bill_quote(user, 101, 40)

        self.assertEqual(quote.max_credits_for_bill, Decimal("50.00"))
        self.assertEqual(quote.credit_savings, Decimal("80.00"))
        self.assertEqual(quote.cash_due, Decimal("21.00"))
        self.assertFalse(quote.can_afford)

    def test_quote_is_limited_by_balance(self):
        user, _ = make_account("small", credits="5.00", cash="100.00")

        quote = bill_quote(user, 500)

        self.assertEqual(quote.max_credits_for_bill, Decimal("5.00"))
        self.assertEqual(quote.cash_due, Decimal("500.00"))
        self.assertFalse(quote.can_afford)
