from decimal import Decimal

from django.test import SimpleTestCase

from ledger.domain.exceptions import InvalidAmount, InvalidInput
from ledger.domain.values import BillMetadata, bill_breakdown, ensure_fits, max_for_digits, to_decimal


class ToDecimalTest(SimpleTestCase):

    def test_quantizes_to_cents(self):
        self.assertEqual(to_decimal("1.005", "x"), Decimal("1.01"))
        self.assertEqual(to_decimal(0.1, "x"), Decimal("0.10"))
        self.assertEqual(to_decimal(7, "x"), Decimal("7.00"))

    def test_rejects_what_is_not_a_usable_number(self):
        for bad in [None, True, "", "  ", "1,000", "inf", "NaN", [1], "1e20"]:
            with self.assertRaises(InvalidInput, msg=repr(bad)):
                to_decimal(bad, "x")

    def test_negative_only_when_allowed(self):
        with self.assertRaises(InvalidInput):
            to_decimal("-1", "x")
        self.assertEqual(to_decimal("-1", "x", allow_negative=True), Decimal("-1.00"))

    def test_width_follows_the_target_column(self):
        self.assertEqual(max_for_digits(12), Decimal("9999999999.99"))
        self.assertEqual(to_decimal("9999999999.99", "x", max_digits=12), Decimal("9999999999.99"))
        with self.assertRaises(InvalidInput):
            to_decimal("10000000000", "x", max_digits=12)
        with self.assertRaises(InvalidInput):
            to_decimal("-1000000000000", "x", allow_negative=True)

    def test_derived_values_are_checked_against_their_column(self):
        self.assertEqual(ensure_fits(Decimal("99999999.99"), "rate", max_digits=10), Decimal("99999999.99"))
        with self.assertRaises(InvalidAmount):
            ensure_fits(Decimal("100000000.00"), "rate", max_digits=10)


class BillBreakdownTest(SimpleTestCase):

    def test_partial_discount(self):
        self.assertEqual(
            bill_breakdown(Decimal("500"), Decimal("100"), Decimal("2")),
            (Decimal("200.00"), Decimal("300.00")),
        )

    def test_discount_larger_than_bill_floors_cash_at_zero(self):
        self.assertEqual(
            bill_breakdown(Decimal("100"), Decimal("100"), Decimal("2")),
            (Decimal("200.00"), Decimal("0.00")),
        )

    def test_savings_wider_than_a_balance_are_rejected(self):
        with self.assertRaises(InvalidAmount):
            bill_breakdown(Decimal("1"), Decimal("999999999999.99"), Decimal("2"))


class BillMetadataTest(SimpleTestCase):

    def test_missing_fields_take_defaults(self):
        metadata = BillMetadata.from_mapping({"provider": None})

        self.assertEqual(metadata, BillMetadata())
        self.assertEqual(metadata.rate_per_unit(Decimal("100")), Decimal("0.00"))

    def test_bad_units_are_invalid_input(self):
        with self.assertRaises(InvalidInput):
            BillMetadata.from_mapping({"units_consumed": "many"})
