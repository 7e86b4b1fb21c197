from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from ledger.application.accounts import adjust, get_account, open_account, select_role, update_profile
from ledger.domain.exceptions import (
    InsufficientBalance,
    InsufficientCash,
    InsufficientCredits,
    InvalidAmount,
    InvalidInput,
    InvalidRole,
    RoleAlreadySelected,
)
from ledger.models import Account
from ledger.tests.helpers import make_account


class AdjustTest(TestCase):

    def setUp(self):
        self.user, self.account = make_account("alice", credits="10.00", cash="50.00")

    def test_applies_both_deltas(self):
        snapshot = adjust(self.user, "5.50", "-20")

        self.assertEqual(snapshot.credits, Decimal("15.50"))
        self.assertEqual(snapshot.cash, Decimal("30.00"))
        self.account.refresh_from_db()
        self.assertEqual(self.account.credits, Decimal("15.50"))
        self.assertEqual(self.account.cash, Decimal("30.00"))

    def test_credit_overdraft_is_rejected_without_side_effects(self):
        with self.assertRaises(InsufficientCredits) as ctx:
            adjust(self.user, "-10.01", "5")

        self.assertIsInstance(ctx.exception, InsufficientBalance)
        self.account.refresh_from_db()
        self.assertEqual(self.account.credits, Decimal("10.00"))
        self.assertEqual(self.account.cash, Decimal("50.00"))

    def test_cash_overdraft_is_rejected_without_side_effects(self):
        with self.assertRaises(InsufficientCash):
            adjust(self.user, "1", "-50.01")

        self.account.refresh_from_db()
        self.assertEqual(self.account.credits, Decimal("10.00"))
        self.assertEqual(self.account.cash, Decimal("50.00"))

    def test_draining_to_exactly_zero_is_allowed(self):
        snapshot = adjust(self.user, "-10", "-50")

        self.assertEqual(snapshot.credits, Decimal("0.00"))
        self.assertEqual(snapshot.cash, Decimal("0.00"))

    def test_non_numeric_delta_is_invalid_input(self):
        with self.assertRaises(InvalidInput):
            adjust(self.user, "lots", "0")

    def test_balance_cannot_outgrow_its_column(self):
        with self.assertRaises(InvalidAmount):
            adjust(self.user, "999999999990.00", "0")
        with self.assertRaises(InvalidAmount):
            adjust(self.user, "0", "999999999950.00")

        self.account.refresh_from_db()
        self.assertEqual(self.account.credits, Decimal("10.00"))
        self.assertEqual(self.account.cash, Decimal("50.00"))

        snapshot = adjust(self.user, "999999999989.99", "0")
        self.assertEqual(snapshot.credits, Decimal("999999999999.99"))


class OpenAccountTest(TestCase):

    def test_account_is_opened_once(self):
        user = get_user_model().objects.create_user(username="bob", password="x")

        first = open_account(user)
        second = open_account(user)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Account.objects.filter(user=user).count(), 1)
        self.assertEqual(first.credits, Decimal("0.00"))

    @override_settings(SOLAR_LEDGER={"STARTING_CASH": "500.00"})
    def test_new_account_receives_starting_cash(self):
        user = get_user_model().objects.create_user(username="carol", password="x")

        account = open_account(user)

        self.assertEqual(account.cash, Decimal("500.00"))


class SelectRoleTest(TestCase):

    def setUp(self):
        self.user = get_user_model().objects.create_user(username="dave", password="x")

    def test_role_can_be_selected_once(self):
        result = select_role(self.user, Account.PRODUCER, full_name="Dave Kumar")

        self.assertEqual(result["role"], Account.PRODUCER)
        account = Account.objects.get(user=self.user)
        self.assertEqual(account.role, Account.PRODUCER)
        self.assertTrue(account.role_selected)
        self.assertEqual(account.full_name, "Dave Kumar")

        with self.assertRaises(RoleAlreadySelected):
            select_role(self.user, Account.CONSUMER)

        account.refresh_from_db()
        self.assertEqual(account.role, Account.PRODUCER)

    def test_unknown_role_is_rejected(self):
        with self.assertRaises(InvalidRole):
            select_role(self.user, "admin")

        self.assertFalse(Account.objects.filter(user=self.user, role_selected=True).exists())


class GetAccountTest(TestCase):

    @override_settings(SOLAR_LEDGER={"SAVINGS_RATE": "3.00"})
    def test_potential_savings_uses_configured_rate(self):
        user, _ = make_account("erin", credits="12.00", cash="4.00")

        snapshot = get_account(user)

        self.assertEqual(snapshot["credits"], Decimal("12.00"))
        self.assertEqual(snapshot["cash"], Decimal("4.00"))
        self.assertEqual(snapshot["savings_rate"], Decimal("3.00"))
        self.assertEqual(snapshot["potential_savings"], Decimal("36.00"))

    @override_settings(SOLAR_LEDGER={"SAVINGS_RATE": "2.50"})
    def test_potential_savings_rounds_half_up(self):
        user, _ = make_account("fay", credits="0.01")

        self.assertEqual(get_account(user)["potential_savings"], Decimal("0.03"))


class UpdateProfileTest(TestCase):

    def setUp(self):
        self.user, self.account = make_account("gita")

    def test_name_can_be_changed_repeatedly(self):
        result = update_profile(self.user, "  Gita Sharma ")

        self.assertEqual(result["full_name"], "Gita Sharma")
        self.account.refresh_from_db()
        self.assertEqual(self.account.full_name, "Gita Sharma")

        update_profile(self.user, "Gita S.")
        self.account.refresh_from_db()
        self.assertEqual(self.account.full_name, "Gita S.")
        self.assertTrue(self.account.role_selected)

    def test_long_names_are_truncated(self):
        update_profile(self.user, "x" * 200)

        self.account.refresh_from_db()
        self.assertEqual(len(self.account.full_name), 150)

    def test_blank_or_missing_name_is_invalid_input(self):
        update_profile(self.user, "Gita")

        for bad in [None, "", "   ", 42]:
            with self.assertRaises(InvalidInput):
                update_profile(self.user, bad)

        self.account.refresh_from_db()
        self.assertEqual(self.account.full_name, "Gita")
