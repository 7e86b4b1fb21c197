"""
API Layer — Ledger RPC Endpoints (Django REST Framework)

Each mutating endpoint is one remote-procedure call: it reads its named
parameters, hands them to one application use case, and returns a single
discriminated result.

Design intent:

The views are thin controllers. They never read or compute balances
themselves, and they never take a user id from the request body; the
account is always the authenticated caller's.

Result shape:

- success:          200 {"success": true, "message": ..., <fields>}
- validation error: 400 {"success": false, "message": ...}
- not found:        404 {"success": false, "message": ...}
- state conflict:   409 {"success": false, "message": ...}
- database fault:   503 {"success": false, "message": ..., "retryable": true}

A database fault means the transaction did not commit, so the whole call
is safe to retry.
"""

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ledger.application import accounts, bills, energy, history, marketplace, redemption
from ledger.domain.exceptions import (
    AccountNotFound,
    LedgerError,
    ListingNotFound,
    ReceiptNotFound,
    ValidationFailure,
)
from ledger.serializers import (
    AccountSnapshotSerializer,
    BillQuoteSerializer,
    BillReceiptSerializer,
    EnergyLogSnapshotSerializer,
    HistoryEntrySerializer,
    LifetimeImpactSerializer,
    MarketListingSerializer,
    OwnListingSerializer,
)

logger = logging.getLogger(__name__)

NOT_FOUND_ERRORS = (AccountNotFound, ListingNotFound, ReceiptNotFound)


def failure_response(exc):
    if isinstance(exc, ValidationFailure):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, NOT_FOUND_ERRORS):
        code = status.HTTP_404_NOT_FOUND
    else:  # StateConflict
        code = status.HTTP_409_CONFLICT
    return Response({"success": False, "message": exc.message}, status=code)


class LedgerView(APIView):
    """
    Base for every ledger endpoint.

    Subclasses implement perform(request, **kwargs) and return a dict (or
    a Response for read endpoints that serialize their own payload).
    """

    def perform(self, request, **kwargs):
        raise NotImplementedError

    def dispatch_operation(self, request, **kwargs):
        try:
            result = self.perform(request, **kwargs)
        except LedgerError as exc:
            return failure_response(exc)
        except DatabaseError:
            logger.exception(
                "Ledger operation failed: view=%s user=%s",
                type(self).__name__, getattr(request.user, "pk", None),
            )
            return Response(
                {
                    "success": False,
                    "message": "The ledger is temporarily unavailable. Please try again.",
                    "retryable": True,
                },
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        if isinstance(result, Response):
            return result
        return Response({"success": True, **result}, status=status.HTTP_200_OK)


class LedgerRPCView(LedgerView):
    def post(self, request, **kwargs):
        return self.dispatch_operation(request, **kwargs)


class LedgerReadView(LedgerView):
    def get(self, request, **kwargs):
        return self.dispatch_operation(request, **kwargs)


class LogEnergyView(LedgerRPCView):
    """POST /api/ledger/rpc/log_energy/"""

    def perform(self, request, **kwargs):
        return energy.log_energy(
            request.user,
            request.data.get("generated"),
            request.data.get("used"),
        )


class EarnCreditsView(LedgerRPCView):
    """POST /api/ledger/rpc/earn_credits/"""

    def perform(self, request, **kwargs):
        return energy.earn_credits(request.user)


class CreateListingView(LedgerRPCView):
    """POST /api/ledger/rpc/create_listing/"""

    def perform(self, request, **kwargs):
        return marketplace.create_listing(
            request.user,
            request.data.get("credits"),
            request.data.get("price_per_credit"),
        )


class PurchaseListingView(LedgerRPCView):
    """POST /api/ledger/rpc/purchase_listing/"""

    def perform(self, request, **kwargs):
        return marketplace.purchase_listing(request.user, request.data.get("listing_id"))


class PayBillView(LedgerRPCView):
    """POST /api/ledger/rpc/pay_bill/"""

    metadata_fields = (
        "provider",
        "consumer_number",
        "consumer_name",
        "billing_month",
        "meter_number",
        "units_consumed",
    )

    def perform(self, request, **kwargs):
        metadata = {name: request.data.get(name) for name in self.metadata_fields}
        return bills.pay_bill(
            request.user,
            request.data.get("bill_amount"),
            request.data.get("credits_to_use"),
            metadata=metadata,
        )


class RedeemCreditsView(LedgerRPCView):
    """POST /api/ledger/rpc/redeem_credits/"""

    def perform(self, request, **kwargs):
        return redemption.redeem_credits(request.user, request.data.get("credits"))


class SelectRoleView(LedgerRPCView):
    """POST /api/ledger/rpc/select_role/"""

    def perform(self, request, **kwargs):
        return accounts.select_role(
            request.user,
            request.data.get("role"),
            full_name=request.data.get("full_name"),
        )


class UpdateProfileView(LedgerRPCView):
    """POST /api/ledger/rpc/update_profile/"""

    def perform(self, request, **kwargs):
        return accounts.update_profile(request.user, request.data.get("full_name"))


class IsOwnListingView(LedgerReadView):
    """GET /api/ledger/rpc/is_own_listing/<listing_id>/"""

    def perform(self, request, listing_id=None, **kwargs):
        return Response(marketplace.is_own_listing(request.user, listing_id))


class AccountView(LedgerReadView):
    """GET /api/ledger/account/"""

    def perform(self, request, **kwargs):
        snapshot = accounts.get_account(request.user)
        snapshot["escrowed_credits"] = marketplace.escrowed_credits(request.user)
        return Response(AccountSnapshotSerializer(snapshot).data)


class TodayEnergyView(LedgerReadView):
    """GET /api/ledger/energy/today/"""

    def perform(self, request, **kwargs):
        return Response(EnergyLogSnapshotSerializer(energy.today_energy(request.user)).data)


class ListingsView(LedgerReadView):
    """GET /api/ledger/listings/"""

    def perform(self, request, **kwargs):
        listings = marketplace.list_active_listings(request.user)
        return Response(MarketListingSerializer(listings, many=True).data)


class MyListingsView(LedgerReadView):
    """GET /api/ledger/listings/mine/"""

    def perform(self, request, **kwargs):
        return Response(OwnListingSerializer(marketplace.my_listings(request.user), many=True).data)


class HistoryView(LedgerReadView):
    """GET /api/ledger/history/?limit=N"""

    def perform(self, request, **kwargs):
        limit = request.query_params.get("limit")
        try:
            limit = int(limit) if limit else None
            if limit is not None and limit < 0:
                raise ValueError(limit)
        except (TypeError, ValueError):
            return Response(
                {"success": False, "message": "limit must be a non-negative integer."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        entries = history.transaction_history(request.user, limit=limit)
        return Response(HistoryEntrySerializer(entries, many=True).data)


class LifetimeImpactView(LedgerReadView):
    """GET /api/ledger/impact/"""

    def perform(self, request, **kwargs):
        return Response(LifetimeImpactSerializer(history.lifetime_impact(request.user).to_dict()).data)


class BillQuoteView(LedgerReadView):
    """GET /api/ledger/bills/quote/?bill_amount=..&credits_to_use=.."""

    def perform(self, request, **kwargs):
        quote = bills.bill_quote(
            request.user,
            request.query_params.get("bill_amount"),
            request.query_params.get("credits_to_use"),
        )
        return Response(BillQuoteSerializer(quote.to_dict()).data)


class BillReceiptView(LedgerReadView):
    """GET /api/ledger/bills/<receipt_id>/"""

    def perform(self, request, receipt_id=None, **kwargs):
        return Response(BillReceiptSerializer(bills.get_receipt(request.user, receipt_id)).data)
