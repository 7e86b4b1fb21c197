"""
Application Use Case — Marketplace Order Book

Listings escrow their credits at creation: the seller's balance is
debited in the same transaction that inserts the active Listing, so the
same credits can never back two listings.

A purchase settles the whole listing in one transaction:

1. Lock the listing row and check it is still active.
2. Lock buyer and seller accounts (primary-key order).
3. Check self-purchase and the buyer's cash.
4. Claim the listing with a conditional UPDATE (status active -> sold).
   Only one concurrent purchase can see a row count of 1.
5. Move cash buyer -> seller, credit the buyer, write the Transaction.

Any exception on the way rolls every step back.
"""

import logging
import uuid

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from ledger.application.accounts import apply_delta, lock_account, lock_accounts, open_account
from ledger.conf import ledger_settings
from ledger.domain.exceptions import (
    InsufficientCash,
    InvalidAmount,
    InvalidPrice,
    ListingNotFound,
    SelfPurchase,
)
from ledger.domain.values import PRICE_DIGITS, ZERO, ensure_fits, quantize, to_decimal
from ledger.models import Listing, Transaction

logger = logging.getLogger(__name__)


def create_listing(user, credits, price_per_credit):
    """Escrow ``credits`` out of the seller's balance and offer them at a fixed price."""
    credits = to_decimal(credits, "credits", allow_negative=True)
    price_per_credit = to_decimal(
        price_per_credit, "price_per_credit", allow_negative=True, max_digits=PRICE_DIGITS,
    )
    config = ledger_settings()

    if credits <= 0:
        raise InvalidAmount("credits", credits)
    if not config.min_price_per_credit <= price_per_credit <= config.max_price_per_credit:
        raise InvalidPrice(price_per_credit, config.min_price_per_credit, config.max_price_per_credit)
    ensure_fits(
        quantize(credits * price_per_credit),
        "credits",
        message="The total price of this listing is too large.",
    )

    with transaction.atomic():
        seller = lock_account(user)
        if credits > seller.credits:
            logger.warning(
                "Listing exceeds balance: account=%s credits=%s available=%s",
                seller.pk, credits, seller.credits,
            )
            raise InvalidAmount(
                "credits",
                credits,
                message=f"Cannot list {credits} credits; only {seller.credits} available.",
            )

        seller = apply_delta(seller, delta_credits=-credits)
        listing = Listing.objects.create(
            seller=seller,
            credits_available=credits,
            price_per_credit=price_per_credit,
            status=Listing.ACTIVE,
        )

    logger.info(
        "Created listing: listing=%s seller=%s credits=%s price=%s",
        listing.pk, seller.pk, credits, price_per_credit,
    )
    return {
        "message": "Listing created successfully.",
        "listing_id": str(listing.pk),
        "credits_remaining": seller.credits,
    }


def _parse_listing_id(listing_id):
    try:
        return uuid.UUID(str(listing_id))
    except ValueError:
        raise ListingNotFound(listing_id)


def _claim_listing(listing_id):
    """Flip an active listing to sold. Returns False if it was no longer active."""
    claimed = (
        Listing.objects
        .filter(pk=listing_id, status=Listing.ACTIVE)
        .update(status=Listing.SOLD, sold_at=timezone.now())
    )
    return claimed == 1


def purchase_listing(user, listing_id):
    """Buy an active listing in full for the caller."""
    listing_id = _parse_listing_id(listing_id)
    buyer_id = open_account(user).pk

    with transaction.atomic():
        listing = Listing.objects.select_for_update().filter(pk=listing_id).first()
        if listing is None or listing.status != Listing.ACTIVE:
            logger.warning("Listing unavailable: listing=%s buyer=%s", listing_id, buyer_id)
            raise ListingNotFound(listing_id)

        if listing.seller_id == buyer_id:
            logger.warning("Self purchase rejected: listing=%s account=%s", listing_id, buyer_id)
            raise SelfPurchase(listing_id)

        accounts = lock_accounts(buyer_id, listing.seller_id)
        buyer = accounts[buyer_id]
        seller = accounts[listing.seller_id]

        total_price = listing.total_price
        if total_price > buyer.cash:
            logger.warning(
                "Insufficient cash: listing=%s buyer=%s price=%s cash=%s",
                listing_id, buyer.pk, total_price, buyer.cash,
            )
            raise InsufficientCash(buyer.pk, total_price, buyer.cash)

        if not _claim_listing(listing.pk):
            logger.warning("Listing claimed concurrently: listing=%s buyer=%s", listing_id, buyer.pk)
            raise ListingNotFound(listing_id)

        buyer = apply_delta(buyer, delta_credits=listing.credits_available, delta_cash=-total_price)
        seller = apply_delta(seller, delta_cash=total_price)
        trade = Transaction.objects.create(
            buyer=buyer,
            seller=seller,
            listing=listing,
            credits_amount=listing.credits_available,
            total_price=total_price,
        )

    logger.info(
        "Purchased listing: listing=%s buyer=%s seller=%s credits=%s total=%s",
        listing.pk, buyer.pk, seller.pk, listing.credits_available, total_price,
    )
    return {
        "message": f"Purchased {listing.credits_available} credits for {total_price}.",
        "transaction_id": str(trade.pk),
        "credits": buyer.credits,
        "cash": buyer.cash,
    }


def is_own_listing(user, listing_id):
    """Read-side ownership predicate used to hide the buy button on the caller's own listings."""
    try:
        listing_id = _parse_listing_id(listing_id)
    except ListingNotFound:
        return False
    account = open_account(user)
    return Listing.objects.filter(pk=listing_id, seller=account).exists()


def list_active_listings(user):
    """Active listings, newest first, each tagged with whether the caller owns it."""
    account = open_account(user)
    listings = Listing.objects.filter(status=Listing.ACTIVE).order_by("-created_at")
    return [
        {
            "id": listing.pk,
            "credits_available": listing.credits_available,
            "price_per_credit": listing.price_per_credit,
            "total_price": listing.total_price,
            "created_at": listing.created_at,
            "is_own": listing.seller_id == account.pk,
        }
        for listing in listings
    ]


def my_listings(user):
    account = open_account(user)
    return list(Listing.objects.filter(seller=account).order_by("-created_at"))


def escrowed_credits(user):
    """Credits the caller currently has locked up in active listings."""
    account = open_account(user)
    total = (
        Listing.objects
        .filter(seller=account, status=Listing.ACTIVE)
        .aggregate(total=Sum("credits_available"))["total"]
    )
    return quantize(total or ZERO)
