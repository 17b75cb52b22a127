"""
Listing search and purchase request lifecycle.

Both services are plain objects constructed once in ``CoreConfig.ready()``
with their stores passed in.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from django.db.models import Q

from .exceptions import (
    Forbidden,
    InvalidInput,
    InvalidQuantity,
    InvalidTransition,
    NotFound,
)
from .models import PurchaseRequest


logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


@dataclass(frozen=True)
class ListingFilters:
    """
    Optional search criteria for listings. ``None`` means no constraint.

    Range bounds are inclusive. A bound of 0 is a real bound.
    """

    category: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_quantity: Optional[Decimal] = None
    max_quantity: Optional[Decimal] = None


def compute_total_price(requested_quantity, listing_quantity, listing_price):
    """
    Price of ``requested_quantity`` out of a lot priced as a whole.

    Multiplies before dividing so exact per-unit prices stay exact, then
    rounds half up to cents.

    Args:
        requested_quantity: Decimal amount requested
        listing_quantity: Decimal amount in the whole lot
        listing_price: Decimal price of the whole lot

    Returns:
        Decimal: Total rounded to two decimal places
    """
    total = requested_quantity * listing_price / listing_quantity
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_quantity(value):
    """
    Convert a raw request value into a positive Decimal quantity.

    Raises:
        InvalidInput: If the value is missing or not a number
        InvalidQuantity: If the number is not finite, not positive or has
            more than two decimal places
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidInput('Quantity is required')

    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise InvalidInput('Quantity must be a number')

    try:
        quantity = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidInput('Quantity must be a number')

    if not quantity.is_finite():
        raise InvalidQuantity('Quantity must be a finite number')

    if quantity <= 0:
        raise InvalidQuantity('Quantity must be greater than 0')

    if quantity != quantity.quantize(CENTS, rounding=ROUND_HALF_UP):
        raise InvalidQuantity('Quantity cannot have more than 2 decimal places')

    return quantity


class ListingQueryEngine:
    """
    Answers filtered listing searches.

    Category and free-text criteria are pushed into the store query. Price
    and quantity ranges are applied to the returned rows.
    """

    def __init__(self, listing_store):
        self.listing_store = listing_store

    def build_predicate(self, filters):
        """Return a ``Q`` for the store-side criteria, or None."""
        predicate = Q()
        if filters.category is not None:
            predicate &= Q(category=filters.category)
        if filters.search is not None:
            predicate &= (
                Q(title__icontains=filters.search) |
                Q(description__icontains=filters.search)
            )
        return predicate if predicate else None

    def search(self, filters=None):
        """
        Return listings matching every supplied filter, newest first.

        Args:
            filters: ListingFilters, or None for all listings

        Returns:
            list: Matching Listing objects
        """
        filters = filters or ListingFilters()

        if (
            filters.min_price is not None and filters.max_price is not None
            and filters.min_price > filters.max_price
        ):
            return []
        if (
            filters.min_quantity is not None and filters.max_quantity is not None
            and filters.min_quantity > filters.max_quantity
        ):
            return []

        results = self.listing_store.list_listings(self.build_predicate(filters))

        if filters.min_price is not None:
            results = [l for l in results if l.price >= filters.min_price]
        if filters.max_price is not None:
            results = [l for l in results if l.price <= filters.max_price]
        if filters.min_quantity is not None:
            results = [l for l in results if l.quantity >= filters.min_quantity]
        if filters.max_quantity is not None:
            results = [l for l in results if l.quantity <= filters.max_quantity]

        return results


class PurchaseLifecycleManager:
    """
    Creates purchase requests and moves them through their status lifecycle.

    Valid transitions:
    - PENDING -> ACCEPTED (seller only)
    - PENDING -> REJECTED (seller only)
    - ACCEPTED, REJECTED -> (terminal)
    """

    DECISION_STATUSES = (
        PurchaseRequest.STATUS_ACCEPTED,
        PurchaseRequest.STATUS_REJECTED,
    )

    def __init__(self, listing_store, purchase_store):
        self.listing_store = listing_store
        self.purchase_store = purchase_store

    def create_purchase_request(self, buyer_id, listing_id, requested_quantity):
        """
        Record a PENDING request from ``buyer_id`` for part of a listing.

        The listing itself is not modified; availability is only checked
        against its current quantity.

        Raises:
            InvalidInput: Quantity missing or not a number
            InvalidQuantity: Quantity not positive, too precise, too large,
                or priced below one cent
            NotFound: Listing does not exist
        """
        quantity = parse_quantity(requested_quantity)

        listing = self.listing_store.get_listing(listing_id)
        if listing is None:
            raise NotFound('Listing not found')

        if quantity > listing.quantity:
            raise InvalidQuantity('Requested quantity exceeds available quantity')

        total_price = compute_total_price(quantity, listing.quantity, listing.price)
        if total_price <= 0:
            raise InvalidQuantity('Requested quantity is too small to price')

        purchase = self.purchase_store.insert(
            listing_id=listing.id,
            buyer_id=buyer_id,
            seller_id=listing.seller_id,
            quantity=quantity,
            total_price=total_price,
            status=PurchaseRequest.STATUS_PENDING
        )

        logger.info(
            f"Purchase request created. ID: {purchase.id}, Listing: {listing.id}, "
            f"Buyer: {buyer_id}, Quantity: {quantity}, Total: {total_price}"
        )
        return purchase

    def update_status(self, requester_id, purchase_id, new_status):
        """
        Accept or reject a PENDING purchase request.

        Raises:
            NotFound: Purchase request does not exist
            Forbidden: Requester is not the purchase's seller
            InvalidInput: ``new_status`` is not ACCEPTED or REJECTED
            InvalidTransition: Request has already been decided
        """
        purchase = self.purchase_store.get_by_id(purchase_id)
        if purchase is None:
            raise NotFound('Purchase request not found')

        if purchase.seller_id != requester_id:
            logger.warning(
                f"Unauthorized status change attempt. Purchase: {purchase_id}, "
                f"Requester: {requester_id}, Seller: {purchase.seller_id}"
            )
            raise Forbidden('Only the seller can update this purchase request')

        if new_status not in self.DECISION_STATUSES:
            raise InvalidInput('Status must be ACCEPTED or REJECTED')

        if not purchase.can_transition_to(new_status):
            raise InvalidTransition(
                f'Purchase request is already {purchase.status} and cannot be changed'
            )

        updated = self.purchase_store.update_status(
            purchase_id,
            new_status,
            expected_status=PurchaseRequest.STATUS_PENDING
        )
        if updated is None:
            # Decided concurrently between the read and the write
            current = self.purchase_store.get_by_id(purchase_id)
            current_status = current.status if current else 'gone'
            raise InvalidTransition(
                f'Purchase request is already {current_status} and cannot be changed'
            )

        logger.info(
            f"Purchase request {purchase_id} status changed: "
            f"{purchase.status} -> {new_status} by seller {requester_id}"
        )
        return updated

    def list_purchases_for_buyer(self, buyer_id):
        """All purchase requests made by ``buyer_id``, newest first."""
        return self.purchase_store.list_by_buyer(buyer_id)

    def list_purchases_for_seller(self, seller_id):
        """All purchase requests received by ``seller_id``, newest first."""
        return self.purchase_store.list_by_seller(seller_id)
