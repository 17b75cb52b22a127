"""
Read-side views of purchase history.

Purchase requests are combined with their listing and the counterpart user
into immutable entries for display. Stored entities are never modified.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class UserSummary:
    """Public details of the other party to a purchase."""

    id: int
    username: str
    email: str
    phone_number: str

    @classmethod
    def from_user(cls, user):
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            phone_number=user.phone_number,
        )


@dataclass(frozen=True)
class ListingSummary:
    id: int
    title: str
    category: str
    unit: str
    price: Decimal
    quantity: Decimal
    status: str

    @classmethod
    def from_listing(cls, listing):
        return cls(
            id=listing.id,
            title=listing.title,
            category=listing.category,
            unit=listing.unit,
            price=listing.price,
            quantity=listing.quantity,
            status=listing.status,
        )


@dataclass(frozen=True)
class PurchaseHistoryEntry:
    """
    A purchase request as shown in a user's history.

    ``counterpart`` is the seller in buyer history and the buyer in seller
    history. ``listing`` is None when the listing has since been deleted.
    """

    id: int
    quantity: Decimal
    total_price: Decimal
    status: str
    created_at: datetime
    listing: Optional[ListingSummary]
    counterpart_role: str
    counterpart: Optional[UserSummary]


COUNTERPART_ROLES = ('seller', 'buyer')


def enrich_purchases(purchases, listing_store, user_store, counterpart_role):
    """
    Build history entries for ``purchases`` with two bulk lookups.

    Args:
        purchases: Iterable of PurchaseRequest objects, already ordered
        listing_store: Store providing ``get_listings_by_ids``
        user_store: Store providing ``get_users_by_ids``
        counterpart_role: 'seller' for buyer history, 'buyer' for seller history

    Returns:
        list[PurchaseHistoryEntry]: Entries in the same order as ``purchases``
    """
    if counterpart_role not in COUNTERPART_ROLES:
        raise ValueError(f"counterpart_role must be one of {COUNTERPART_ROLES}")

    purchases = list(purchases)
    counterpart_attr = f'{counterpart_role}_id'

    listings = listing_store.get_listings_by_ids(p.listing_id for p in purchases)
    users = user_store.get_users_by_ids(getattr(p, counterpart_attr) for p in purchases)

    entries = []
    for purchase in purchases:
        listing = listings.get(purchase.listing_id)
        user = users.get(getattr(purchase, counterpart_attr))
        entries.append(PurchaseHistoryEntry(
            id=purchase.id,
            quantity=purchase.quantity,
            total_price=purchase.total_price,
            status=purchase.status,
            created_at=purchase.created_at,
            listing=ListingSummary.from_listing(listing) if listing else None,
            counterpart_role=counterpart_role,
            counterpart=UserSummary.from_user(user) if user else None,
        ))
    return entries
