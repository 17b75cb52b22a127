"""
ORM-backed stores for listings, users and purchase requests.

Services receive these through their constructors so tests can swap in
in-memory fakes. Connection-level database failures are reported as
StorageUnavailable; everything else propagates unchanged.
"""

import functools
import logging

from django.db import InterfaceError, OperationalError, transaction
from django.utils import timezone

from .exceptions import StorageUnavailable
from .models import Listing, PurchaseRequest, User


logger = logging.getLogger(__name__)


def translate_storage_errors(func):
    """Re-raise database connection errors as StorageUnavailable."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Storage failure in {func.__qualname__}: {e}")
            raise StorageUnavailable() from e

    return wrapper


class ListingStore:
    """Access to Listing rows."""

    @translate_storage_errors
    def get_listing(self, listing_id):
        """Return the listing with ``listing_id`` or None."""
        return Listing.objects.select_related('seller').filter(pk=listing_id).first()

    @translate_storage_errors
    def get_listings_by_ids(self, ids):
        """Return a dict of id -> Listing for the ids that exist."""
        ids = {i for i in ids if i is not None}
        if not ids:
            return {}
        return Listing.objects.select_related('seller').in_bulk(ids)

    @translate_storage_errors
    def list_listings(self, predicate=None):
        """
        Return listings matching ``predicate``, newest first.

        Args:
            predicate: Optional ``Q`` object applied as a filter
        """
        queryset = Listing.objects.select_related('seller')
        if predicate is not None:
            queryset = queryset.filter(predicate)
        return list(queryset.order_by('-created_at', '-id'))

    @translate_storage_errors
    def create_listing(self, **fields):
        with transaction.atomic():
            return Listing.objects.create(**fields)

    @translate_storage_errors
    def update_listing(self, listing, changes):
        """Apply ``changes`` to ``listing`` and save it."""
        with transaction.atomic():
            for field, value in changes.items():
                setattr(listing, field, value)
            listing.save()
        return listing

    @translate_storage_errors
    def delete_listing(self, listing):
        with transaction.atomic():
            listing.delete()


class UserStore:
    """Read access to User rows."""

    @translate_storage_errors
    def get_user(self, user_id):
        return User.objects.filter(pk=user_id).first()

    @translate_storage_errors
    def get_users_by_ids(self, ids):
        """Return a dict of id -> User for the ids that exist."""
        ids = {i for i in ids if i is not None}
        if not ids:
            return {}
        return User.objects.in_bulk(ids)


class PurchaseStore:
    """Access to PurchaseRequest rows."""

    @translate_storage_errors
    def insert(self, **fields):
        with transaction.atomic():
            return PurchaseRequest.objects.create(**fields)

    @translate_storage_errors
    def get_by_id(self, purchase_id):
        return PurchaseRequest.objects.filter(pk=purchase_id).first()

    @translate_storage_errors
    def update_status(self, purchase_id, status, expected_status):
        """
        Set the status only if the row still has ``expected_status``.

        The check and the write happen in one UPDATE statement, so two
        concurrent decisions on the same request cannot both succeed.

        Returns:
            PurchaseRequest: The reloaded request, or None if the guard failed
        """
        updated = PurchaseRequest.objects.filter(
            pk=purchase_id,
            status=expected_status
        ).update(status=status, updated_at=timezone.now())
        if not updated:
            return None
        return PurchaseRequest.objects.get(pk=purchase_id)

    @translate_storage_errors
    def list_by_buyer(self, buyer_id):
        return list(
            PurchaseRequest.objects.filter(buyer_id=buyer_id).order_by('-created_at', '-id')
        )

    @translate_storage_errors
    def list_by_seller(self, seller_id):
        return list(
            PurchaseRequest.objects.filter(seller_id=seller_id).order_by('-created_at', '-id')
        )
