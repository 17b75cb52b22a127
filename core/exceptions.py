"""
Domain errors raised by the marketplace services.

Every error carries a short message suitable for direct display and the
HTTP status the API answers with.
"""

from rest_framework import status


class MarketplaceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'The request could not be processed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(MarketplaceError):
    """A referenced listing or purchase request does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found.'


class Forbidden(MarketplaceError):
    """The requester is not allowed to act on the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'You do not have permission to perform this action.'


class InvalidQuantity(MarketplaceError):
    """Requested quantity is non-positive or exceeds what is available."""

    default_message = 'Invalid quantity.'


class InvalidInput(MarketplaceError):
    """A field is missing or malformed."""

    default_message = 'Invalid input.'


class InvalidTransition(InvalidInput):
    """The purchase request is no longer in a state that allows the change."""

    default_message = 'This purchase request can no longer be changed.'


class StorageUnavailable(MarketplaceError):
    """The database could not be reached. Callers may retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'Storage is temporarily unavailable. Please retry.'


class IdentificationFailed(MarketplaceError):
    """The AI provider failed or returned an unusable answer."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = 'Failed to identify waste.'
