"""
Custom permission classes for the Waste Materials Marketplace.
"""

from rest_framework import permissions


class IsBuyer(permissions.BasePermission):
    """
    Allow only authenticated users with the buyer role.

    Usage:
        class MyView(APIView):
            permission_classes = [IsAuthenticated, IsBuyer]
    """

    message = 'Only buyers can perform this action.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return getattr(request.user, 'role', None) == 'buyer'


class IsSeller(permissions.BasePermission):
    """
    Allow only authenticated users with the seller role.

    Returns 403 Forbidden for buyers.
    """

    message = 'Only sellers can perform this action.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return getattr(request.user, 'role', None) == 'seller'


class IsListingOwnerOrReadOnly(permissions.BasePermission):
    """
    Object-level permission: anyone may read a listing, only its seller may
    change or delete it.
    """

    message = 'You can only modify your own listings.'

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(
            request.user
            and request.user.is_authenticated
            and obj.seller_id == request.user.id
        )
