"""
API views for the Waste Materials Marketplace.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.apps import apps
from django.conf import settings
from django.contrib.auth import authenticate
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models import Q
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from .enrichment import enrich_purchases
from .exceptions import InvalidInput, MarketplaceError, NotFound
from .identification import decode_image
from .metrics import collect_system_metrics
from .models import Inquiry
from .permissions import IsBuyer, IsListingOwnerOrReadOnly, IsSeller
from .serializers import (
    IdentifyWasteSerializer,
    InquirySerializer,
    ListingSerializer,
    LoginSerializer,
    PurchaseHistorySerializer,
    PurchaseRequestCreateSerializer,
    PurchaseRequestSerializer,
    UserProfileSerializer,
    UserRegistrationSerializer,
    first_error_message,
)
from .services import ListingFilters

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """
    Get client IP address from request.
    Handles proxy headers for accurate IP detection.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def error_response(exc):
    """Render a MarketplaceError as ``{"message": ...}``."""
    return Response({'message': exc.message}, status=exc.status_code)


class MarketplaceServicesMixin:
    """Gives views access to the services built in ``CoreConfig.ready()``."""

    @property
    def services(self):
        return apps.get_app_config('core')


# ============================================================================
# Accounts
# ============================================================================

class UserRegistrationView(generics.CreateAPIView):
    """
    API endpoint for user registration.

    POST /api/auth/register/
    Returns the created user (without password) on success.
    """
    serializer_class = UserRegistrationSerializer
    permission_classes = [AllowAny]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self.perform_create(serializer)
        except IntegrityError:
            # Concurrent registration with the same email or username
            return Response(
                {'email': ['A user with that email or username already exists.']},
                status=status.HTTP_400_BAD_REQUEST
            )

        logger.info(
            f"User registered. Email: {serializer.instance.email}, "
            f"Role: {serializer.instance.role}"
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    API endpoint for login with JWT token generation.

    POST /api/auth/login/
    Request body: {"email": "user@example.com", "password": "..."}

    Success response (200):
    {
        "access": "<jwt_access_token>",
        "refresh": "<jwt_refresh_token>",
        "user": {"id": 1, "username": "...", "email": "...", "role": "buyer"}
    }

    Error response (401): {"detail": "Invalid credentials"}
    """
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'login'

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        email = serializer.validated_data['email'].lower().strip()
        password = serializer.validated_data['password']

        user = authenticate(request, email=email, password=password)
        if user is None:
            logger.warning(
                f"Failed login attempt. Email: {email}, IP: {get_client_ip(request)}"
            )
            return Response(
                {'detail': 'Invalid credentials'},
                status=status.HTTP_401_UNAUTHORIZED
            )

        refresh = RefreshToken.for_user(user)
        logger.info(f"Successful login. Email: {email}, IP: {get_client_ip(request)}")

        return Response({
            'access': str(refresh.access_token),
            'refresh': str(refresh),
            'user': {
                'id': user.id,
                'username': user.username,
                'email': user.email,
                'role': user.role,
            }
        }, status=status.HTTP_200_OK)


class UserProfileView(generics.RetrieveUpdateAPIView):
    """
    GET /api/auth/profile/    the authenticated user's profile
    PATCH /api/auth/profile/  update phone number
    """
    serializer_class = UserProfileSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        return self.request.user


# ============================================================================
# Listings
# ============================================================================

LISTING_QUERY_PARAMS = {
    'minPrice': 'min_price',
    'maxPrice': 'max_price',
    'minQuantity': 'min_quantity',
    'maxQuantity': 'max_quantity',
}


def parse_listing_filters(query_params):
    """
    Build ListingFilters from the listing search query string.

    Empty parameters are treated as absent.

    Raises:
        InvalidInput: If a numeric bound is not a finite number
    """
    values = {}

    for name in ('category', 'search'):
        value = query_params.get(name)
        if value is not None and value.strip():
            values[name] = value.strip()

    for param, field in LISTING_QUERY_PARAMS.items():
        raw = query_params.get(param)
        if raw is None or not raw.strip():
            continue
        try:
            number = Decimal(raw.strip())
        except InvalidOperation:
            raise InvalidInput(f'{param} must be a number')
        if not number.is_finite():
            raise InvalidInput(f'{param} must be a number')
        values[field] = number

    return ListingFilters(**values)


class ListingListCreateView(MarketplaceServicesMixin, APIView):
    """
    GET /api/listings/   search listings (public)

    Query parameters (all optional):
    - category: exact category name, e.g. "Plastic"
    - search: case-insensitive text matched against title and description
    - minPrice, maxPrice: inclusive bounds on the lot price
    - minQuantity, maxQuantity: inclusive bounds on the lot quantity

    Results are newest first. A non-numeric bound answers 400 {"message"}.

    POST /api/listings/  create a listing (sellers only)
    """

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAuthenticated(), IsSeller()]

    def get(self, request, *args, **kwargs):
        try:
            filters = parse_listing_filters(request.query_params)
            listings = self.services.listing_query_engine.search(filters)
        except MarketplaceError as e:
            return error_response(e)

        serializer = ListingSerializer(listings, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = ListingSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            listing = self.services.listing_store.create_listing(
                seller=request.user,
                **serializer.validated_data
            )
        except DjangoValidationError as e:
            return Response(e.message_dict, status=status.HTTP_400_BAD_REQUEST)
        except MarketplaceError as e:
            return error_response(e)

        logger.info(
            f"Listing created. ID: {listing.id}, Seller: {request.user.email}, "
            f"Category: {listing.category}"
        )
        return Response(ListingSerializer(listing).data, status=status.HTTP_201_CREATED)


class ListingDetailView(MarketplaceServicesMixin, APIView):
    """
    GET /api/listings/<id>/           listing detail (public)
    PUT/PATCH /api/listings/<id>/     update (owner only)
    DELETE /api/listings/<id>/        delete (owner only)
    """

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAuthenticated(), IsListingOwnerOrReadOnly()]

    def get_listing(self, pk):
        listing = self.services.listing_store.get_listing(pk)
        if listing is None:
            raise NotFound('Listing not found')
        self.check_object_permissions(self.request, listing)
        return listing

    def get(self, request, pk, *args, **kwargs):
        try:
            listing = self.get_listing(pk)
        except MarketplaceError as e:
            return error_response(e)
        return Response(ListingSerializer(listing).data, status=status.HTTP_200_OK)

    def put(self, request, pk, *args, **kwargs):
        return self._update(request, pk, partial=False)

    def patch(self, request, pk, *args, **kwargs):
        return self._update(request, pk, partial=True)

    def _update(self, request, pk, partial):
        try:
            listing = self.get_listing(pk)
        except MarketplaceError as e:
            return error_response(e)

        serializer = ListingSerializer(listing, data=request.data, partial=partial)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            listing = self.services.listing_store.update_listing(
                listing, serializer.validated_data
            )
        except DjangoValidationError as e:
            return Response(e.message_dict, status=status.HTTP_400_BAD_REQUEST)
        except MarketplaceError as e:
            return error_response(e)

        logger.info(
            f"Listing updated. ID: {listing.id}, Seller: {request.user.email}, "
            f"Fields: {sorted(serializer.validated_data)}"
        )
        return Response(ListingSerializer(listing).data, status=status.HTTP_200_OK)

    def delete(self, request, pk, *args, **kwargs):
        try:
            listing = self.get_listing(pk)
            self.services.listing_store.delete_listing(listing)
        except MarketplaceError as e:
            return error_response(e)

        logger.info(f"Listing deleted. ID: {pk}, Seller: {request.user.email}")
        return Response(status=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Purchase requests
# ============================================================================

class PurchaseRequestCreateView(MarketplaceServicesMixin, APIView):
    """
    API endpoint for buyers to request part of a listing.

    POST /api/purchases/
    Request body: {"listingId": 1, "quantity": 10}

    Success response (201):
    {
        "id": 1,
        "listingId": 1,
        "buyerId": 2,
        "sellerId": 3,
        "quantity": "10.00",
        "totalPrice": "3.00",
        "status": "PENDING",
        ...
    }

    Error responses ({"message": "..."}):
    - 400: Missing or invalid listingId or quantity
    - 403: Requester is not a buyer
    - 404: Listing not found
    - 503: Storage unavailable
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        # Checked here rather than in permission_classes to answer with {message}
        if not IsBuyer().has_permission(request, self):
            logger.warning(
                f"Non-buyer purchase attempt. User: {request.user.email}, "
                f"IP: {get_client_ip(request)}"
            )
            return Response(
                {'message': IsBuyer.message},
                status=status.HTTP_403_FORBIDDEN
            )

        serializer = PurchaseRequestCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'message': first_error_message(serializer.errors)},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            purchase = self.services.purchase_lifecycle.create_purchase_request(
                buyer_id=request.user.id,
                listing_id=serializer.validated_data['listingId'],
                requested_quantity=serializer.validated_data.get('quantity')
            )
        except MarketplaceError as e:
            return error_response(e)

        return Response(
            PurchaseRequestSerializer(purchase).data,
            status=status.HTTP_201_CREATED
        )


class PurchaseStatusUpdateView(MarketplaceServicesMixin, APIView):
    """
    API endpoint for sellers to accept or reject a purchase request.

    PUT /api/purchases/<id>/status/
    Request body: {"status": "ACCEPTED"} or {"status": "REJECTED"}

    Error responses ({"message": "..."}):
    - 400: Status is not ACCEPTED/REJECTED, or request already decided
    - 403: Requester is not the request's seller
    - 404: Purchase request not found
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, pk, *args, **kwargs):
        new_status = request.data.get('status') if isinstance(request.data, dict) else None

        try:
            purchase = self.services.purchase_lifecycle.update_status(
                requester_id=request.user.id,
                purchase_id=pk,
                new_status=new_status
            )
        except MarketplaceError as e:
            return error_response(e)

        return Response(PurchaseRequestSerializer(purchase).data, status=status.HTTP_200_OK)


class PurchaseHistoryView(MarketplaceServicesMixin, APIView):
    """
    Base for the buyer and seller history endpoints.

    Subclasses set ``counterpart_role`` and implement ``get_purchases``.
    """
    permission_classes = [IsAuthenticated]
    counterpart_role = None

    def get_purchases(self, user):
        raise NotImplementedError

    def get(self, request, *args, **kwargs):
        try:
            entries = enrich_purchases(
                self.get_purchases(request.user),
                self.services.listing_store,
                self.services.user_store,
                self.counterpart_role
            )
        except MarketplaceError as e:
            return error_response(e)

        serializer = PurchaseHistorySerializer(entries, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


class MyPurchasesView(PurchaseHistoryView):
    """GET /api/purchases/my-purchases/  requests made by the user, with sellers."""
    counterpart_role = 'seller'

    def get_purchases(self, user):
        return self.services.purchase_lifecycle.list_purchases_for_buyer(user.id)


class MySalesView(PurchaseHistoryView):
    """GET /api/purchases/my-sales/  requests received by the user, with buyers."""
    counterpart_role = 'buyer'

    def get_purchases(self, user):
        return self.services.purchase_lifecycle.list_purchases_for_seller(user.id)


# ============================================================================
# Inquiries
# ============================================================================

class InquiryListCreateView(generics.ListCreateAPIView):
    """
    GET /api/inquiries/   inquiries the user sent or received, newest first
    POST /api/inquiries/  ask the seller of a listing a question
    """
    serializer_class = InquirySerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        return Inquiry.objects.select_related('buyer', 'seller').filter(
            Q(buyer=user) | Q(seller=user)
        ).order_by('-created_at', '-id')

    def perform_create(self, serializer):
        listing = serializer.validated_data['listing']
        inquiry = serializer.save(buyer=self.request.user, seller=listing.seller)
        logger.info(
            f"Inquiry created. ID: {inquiry.id}, Listing: {listing.id}, "
            f"From: {self.request.user.email}"
        )


# ============================================================================
# Metrics
# ============================================================================

class MetricsView(APIView):
    """
    GET /api/metrics/

    Response (200):
    {
        "total_listings": 12,
        "total_users": 30,
        "total_buyers": 20,
        "total_sellers": 10,
        "successful_purchases": 4,
        "pending_purchases": 3,
        "total_revenue": "215.00"
    }
    """
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        try:
            metrics = collect_system_metrics()
        except MarketplaceError as e:
            return error_response(e)

        metrics['total_revenue'] = str(metrics['total_revenue'])
        return Response(metrics, status=status.HTTP_200_OK)


# ============================================================================
# AI waste identification
# ============================================================================

class IdentifyWasteView(MarketplaceServicesMixin, APIView):
    """
    POST /api/ai/identify/
    Request body: {"image": "<base64 or data URL>"}

    Success response (200):
    {"material": "PET bottle", "category": "Plastic", "confidence": 0.92,
     "description": "..."}

    Error responses ({"message": "..."}):
    - 400: Missing or invalid image
    - 502: Identification failed
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = IdentifyWasteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'message': 'Image required'}, status=status.HTTP_400_BAD_REQUEST)

        try:
            image_bytes, mime_type = decode_image(
                serializer.validated_data['image'],
                settings.IDENTIFY_MAX_IMAGE_BYTES
            )
            result = self.services.waste_identifier.identify(image_bytes, mime_type)
        except MarketplaceError as e:
            return error_response(e)

        return Response(result, status=status.HTTP_200_OK)
