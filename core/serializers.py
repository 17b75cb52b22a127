"""
Serializers for accounts, listings, purchase requests and inquiries.
"""

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework import serializers

from .models import Inquiry, Listing, PurchaseRequest

User = get_user_model()


def first_error_message(errors):
    """
    Flatten DRF validation errors into one short message.

    ``{'listingId': ['This field is required.']}`` becomes
    ``'listingId: This field is required.'``.
    """
    if isinstance(errors, dict):
        for field, value in errors.items():
            message = first_error_message(value)
            if field == 'non_field_errors':
                return message
            return f"{field}: {message}"
    if isinstance(errors, (list, tuple)) and errors:
        return first_error_message(errors[0])
    return str(errors) if errors else 'Invalid input'


# ============================================================================
# Accounts
# ============================================================================

class UserRegistrationSerializer(serializers.ModelSerializer):
    """
    Serializer for user registration.

    Fields:
    - username: Required, unique
    - email: Required, unique (case-insensitive)
    - password / confirm_password: Required, must match and pass Django's
      password validators
    - phone_number: Optional
    - role: 'buyer' or 'seller', defaults to 'buyer'
    """

    password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    confirm_password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'password', 'confirm_password',
                  'phone_number', 'role', 'created_at']
        read_only_fields = ['id', 'created_at']
        extra_kwargs = {
            'email': {'required': True},
        }

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError(
                "A user with that email already exists."
            )
        return value

    def validate_password(self, value):
        try:
            validate_password(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value

    def validate(self, attrs):
        if attrs.get('password') != attrs.get('confirm_password'):
            raise serializers.ValidationError({
                'confirm_password': 'Password confirmation does not match.'
            })
        return attrs

    def create(self, validated_data):
        validated_data.pop('confirm_password', None)
        password = validated_data.pop('password')

        with transaction.atomic():
            user = User(**validated_data)
            user.set_password(password)
            user.save()

        return user


class LoginSerializer(serializers.Serializer):
    """
    Login credentials. Authentication itself happens in the view.
    """
    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class UserProfileSerializer(serializers.ModelSerializer):
    """
    The authenticated user's profile. Only ``phone_number`` is editable;
    role and email are fixed for the account's lifetime.
    """

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'phone_number', 'role', 'created_at']
        read_only_fields = ['id', 'username', 'email', 'role', 'created_at']


class UserSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField()
    email = serializers.EmailField()
    phone_number = serializers.CharField()


# ============================================================================
# Listings
# ============================================================================

class ListingSerializer(serializers.ModelSerializer):
    """
    Serializer for creating, updating and displaying listings.

    ``price`` is the price of the whole lot. ``price_per_unit`` is derived.
    The seller is always the authenticated user and cannot be set.
    """

    seller = UserSummarySerializer(read_only=True)
    price_per_unit = serializers.SerializerMethodField()

    class Meta:
        model = Listing
        fields = [
            'id',
            'seller',
            'title',
            'description',
            'category',
            'quantity',
            'unit',
            'price',
            'price_per_unit',
            'address',
            'latitude',
            'longitude',
            'images',
            'status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'seller', 'created_at', 'updated_at']

    def get_price_per_unit(self, obj):
        value = obj.price_per_unit()
        return str(value) if value is not None else None

    def validate_title(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Title cannot be empty.")
        return value.strip()

    def validate_description(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Description cannot be empty.")
        return value.strip()

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than 0.")
        return value

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Price must be greater than 0.")
        return value

    def validate(self, attrs):
        latitude = attrs.get('latitude', getattr(self.instance, 'latitude', None))
        longitude = attrs.get('longitude', getattr(self.instance, 'longitude', None))
        if (latitude is None) != (longitude is None):
            raise serializers.ValidationError(
                "Latitude and longitude must be provided together."
            )
        return attrs


# ============================================================================
# Purchase requests
# ============================================================================

class PurchaseRequestCreateSerializer(serializers.Serializer):
    """
    Body of ``POST /api/purchases/``.

    ``quantity`` is kept as text so the lifecycle manager can tell a
    malformed value from an out-of-range one.
    """
    listingId = serializers.IntegerField(required=True)
    quantity = serializers.CharField(
        required=False,
        allow_null=True,
        allow_blank=True
    )


class PurchaseRequestSerializer(serializers.ModelSerializer):
    """A stored purchase request, with camelCase keys."""

    listingId = serializers.IntegerField(source='listing_id', read_only=True)
    buyerId = serializers.IntegerField(source='buyer_id', read_only=True)
    sellerId = serializers.IntegerField(source='seller_id', read_only=True)
    totalPrice = serializers.DecimalField(
        source='total_price', max_digits=14, decimal_places=2, read_only=True
    )
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = PurchaseRequest
        fields = ['id', 'listingId', 'buyerId', 'sellerId', 'quantity',
                  'totalPrice', 'status', 'createdAt', 'updatedAt']
        read_only_fields = fields


class ListingSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    title = serializers.CharField()
    category = serializers.CharField()
    unit = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    status = serializers.CharField()


class PurchaseHistorySerializer(serializers.Serializer):
    """
    A PurchaseHistoryEntry. The counterpart appears under ``seller`` in
    buyer history and under ``buyer`` in seller history.
    """

    id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    totalPrice = serializers.DecimalField(
        source='total_price', max_digits=14, decimal_places=2
    )
    status = serializers.CharField()
    createdAt = serializers.DateTimeField(source='created_at')
    listing = ListingSummarySerializer(allow_null=True)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        counterpart = instance.counterpart
        data[instance.counterpart_role] = (
            UserSummarySerializer(counterpart).data if counterpart else None
        )
        return data


# ============================================================================
# Inquiries
# ============================================================================

class InquirySerializer(serializers.ModelSerializer):
    """
    A question about a listing. Buyer and seller are filled in by the view.
    """

    listing = serializers.PrimaryKeyRelatedField(queryset=Listing.objects.all())
    buyer = UserSummarySerializer(read_only=True)
    seller = UserSummarySerializer(read_only=True)

    class Meta:
        model = Inquiry
        fields = ['id', 'listing', 'buyer', 'seller', 'message', 'created_at']
        read_only_fields = ['id', 'buyer', 'seller', 'created_at']

    def validate_message(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Message cannot be empty.")
        return value.strip()

    def validate(self, attrs):
        request = self.context.get('request')
        listing = attrs.get('listing')
        if request and listing and listing.seller_id == request.user.id:
            raise serializers.ValidationError({
                'listing': 'You cannot send an inquiry about your own listing.'
            })
        return attrs


# ============================================================================
# AI
# ============================================================================

class IdentifyWasteSerializer(serializers.Serializer):
    """Base64 image, optionally as a ``data:image/...;base64,`` URL."""
    image = serializers.CharField(required=True, trim_whitespace=True)
