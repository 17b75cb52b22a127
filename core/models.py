"""
Data models for the Waste Materials Marketplace.
"""

from decimal import Decimal, ROUND_HALF_UP

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from .validators import validate_image_urls, validate_phone_number


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    Additional fields:
    - email: Required, unique email address (stored lowercase)
    - phone_number: Optional phone number with validation
    - role: Either 'buyer' or 'seller'
    - created_at: Account creation timestamp
    - updated_at: Last update timestamp
    """

    ROLE_BUYER = 'buyer'
    ROLE_SELLER = 'seller'
    ROLE_CHOICES = [
        (ROLE_BUYER, 'Buyer'),
        (ROLE_SELLER, 'Seller'),
    ]

    email = models.EmailField(
        _('email address'),
        unique=True,
        blank=False,
        null=False,
        error_messages={
            'unique': _('A user with that email already exists.'),
        },
        help_text=_('Required. Enter a valid email address.')
    )

    phone_number = models.CharField(
        _('phone number'),
        max_length=20,
        blank=True,
        default='',
        validators=[validate_phone_number],
        help_text=_('Optional. Enter phone number in international format.')
    )

    role = models.CharField(
        _('role'),
        max_length=10,
        choices=ROLE_CHOICES,
        default=ROLE_BUYER,
        help_text=_('Whether the account buys or sells waste materials.')
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
        help_text=_('Timestamp when the account was created.')
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
        help_text=_('Timestamp when the account was last updated.')
    )

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['email'], name='core_user_email_idx'),
            models.Index(fields=['role'], name='core_user_role_idx'),
        ]

    def __str__(self):
        return self.email or self.username

    def is_buyer(self):
        """Return True if the account acts as a buyer."""
        return self.role == self.ROLE_BUYER

    def is_seller(self):
        """Return True if the account acts as a seller."""
        return self.role == self.ROLE_SELLER

    def clean(self):
        """
        Validate model fields.

        Ensures:
        - Email is provided and stored lowercase
        - Role is provided

        Raises:
            ValidationError: If validation fails
        """
        super().clean()

        if self.email:
            self.email = self.email.lower()

        if not self.email:
            raise ValidationError({
                'email': _('Email address is required.')
            })

        if not self.role:
            raise ValidationError({
                'role': _('Role is required.')
            })

    def save(self, *args, **kwargs):
        """
        Normalize email before saving.

        New accounts skip full_clean so duplicate emails surface as an
        IntegrityError from the database.
        """
        if self.email:
            self.email = self.email.lower()

        if self.pk is not None:
            self.full_clean()

        super().save(*args, **kwargs)


class Listing(models.Model):
    """
    A lot of recyclable waste offered by a seller.

    ``quantity`` is the total amount on offer in ``unit`` and ``price`` is
    the price of the whole lot, not a unit price.
    """

    CATEGORY_CHOICES = [
        ('Plastic', 'Plastic'),
        ('Glass', 'Glass'),
        ('Metal', 'Metal'),
        ('Paper', 'Paper'),
        ('Electronics', 'Electronics'),
        ('Textile', 'Textile'),
    ]

    UNIT_CHOICES = [
        ('kg', 'Kilograms'),
        ('tons', 'Tons'),
        ('units', 'Units'),
    ]

    STATUS_CHOICES = [
        ('available', 'Available'),
        ('sold', 'Sold'),
    ]

    seller = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='listings',
        help_text=_('Seller offering this lot')
    )

    title = models.CharField(
        _('title'),
        max_length=200,
        blank=False,
        null=False,
        help_text=_('Short title of the listing')
    )

    description = models.TextField(
        _('description'),
        blank=False,
        null=False,
        help_text=_('Description of the material and its condition')
    )

    category = models.CharField(
        _('category'),
        max_length=20,
        choices=CATEGORY_CHOICES,
        help_text=_('Material category')
    )

    quantity = models.DecimalField(
        _('quantity'),
        max_digits=12,
        decimal_places=2,
        help_text=_('Total amount on offer')
    )

    unit = models.CharField(
        _('unit'),
        max_length=10,
        choices=UNIT_CHOICES,
        default='kg',
        help_text=_('Unit the quantity is measured in')
    )

    price = models.DecimalField(
        _('price'),
        max_digits=12,
        decimal_places=2,
        help_text=_('Price for the whole lot')
    )

    address = models.CharField(
        _('address'),
        max_length=300,
        blank=True,
        default='',
        help_text=_('Pickup address')
    )

    latitude = models.DecimalField(
        _('latitude'),
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True
    )

    longitude = models.DecimalField(
        _('longitude'),
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True
    )

    images = models.JSONField(
        _('images'),
        default=list,
        blank=True,
        validators=[validate_image_urls],
        help_text=_('List of image URLs')
    )

    status = models.CharField(
        _('status'),
        max_length=20,
        choices=STATUS_CHOICES,
        default='available',
        help_text=_('Availability of the listing')
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
        help_text=_('Timestamp when the listing was created')
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
        help_text=_('Timestamp when the listing was last updated')
    )

    class Meta:
        verbose_name = _('listing')
        verbose_name_plural = _('listings')
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['seller'], name='core_listing_seller_idx'),
            models.Index(fields=['category'], name='core_listing_category_idx'),
            models.Index(fields=['created_at'], name='core_listing_created_idx'),
        ]

    def __str__(self):
        return self.title

    def clean(self):
        """
        Validate model fields.

        Ensures:
        - Seller has the seller role
        - Title and description are not blank
        - Quantity and price are greater than 0
        - Latitude and longitude are in range

        Raises:
            ValidationError: If validation fails
        """
        super().clean()

        if self.seller_id and self.seller and not self.seller.is_seller():
            raise ValidationError({
                'seller': _('Only sellers can create listings.')
            })

        if not self.title or not self.title.strip():
            raise ValidationError({
                'title': _('Title cannot be empty.')
            })

        if not self.description or not self.description.strip():
            raise ValidationError({
                'description': _('Description cannot be empty.')
            })

        if self.quantity is not None and self.quantity <= 0:
            raise ValidationError({
                'quantity': _('Quantity must be greater than 0.')
            })

        if self.price is not None and self.price <= 0:
            raise ValidationError({
                'price': _('Price must be greater than 0.')
            })

        if self.latitude is not None and not (-90 <= self.latitude <= 90):
            raise ValidationError({
                'latitude': _('Latitude must be between -90 and 90.')
            })

        if self.longitude is not None and not (-180 <= self.longitude <= 180):
            raise ValidationError({
                'longitude': _('Longitude must be between -180 and 180.')
            })

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def price_per_unit(self):
        """
        Price of a single unit of the lot, rounded to cents.

        Returns:
            Decimal: price / quantity, or None when quantity is unset
        """
        if not self.quantity:
            return None
        return (self.price / self.quantity).quantize(
            Decimal('0.01'), rounding=ROUND_HALF_UP
        )


class PurchaseRequest(models.Model):
    """
    A buyer's non-binding request to buy part of a listing.

    Fields:
    - listing: Listing the request targets (nulled if the listing is deleted)
    - buyer: User who made the request
    - seller: Listing owner at creation time
    - quantity: Requested amount
    - total_price: quantity x (price / listing quantity), fixed at creation
    - status: PENDING, ACCEPTED or REJECTED
    """

    STATUS_PENDING = 'PENDING'
    STATUS_ACCEPTED = 'ACCEPTED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    # ACCEPTED and REJECTED are terminal
    VALID_TRANSITIONS = {
        STATUS_PENDING: [STATUS_ACCEPTED, STATUS_REJECTED],
        STATUS_ACCEPTED: [],
        STATUS_REJECTED: [],
    }

    listing = models.ForeignKey(
        Listing,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='purchase_requests',
        help_text=_('Listing being requested')
    )

    buyer = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='purchases',
        help_text=_('User requesting to buy')
    )

    seller = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='sales',
        help_text=_('Owner of the listing at request time')
    )

    quantity = models.DecimalField(
        _('quantity'),
        max_digits=12,
        decimal_places=2,
        help_text=_('Requested amount')
    )

    total_price = models.DecimalField(
        _('total price'),
        max_digits=14,
        decimal_places=2,
        help_text=_('Price for the requested amount')
    )

    status = models.CharField(
        _('status'),
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        help_text=_('Current status of the request')
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
        help_text=_('Timestamp when the request was created')
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
        help_text=_('Timestamp when the request was last updated')
    )

    class Meta:
        verbose_name = _('purchase request')
        verbose_name_plural = _('purchase requests')
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['buyer', '-created_at'], name='core_pr_buyer_created_idx'),
            models.Index(fields=['seller', '-created_at'], name='core_pr_seller_created_idx'),
            models.Index(fields=['status'], name='core_pr_status_idx'),
        ]

    def __str__(self):
        return f"Purchase #{self.pk} {self.quantity} ({self.status})"

    def can_transition_to(self, new_status):
        """
        Check if the request may move to ``new_status``.

        Args:
            new_status: Target status

        Returns:
            bool: True if the transition is allowed
        """
        return new_status in self.VALID_TRANSITIONS.get(self.status, [])

    def clean(self):
        """
        Validate model fields and status transitions.

        Ensures:
        - Quantity and total price are positive
        - Buyer and seller are different users
        - total_price never changes after creation
        - Status only leaves PENDING, and only once

        Raises:
            ValidationError: If validation fails
        """
        super().clean()

        if self.quantity is not None and self.quantity <= 0:
            raise ValidationError({
                'quantity': _('Quantity must be greater than 0.')
            })

        if self.total_price is not None and self.total_price <= 0:
            raise ValidationError({
                'total_price': _('Total price must be greater than 0.')
            })

        if self.buyer_id and self.seller_id and self.buyer_id == self.seller_id:
            raise ValidationError({
                'buyer': _('Buyer and seller cannot be the same user.')
            })

        if self.pk is not None:
            try:
                old_instance = PurchaseRequest.objects.get(pk=self.pk)
            except PurchaseRequest.DoesNotExist:
                return

            if old_instance.total_price != self.total_price:
                raise ValidationError({
                    'total_price': _('Total price cannot be changed after creation.')
                })

            if old_instance.status != self.status:
                if not old_instance.can_transition_to(self.status):
                    raise ValidationError({
                        'status': _(
                            f'Invalid status transition from {old_instance.status} to {self.status}.'
                        )
                    })

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)


class Inquiry(models.Model):
    """
    A free-text question from a buyer to the seller of a listing.
    """

    listing = models.ForeignKey(
        Listing,
        on_delete=models.CASCADE,
        related_name='inquiries',
        help_text=_('Listing the question is about')
    )

    buyer = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='sent_inquiries',
        help_text=_('User asking the question')
    )

    seller = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='received_inquiries',
        help_text=_('Owner of the listing')
    )

    message = models.TextField(
        _('message'),
        max_length=2000,
        help_text=_('Question text')
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True
    )

    class Meta:
        verbose_name = _('inquiry')
        verbose_name_plural = _('inquiries')
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['listing'], name='core_inquiry_listing_idx'),
            models.Index(fields=['seller'], name='core_inquiry_seller_idx'),
        ]

    def __str__(self):
        return f"Inquiry on {self.listing_id} from {self.buyer_id}"

    def clean(self):
        super().clean()

        if not self.message or not self.message.strip():
            raise ValidationError({
                'message': _('Message cannot be empty.')
            })

        if self.buyer_id and self.seller_id and self.buyer_id == self.seller_id:
            raise ValidationError({
                'buyer': _('You cannot send an inquiry about your own listing.')
            })

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)
