"""
Django admin configuration for the marketplace models.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import Inquiry, Listing, PurchaseRequest, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for marketplace accounts, adding role and phone number."""

    list_display = ['email', 'username', 'role', 'phone_number', 'is_staff', 'is_active', 'created_at']
    list_filter = ['role', 'is_staff', 'is_superuser', 'is_active', 'created_at']
    search_fields = ['email', 'username', 'first_name', 'last_name', 'phone_number']
    ordering = ['-created_at']

    fieldsets = (
        (None, {'fields': ('username', 'password')}),
        (_('Contact'), {'fields': ('first_name', 'last_name', 'email', 'phone_number')}),
        (_('Marketplace Role'), {'fields': ('role',)}),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Important Dates'), {
            'fields': ('last_login', 'date_joined', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('username', 'email', 'password1', 'password2', 'role', 'phone_number'),
        }),
    )

    readonly_fields = ['created_at', 'updated_at', 'last_login', 'date_joined']
    date_hierarchy = 'created_at'
    list_per_page = 25

    def get_readonly_fields(self, request, obj=None):
        if obj:
            return self.readonly_fields
        return []


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ['title', 'seller', 'category', 'quantity', 'unit', 'price', 'status', 'created_at']
    list_filter = ['category', 'unit', 'status', 'created_at']
    search_fields = ['title', 'description', 'address', 'seller__email', 'seller__username']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'
    list_per_page = 25

    fieldsets = (
        (None, {'fields': ('seller', 'title', 'description', 'category')}),
        (_('Quantity & Price'), {'fields': ('quantity', 'unit', 'price', 'status')}),
        (_('Location'), {'fields': ('address', 'latitude', 'longitude')}),
        (_('Images'), {'fields': ('images',)}),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )


@admin.register(PurchaseRequest)
class PurchaseRequestAdmin(admin.ModelAdmin):
    """
    Purchase requests are shown read-only apart from status, and cannot be
    deleted, so history stays intact.
    """

    list_display = ['id', 'listing', 'buyer', 'seller', 'quantity', 'total_price', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['listing__title', 'buyer__email', 'buyer__username', 'seller__email', 'seller__username']
    readonly_fields = ['listing', 'buyer', 'seller', 'quantity', 'total_price', 'created_at', 'updated_at']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'
    list_per_page = 25

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Inquiry)
class InquiryAdmin(admin.ModelAdmin):
    list_display = ['id', 'listing', 'buyer', 'seller', 'created_at']
    list_filter = ['created_at']
    search_fields = ['listing__title', 'buyer__email', 'seller__email', 'message']
    readonly_fields = ['created_at']
    ordering = ['-created_at']
    list_per_page = 25
