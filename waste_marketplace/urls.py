"""
URL configuration for waste_marketplace project.
"""
from django.contrib import admin
from django.urls import path
from rest_framework_simplejwt.views import TokenBlacklistView, TokenRefreshView

from core import views

urlpatterns = [
    path('admin/', admin.site.urls),

    # Accounts
    path('api/auth/register/', views.UserRegistrationView.as_view(), name='register'),
    path('api/auth/login/', views.LoginView.as_view(), name='login'),
    path('api/auth/logout/', TokenBlacklistView.as_view(), name='logout'),
    path('api/auth/profile/', views.UserProfileView.as_view(), name='profile'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Listings
    path('api/listings/', views.ListingListCreateView.as_view(), name='listing-list'),
    path('api/listings/<int:pk>/', views.ListingDetailView.as_view(), name='listing-detail'),

    # Purchase requests
    path('api/purchases/', views.PurchaseRequestCreateView.as_view(), name='purchase-create'),
    path('api/purchases/my-purchases/', views.MyPurchasesView.as_view(), name='my-purchases'),
    path('api/purchases/my-sales/', views.MySalesView.as_view(), name='my-sales'),
    path(
        'api/purchases/<int:pk>/status/',
        views.PurchaseStatusUpdateView.as_view(),
        name='purchase-status-update'
    ),

    # Inquiries, metrics, AI
    path('api/inquiries/', views.InquiryListCreateView.as_view(), name='inquiry-list'),
    path('api/metrics/', views.MetricsView.as_view(), name='metrics'),
    path('api/ai/identify/', views.IdentifyWasteView.as_view(), name='identify-waste'),
]
