"""
Marketplace-wide counters for the performance dashboard.
"""

from decimal import Decimal

from django.db.models import Sum

from .models import Listing, PurchaseRequest, User
from .services import CENTS
from .stores import translate_storage_errors


@translate_storage_errors
def collect_system_metrics():
    """
    Count listings, users and purchase outcomes.

    Revenue is the sum of total prices over ACCEPTED purchase requests.

    Returns:
        dict: Metric name -> value
    """
    accepted = PurchaseRequest.objects.filter(status=PurchaseRequest.STATUS_ACCEPTED)
    revenue = accepted.aggregate(total=Sum('total_price'))['total'] or Decimal('0')

    return {
        'total_listings': Listing.objects.count(),
        'total_users': User.objects.count(),
        'total_buyers': User.objects.filter(role=User.ROLE_BUYER).count(),
        'total_sellers': User.objects.filter(role=User.ROLE_SELLER).count(),
        'successful_purchases': accepted.count(),
        'pending_purchases': PurchaseRequest.objects.filter(
            status=PurchaseRequest.STATUS_PENDING
        ).count(),
        'total_revenue': revenue.quantize(CENTS),
    }
