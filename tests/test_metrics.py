"""
Tests for system metrics.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from core.metrics import collect_system_metrics
from core.models import Listing, PurchaseRequest

User = get_user_model()


class SystemMetricsTestCase(TestCase):

    def test_empty_marketplace(self):
        metrics = collect_system_metrics()
        self.assertEqual(metrics, {
            'total_listings': 0,
            'total_users': 0,
            'total_buyers': 0,
            'total_sellers': 0,
            'successful_purchases': 0,
            'pending_purchases': 0,
            'total_revenue': Decimal('0.00'),
        })

    def test_counts_and_revenue(self):
        seller = User.objects.create_user(
            username='seller', email='seller@example.com', password='x', role='seller'
        )
        buyers = [
            User.objects.create_user(
                username=f'buyer{i}', email=f'buyer{i}@example.com', password='x', role='buyer'
            )
            for i in range(3)
        ]
        listing = Listing.objects.create(
            seller=seller,
            title='Newsprint Bales',
            description='Baled newsprint.',
            category='Paper',
            quantity=Decimal('10'),
            unit='tons',
            price=Decimal('500.00')
        )
        for buyer, total, state in zip(
            buyers,
            ('50.00', '120.50', '999.00'),
            ('ACCEPTED', 'ACCEPTED', 'REJECTED'),
        ):
            PurchaseRequest.objects.create(
                listing=listing, buyer=buyer, seller=seller,
                quantity=Decimal('1'), total_price=Decimal(total), status=state
            )
        PurchaseRequest.objects.create(
            listing=listing, buyer=buyers[0], seller=seller,
            quantity=Decimal('1'), total_price=Decimal('50.00')
        )

        response = APIClient().get('/api/metrics/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_listings'], 1)
        self.assertEqual(response.data['total_users'], 4)
        self.assertEqual(response.data['total_buyers'], 3)
        self.assertEqual(response.data['total_sellers'], 1)
        self.assertEqual(response.data['successful_purchases'], 2)
        self.assertEqual(response.data['pending_purchases'], 1)
        self.assertEqual(response.data['total_revenue'], '170.50')

    def test_revenue_keeps_cents(self):
        seller = User.objects.create_user(
            username='seller', email='seller@example.com', password='x', role='seller'
        )
        buyer = User.objects.create_user(
            username='buyer', email='buyer@example.com', password='x', role='buyer'
        )
        listing = Listing.objects.create(
            seller=seller,
            title='Glass Cullet',
            description='Crushed clear glass.',
            category='Glass',
            quantity=Decimal('50'),
            unit='kg',
            price=Decimal('15.00')
        )
        PurchaseRequest.objects.create(
            listing=listing, buyer=buyer, seller=seller,
            quantity=Decimal('10'), total_price=Decimal('3.00'), status='ACCEPTED'
        )

        revenue = collect_system_metrics()['total_revenue']

        self.assertEqual(str(revenue), '3.00')
