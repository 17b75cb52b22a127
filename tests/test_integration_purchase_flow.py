"""
End-to-end purchase flow over the HTTP API, plus storage failure handling.
"""

from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import OperationalError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from core.exceptions import StorageUnavailable
from core.models import PurchaseRequest
from core.stores import ListingStore

User = get_user_model()


class PurchaseFlowIntegrationTestCase(TestCase):
    """Register, list, search, request, accept, and read history."""

    def setUp(self):
        cache.clear()
        self.seller_client = APIClient()
        self.buyer_client = APIClient()

    def _register_and_login(self, client, username, email, role):
        response = client.post('/api/auth/register/', {
            'username': username,
            'email': email,
            'password': 'Str0ng-Passw0rd!',
            'confirm_password': 'Str0ng-Passw0rd!',
            'phone_number': '555-0100',
            'role': role,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

        response = client.post('/api/auth/login/', {
            'email': email,
            'password': 'Str0ng-Passw0rd!',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        return response.data['user']

    def test_glass_bottles_purchase_flow(self):
        self._register_and_login(self.seller_client, 'seller1', 'seller@example.com', 'seller')
        self._register_and_login(self.buyer_client, 'buyer1', 'buyer@example.com', 'buyer')

        # Seller lists 50 kg of glass for 15.00
        response = self.seller_client.post('/api/listings/', {
            'title': '50kg Mixed Glass Bottles',
            'description': 'Assorted glass bottles, rinsed and sorted by color.',
            'category': 'Glass',
            'quantity': '50',
            'unit': 'kg',
            'price': '15.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        listing_id = response.data['id']

        # Buyer finds it
        response = self.buyer_client.get('/api/listings/', {'category': 'Glass', 'maxPrice': '20'})
        self.assertEqual([l['id'] for l in response.data], [listing_id])

        # Buyer requests 10 kg
        response = self.buyer_client.post(
            '/api/purchases/', {'listingId': listing_id, 'quantity': 10}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity'], '10.00')
        self.assertEqual(response.data['totalPrice'], '3.00')
        self.assertEqual(response.data['status'], 'PENDING')
        purchase_id = response.data['id']

        # Seller sees it and accepts
        response = self.seller_client.get('/api/purchases/my-sales/')
        self.assertEqual(response.data[0]['id'], purchase_id)
        self.assertEqual(response.data[0]['buyer']['username'], 'buyer1')

        response = self.seller_client.put(
            f'/api/purchases/{purchase_id}/status/', {'status': 'ACCEPTED'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ACCEPTED')
        self.assertEqual(response.data['totalPrice'], '3.00')

        # Buyer's history reflects the decision
        response = self.buyer_client.get('/api/purchases/my-purchases/')
        entry = response.data[0]
        self.assertEqual(entry['status'], 'ACCEPTED')
        self.assertEqual(entry['totalPrice'], '3.00')
        self.assertEqual(entry['seller']['username'], 'seller1')

        # Listing quantity is untouched
        response = self.buyer_client.get(f'/api/listings/{listing_id}/')
        self.assertEqual(response.data['quantity'], '50.00')

        # Revenue counts the accepted request
        response = self.buyer_client.get('/api/metrics/')
        self.assertEqual(response.data['successful_purchases'], 1)
        self.assertEqual(response.data['total_revenue'], '3.00')

        self.assertEqual(PurchaseRequest.objects.get(pk=purchase_id).total_price, Decimal('3.00'))


class StorageUnavailableTestCase(TestCase):

    def test_store_translates_operational_error(self):
        with mock.patch('core.stores.Listing.objects') as objects:
            objects.select_related.side_effect = OperationalError('database is locked')
            with self.assertRaises(StorageUnavailable):
                ListingStore().list_listings()

    def test_listing_search_answers_503(self):
        client = APIClient()
        with mock.patch('core.stores.Listing.objects') as objects:
            objects.select_related.side_effect = OperationalError('connection refused')
            response = client.get('/api/listings/')

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertIn('message', response.data)

    def test_metrics_answers_503(self):
        client = APIClient()
        with mock.patch('core.metrics.Listing.objects') as objects:
            objects.count.side_effect = OperationalError('connection refused')
            response = client.get('/api/metrics/')

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
