"""
Tests for POST /api/purchases/ and PUT /api/purchases/<id>/status/.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from core.models import Listing, PurchaseRequest

User = get_user_model()


class PurchaseAPITestCase(TestCase):

    create_url = '/api/purchases/'

    def setUp(self):
        self.client = APIClient()

        self.buyer = User.objects.create_user(
            username='buyer',
            email='buyer@example.com',
            password='testpass123',
            role='buyer'
        )
        self.other_buyer = User.objects.create_user(
            username='otherbuyer',
            email='otherbuyer@example.com',
            password='testpass123',
            role='buyer'
        )
        self.seller = User.objects.create_user(
            username='seller',
            email='seller@example.com',
            password='testpass123',
            role='seller'
        )
        self.other_seller = User.objects.create_user(
            username='otherseller',
            email='otherseller@example.com',
            password='testpass123',
            role='seller'
        )

        self.crates = Listing.objects.create(
            seller=self.seller,
            title='100 Plastic Crates',
            description='High density polyethylene crates.',
            category='Plastic',
            quantity=Decimal('100'),
            unit='units',
            price=Decimal('200.00')
        )

    def _auth(self, user):
        token = str(RefreshToken.for_user(user).access_token)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    def _status_url(self, purchase_id):
        return f'/api/purchases/{purchase_id}/status/'

    def _pending_purchase(self, quantity='10'):
        return PurchaseRequest.objects.create(
            listing=self.crates,
            buyer=self.buyer,
            seller=self.seller,
            quantity=Decimal(quantity),
            total_price=Decimal(quantity) * 2
        )


class PurchaseCreationTests(PurchaseAPITestCase):

    def test_buyer_creates_pending_request(self):
        self._auth(self.buyer)
        response = self.client.post(
            self.create_url, {'listingId': self.crates.id, 'quantity': 10}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'PENDING')
        self.assertEqual(response.data['totalPrice'], '20.00')
        self.assertEqual(response.data['quantity'], '10.00')
        self.assertEqual(response.data['listingId'], self.crates.id)
        self.assertEqual(response.data['buyerId'], self.buyer.id)
        self.assertEqual(response.data['sellerId'], self.seller.id)

        purchase = PurchaseRequest.objects.get(pk=response.data['id'])
        self.assertEqual(purchase.total_price, Decimal('20.00'))

    def test_listing_quantity_is_not_reduced(self):
        self._auth(self.buyer)
        self.client.post(self.create_url, {'listingId': self.crates.id, 'quantity': 60}, format='json')
        self.crates.refresh_from_db()
        self.assertEqual(self.crates.quantity, Decimal('100'))

    def test_fractional_quantity_as_string(self):
        self._auth(self.buyer)
        response = self.client.post(
            self.create_url, {'listingId': self.crates.id, 'quantity': '33.33'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['totalPrice'], '66.66')

    def test_entire_quantity_allowed(self):
        self._auth(self.buyer)
        response = self.client.post(
            self.create_url, {'listingId': self.crates.id, 'quantity': '100'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['totalPrice'], '200.00')

    def test_quantity_over_available_rejected(self):
        self._auth(self.buyer)
        response = self.client.post(
            self.create_url, {'listingId': self.crates.id, 'quantity': '100.01'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Requested quantity exceeds available quantity')
        self.assertFalse(PurchaseRequest.objects.exists())

    def test_non_positive_quantity_rejected(self):
        self._auth(self.buyer)
        for quantity in (0, -5):
            response = self.client.post(
                self.create_url, {'listingId': self.crates.id, 'quantity': quantity}, format='json'
            )
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn('message', response.data)

    def test_missing_or_malformed_fields_rejected(self):
        self._auth(self.buyer)
        bodies = [
            {'listingId': self.crates.id},
            {'listingId': self.crates.id, 'quantity': 'ten'},
            {'quantity': 5},
            {'listingId': 'abc', 'quantity': 5},
        ]
        for body in bodies:
            response = self.client.post(self.create_url, body, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, body)
            self.assertIn('message', response.data)

    def test_total_below_one_cent_rejected(self):
        newsprint = Listing.objects.create(
            seller=self.seller,
            title='Shredded Newsprint',
            description='Loose shredded newsprint.',
            category='Paper',
            quantity=Decimal('1000'),
            unit='kg',
            price=Decimal('1.00')
        )
        self._auth(self.buyer)

        response = self.client.post(
            self.create_url, {'listingId': newsprint.id, 'quantity': '1'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Requested quantity is too small to price')
        self.assertFalse(PurchaseRequest.objects.exists())

    def test_unknown_listing_is_not_found(self):
        self._auth(self.buyer)
        response = self.client.post(
            self.create_url, {'listingId': 99999, 'quantity': 1}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Listing not found')

    def test_seller_cannot_create_request(self):
        self._auth(self.other_seller)
        response = self.client.post(
            self.create_url, {'listingId': self.crates.id, 'quantity': 1}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('message', response.data)

    def test_anonymous_cannot_create_request(self):
        response = self.client.post(
            self.create_url, {'listingId': self.crates.id, 'quantity': 1}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class PurchaseStatusUpdateTests(PurchaseAPITestCase):

    def test_seller_accepts_request(self):
        purchase = self._pending_purchase()
        self._auth(self.seller)

        response = self.client.put(self._status_url(purchase.id), {'status': 'ACCEPTED'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ACCEPTED')
        self.assertEqual(response.data['totalPrice'], '20.00')
        purchase.refresh_from_db()
        self.assertEqual(purchase.status, 'ACCEPTED')

    def test_seller_rejects_request(self):
        purchase = self._pending_purchase()
        self._auth(self.seller)

        response = self.client.put(self._status_url(purchase.id), {'status': 'REJECTED'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        purchase.refresh_from_db()
        self.assertEqual(purchase.status, 'REJECTED')

    def test_other_users_are_forbidden(self):
        purchase = self._pending_purchase()
        for user in (self.buyer, self.other_buyer, self.other_seller):
            self._auth(user)
            response = self.client.put(self._status_url(purchase.id), {'status': 'ACCEPTED'}, format='json')
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        purchase.refresh_from_db()
        self.assertEqual(purchase.status, 'PENDING')

    def test_unknown_purchase_is_not_found(self):
        self._auth(self.seller)
        response = self.client.put(self._status_url(99999), {'status': 'ACCEPTED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_status_value_rejected(self):
        purchase = self._pending_purchase()
        self._auth(self.seller)
        for body in ({'status': 'PENDING'}, {'status': 'done'}, {}):
            response = self.client.put(self._status_url(purchase.id), body, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, body)

        purchase.refresh_from_db()
        self.assertEqual(purchase.status, 'PENDING')

    def test_non_object_body_rejected(self):
        purchase = self._pending_purchase()
        self._auth(self.seller)

        response = self.client.put(self._status_url(purchase.id), ['ACCEPTED'], format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Status must be ACCEPTED or REJECTED')
        purchase.refresh_from_db()
        self.assertEqual(purchase.status, 'PENDING')

    def test_non_object_body_from_non_seller_is_forbidden(self):
        purchase = self._pending_purchase()
        self._auth(self.other_seller)

        response = self.client.put(self._status_url(purchase.id), ['ACCEPTED'], format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_accepted_request_cannot_be_rejected(self):
        purchase = self._pending_purchase()
        self._auth(self.seller)

        self.client.put(self._status_url(purchase.id), {'status': 'ACCEPTED'}, format='json')
        response = self.client.put(self._status_url(purchase.id), {'status': 'REJECTED'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('ACCEPTED', response.data['message'])
        purchase.refresh_from_db()
        self.assertEqual(purchase.status, 'ACCEPTED')

    def test_status_update_keeps_total_after_listing_price_change(self):
        purchase = self._pending_purchase()
        Listing.objects.filter(pk=self.crates.pk).update(price=Decimal('999.00'))
        self._auth(self.seller)

        response = self.client.put(self._status_url(purchase.id), {'status': 'ACCEPTED'}, format='json')

        self.assertEqual(response.data['totalPrice'], '20.00')

    def test_post_not_allowed(self):
        purchase = self._pending_purchase()
        self._auth(self.seller)
        response = self.client.post(self._status_url(purchase.id), {'status': 'ACCEPTED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
