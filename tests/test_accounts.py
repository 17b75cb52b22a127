"""
Tests for registration, login, token refresh, logout and profile.
"""

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework import status
from rest_framework.test import APIClient

User = get_user_model()

PASSWORD = 'Str0ng-Passw0rd!'


@pytest.fixture(autouse=True)
def clear_cache(db):
    """Clear Django cache before each test to reset throttle limits."""
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def seller(db):
    return User.objects.create_user(
        username='seller1',
        email='seller@example.com',
        password=PASSWORD,
        phone_number='555-0102',
        role='seller'
    )


def registration_payload(**overrides):
    payload = {
        'username': 'buyer1',
        'email': 'Buyer@Example.com',
        'password': PASSWORD,
        'confirm_password': PASSWORD,
        'phone_number': '555-0101',
        'role': 'buyer',
    }
    payload.update(overrides)
    return payload


def login(client, email, password=PASSWORD):
    return client.post('/api/auth/login/', {'email': email, 'password': password}, format='json')


@pytest.mark.django_db
class TestRegistration:

    def test_register_buyer(self, api_client):
        response = api_client.post('/api/auth/register/', registration_payload(), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['email'] == 'buyer@example.com'
        assert response.data['role'] == 'buyer'
        assert 'password' not in response.data

        user = User.objects.get(username='buyer1')
        assert user.check_password(PASSWORD)
        assert not user.is_staff

    def test_role_defaults_to_buyer(self, api_client):
        payload = registration_payload()
        del payload['role']
        response = api_client.post('/api/auth/register/', payload, format='json')
        assert response.data['role'] == 'buyer'

    def test_register_seller(self, api_client):
        response = api_client.post(
            '/api/auth/register/', registration_payload(role='seller'), format='json'
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert User.objects.get(username='buyer1').is_seller()

    @pytest.mark.parametrize('overrides, field', [
        ({'role': 'admin'}, 'role'),
        ({'email': 'not-an-email'}, 'email'),
        ({'confirm_password': 'different'}, 'confirm_password'),
        ({'password': '123', 'confirm_password': '123'}, 'password'),
        ({'phone_number': 'call me'}, 'phone_number'),
    ])
    def test_invalid_registration(self, api_client, overrides, field):
        response = api_client.post(
            '/api/auth/register/', registration_payload(**overrides), format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert field in response.data

    def test_duplicate_email_case_insensitive(self, api_client, seller):
        response = api_client.post(
            '/api/auth/register/', registration_payload(email='SELLER@example.com'), format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'email' in response.data

    def test_staff_flags_are_ignored(self, api_client):
        response = api_client.post(
            '/api/auth/register/', registration_payload(is_staff=True, is_superuser=True), format='json'
        )
        assert response.status_code == status.HTTP_201_CREATED
        user = User.objects.get(username='buyer1')
        assert not user.is_staff
        assert not user.is_superuser


@pytest.mark.django_db
class TestLogin:

    def test_login_returns_tokens_and_user(self, api_client, seller):
        response = login(api_client, 'Seller@Example.com')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['access']
        assert response.data['refresh']
        assert response.data['user'] == {
            'id': seller.id,
            'username': 'seller1',
            'email': 'seller@example.com',
            'role': 'seller',
        }

    @pytest.mark.parametrize('email, password', [
        ('seller@example.com', 'wrong-password'),
        ('nobody@example.com', PASSWORD),
    ])
    def test_bad_credentials_are_indistinguishable(self, api_client, seller, email, password):
        response = login(api_client, email, password)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {'detail': 'Invalid credentials'}

    def test_inactive_account_cannot_login(self, api_client, seller):
        seller.is_active = False
        seller.save()
        assert login(api_client, 'seller@example.com').status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_is_rate_limited(self, api_client, seller):
        for _ in range(10):
            login(api_client, 'seller@example.com', 'wrong-password')
        response = login(api_client, 'seller@example.com')
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS


@pytest.mark.django_db
class TestTokenLifecycle:

    def test_refresh_issues_new_access_token(self, api_client, seller):
        tokens = login(api_client, 'seller@example.com').data
        response = api_client.post('/api/token/refresh/', {'refresh': tokens['refresh']}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['access']

    def test_logout_blacklists_refresh_token(self, api_client, seller):
        tokens = login(api_client, 'seller@example.com').data

        response = api_client.post('/api/auth/logout/', {'refresh': tokens['refresh']}, format='json')
        assert response.status_code == status.HTTP_200_OK

        response = api_client.post('/api/token/refresh/', {'refresh': tokens['refresh']}, format='json')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestProfile:

    def test_get_profile(self, api_client, seller):
        tokens = login(api_client, 'seller@example.com').data
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = api_client.get('/api/auth/profile/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == 'seller@example.com'
        assert response.data['role'] == 'seller'
        assert 'password' not in response.data

    def test_update_phone_but_not_role(self, api_client, seller):
        tokens = login(api_client, 'seller@example.com').data
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = api_client.patch(
            '/api/auth/profile/', {'phone_number': '+1 212 555 0199', 'role': 'buyer'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        seller.refresh_from_db()
        assert seller.phone_number == '+1 212 555 0199'
        assert seller.role == 'seller'

    def test_profile_requires_authentication(self, api_client):
        assert api_client.get('/api/auth/profile/').status_code == status.HTTP_401_UNAUTHORIZED
