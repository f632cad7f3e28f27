"""
Authentication API Tests

- Registration (roles, duplicate email, password validation)
- Login / logout / refresh with simplejwt
"""

import pytest
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from conftest import TEST_PASSWORD

User = get_user_model()

REGISTER_URL = '/api/v1/auth/register/'
LOGIN_URL = '/api/v1/auth/login/'
LOGOUT_URL = '/api/v1/auth/logout/'
REFRESH_URL = '/api/v1/auth/token/refresh/'


def registration_payload(**overrides):
    payload = {
        'email': 'camille.martin@example.com',
        'password': 'Tr3s-s3cure-pass',
        'first_name': 'Camille',
        'last_name': 'Martin',
        'role': 'artisan',
        'company': 'Martin Plomberie',
        'trades': ['Plomberie'],
        'arrondissements': [11, 3, 11],
    }
    payload.update(overrides)
    return payload


# ============================================================================
# REGISTRATION
# ============================================================================

@pytest.mark.django_db
class TestRegistration:

    def test_register_artisan_returns_tokens(self, api_client):
        response = api_client.post(REGISTER_URL, registration_payload())

        assert response.status_code == status.HTTP_201_CREATED
        assert set(response.data['tokens']) == {'access', 'refresh'}
        assert response.data['user']['role'] == 'artisan'

        user = User.objects.get(email='camille.martin@example.com')
        assert user.is_verified is False
        assert user.is_certified is False
        assert user.arrondissements == [3, 11]

    def test_response_uses_camel_case(self, api_client):
        response = api_client.post(REGISTER_URL, registration_payload())

        body = response.json()
        assert 'firstName' in body['user']
        assert 'completedProjects' in body['user']

    def test_accepts_camel_case_body(self, api_client):
        payload = registration_payload()
        payload['firstName'] = payload.pop('first_name')
        payload['lastName'] = payload.pop('last_name')

        response = api_client.post(REGISTER_URL, payload)

        assert response.status_code == status.HTTP_201_CREATED
        assert User.objects.get(email=payload['email']).first_name == 'Camille'

    def test_duplicate_email_is_case_insensitive(self, api_client, gestionnaire_factory):
        gestionnaire_factory(email='camille.martin@example.com')

        response = api_client.post(REGISTER_URL, registration_payload(email='Camille.Martin@Example.com'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error_code'] == 'VALIDATION_ERROR'
        assert response.data['errors'][0]['field'] == 'email'

    def test_admin_role_cannot_be_self_assigned(self, api_client):
        response = api_client.post(REGISTER_URL, registration_payload(role='admin'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not User.objects.filter(role='admin').exists()

    def test_weak_password_rejected(self, api_client):
        response = api_client.post(REGISTER_URL, registration_payload(password='123'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        fields = [error['field'] for error in response.data['errors']]
        assert 'password' in fields

    def test_unknown_trade_rejected(self, api_client):
        response = api_client.post(REGISTER_URL, registration_payload(trades=['Jardinage']))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_arrondissement_out_of_range_rejected(self, api_client):
        response = api_client.post(REGISTER_URL, registration_payload(arrondissements=[21]))

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# ============================================================================
# LOGIN / LOGOUT / REFRESH
# ============================================================================

@pytest.mark.django_db
class TestLoginFlow:

    def test_login_with_valid_credentials(self, api_client, gestionnaire):
        response = api_client.post(LOGIN_URL, {'email': gestionnaire.email, 'password': TEST_PASSWORD})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert response.data['user']['id'] == str(gestionnaire.id)

    def test_login_email_is_case_insensitive(self, api_client, gestionnaire):
        response = api_client.post(LOGIN_URL, {'email': gestionnaire.email.upper(), 'password': TEST_PASSWORD})

        assert response.status_code == status.HTTP_200_OK

    def test_login_with_invalid_password(self, api_client, gestionnaire):
        response = api_client.post(LOGIN_URL, {'email': gestionnaire.email, 'password': 'wrong'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False

    def test_inactive_user_cannot_login(self, api_client, gestionnaire_factory):
        user = gestionnaire_factory(is_active=False)

        response = api_client.post(LOGIN_URL, {'email': user.email, 'password': TEST_PASSWORD})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_blacklists_refresh_token(self, gestionnaire_client, api_client, gestionnaire):
        refresh = str(RefreshToken.for_user(gestionnaire))

        response = gestionnaire_client.post(LOGOUT_URL, {'refresh': refresh})
        assert response.status_code == status.HTTP_200_OK

        response = api_client.post(REFRESH_URL, {'refresh': refresh})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_with_garbage_token(self, gestionnaire_client):
        response = gestionnaire_client.post(LOGOUT_URL, {'refresh': 'not-a-token'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_refresh_returns_new_access(self, api_client, artisan):
        refresh = RefreshToken.for_user(artisan)

        response = api_client.post(REFRESH_URL, {'refresh': str(refresh)})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data

    def test_jwt_header_authenticates(self, api_client, artisan):
        access = RefreshToken.for_user(artisan).access_token
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')

        response = api_client.get('/api/v1/auth/me/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == artisan.email

    def test_me_requires_authentication(self, api_client):
        response = api_client.get('/api/v1/auth/me/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error_code'] == 'NOT_AUTHENTICATED'
