"""
Tests for authentication endpoints.

Endpoints tested:
- POST /api/auth/register
- POST /api/auth/login
- POST /api/auth/logout
- GET /api/auth/me
- POST /api/auth/verify-email, /api/auth/verify-mobile

Business Rules:
- Email, username and mobile number are each unique; the first conflict
  (in that order) is reported
- Tokens are accepted from the Authorization header or the auth cookie
- The password hash never leaves the server
"""
import pytest
from django.conf import settings

from apps.authz.authentication import issue_access_token
from apps.authz.models import User


def registration(**overrides):
    payload = {
        'firstName': 'Meera',
        'lastName': 'Nair',
        'username': 'meera',
        'email': 'meera@test.com',
        'password': 'secret12',
        'dateOfBirth': '2002-04-18',
        'qualification': 'B.Tech',
        'mobileNumber': '9876501234',
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
class TestRegister:
    """Test POST /api/auth/register"""

    def test_register_creates_account_and_sets_cookie(self, api_client):
        response = api_client.post('/api/auth/register', registration(), format='json')

        assert response.status_code == 201
        assert response.data['message'] == 'User registered successfully'
        assert response.data['token']
        assert response.data['user']['username'] == 'meera'
        assert response.data['user']['fullName'] == 'Meera Nair'
        assert 'password' not in response.data['user']

        cookie = response.cookies[settings.AUTH_COOKIE_NAME]
        assert cookie.value == response.data['token']
        assert cookie['httponly']

        user = User.objects.get(username='meera')
        assert user.check_password('secret12')
        assert user.mobile_number == '9876501234'
        assert str(user.date_of_birth) == '2002-04-18'

    @pytest.mark.parametrize('field,value,message', [
        ('email', 'MEERA@test.com', 'Email already registered'),
        ('username', 'meera', 'Username already taken'),
        ('mobileNumber', '9876501234', 'Mobile number already registered'),
    ])
    def test_duplicate_identity_is_rejected(self, api_client, field, value, message):
        api_client.post('/api/auth/register', registration(), format='json')
        fresh = registration(username='other', email='other@test.com', mobileNumber='9123456780')
        fresh[field] = value

        response = api_client.post('/api/auth/register', fresh, format='json')

        assert response.status_code == 400
        assert response.data['error'] == message
        assert response.data['errors'] == [{'field': field, 'message': message}]
        assert User.objects.count() == 1

    def test_email_conflict_reported_before_username(self, api_client):
        api_client.post('/api/auth/register', registration(), format='json')

        response = api_client.post('/api/auth/register', registration(mobileNumber='9123456780'), format='json')

        assert response.data['error'] == 'Email already registered'

    @pytest.mark.parametrize('field,value', [
        ('username', 'ab'),
        ('email', 'not-an-email'),
        ('password', '123'),
        ('mobileNumber', '12345'),
        ('dateOfBirth', 'yesterday'),
        ('firstName', ''),
    ])
    def test_invalid_fields(self, api_client, field, value):
        response = api_client.post('/api/auth/register', registration(**{field: value}), format='json')

        assert response.status_code == 400
        assert field in {e['field'] for e in response.data['errors']}
        assert not User.objects.exists()

    @pytest.mark.parametrize('mobile', ['+919876543210', '919876543210', '09876543210', '6123456789'])
    def test_accepted_mobile_formats(self, api_client, mobile):
        response = api_client.post('/api/auth/register', registration(mobileNumber=mobile), format='json')
        assert response.status_code == 201


@pytest.mark.django_db
class TestLogin:
    """Test POST /api/auth/login"""

    def test_login_with_username(self, api_client, user):
        response = api_client.post('/api/auth/login', {'username': user.username, 'password': 'testpass123'}, format='json')

        assert response.status_code == 200
        assert response.data['user']['id'] == str(user.id)
        assert settings.AUTH_COOKIE_NAME in response.cookies

    def test_login_with_email(self, api_client, user):
        response = api_client.post('/api/auth/login', {'username': user.email, 'password': 'testpass123'}, format='json')
        assert response.status_code == 200

    def test_wrong_password(self, api_client, user):
        response = api_client.post('/api/auth/login', {'username': user.username, 'password': 'nope'}, format='json')

        assert response.status_code == 401
        assert response.data == {'error': 'Invalid credentials'}

    def test_unknown_user_gets_same_answer(self, api_client):
        response = api_client.post('/api/auth/login', {'username': 'ghost', 'password': 'nope'}, format='json')

        assert response.status_code == 401
        assert response.data == {'error': 'Invalid credentials'}

    def test_missing_fields(self, api_client):
        response = api_client.post('/api/auth/login', {}, format='json')
        assert response.status_code == 400


@pytest.mark.django_db
class TestTokenTransport:
    """Tokens work from the Authorization header and from the cookie."""

    def test_bearer_header(self, api_client, user):
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_access_token(user)}')

        response = api_client.get('/api/auth/me')

        assert response.status_code == 200
        assert response.data['username'] == user.username
        assert 'password' not in response.data

    def test_cookie(self, api_client, user):
        api_client.cookies[settings.AUTH_COOKIE_NAME] = issue_access_token(user)

        response = api_client.get('/api/auth/me')

        assert response.status_code == 200
        assert response.data['id'] == str(user.id)

    def test_missing_token(self, api_client):
        response = api_client.get('/api/auth/me')

        assert response.status_code == 401
        assert response.data == {'error': 'Please authenticate'}

    def test_invalid_token_on_gated_endpoint(self, api_client):
        api_client.cookies[settings.AUTH_COOKIE_NAME] = 'garbage'

        response = api_client.get('/api/auth/me')

        assert response.status_code == 401
        assert response.data == {'error': 'Please authenticate'}


@pytest.mark.django_db
class TestLogoutAndVerification:

    def test_logout_clears_cookie(self, auth_client):
        response = auth_client.post('/api/auth/logout')

        assert response.status_code == 200
        assert response.cookies[settings.AUTH_COOKIE_NAME].value == ''

    def test_verify_email(self, auth_client, user):
        response = auth_client.post('/api/auth/verify-email')

        assert response.status_code == 200
        user.refresh_from_db()
        assert user.is_email_verified is True
        assert user.is_mobile_verified is False

    def test_verify_mobile(self, auth_client, user):
        auth_client.post('/api/auth/verify-mobile')

        user.refresh_from_db()
        assert user.is_mobile_verified is True

    def test_verification_requires_authentication(self, api_client):
        assert api_client.post('/api/auth/verify-email').status_code == 401


@pytest.mark.django_db
class TestEnsureSuperuser:
    """The moderation superuser is created once and never duplicated."""

    def test_creates_staff_superuser(self, monkeypatch):
        from django.core.management import call_command

        monkeypatch.setenv('DJANGO_SUPERUSER_USERNAME', 'moderator')
        monkeypatch.setenv('DJANGO_SUPERUSER_PASSWORD', 'modpass123')

        call_command('ensure_superuser')
        call_command('ensure_superuser')

        admin = User.objects.get(username='moderator')
        assert admin.is_staff and admin.is_superuser
        assert admin.check_password('modpass123')
        assert User.objects.filter(is_superuser=True).count() == 1
