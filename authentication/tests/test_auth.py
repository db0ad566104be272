"""Login, registration, profile and token endpoints."""
import pytest

from authentication.models import User

PASSWORD = 'testpass123'


pytestmark = pytest.mark.django_db


class TestLogin:

    def test_login_with_username_returns_tokens_and_navigation(self, api_client, waiter):
        response = api_client.post('/api/auth/login/', {'username': waiter.username, 'password': PASSWORD})

        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        assert body['data']['user']['role'] == User.ROLE_WAITER
        assert body['data']['token']
        assert body['data']['refreshToken']
        names = [entry['name'] for entry in body['data']['navigation']]
        assert 'Orders' in names
        assert 'Users' not in names

        waiter.refresh_from_db()
        assert waiter.last_login_at is not None

    def test_login_with_email(self, api_client, manager):
        response = api_client.post('/api/auth/login/', {'username': manager.email.upper(), 'password': PASSWORD})
        assert response.status_code == 200

    def test_wrong_password_is_rejected(self, api_client, waiter):
        response = api_client.post('/api/auth/login/', {'username': waiter.username, 'password': 'nope-nope'})

        assert response.status_code == 401
        assert response.json() == {'success': False, 'message': 'Invalid credentials'}

    def test_inactive_user_cannot_login(self, api_client, waiter):
        waiter.is_active = False
        waiter.save()

        response = api_client.post('/api/auth/login/', {'username': waiter.username, 'password': PASSWORD})
        assert response.status_code == 401

    def test_missing_fields_is_validation_error(self, api_client):
        response = api_client.post('/api/auth/login/', {'username': 'someone'})

        assert response.status_code == 400
        body = response.json()
        assert body['message'] == 'Validation error'
        assert any(error.startswith('password') for error in body['errors'])

    def test_access_token_authenticates_requests(self, api_client, cashier):
        login = api_client.post('/api/auth/login/', {'username': cashier.username, 'password': PASSWORD})
        token = login.json()['data']['token']

        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = api_client.get('/api/auth/profile/')

        assert response.status_code == 200
        assert response.json()['data']['user']['username'] == cashier.username


class TestRegister:

    def test_register_defaults_to_waiter(self, api_client):
        response = api_client.post('/api/auth/register/', {
            'username': 'newbie',
            'email': 'Newbie@Example.com',
            'password': 'secret123',
            'first_name': 'New',
            'last_name': 'Bie',
        })

        assert response.status_code == 201
        user = User.objects.get(username='newbie')
        assert user.role == User.ROLE_WAITER
        assert user.email == 'newbie@example.com'
        assert response.json()['data']['token']

    def test_duplicate_email_is_rejected(self, api_client, waiter):
        response = api_client.post('/api/auth/register/', {
            'username': 'other',
            'email': waiter.email,
            'password': 'secret123',
            'first_name': 'Other',
            'last_name': 'Person',
        })

        assert response.status_code == 400
        assert 'User with this email or username already exists' in response.json()['errors']

    def test_anonymous_cannot_register_admin(self, api_client):
        response = api_client.post('/api/auth/register/', {
            'username': 'sneaky',
            'email': 'sneaky@example.com',
            'password': 'secret123',
            'first_name': 'Sneaky',
            'last_name': 'Admin',
            'role': User.ROLE_ADMIN,
        })

        assert response.status_code == 403
        assert not User.objects.filter(username='sneaky').exists()

    def test_short_password_is_rejected(self, api_client):
        response = api_client.post('/api/auth/register/', {
            'username': 'shorty',
            'email': 'shorty@example.com',
            'password': '123',
            'first_name': 'Short',
            'last_name': 'Pass',
        })
        assert response.status_code == 400


class TestProfile:

    def test_profile_requires_authentication(self, api_client):
        response = api_client.get('/api/auth/profile/')

        assert response.status_code == 401
        assert response.json()['success'] is False

    def test_update_profile(self, client_for, waiter):
        response = client_for(waiter).put('/api/auth/profile/', {'first_name': 'Renamed', 'phone': '+250788123456'})

        assert response.status_code == 200
        waiter.refresh_from_db()
        assert waiter.first_name == 'Renamed'
        assert waiter.phone == '+250788123456'

    def test_profile_cannot_change_role(self, client_for, waiter):
        client_for(waiter).put('/api/auth/profile/', {'role': User.ROLE_ADMIN})

        waiter.refresh_from_db()
        assert waiter.role == User.ROLE_WAITER

    def test_change_password(self, client_for, waiter):
        response = client_for(waiter).put('/api/auth/change-password/', {
            'currentPassword': PASSWORD,
            'newPassword': 'brand-new-pass',
        })

        assert response.status_code == 200
        waiter.refresh_from_db()
        assert waiter.check_password('brand-new-pass')

    def test_change_password_checks_current(self, client_for, waiter):
        response = client_for(waiter).put('/api/auth/change-password/', {
            'currentPassword': 'wrong-password',
            'newPassword': 'brand-new-pass',
        })

        assert response.status_code == 400
        assert 'currentPassword: Current password is incorrect' in response.json()['errors']


class TestTokens:

    def test_refresh_and_logout(self, api_client, waiter):
        login = api_client.post('/api/auth/login/', {'username': waiter.username, 'password': PASSWORD}).json()
        refresh = login['data']['refreshToken']

        refreshed = api_client.post('/api/auth/refresh/', {'refresh': refresh})
        assert refreshed.status_code == 200
        assert 'access' in refreshed.json()

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {login['data']['token']}")
        logout = api_client.post('/api/auth/logout/', {'refreshToken': refresh})
        assert logout.status_code == 200

        # Blacklisted refresh tokens can no longer be used
        api_client.credentials()
        assert api_client.post('/api/auth/refresh/', {'refresh': refresh}).status_code == 401


def test_health_check_is_public(api_client):
    response = api_client.get('/api/health/')

    assert response.status_code == 200
    assert response.json()['status'] == 'healthy'
