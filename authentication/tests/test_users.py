"""Staff account management."""
import pytest

from authentication.models import User


pytestmark = pytest.mark.django_db


class TestUserList:

    def test_manager_lists_users_with_pagination(self, client_for, manager, waiter, cashier):
        response = client_for(manager).get('/api/users/', {'limit': 2})

        assert response.status_code == 200
        data = response.json()['data']
        assert len(data['users']) == 2
        assert data['pagination'] == {'current': 1, 'pages': 2, 'total': 3, 'limit': 2}

    def test_page_past_the_end_is_empty(self, client_for, manager, waiter, cashier):
        response = client_for(manager).get('/api/users/', {'limit': 2, 'page': 5})

        assert response.status_code == 200
        data = response.json()['data']
        assert data['users'] == []
        assert data['pagination'] == {'current': 5, 'pages': 2, 'total': 3, 'limit': 2}

    def test_limit_is_capped(self, client_for, manager):
        response = client_for(manager).get('/api/users/', {'limit': 500})
        assert response.json()['data']['pagination']['limit'] == 100

    def test_filter_by_role(self, client_for, admin, waiter, cashier):
        response = client_for(admin).get('/api/users/', {'role': User.ROLE_CASHIER})

        usernames = [user['username'] for user in response.json()['data']['users']]
        assert usernames == [cashier.username]

    def test_waiter_cannot_list_users(self, client_for, waiter):
        response = client_for(waiter).get('/api/users/')

        assert response.status_code == 403
        assert response.json()['message'] == 'Admin or manager access required'

    def test_users_by_role(self, client_for, manager, waiter):
        response = client_for(manager).get(f'/api/users/role/{User.ROLE_WAITER}/')

        assert response.status_code == 200
        assert [user['id'] for user in response.json()['data']['users']] == [waiter.id]

    def test_users_by_unknown_role(self, client_for, manager):
        response = client_for(manager).get('/api/users/role/chef/')
        assert response.status_code == 400


class TestUserCreate:

    def test_create_generates_password_and_mails_it(self, client_for, manager, mailoutbox):
        response = client_for(manager).post('/api/users/', {
            'username': 'kasper',
            'email': 'kasper@example.com',
            'first_name': 'Kasper',
            'last_name': 'Ndoli',
            'role': User.ROLE_CASHIER,
        })

        assert response.status_code == 201
        user = User.objects.get(username='kasper')
        assert user.role == User.ROLE_CASHIER
        assert user.created_by == manager
        assert len(mailoutbox) == 1
        assert 'kasper' in mailoutbox[0].body

    def test_mail_failure_does_not_block_creation(self, client_for, manager, monkeypatch):
        def broken_send_mail(*args, **kwargs):
            raise ConnectionRefusedError('SMTP server unreachable')

        monkeypatch.setattr('authentication.emails.send_mail', broken_send_mail)

        response = client_for(manager).post('/api/users/', {
            'username': 'offline',
            'email': 'offline@example.com',
            'first_name': 'Off',
            'last_name': 'Line',
            'role': User.ROLE_WAITER,
        })

        assert response.status_code == 201
        assert User.objects.filter(username='offline').exists()

    def test_manager_cannot_create_admin(self, client_for, manager):
        response = client_for(manager).post('/api/users/', {
            'username': 'boss',
            'email': 'boss@example.com',
            'first_name': 'Big',
            'last_name': 'Boss',
            'role': User.ROLE_ADMIN,
        })

        assert response.status_code == 403
        assert response.json()['message'] == 'Only admin can create admin users'

    def test_admin_can_create_admin(self, client_for, admin):
        response = client_for(admin).post('/api/users/', {
            'username': 'boss',
            'email': 'boss@example.com',
            'first_name': 'Big',
            'last_name': 'Boss',
            'role': User.ROLE_ADMIN,
            'password': 'secret123',
        })
        assert response.status_code == 201


class TestUserUpdateAndDelete:

    def test_update_user(self, client_for, manager, waiter):
        response = client_for(manager).put(f'/api/users/{waiter.id}/', {'role': User.ROLE_CASHIER})

        assert response.status_code == 200
        assert response.json()['data']['user']['role'] == User.ROLE_CASHIER

    def test_manager_cannot_touch_admin(self, client_for, manager, admin):
        response = client_for(manager).put(f'/api/users/{admin.id}/', {'first_name': 'Changed'})
        assert response.status_code == 403

    def test_duplicate_email_on_update(self, client_for, manager, waiter, cashier):
        response = client_for(manager).put(f'/api/users/{waiter.id}/', {'email': cashier.email})

        assert response.status_code == 400
        assert 'email: Email is already taken' in response.json()['errors']

    def test_only_admin_deletes(self, client_for, manager, admin, waiter):
        assert client_for(manager).delete(f'/api/users/{waiter.id}/').status_code == 403
        assert client_for(admin).delete(f'/api/users/{waiter.id}/').status_code == 200
        assert not User.objects.filter(pk=waiter.pk).exists()

    def test_admin_cannot_delete_self(self, client_for, admin):
        response = client_for(admin).delete(f'/api/users/{admin.id}/')

        assert response.status_code == 400
        assert response.json()['message'] == 'Cannot delete your own account'

    def test_unknown_user_is_404(self, client_for, admin):
        response = client_for(admin).get('/api/users/99999/')

        assert response.status_code == 404
        assert response.json()['message'] == 'User not found'


class TestToggleStatus:

    def test_toggle_deactivates_and_reactivates(self, client_for, manager, waiter):
        client = client_for(manager)

        response = client.patch(f'/api/users/{waiter.id}/toggle-status/')
        assert response.json()['message'] == 'User deactivated successfully'
        waiter.refresh_from_db()
        assert waiter.is_active is False

        response = client.patch(f'/api/users/{waiter.id}/toggle-status/')
        assert response.json()['message'] == 'User activated successfully'

    def test_manager_cannot_toggle_admin(self, client_for, manager, admin):
        response = client_for(manager).patch(f'/api/users/{admin.id}/toggle-status/')

        assert response.status_code == 403
        assert response.json()['message'] == 'Only admin can change admin user status'

    def test_cannot_toggle_self(self, client_for, admin):
        response = client_for(admin).patch(f'/api/users/{admin.id}/toggle-status/')
        assert response.status_code == 400
