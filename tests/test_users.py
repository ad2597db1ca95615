"""
Tests for account registration, profile editing and user management.
"""

import pytest

from conftest import _login


def _register_payload(**fields):
    payload = {
        'username': 'rahmat',
        'email': 'rahmat@contoh.ac.id',
        'password': 'rahasia99',
        'confirm_password': 'rahasia99',
        'full_name': 'Rahmat Hidayat',
        'institution': 'UIN Ar-Raniry',
        'phone': '081377788899',
    }
    payload.update(fields)
    return payload


class TestRegister:
    """Tests for POST /api/auth/register."""

    def test_register_creates_requester(self, app, client):
        response = client.post('/api/auth/register', json=_register_payload())

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['username'] == 'rahmat'
        assert data['role'] == 'user'
        assert data['institution'] == 'UIN Ar-Raniry'
        assert 'password_hash' not in data

        fresh = _login(app, 'rahmat', 'rahasia99')
        me = fresh.get('/api/auth/me').get_json()['data']
        assert 'reservations.create' in me['permissions']
        assert 'users.manage' not in me['permissions']

    def test_role_cannot_be_chosen(self, client):
        response = client.post('/api/auth/register', json=_register_payload(role='admin'))

        assert response.status_code == 201
        assert response.get_json()['data']['role'] == 'user'

    def test_email_normalized(self, client):
        response = client.post('/api/auth/register',
                               json=_register_payload(email='Rahmat@Contoh.AC.ID'))

        assert response.get_json()['data']['email'] == 'rahmat@contoh.ac.id'

    def test_duplicate_username(self, client):
        response = client.post('/api/auth/register', json=_register_payload(username='demo'))

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Username sudah digunakan'

    def test_duplicate_email(self, client):
        response = client.post('/api/auth/register',
                               json=_register_payload(email='demo@libroom.local'))

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Email sudah digunakan'

    @pytest.mark.parametrize('overrides, field', [
        ({'email': 'bukan-email'}, 'email'),
        ({'phone': '021-555'}, 'phone'),
        ({'username': 'a b'}, 'username'),
        ({'password': '123', 'confirm_password': '123'}, 'password'),
        ({'confirm_password': 'lainnya99'}, 'confirm_password'),
        ({'full_name': ''}, 'full_name'),
    ])
    def test_invalid_fields(self, client, overrides, field):
        response = client.post('/api/auth/register', json=_register_payload(**overrides))

        assert response.status_code == 400
        assert field in response.get_json()['errors']

    def test_optional_fields(self, client):
        payload = _register_payload()
        del payload['institution']
        del payload['phone']

        response = client.post('/api/auth/register', json=payload)

        assert response.status_code == 201
        assert response.get_json()['data']['phone'] is None


class TestProfile:
    """Tests for PUT /api/auth/profile."""

    def test_requires_login(self, client):
        assert client.put('/api/auth/profile', json={'full_name': 'X'}).status_code == 401

    def test_update_fields(self, user_client):
        response = user_client.put('/api/auth/profile', json={
            'full_name': 'Demo Baru',
            'phone': '081399988877',
        })

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['full_name'] == 'Demo Baru'
        assert data['phone'] == '081399988877'
        # Untouched fields survive
        assert data['email'] == 'demo@libroom.local'
        assert data['institution'] == 'Universitas Syiah Kuala'

    def test_clear_optional_field(self, user_client):
        response = user_client.put('/api/auth/profile', json={'institution': ''})

        assert response.get_json()['data']['institution'] is None

    def test_email_taken_by_other_account(self, user_client):
        response = user_client.put('/api/auth/profile', json={'email': 'admin@libroom.local'})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Email sudah digunakan'

    def test_keep_own_email(self, user_client):
        response = user_client.put('/api/auth/profile', json={'email': 'demo@libroom.local'})

        assert response.status_code == 200

    def test_email_cannot_be_blank(self, user_client):
        assert user_client.put('/api/auth/profile', json={'email': ''}).status_code == 400

    def test_invalid_email(self, user_client):
        response = user_client.put('/api/auth/profile', json={'email': 'demo-at-libroom'})

        assert response.status_code == 400
        assert 'email' in response.get_json()['errors']


class TestUserManagement:
    """Tests for /api/users."""

    def test_requires_admin(self, user_client):
        assert user_client.get('/api/users').status_code == 403

    def test_list(self, admin_client):
        response = admin_client.get('/api/users')

        data = response.get_json()
        assert response.status_code == 200
        assert {u['username'] for u in data['data']} == {'admin', 'demo'}
        assert data['total'] == 2
        assert all('password_hash' not in u for u in data['data'])

    def test_list_by_role(self, admin_client):
        data = admin_client.get('/api/users?role=user').get_json()['data']

        assert [u['username'] for u in data] == ['demo']

    def test_list_bad_role(self, admin_client):
        assert admin_client.get('/api/users?role=guest').status_code == 400

    def test_detail(self, admin_client, catalog):
        response = admin_client.get(f'/api/users/{catalog["user_id"]}')

        data = response.get_json()['data']
        assert data['username'] == 'demo'
        assert 'password_hash' not in data

    def test_detail_not_found(self, admin_client):
        assert admin_client.get('/api/users/9999').status_code == 404

    def test_toggle_status(self, app, admin_client, catalog):
        url = f'/api/users/{catalog["user_id"]}/status'

        response = admin_client.patch(url)
        assert response.status_code == 200
        assert response.get_json()['data']['active'] == 0

        blocked = app.test_client().post('/api/auth/login',
                                         json={'username': 'demo', 'password': 'demo123'})
        assert blocked.status_code == 403

        response = admin_client.patch(url)
        assert response.get_json()['data']['active'] == 1
        _login(app, 'demo', 'demo123')

    def test_cannot_deactivate_self(self, admin_client, catalog):
        response = admin_client.patch(f'/api/users/{catalog["admin_id"]}/status')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Tidak dapat menonaktifkan atau menghapus akun sendiri'

    def test_delete_is_soft(self, app, admin_client, catalog, make_reservation):
        reservation = make_reservation()

        response = admin_client.delete(f'/api/users/{catalog["user_id"]}')
        assert response.status_code == 200

        user = admin_client.get(f'/api/users/{catalog["user_id"]}').get_json()['data']
        assert user['active'] == 0
        kept = admin_client.get(f'/api/reservations/{reservation["id"]}')
        assert kept.status_code == 200

        active = admin_client.get('/api/users?active_only=1').get_json()['data']
        assert [u['username'] for u in active] == ['admin']

    def test_cannot_delete_self(self, admin_client, catalog):
        assert admin_client.delete(f'/api/users/{catalog["admin_id"]}').status_code == 400

    def test_delete_not_found(self, admin_client):
        assert admin_client.delete('/api/users/9999').status_code == 404

    def test_last_active_admin_kept(self, app, catalog):
        from blueprints.users.services import can_disable_user
        from models.user import create_user

        with app.app_context():
            allowed, message = can_disable_user(catalog['admin_id'], catalog['user_id'])
            assert not allowed
            assert message == 'Tidak dapat menonaktifkan admin aktif terakhir'

            second_admin = create_user('kepala', 'kepala@libroom.local', 'kepala123',
                                       full_name='Kepala Pustaka', role='admin')
            allowed, _ = can_disable_user(catalog['admin_id'], second_admin)
            assert allowed
