import pytest
from rest_framework.test import APIClient

from reporting.models import AuditLog, User

pytestmark = pytest.mark.django_db

PASSWORD = "P@ssw0rd1"


def login(client, email, password=PASSWORD):
    return client.post('/api/auth/login', {'email': email, 'password': password}, format='json')


def test_login_returns_token_pair_and_profile(admin):
    client = APIClient()
    r = login(client, 'ADMIN@blueocean.com')
    assert r.status_code == 200
    assert r.data['access_token'] and r.data['refresh_token']
    assert r.data['user']['email'] == 'admin@blueocean.com'
    assert r.data['user']['organization']['name'] == 'Blue Ocean Lines'
    admin.refresh_from_db()
    assert admin.last_login is not None
    assert AuditLog.objects.filter(action='LOGIN', entity_id=str(admin.id)).exists()


def test_bearer_token_authenticates_requests(captain):
    client = APIClient()
    token = login(client, captain.email).data['access_token']
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    r = client.get('/api/auth/me')
    assert r.status_code == 200
    assert r.data['role'] == 'CAPTAIN'
    assert r.data['assignedVessel']['name'] == 'MV Aurora'


def test_request_without_token_is_rejected():
    r = APIClient().get('/api/auth/me')
    assert r.status_code == 401
    assert r.data['statusCode'] == 401
    assert r.data['path'] == '/api/auth/me'


def test_wrong_password_is_audited_with_reason(admin):
    r = login(APIClient(), admin.email, 'nope-nope')
    assert r.status_code == 401
    assert r.data['message'] == 'Invalid credentials'
    log = AuditLog.objects.get(action='LOGIN_FAILED')
    assert log.after['reason'] == 'Invalid password'
    assert log.user_id == admin.id


def test_unknown_email_is_audited(db):
    r = login(APIClient(), 'ghost@nowhere.com')
    assert r.status_code == 401
    log = AuditLog.objects.get(action='LOGIN_FAILED')
    assert log.entity_id == 'ghost@nowhere.com'
    assert log.after['reason'] == 'User not found'


def test_disabled_account_cannot_log_in_or_use_old_token(captain):
    client = APIClient()
    token = login(client, captain.email).data['access_token']
    captain.is_active = False
    captain.save()

    r = login(client, captain.email)
    assert r.status_code == 401
    assert r.data['message'] == 'Account is disabled'

    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    assert client.get('/api/auth/me').status_code == 401


def test_login_is_throttled(admin):
    client = APIClient()
    codes = [login(client, admin.email, 'wrong').status_code for _ in range(6)]
    assert codes[:5] == [401] * 5
    assert codes[5] == 429


def test_role_in_login_payload_is_ignored(captain):
    r = APIClient().post('/api/auth/login', {'email': captain.email, 'password': PASSWORD, 'role': 'SUPER_ADMIN'},
                         format='json')
    assert r.status_code == 200
    captain.refresh_from_db()
    assert captain.role == 'CAPTAIN'


def test_register_requires_admin_and_rejects_duplicates(as_user, admin, captain):
    payload = {'email': 'mate@blueocean.com', 'password': 'secret1', 'name': 'First Mate'}
    r = as_user(captain).post('/api/auth/register', payload, format='json')
    assert r.status_code == 403

    r = as_user(admin).post('/api/auth/register', payload, format='json')
    assert r.status_code == 201
    assert r.data['access_token']
    created = User.objects.get(email='mate@blueocean.com')
    assert created.organization_id == admin.organization_id
    assert created.role == 'CAPTAIN'

    r = as_user(admin).post('/api/auth/register', payload, format='json')
    assert r.status_code == 409
    assert r.data['error'] == 'Conflict'


def test_change_password(as_user, admin):
    client = as_user(admin)
    r = client.post('/api/auth/change-password', {'currentPassword': 'bad', 'newPassword': 'newpass1'}, format='json')
    assert r.status_code == 401
    assert AuditLog.objects.filter(action='PASSWORD_CHANGE_FAILED').count() == 1

    r = client.post('/api/auth/change-password', {'currentPassword': PASSWORD, 'newPassword': 'newpass1'},
                    format='json')
    assert r.status_code == 200
    admin.refresh_from_db()
    assert admin.check_password('newpass1')
    assert AuditLog.objects.filter(action='PASSWORD_CHANGE').count() == 1


def test_forgot_and_reset_password(monkeypatch, captain):
    sent = {}

    def fake_send(**kwargs):
        sent.update(kwargs)
        return True

    monkeypatch.setattr('reporting.services.email.send_password_reset_email', fake_send)
    client = APIClient()

    r = client.post('/api/auth/forgot-password', {'email': 'nobody@blueocean.com'}, format='json')
    unknown_message = r.data['message']
    assert r.status_code == 200
    assert not sent

    r = client.post('/api/auth/forgot-password', {'email': captain.email}, format='json')
    assert r.status_code == 200
    assert r.data['message'] == unknown_message
    token = sent['token']
    captain.refresh_from_db()
    assert captain.password_reset_token and captain.password_reset_token != token

    r = client.post('/api/auth/reset-password', {'token': token, 'newPassword': 'short'}, format='json')
    assert r.status_code == 400
    assert r.data['message'] == 'Password must be at least 8 characters'

    r = client.post('/api/auth/reset-password', {'token': token, 'newPassword': 'brand-new-pass'}, format='json')
    assert r.status_code == 200
    captain.refresh_from_db()
    assert captain.check_password('brand-new-pass')
    assert captain.password_reset_token is None

    # tokens are single use
    r = client.post('/api/auth/reset-password', {'token': token, 'newPassword': 'another-pass'}, format='json')
    assert r.status_code == 400
    assert r.data['message'] == 'Invalid or expired reset token'
    assert list(AuditLog.objects.filter(user=captain).values_list('action', flat=True).order_by('id')) == [
        'PASSWORD_RESET_REQUESTED', 'PASSWORD_RESET',
    ]


def test_refresh_and_logout_blacklists_token(admin):
    client = APIClient()
    tokens = login(client, admin.email).data
    r = client.post('/api/auth/refresh', {'refresh': tokens['refresh_token']}, format='json')
    assert r.status_code == 200
    assert r.data['access_token']

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access_token']}")
    r = client.post('/api/auth/logout', {'refresh': tokens['refresh_token']}, format='json')
    assert r.status_code == 200
    assert r.data['blacklisted'] == 1

    r = client.post('/api/auth/refresh', {'refresh': tokens['refresh_token']}, format='json')
    assert r.status_code == 401


def test_logout_without_token_blacklists_every_session(admin):
    client = APIClient()
    login(client, admin.email)
    tokens = login(client, admin.email).data
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access_token']}")
    r = client.post('/api/auth/logout', {}, format='json')
    assert r.status_code == 200
    assert r.data['blacklisted'] == 2


def test_response_carries_request_id(admin):
    r = APIClient().post('/api/auth/login', {'email': admin.email, 'password': PASSWORD}, format='json',
                         HTTP_X_REQUEST_ID='trace-123')
    assert r['X-Request-Id'] == 'trace-123'
    assert AuditLog.objects.get(action='LOGIN').request_id == 'trace-123'
