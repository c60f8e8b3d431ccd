"""
Role based access answers for the SPA, tenancy edge cases, the error
body shape and the operational endpoints.
"""
import io

import pytest
from django.core.management import call_command
from rest_framework.test import APIClient

from reporting.models import Organization, User, Vessel
from reporting.services.access import can

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize('role,resource,action,allowed', [
    ('CAPTAIN', 'inspections', 'list', True),
    ('CAPTAIN', 'inspections', 'create', True),
    ('CAPTAIN', 'inspections', 'delete', False),
    ('CAPTAIN', 'vessels', 'list', True),
    ('CAPTAIN', 'vessels', 'edit', False),
    ('CAPTAIN', 'users', 'list', False),
    ('ADMIN', 'users', 'list', True),
    ('ADMIN', 'vessels', 'delete', True),
    ('ADMIN', 'organizations', 'list', False),
    ('ADMIN', 'platform-audit-logs', 'list', False),
    ('SUPER_ADMIN', 'organizations', 'create', True),
    ('SUPER_ADMIN', 'users', 'list', True),
])
def test_access_matrix(role, resource, action, allowed):
    user = User(email='x@example.com', name='X', role=role)
    result = can(user, resource, action)
    assert result['can'] is allowed
    if not allowed:
        assert result['reason']


def test_can_endpoint(as_user, captain):
    r = as_user(captain).get('/api/auth/can', {'resource': 'users'})
    assert r.status_code == 200
    assert r.data == {'can': False, 'reason': 'Only admins can access user management'}
    assert as_user(captain).get('/api/auth/can').status_code == 400


def test_user_without_organization_is_rejected(as_user, db):
    stray = User.objects.create_user(email='stray@nowhere.com', password='secret1', name='Stray',
                                     role=User.ROLE_ADMIN)
    r = as_user(stray).get('/api/vessels')
    assert r.status_code == 403
    assert r.data['message'] == 'User not assigned to any organization'


def test_super_admin_context_header_scopes_queries(as_user, super_admin, org, vessel, other_vessel):
    r = as_user(super_admin, org).get('/api/vessels')
    assert [v['id'] for v in r.data] == [vessel.id]
    r = as_user(super_admin, org).get(f'/api/vessels/{other_vessel.id}')
    assert r.status_code == 404


def test_error_body_shape(as_user, admin):
    r = as_user(admin).get('/api/vessels/424242')
    assert r.status_code == 404
    assert set(r.data) == {'statusCode', 'message', 'error', 'path', 'timestamp'}
    assert r.data['error'] == 'Not Found'
    assert r.data['message'] == 'Vessel with ID 424242 not found'
    assert r.data['path'] == '/api/vessels/424242'


def test_health(db):
    r = APIClient().get('/api/health')
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}


def test_metrics_endpoint_is_exposed(db):
    r = APIClient().get('/metrics')
    assert r.status_code == 200


def test_seed_demo_is_idempotent(db):
    call_command('seed_demo', stdout=io.StringIO())
    call_command('seed_demo', stdout=io.StringIO())
    assert Organization.objects.filter(name='Demo Shipping').count() == 1
    assert Vessel.objects.filter(imo_number='9000001').count() == 1
    captain = User.objects.get(email='captain@demoshipping.com')
    assert captain.assigned_vessel.imo_number == '9000001'
    assert User.objects.get(email='superadmin@platform.local').role == 'SUPER_ADMIN'
