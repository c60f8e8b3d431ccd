import pytest

from reporting.models import AuditLog, User

pytestmark = pytest.mark.django_db


def test_admin_creates_captain_with_vessel(as_user, admin, vessel):
    r = as_user(admin).post('/api/users', {
        'email': 'NEW.Captain@blueocean.com', 'password': 'secret1', 'name': 'New Captain',
        'assignedVesselId': vessel.id,
    }, format='json')
    assert r.status_code == 201
    assert r.data['email'] == 'new.captain@blueocean.com'
    assert r.data['role'] == 'CAPTAIN'
    assert r.data['assignedVessel']['id'] == vessel.id
    assert AuditLog.objects.filter(action='CREATE', entity_type='User', entity_id=str(r.data['id'])).exists()


def test_create_user_validation(as_user, admin, captain, other_vessel, vessel):
    client = as_user(admin)
    r = client.post('/api/users', {'email': captain.email, 'password': 'secret1', 'name': 'Dup'}, format='json')
    assert r.status_code == 409

    r = client.post('/api/users', {'email': 'x@blueocean.com', 'password': '123', 'name': 'X'}, format='json')
    assert r.status_code == 400
    assert set(r.data['details']['validationErrors']) == {'password', 'name'}

    r = client.post('/api/users', {'email': 'boss@blueocean.com', 'password': 'secret1', 'name': 'Boss',
                                   'role': 'SUPER_ADMIN'}, format='json')
    assert r.status_code == 403

    r = client.post('/api/users', {'email': 'y@blueocean.com', 'password': 'secret1', 'name': 'Yves',
                                   'assignedVesselId': other_vessel.id}, format='json')
    assert r.status_code == 403

    # the vessel already has a captain
    r = client.post('/api/users', {'email': 'z@blueocean.com', 'password': 'secret1', 'name': 'Zed',
                                   'assignedVesselId': vessel.id}, format='json')
    assert r.status_code == 409


def test_names_are_stripped_of_markup(as_user, admin):
    r = as_user(admin).post('/api/users', {
        'email': 'xss@blueocean.com', 'password': 'secret1', 'name': '<script>x</script>Jack',
    }, format='json')
    assert r.status_code == 201
    assert '<' not in r.data['name']


def test_super_admin_without_context_must_pick_organization(as_user, super_admin, org):
    payload = {'email': 'a@blueocean.com', 'password': 'secret1', 'name': 'Anna', 'role': 'ADMIN'}
    r = as_user(super_admin).post('/api/users', payload, format='json')
    assert r.status_code == 400
    r = as_user(super_admin, org).post('/api/users', payload, format='json')
    assert r.status_code == 201
    assert r.data['organizationId'] == org.id


def test_list_users_is_tenant_scoped(as_user, admin, captain, other_admin):
    r = as_user(admin).get('/api/users')
    assert r.status_code == 200
    emails = {u['email'] for u in r.data}
    assert emails == {admin.email, captain.email}

    r = as_user(admin).get('/api/users', {'role': 'CAPTAIN', 'page': 1, 'limit': 10})
    assert r.data['total'] == 1
    assert r.data['data'][0]['email'] == captain.email


def test_inactive_users_hidden_unless_requested(as_user, admin, captain):
    captain.is_active = False
    captain.save()
    client = as_user(admin)
    assert captain.email not in {u['email'] for u in client.get('/api/users').data}
    assert captain.email in {u['email'] for u in client.get('/api/users', {'includeInactive': 'true'}).data}


def test_cross_tenant_user_is_not_found(as_user, admin, other_admin):
    assert as_user(admin).get(f'/api/users/{other_admin.id}').status_code == 404
    assert as_user(admin).patch(f'/api/users/{other_admin.id}', {'name': 'Hacked'}, format='json').status_code == 404


def test_captain_updates_own_profile_only(as_user, captain, admin):
    client = as_user(captain)
    r = client.patch(f'/api/users/{captain.id}', {'name': 'Captain Hook', 'signatureImage': '/uploads/s.png'},
                     format='json')
    assert r.status_code == 200
    assert r.data['name'] == 'Captain Hook'

    assert client.patch(f'/api/users/{captain.id}', {'role': 'ADMIN'}, format='json').status_code == 403
    assert client.patch(f'/api/users/{admin.id}', {'name': 'x y'}, format='json').status_code == 403
    assert client.get(f'/api/users/{captain.id}').status_code == 200
    assert client.get(f'/api/users/{admin.id}').status_code == 403
    assert client.get('/api/users').status_code == 403


def test_update_user_email_conflict_and_password(as_user, admin, captain):
    client = as_user(admin)
    r = client.patch(f'/api/users/{captain.id}', {'email': admin.email}, format='json')
    assert r.status_code == 409
    r = client.patch(f'/api/users/{captain.id}', {'password': 'changed1'}, format='json')
    assert r.status_code == 200
    captain.refresh_from_db()
    assert captain.check_password('changed1')
    log = AuditLog.objects.get(action='UPDATE', entity_type='User')
    assert log.after['passwordChanged'] is True
    assert 'password' not in log.after


def test_admin_cannot_change_own_role(as_user, admin):
    r = as_user(admin).patch(f'/api/users/{admin.id}', {'role': 'CAPTAIN'}, format='json')
    assert r.status_code == 400


def test_soft_delete(as_user, admin, captain):
    assert as_user(admin).delete(f'/api/users/{admin.id}').status_code == 400
    r = as_user(admin).delete(f'/api/users/{captain.id}')
    assert r.status_code == 200
    assert r.data == {'deleted': True, 'id': captain.id}
    captain.refresh_from_db()
    assert captain.is_active is False
    assert AuditLog.objects.filter(action='DELETE', entity_type='User').count() == 1


def test_hard_delete(as_user, admin, captain, report):
    assert as_user(admin).delete(f'/api/users/{captain.id}/hard').status_code == 409
    spare = User.objects.create_user(email='spare@blueocean.com', password='secret1', name='Spare',
                                     organization=admin.organization)
    r = as_user(admin).delete(f'/api/users/{spare.id}/hard')
    assert r.status_code == 200
    assert not User.objects.filter(pk=spare.id).exists()
    assert AuditLog.objects.filter(action='HARD_DELETE', entity_id=str(spare.id)).exists()


def test_captain_activity(as_user, admin, captain, report):
    r = as_user(admin).get('/api/users/captain-activity')
    assert r.status_code == 200
    row = r.data[0]
    assert row['id'] == captain.id
    assert row['reportCount'] == 1
    assert row['vessel']['name'] == 'MV Aurora'
    assert row['lastReportDate'] is not None


def test_users_me(as_user, captain):
    r = as_user(captain).get('/api/users/me')
    assert r.status_code == 200
    assert r.data['organization']['name'] == 'Blue Ocean Lines'
