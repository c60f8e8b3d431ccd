import pytest

from reporting.models import AuditLog, User, Vessel

pytestmark = pytest.mark.django_db


def test_admin_creates_vessel(as_user, admin, org):
    r = as_user(admin).post('/api/vessels', {'name': 'MV Boreas', 'imoNumber': '9876543', 'flag': 'Malta'},
                            format='json')
    assert r.status_code == 201
    assert r.data['organizationId'] == org.id
    assert r.data['captain'] is None
    assert AuditLog.objects.filter(action='CREATE', entity_type='Vessel').exists()


def test_duplicate_imo_conflicts_and_blank_imo_is_null(as_user, admin, vessel, other_vessel):
    client = as_user(admin)
    assert client.post('/api/vessels', {'name': 'Copy', 'imoNumber': vessel.imo_number},
                       format='json').status_code == 409
    # IMO numbers are unique across tenants
    assert client.post('/api/vessels', {'name': 'Copy', 'imoNumber': other_vessel.imo_number},
                       format='json').status_code == 409
    for name in ('One', 'Two'):
        r = client.post('/api/vessels', {'name': name, 'imoNumber': ''}, format='json')
        assert r.status_code == 201
        assert r.data['imoNumber'] is None


def test_captain_cannot_manage_vessels(as_user, captain, vessel):
    client = as_user(captain)
    assert client.post('/api/vessels', {'name': 'Nope'}, format='json').status_code == 403
    assert client.patch(f'/api/vessels/{vessel.id}', {'flag': 'X'}, format='json').status_code == 403
    assert client.delete(f'/api/vessels/{vessel.id}').status_code == 403


def test_captain_sees_only_assigned_vessel(as_user, org, captain, vessel):
    Vessel.objects.create(name='MV Second', organization=org)
    r = as_user(captain).get('/api/vessels')
    assert [v['id'] for v in r.data] == [vessel.id]
    assert r.data[0]['captain']['id'] == captain.id


def test_captain_without_vessel_sees_nothing(as_user, org, vessel):
    idle = User.objects.create_user(email='idle@blueocean.com', password='secret1', name='Idle', organization=org)
    assert as_user(idle).get('/api/vessels').data == []
    assert as_user(idle).get('/api/vessels/my-vessel').data is None


def test_vessel_list_is_tenant_scoped_and_sorted(as_user, admin, super_admin, org, vessel, other_vessel):
    Vessel.objects.create(name='Albatross', organization=org)
    r = as_user(admin).get('/api/vessels')
    assert [v['name'] for v in r.data] == ['Albatross', 'MV Aurora']
    assert r.data[1]['_count'] == {'inspections': 0}

    r = as_user(super_admin).get('/api/vessels')
    assert {v['name'] for v in r.data} == {'Albatross', 'MV Aurora', 'MT Sahara'}


def test_vessel_detail_access(as_user, admin, captain, vessel, other_vessel, report):
    r = as_user(admin).get(f'/api/vessels/{vessel.id}')
    assert r.status_code == 200
    assert len(r.data['inspections']) == 1
    assert as_user(admin).get(f'/api/vessels/{other_vessel.id}').status_code == 404

    second = Vessel.objects.create(name='MV Second', organization=vessel.organization)
    assert as_user(captain).get(f'/api/vessels/{second.id}').status_code == 403


def test_my_vessel(as_user, captain, vessel):
    r = as_user(captain).get('/api/vessels/my-vessel')
    assert r.status_code == 200
    assert r.data['id'] == vessel.id


def test_update_vessel_imo_uniqueness_excludes_self(as_user, admin, vessel, other_vessel):
    client = as_user(admin)
    r = client.patch(f'/api/vessels/{vessel.id}', {'imoNumber': vessel.imo_number, 'flag': 'Liberia'},
                     format='json')
    assert r.status_code == 200
    assert r.data['flag'] == 'Liberia'
    r = client.patch(f'/api/vessels/{vessel.id}', {'imoNumber': other_vessel.imo_number}, format='json')
    assert r.status_code == 409
    log = AuditLog.objects.get(action='UPDATE', entity_type='Vessel')
    assert log.before['flag'] is None
    assert log.after['flag'] == 'Liberia'


def test_delete_vessel_with_reports_conflicts(as_user, admin, vessel, report):
    assert as_user(admin).delete(f'/api/vessels/{vessel.id}').status_code == 409
    spare = Vessel.objects.create(name='Spare', organization=vessel.organization)
    assert as_user(admin).delete(f'/api/vessels/{spare.id}').status_code == 200
    assert not Vessel.objects.filter(pk=spare.id).exists()


def test_assign_captain_releases_previous(as_user, admin, org, captain, vessel):
    newcomer = User.objects.create_user(email='new@blueocean.com', password='secret1', name='Newcomer',
                                        organization=org)
    r = as_user(admin).post(f'/api/vessels/{vessel.id}/assign-captain/{newcomer.id}')
    assert r.status_code == 200
    newcomer.refresh_from_db()
    captain.refresh_from_db()
    assert newcomer.assigned_vessel_id == vessel.id
    assert captain.assigned_vessel_id is None
    log = AuditLog.objects.get(action='ASSIGN_CAPTAIN')
    assert log.before == {'captainId': captain.id}
    assert log.after['captainId'] == newcomer.id


def test_assign_captain_errors(as_user, admin, org, vessel, other_admin):
    client = as_user(admin)
    assert client.post(f'/api/vessels/{vessel.id}/assign-captain/99999').status_code == 404
    assert client.post(f'/api/vessels/{vessel.id}/assign-captain/{other_admin.id}').status_code == 403
    assert client.post(f'/api/vessels/{vessel.id}/assign-captain/{admin.id}').status_code == 400


def test_remove_captain(as_user, admin, captain, vessel):
    r = as_user(admin).delete(f'/api/vessels/{vessel.id}/captain')
    assert r.status_code == 200
    assert r.data == {'removed': True, 'captainId': captain.id}
    captain.refresh_from_db()
    assert captain.assigned_vessel_id is None
    assert AuditLog.objects.filter(action='REMOVE_CAPTAIN').count() == 1
