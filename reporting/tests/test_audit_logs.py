import csv
import io
from datetime import timedelta

import pytest
from django.core.management import call_command
from django.utils import timezone

from reporting.models import AuditLog
from reporting.services.audit import log_action

pytestmark = pytest.mark.django_db


@pytest.fixture
def logs(admin, captain, other_admin, org, other_org):
    log_action(user=admin, action='CREATE', entity_type='Vessel', entity_id=1, organization_id=org.id,
               after={'name': 'A'})
    log_action(user=captain, action='UPDATE', entity_type='InspectionReport', entity_id=7, organization_id=org.id,
               before={'title': 'a'}, after={'title': 'b'})
    log_action(user=captain, action='CREATE', entity_type='InspectionReport', entity_id=7, organization_id=org.id)
    log_action(user=other_admin, action='CREATE', entity_type='Vessel', entity_id=2, organization_id=other_org.id)


def test_log_action_is_json_safe_and_hides_secrets(admin):
    log = log_action(user=admin, action='UPDATE', entity_type='User', entity_id=admin.id,
                     after={'password': 'secret', 'when': timezone.now(), 'name': 'x'})
    log.refresh_from_db()
    assert 'password' not in log.after
    assert isinstance(log.after['when'], str)
    assert log.organization_id == admin.organization_id
    assert log.entity_id == str(admin.id)


def test_org_logs_are_tenant_scoped(as_user, admin, logs):
    r = as_user(admin).get('/api/audit-logs')
    assert r.status_code == 200
    assert r.data['total'] == 3
    assert {row['organizationId'] for row in r.data['data']} == {admin.organization_id}


def test_org_log_filters_and_paging(as_user, admin, captain, logs):
    client = as_user(admin)
    r = client.get('/api/audit-logs', {'entityType': 'InspectionReport', 'take': 1})
    assert r.data['total'] == 2
    assert len(r.data['data']) == 1
    r = client.get('/api/audit-logs', {'userId': captain.id, 'action': 'UPDATE'})
    assert r.data['total'] == 1
    assert r.data['data'][0]['before'] == {'title': 'a'}

    today = timezone.now().date().isoformat()
    assert client.get('/api/audit-logs', {'startDate': today, 'endDate': today}).data['total'] == 3
    yesterday = (timezone.now() - timedelta(days=1)).date().isoformat()
    assert client.get('/api/audit-logs', {'endDate': yesterday}).data['total'] == 0
    assert client.get('/api/audit-logs', {'startDate': 'not-a-date'}).status_code == 400
    assert client.get('/api/audit-logs', {'take': -1}).status_code == 400


def test_entity_history_oldest_first(as_user, admin, logs):
    r = as_user(admin).get('/api/audit-logs/entity', {'entityType': 'InspectionReport', 'entityId': '7'})
    assert r.status_code == 200
    assert [row['action'] for row in r.data] == ['UPDATE', 'CREATE']
    assert as_user(admin).get('/api/audit-logs/entity').status_code == 400


def test_stats(as_user, admin, logs):
    r = as_user(admin).get('/api/audit-logs/stats')
    assert r.status_code == 200
    assert r.data['total'] == 3
    assert r.data['last24Hours'] == 3
    assert r.data['byAction'][0] == {'action': 'CREATE', 'count': 2}
    assert {row['entityType'] for row in r.data['byEntityType']} == {'Vessel', 'InspectionReport'}


def test_export_csv(as_user, admin, logs):
    r = as_user(admin).get('/api/audit-logs/export')
    assert r.status_code == 200
    assert r['Content-Disposition'] == 'attachment; filename="audit-logs.csv"'
    rows = list(csv.DictReader(io.StringIO(r.content.decode())))
    assert len(rows) == 3
    assert rows[0]['userEmail']


def test_captain_cannot_read_logs(as_user, captain, logs):
    assert as_user(captain).get('/api/audit-logs').status_code == 403


def test_platform_logs_require_super_admin(as_user, admin, super_admin, logs):
    assert as_user(admin).get('/api/platform/audit-logs').status_code == 403
    r = as_user(super_admin).get('/api/platform/audit-logs')
    assert r.data['total'] == 4
    assert as_user(super_admin).get('/api/platform/audit-logs/stats').data['total'] == 4
    r = as_user(super_admin).get('/api/platform/audit-logs/export')
    assert r['Content-Disposition'] == 'attachment; filename="platform-audit-logs.csv"'


def test_mutations_write_request_metadata(as_user, admin, vessel):
    client = as_user(admin)
    client.patch(f'/api/vessels/{vessel.id}', {'flag': 'Bahamas'}, format='json',
                 HTTP_USER_AGENT='pytest-agent', HTTP_X_FORWARDED_FOR='10.0.0.9, 172.16.0.1')
    log = AuditLog.objects.get(action='UPDATE')
    assert log.user_id == admin.id
    assert log.ip == '10.0.0.9'
    assert log.user_agent == 'pytest-agent'
    assert log.request_id


def test_failed_mutation_leaves_no_audit_row(as_user, admin, vessel, report):
    assert as_user(admin).delete(f'/api/vessels/{vessel.id}').status_code == 409
    assert not AuditLog.objects.filter(action='DELETE').exists()


def test_purge_command(settings, logs):
    settings.AUDIT_RETENTION_DAYS = 30
    old = AuditLog.objects.order_by('id').first()
    AuditLog.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=31))
    out = io.StringIO()
    call_command('purge_audit_logs', stdout=out)
    assert 'Deleted 1' in out.getvalue()
    assert not AuditLog.objects.filter(pk=old.pk).exists()
    assert AuditLog.objects.count() == 3
