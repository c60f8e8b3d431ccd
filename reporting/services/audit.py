"""
Audit trail helpers.

``log_action`` is called by every mutating service inside the same
transaction as the change it describes, so a failed write rolls the
change back as well.  Rows are never updated or deleted by the API;
only the ``purge_audit_logs`` command removes expired rows.
"""
from __future__ import annotations

import csv
import io
import json
from datetime import datetime, time, timedelta, timezone as dt_timezone
from typing import Any, Dict, Optional

from django.core.serializers.json import DjangoJSONEncoder
from django.db.models import Count
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework.exceptions import ValidationError

from reporting.models import AuditLog

SENSITIVE_KEYS = {'password', 'passwordResetToken', 'passwordResetExpires', 'adminPassword'}
DEFAULT_TAKE = 50
MAX_TAKE = 500

CSV_COLUMNS = [
    'id', 'createdAt', 'action', 'entityType', 'entityId',
    'userId', 'userName', 'userEmail', 'organizationId', 'ip', 'requestId',
]


def _json_safe(value: Any) -> Any:
    if value is None:
        return None
    data = json.loads(json.dumps(value, cls=DjangoJSONEncoder))
    if isinstance(data, dict):
        data = {k: v for k, v in data.items() if k not in SENSITIVE_KEYS}
    return data


def _client_ip(request) -> Optional[str]:
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def log_action(*, request=None, user=None, action: str, entity_type: str, entity_id: Any = None,
               organization_id: Optional[int] = None, before: Optional[Dict[str, Any]] = None,
               after: Optional[Dict[str, Any]] = None) -> AuditLog:
    """Append one audit row.

    ``user`` defaults to the authenticated user of ``request`` and the
    organization to that user's organization.
    """
    if user is None and request is not None:
        candidate = getattr(request, 'user', None)
        if candidate is not None and candidate.is_authenticated:
            user = candidate
    if organization_id is None and user is not None:
        organization_id = user.organization_id

    ip = user_agent = request_id = None
    if request is not None:
        ip = _client_ip(request)
        user_agent = (request.META.get('HTTP_USER_AGENT') or '')[:500] or None
        request_id = getattr(request, 'request_id', None) or request.META.get('HTTP_X_REQUEST_ID')

    return AuditLog.objects.create(
        user=user,
        organization_id=organization_id,
        entity_type=entity_type,
        entity_id='' if entity_id is None else str(entity_id),
        action=action,
        before=_json_safe(before),
        after=_json_safe(after),
        ip=ip,
        user_agent=user_agent,
        request_id=request_id,
    )


# ---------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------
def _parse_when(raw: str, field: str, end: bool = False):
    when = parse_datetime(raw)
    if when is None:
        day = parse_date(raw)
        if day is None:
            raise ValidationError({field: ['Expected an ISO date or datetime']})
        when = datetime.combine(day, time.min)
        if end:
            when += timedelta(days=1)
    elif end:
        when += timedelta(microseconds=1)
    if timezone.is_naive(when):
        when = timezone.make_aware(when, dt_timezone.utc)
    return when


def _int_param(params, name: str, default: int) -> int:
    raw = params.get(name)
    if raw in (None, ''):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({name: ['Must be an integer']})
    if value < 0:
        raise ValidationError({name: ['Must not be negative']})
    return value


def filter_logs(params, organization_id: Optional[int] = None):
    """Build the audit queryset for the given query parameters.

    ``organization_id`` of ``None`` means platform-wide.
    """
    qs = AuditLog.objects.select_related('user')
    if organization_id is not None:
        qs = qs.filter(organization_id=organization_id)
    if params.get('entityType'):
        qs = qs.filter(entity_type=params['entityType'])
    if params.get('entityId'):
        qs = qs.filter(entity_id=str(params['entityId']))
    if params.get('action'):
        qs = qs.filter(action=params['action'])
    if params.get('userId'):
        qs = qs.filter(user_id=_int_param(params, 'userId', 0))
    if params.get('startDate'):
        qs = qs.filter(created_at__gte=_parse_when(params['startDate'], 'startDate'))
    if params.get('endDate'):
        # a bare date includes the whole day
        qs = qs.filter(created_at__lt=_parse_when(params['endDate'], 'endDate', end=True))
    return qs.order_by('-created_at', '-id')


def page(qs, params) -> tuple[list, int]:
    skip = _int_param(params, 'skip', 0)
    take = min(_int_param(params, 'take', DEFAULT_TAKE) or DEFAULT_TAKE, MAX_TAKE)
    total = qs.count()
    return list(qs[skip:skip + take]), total


def serialize(log: AuditLog) -> Dict[str, Any]:
    user = log.user
    return {
        'id': log.id,
        'entityType': log.entity_type,
        'entityId': log.entity_id,
        'action': log.action,
        'before': log.before,
        'after': log.after,
        'userId': log.user_id,
        'user': {'id': user.id, 'name': user.name, 'email': user.email} if user else None,
        'organizationId': log.organization_id,
        'ip': log.ip,
        'userAgent': log.user_agent,
        'requestId': log.request_id,
        'createdAt': log.created_at.isoformat() if log.created_at else None,
    }


def stats(organization_id: Optional[int] = None) -> Dict[str, Any]:
    qs = AuditLog.objects.all()
    if organization_id is not None:
        qs = qs.filter(organization_id=organization_id)
    now = timezone.now()
    by_action = qs.values('action').annotate(count=Count('id')).order_by('-count', 'action')
    by_entity = qs.values('entity_type').annotate(count=Count('id')).order_by('-count', 'entity_type')
    return {
        'total': qs.count(),
        'last24Hours': qs.filter(created_at__gte=now - timedelta(hours=24)).count(),
        'last7Days': qs.filter(created_at__gte=now - timedelta(days=7)).count(),
        'byAction': [{'action': r['action'], 'count': r['count']} for r in by_action],
        'byEntityType': [{'entityType': r['entity_type'], 'count': r['count']} for r in by_entity],
    }


def export_csv(qs) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=CSV_COLUMNS, extrasaction='ignore')
    writer.writeheader()
    for log in qs.iterator():
        user = log.user
        writer.writerow({
            'id': log.id,
            'createdAt': log.created_at.isoformat(),
            'action': log.action,
            'entityType': log.entity_type,
            'entityId': log.entity_id,
            'userId': log.user_id or '',
            'userName': user.name if user else '',
            'userEmail': user.email if user else '',
            'organizationId': log.organization_id or '',
            'ip': log.ip or '',
            'requestId': log.request_id or '',
        })
    return buf.getvalue()


def purge_older_than(days: int) -> int:
    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = AuditLog.objects.filter(created_at__lt=cutoff).delete()
    return deleted
