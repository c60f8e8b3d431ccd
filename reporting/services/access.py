"""
Access rules used by the admin SPA to show or hide resources and buttons.

The API enforces the same rules through its permission classes; this
module only answers "may this user do X on resource Y" so that the SPA
does not have to duplicate the role matrix.
"""
from __future__ import annotations

from typing import Dict, Optional

from reporting.permissions import ADMIN, CAPTAIN, SUPER_ADMIN

RANK = {CAPTAIN: 1, ADMIN: 2, SUPER_ADMIN: 3}

# resource -> minimum role for any action
RESOURCE_RULES = {
    'users': (ADMIN, 'Only admins can access user management'),
    'settings': (ADMIN, 'Only admins can access settings'),
    'audit-logs': (ADMIN, 'Only admins can access audit logs'),
    'organizations': (SUPER_ADMIN, 'Only super admins can manage organizations'),
    'platform-audit-logs': (SUPER_ADMIN, 'Only super admins can access platform audit logs'),
}

# (resource, action) -> minimum role, on top of the resource rule
ACTION_RULES = {
    ('vessels', 'create'): ADMIN,
    ('vessels', 'edit'): ADMIN,
    ('vessels', 'delete'): ADMIN,
    ('inspections', 'delete'): ADMIN,
    ('entries', 'delete'): ADMIN,
}


def _at_least(role: Optional[str], required: str) -> bool:
    return RANK.get(role or '', 0) >= RANK[required]


def can(user, resource: str, action: str = 'list') -> Dict[str, object]:
    if user is None or not user.is_authenticated:
        return {'can': False, 'reason': 'Not authenticated'}
    role = user.role
    rule = RESOURCE_RULES.get(resource)
    if rule and not _at_least(role, rule[0]):
        return {'can': False, 'reason': rule[1]}
    required = ACTION_RULES.get((resource, action))
    if required and not _at_least(role, required):
        return {'can': False, 'reason': f'Only admins can {action} {resource}'}
    return {'can': True}
