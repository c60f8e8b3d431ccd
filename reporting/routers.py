"""
URL mappings for the ship reporting API.

Every endpoint lives under ``/api/``.  Trailing slashes are omitted to
match the paths the SPA calls; literal segments such as ``my`` or
``me`` are registered before the ``<int:pk>`` routes they share a
prefix with.
"""
from django.urls import include, path

from .auth_views import (
    can_view,
    change_password_view,
    forgot_password_view,
    jwt_logout_view,
    jwt_refresh_view,
    login_view,
    me_view,
    register_view,
    reset_password_view,
)
from .views import audit_logs, entries, health, inspections, organizations, uploads, users, vessels

urlpatterns = [
    # Auth
    path('api/auth/login', login_view),
    path('api/auth/register', register_view),
    path('api/auth/me', me_view),
    path('api/auth/change-password', change_password_view),
    path('api/auth/refresh', jwt_refresh_view),
    path('api/auth/logout', jwt_logout_view),
    path('api/auth/forgot-password', forgot_password_view),
    path('api/auth/reset-password', reset_password_view),
    path('api/auth/can', can_view),

    # Organizations
    path('api/organization', organizations.organizations),
    path('api/organization/my', organizations.my_organization),
    path('api/organization/current', organizations.current_organization),
    path('api/organization/analytics', organizations.analytics),
    path('api/organization/<int:pk>', organizations.organization_detail),

    # Users
    path('api/users', users.users),
    path('api/users/me', users.me),
    path('api/users/captain-activity', users.captain_activity),
    path('api/users/<int:pk>', users.user_detail),
    path('api/users/<int:pk>/hard', users.user_hard_delete),

    # Vessels
    path('api/vessels', vessels.vessels),
    path('api/vessels/my-vessel', vessels.my_vessel),
    path('api/vessels/<int:pk>', vessels.vessel_detail),
    path('api/vessels/<int:pk>/assign-captain/<int:user_id>', vessels.assign_captain),
    path('api/vessels/<int:pk>/captain', vessels.remove_captain),

    # Inspection reports and their entries
    path('api/inspections', inspections.inspections),
    path('api/inspections/<int:pk>', inspections.inspection_detail),
    path('api/inspections/<int:pk>/pdf', inspections.inspection_pdf),
    path('api/inspections/<int:report_id>/entries', entries.entries),
    path('api/inspections/<int:report_id>/entries/<int:entry_id>', entries.entry_detail),

    # Audit logs
    path('api/audit-logs', audit_logs.audit_logs),
    path('api/audit-logs/entity', audit_logs.audit_entity_history),
    path('api/audit-logs/export', audit_logs.audit_export),
    path('api/audit-logs/stats', audit_logs.audit_stats),
    path('api/platform/audit-logs', audit_logs.platform_audit_logs),
    path('api/platform/audit-logs/stats', audit_logs.platform_audit_stats),
    path('api/platform/audit-logs/export', audit_logs.platform_audit_export),

    # Uploads
    path('api/upload/logo', uploads.upload_logo),
    path('api/upload/signature', uploads.upload_signature),
    path('api/upload/profile-image', uploads.upload_profile_image),
    path('api/upload/url', uploads.file_url),
    path('api/upload/status', uploads.storage_status),

    # Ops
    path('api/health', health.healthz),
    path('', include('django_prometheus.urls')),
]
