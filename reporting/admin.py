"""
Django admin registrations for the reporting models.

Audit logs are read-only here: they may be inspected and filtered but
never added, edited or deleted through the admin.
"""

from django.contrib import admin

from .models import AuditLog, InspectionEntry, InspectionReport, Organization, User, Vessel


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'email', 'owner', 'default_form_no', 'created_at')
    search_fields = ('name', 'email', 'owner')


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'role', 'organization', 'assigned_vessel', 'is_active')
    list_filter = ('role', 'is_active', 'organization')
    search_fields = ('email', 'name')
    exclude = ('password_reset_token',)


@admin.register(Vessel)
class VesselAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'imo_number', 'flag', 'organization')
    list_filter = ('organization',)
    search_fields = ('name', 'imo_number', 'call_sign')


class InspectionEntryInline(admin.TabularInline):
    model = InspectionEntry
    extra = 0
    fields = ('sr_no', 'deficiency', 'status', 'office_sign_user', 'office_sign_date')


@admin.register(InspectionReport)
class InspectionReportAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'vessel', 'organization', 'inspected_by', 'inspection_date', 'created_at')
    list_filter = ('organization',)
    search_fields = ('title', 'inspected_by', 'vessel__name')
    inlines = [InspectionEntryInline]


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'entity_type', 'entity_id', 'user', 'organization', 'ip')
    list_filter = ('action', 'entity_type')
    search_fields = ('entity_id', 'request_id', 'user__email')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
