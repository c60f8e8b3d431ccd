"""
Database models for the ship inspection reporting backend.

Organizations are the tenants of the platform.  Every user (except the
platform super administrators), vessel, inspection report and audit log
row hangs off an organization so that queries can be scoped to a single
tenant.  Field names follow Django conventions; the API layer converts
them to the camelCase names the admin SPA expects.
"""
from __future__ import annotations

from django.contrib.auth.base_user import BaseUserManager
from django.contrib.auth.models import AbstractUser
from django.db import models


class Organization(models.Model):
    """A shipping company using the platform."""
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=50, blank=True, null=True)
    owner = models.CharField(max_length=255, blank=True, null=True)
    logo = models.CharField(max_length=500, blank=True, null=True)
    # printed on every new report unless the report overrides it
    default_form_no = models.CharField(max_length=100, blank=True, null=True)
    footer_text = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class UserManager(BaseUserManager):
    """Manager for the email based user model."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email must be set')
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('role', User.ROLE_SUPER_ADMIN)
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Platform user identified by email.

    ``role`` drives authorization: super administrators manage the whole
    platform, administrators manage one organization and captains work
    on the single vessel they are assigned to.  Users are never removed
    by the regular API; ``is_active`` is cleared instead.
    """
    ROLE_SUPER_ADMIN = 'SUPER_ADMIN'
    ROLE_ADMIN = 'ADMIN'
    ROLE_CAPTAIN = 'CAPTAIN'
    ROLE_CHOICES = [
        (ROLE_SUPER_ADMIN, 'Super Administrator'),
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_CAPTAIN, 'Captain'),
    ]

    username = None
    first_name = None
    last_name = None

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CAPTAIN, db_index=True)
    organization = models.ForeignKey(
        Organization, null=True, blank=True, on_delete=models.SET_NULL, related_name='users'
    )
    assigned_vessel = models.OneToOneField(
        'Vessel', null=True, blank=True, on_delete=models.SET_NULL, related_name='captain'
    )
    signature_image = models.CharField(max_length=500, blank=True, null=True)
    profile_image = models.CharField(max_length=500, blank=True, null=True)
    # sha256 of the one-time token mailed to the user
    password_reset_token = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    password_reset_expires = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    objects = UserManager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"

    def get_full_name(self) -> str:
        return self.name

    def get_short_name(self) -> str:
        return self.name

    @property
    def is_super_admin(self) -> bool:
        return self.role == self.ROLE_SUPER_ADMIN

    @property
    def is_org_admin(self) -> bool:
        return self.role == self.ROLE_ADMIN

    @property
    def is_captain(self) -> bool:
        return self.role == self.ROLE_CAPTAIN


class Vessel(models.Model):
    """A ship belonging to an organization.  At most one captain is assigned."""
    name = models.CharField(max_length=255)
    imo_number = models.CharField(max_length=20, unique=True, null=True, blank=True)
    call_sign = models.CharField(max_length=50, blank=True, null=True)
    flag = models.CharField(max_length=100, blank=True, null=True)
    ship_file_no = models.CharField(max_length=100, blank=True, null=True)
    organization = models.ForeignKey(
        Organization, null=True, blank=True, on_delete=models.SET_NULL, related_name='vessels'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return f"{self.name} ({self.imo_number or '-'})"


class InspectionReport(models.Model):
    """Third party deficiency summary raised against a vessel."""
    DEFAULT_TITLE = 'THIRD PARTY DEFICIENCY SUMMARY'

    vessel = models.ForeignKey(Vessel, on_delete=models.PROTECT, related_name='reports')
    organization = models.ForeignKey(Organization, on_delete=models.PROTECT, related_name='reports')
    created_by = models.ForeignKey('User', on_delete=models.PROTECT, related_name='reports')
    title = models.CharField(max_length=255, default=DEFAULT_TITLE)
    ship_file_no = models.CharField(max_length=100, blank=True, null=True)
    office_file_no = models.CharField(max_length=100, blank=True, null=True)
    revision_no = models.CharField(max_length=50, blank=True, null=True)
    form_no = models.CharField(max_length=100, blank=True, null=True)
    applicable_fom_sections = models.CharField(max_length=255, blank=True, null=True)
    inspected_by = models.CharField(max_length=255, blank=True, null=True)
    inspection_date = models.DateField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['organization', 'created_at'], name='report_org_created_idx'),
            models.Index(fields=['vessel', 'created_at'], name='report_vessel_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.title} #{self.pk}"


class InspectionEntry(models.Model):
    """One deficiency line of a report.

    The ship staff fill in the deficiency, the cause analysis and the
    actions.  The office side (company analysis, status and sign-off) is
    reserved for administrators.
    """
    STATUS_OPEN = 'OPEN'
    STATUS_FURTHER_ACTION_NEEDED = 'FURTHER_ACTION_NEEDED'
    STATUS_CLOSED_SATISFACTORILY = 'CLOSED_SATISFACTORILY'
    STATUS_CHOICES = [
        (STATUS_OPEN, 'Open'),
        (STATUS_FURTHER_ACTION_NEEDED, 'Further action needed'),
        (STATUS_CLOSED_SATISFACTORILY, 'Closed satisfactorily'),
    ]

    report = models.ForeignKey(InspectionReport, on_delete=models.CASCADE, related_name='entries')
    sr_no = models.CharField(max_length=5)
    deficiency = models.TextField()
    masters_cause_analysis = models.TextField(blank=True, null=True)
    corrective_action = models.TextField(blank=True, null=True)
    preventive_action = models.TextField(blank=True, null=True)
    completion_date = models.DateField(blank=True, null=True)
    company_analysis = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=STATUS_OPEN, db_index=True)
    office_sign_user = models.ForeignKey(
        'User', null=True, blank=True, on_delete=models.SET_NULL, related_name='signed_entries'
    )
    office_sign_date = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sr_no', 'id']
        verbose_name_plural = 'inspection entries'

    def __str__(self) -> str:
        return f"{self.sr_no}: {self.deficiency[:40]}"


class AuditLog(models.Model):
    """Append-only record of a mutation or security relevant event."""
    user = models.ForeignKey('User', null=True, blank=True, on_delete=models.SET_NULL, related_name='audit_logs')
    organization = models.ForeignKey(
        Organization, null=True, blank=True, on_delete=models.SET_NULL, related_name='audit_logs'
    )
    entity_type = models.CharField(max_length=64)
    entity_id = models.CharField(max_length=64)
    action = models.CharField(max_length=64, db_index=True)
    before = models.JSONField(null=True, blank=True)
    after = models.JSONField(null=True, blank=True)
    ip = models.CharField(max_length=64, blank=True, null=True)
    user_agent = models.CharField(max_length=500, blank=True, null=True)
    request_id = models.CharField(max_length=64, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='audit_entity_idx'),
            models.Index(fields=['user'], name='audit_user_idx'),
            models.Index(fields=['organization'], name='audit_org_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.entity_type}#{self.entity_id}"
