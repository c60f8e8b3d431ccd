"""
Management command to create a small demo tenant.

Running it twice leaves the database unchanged apart from resetting the
demo passwords.
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from reporting.models import Organization, User, Vessel

DEMO_PASSWORD = "Password123"


class Command(BaseCommand):
    help = "Create a demo organization with an admin, a vessel, a captain and a super admin (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default=DEMO_PASSWORD, help="Password for every demo account")

    def _user(self, email, name, role, password, **extra):
        user, created = User.objects.get_or_create(email=email, defaults={"name": name, "role": role, **extra})
        if not created:
            user.name = name
            user.role = role
            for key, value in extra.items():
                setattr(user, key, value)
        user.is_active = True
        user.set_password(password)
        user.save()
        self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role})"))
        return user

    @transaction.atomic
    def handle(self, *args, **opts):
        password = opts["password"]
        org, _ = Organization.objects.get_or_create(
            name="Demo Shipping",
            defaults={
                "email": "admin@demoshipping.com",
                "owner": "Demo Shipping Admin",
                "default_form_no": "F-INS-01",
                "footer_text": "Demo Shipping - Fleet Operations",
            },
        )
        vessel, _ = Vessel.objects.get_or_create(
            imo_number="9000001",
            defaults={"name": "MV Demo Star", "call_sign": "DEMO1", "flag": "Panama",
                      "ship_file_no": "SF-001", "organization": org},
        )

        self._user("superadmin@platform.local", "Platform Super Admin", User.ROLE_SUPER_ADMIN, password,
                   is_staff=True, is_superuser=True)
        self._user("admin@demoshipping.com", "Demo Shipping Admin", User.ROLE_ADMIN, password, organization=org)
        self._user("captain@demoshipping.com", "Demo Captain", User.ROLE_CAPTAIN, password,
                   organization=org, assigned_vessel=vessel)

        self.stdout.write(self.style.SUCCESS("Demo data ensured."))
