# reporting/management/commands/purge_audit_logs.py
from django.conf import settings
from django.core.management.base import BaseCommand

from reporting.services.audit import purge_older_than


class Command(BaseCommand):
    help = "Delete audit log rows older than AUDIT_RETENTION_DAYS (or --days)."

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, default=None, help="Retention in days")

    def handle(self, *args, **opts):
        days = opts["days"] if opts["days"] is not None else settings.AUDIT_RETENTION_DAYS
        if days < 1:
            self.stderr.write(self.style.ERROR("Retention must be at least one day"))
            return
        deleted = purge_older_than(days)
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} audit log rows older than {days} days."))
