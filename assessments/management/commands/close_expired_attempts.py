"""
Submit in-progress attempts whose deadline has passed.

Run via cron (e.g. every minute):
  python manage.py close_expired_attempts
"""
from django.core.management.base import BaseCommand

from assessments.services.sweeper import close_expired_attempts


class Command(BaseCommand):
    help = "Submit IN_PROGRESS attempts with ends_at < now, scoring what was saved"

    def add_arguments(self, parser):
        parser.add_argument('--limit', type=int, default=None, help='Attempts per run (default ATTEMPT_SWEEP_BATCH_SIZE)')

    def handle(self, *args, **options):
        closed = close_expired_attempts(limit=options['limit'])
        self.stdout.write(self.style.SUCCESS(f"Submitted {closed} expired attempt(s)"))
