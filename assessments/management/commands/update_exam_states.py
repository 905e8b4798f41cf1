"""
Publish and close exams following their availability window, then submit
attempts left open on closed exams.

Run via cron (e.g. every few minutes):
  python manage.py update_exam_states
"""
from django.core.management.base import BaseCommand

from assessments.services.sweeper import sync_exam_states


class Command(BaseCommand):
    help = "Move exams between draft/published/closed by valid_from and valid_to"

    def handle(self, *args, **options):
        summary = sync_exam_states()
        self.stdout.write(self.style.SUCCESS(
            f"Published {summary['published']} exam(s), closed {summary['closed']} exam(s), "
            f"submitted {summary['attempts_closed']} attempt(s)"
        ))
