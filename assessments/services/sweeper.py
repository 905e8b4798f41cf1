# assessments/services/sweeper.py
"""
Scheduled counterparts of lazy expiry.

Both sweeps submit attempts through ``AttemptLifecycle.close_attempt``, so a
swept attempt ends exactly as if its owner had come back after the deadline.
"""
import logging

from django.conf import settings
from django.db import transaction

from assessments.models import ExamAttempt
from cores.models import AuditLog
from exams.models import Exam

from . import timing
from .lifecycle import AttemptLifecycle

logger = logging.getLogger(__name__)


def close_expired_attempts(lifecycle=None, limit=None):
    """Submits in-progress attempts whose deadline has passed. Returns how many."""
    lifecycle = lifecycle or AttemptLifecycle()
    limit = limit or getattr(settings, 'ATTEMPT_SWEEP_BATCH_SIZE', 200)
    now = lifecycle.clock.now()

    attempt_ids = list(
        ExamAttempt.objects
        .filter(state=ExamAttempt.State.IN_PROGRESS, ends_at__lt=now)
        .order_by('ends_at')
        .values_list('pk', flat=True)[:limit]
    )

    closed = _close_each(lifecycle, attempt_ids, ExamAttempt.SubmissionReason.EXPIRED)
    if closed:
        logger.info("Expired-attempt sweep submitted %s attempt(s)", closed)
    return closed


def sync_exam_states(lifecycle=None):
    """
    Moves exams along their availability window:

    - complete draft exams whose ``valid_from`` has been reached become published;
    - published exams whose ``valid_to`` has passed become closed;
    - in-progress attempts of closed exams are submitted.

    Returns ``{'published': n, 'closed': n, 'attempts_closed': n}``.
    """
    lifecycle = lifecycle or AttemptLifecycle()
    now = lifecycle.clock.now()
    summary = {'published': 0, 'closed': 0, 'attempts_closed': 0}

    for exam in Exam.objects.filter(status=Exam.Status.DRAFT, valid_from__isnull=False):
        if timing.has_not_started(now, exam.valid_from) or timing.has_ended(now, exam.valid_to):
            continue
        if not exam.is_ready_to_publish():
            logger.info("Exam %s reached valid_from but is incomplete; left as draft", exam.code)
            continue
        with transaction.atomic():
            Exam.objects.filter(pk=exam.pk, status=Exam.Status.DRAFT).update(status=Exam.Status.PUBLISHED)
            AuditLog.record('EXAM_PUBLISH', exam, details=f"Published automatically at {now.isoformat()}")
        summary['published'] += 1
        logger.info("Exam %s published (valid_from=%s)", exam.code, exam.valid_from)

    for exam in Exam.objects.filter(status=Exam.Status.PUBLISHED, valid_to__isnull=False):
        if not timing.has_ended(now, exam.valid_to):
            continue
        with transaction.atomic():
            Exam.objects.filter(pk=exam.pk, status=Exam.Status.PUBLISHED).update(status=Exam.Status.CLOSED)
            AuditLog.record('EXAM_CLOSE', exam, details=f"Closed automatically at {now.isoformat()}")
        summary['closed'] += 1
        logger.info("Exam %s closed (valid_to=%s)", exam.code, exam.valid_to)

    open_attempts = (
        ExamAttempt.objects
        .filter(state=ExamAttempt.State.IN_PROGRESS, exam__status=Exam.Status.CLOSED)
        .values_list('pk', flat=True)
    )
    summary['attempts_closed'] = _close_each(lifecycle, list(open_attempts), ExamAttempt.SubmissionReason.EXAM_CLOSED)
    return summary


def _close_each(lifecycle, attempt_ids, reason):
    """Closes attempts one transaction at a time; a failing attempt is logged and left in progress."""
    closed = 0
    for attempt_id in attempt_ids:
        try:
            if lifecycle.close_attempt(attempt_id, reason=reason):
                closed += 1
        except Exception:
            logger.exception("Could not close attempt %s (%s); left in progress", attempt_id, reason)
    return closed
