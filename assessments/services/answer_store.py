# assessments/services/answer_store.py
"""
Per-attempt answer persistence.

One row per (attempt, question); saving again replaces the selection.
Callers must hold the attempt row lock.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from assessments.models import AttemptAnswer

from . import timing

logger = logging.getLogger(__name__)


class UpsertStatus(str, Enum):
    SAVED = "saved"
    EXPIRED = "expired"
    NOT_ACTIVE = "not_active"


@dataclass(frozen=True)
class UpsertResult:
    status: UpsertStatus
    answer: Optional[AttemptAnswer] = None

    @property
    def saved(self):
        return self.status == UpsertStatus.SAVED


def upsert_answer(attempt, question_id, selected_option_id, now):
    if not attempt.is_in_progress:
        return UpsertResult(UpsertStatus.NOT_ACTIVE)

    if timing.is_expired(now, attempt.ends_at):
        logger.warning(
            "Dropped answer for attempt %s question %s: deadline %s passed",
            attempt.pk, question_id, attempt.ends_at.isoformat(),
        )
        return UpsertResult(UpsertStatus.EXPIRED)

    answer, _ = AttemptAnswer.objects.update_or_create(
        attempt=attempt,
        question_id=question_id,
        defaults={'selected_option_id': selected_option_id},
    )

    attempt.last_seen_question_id = question_id
    attempt.save(update_fields=['last_seen_question'])
    return UpsertResult(UpsertStatus.SAVED, answer)


def has_answer(attempt_id, question_id):
    return AttemptAnswer.objects.filter(
        attempt_id=attempt_id,
        question_id=question_id,
        selected_option__isnull=False,
    ).exists()


def answered_question_ids(attempt_id):
    return set(
        AttemptAnswer.objects
        .filter(attempt_id=attempt_id, selected_option__isnull=False)
        .values_list('question_id', flat=True)
    )


def saved_selections(attempt_id):
    """{question_id: selected_option_id} for every non-blank answer."""
    return dict(
        AttemptAnswer.objects
        .filter(attempt_id=attempt_id, selected_option__isnull=False)
        .values_list('question_id', 'selected_option_id')
    )
