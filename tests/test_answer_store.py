from datetime import timedelta

import pytest

from assessments.models import AttemptAnswer, ExamAttempt
from assessments.services import answer_store
from assessments.services.answer_store import UpsertStatus

pytestmark = pytest.mark.django_db


def test_upsert_replaces_the_previous_selection(started, exam_setup, clock):
    attempt = ExamAttempt.objects.get(pk=started.attempt_id)
    q = exam_setup.questions[0]

    answer_store.upsert_answer(attempt, q.question.pk, q.wrong.pk, clock.now())
    result = answer_store.upsert_answer(attempt, q.question.pk, q.correct.pk, clock.now())

    assert result.saved
    assert AttemptAnswer.objects.filter(attempt=attempt).count() == 1
    assert answer_store.saved_selections(attempt.pk) == {q.question.pk: q.correct.pk}
    attempt.refresh_from_db()
    assert attempt.last_seen_question_id == q.question.pk


def test_blank_answer_is_stored_but_not_counted_as_answered(started, exam_setup, clock):
    attempt = ExamAttempt.objects.get(pk=started.attempt_id)
    q = exam_setup.questions[0]

    answer_store.upsert_answer(attempt, q.question.pk, None, clock.now())

    assert AttemptAnswer.objects.filter(attempt=attempt, question=q.question).exists()
    assert not answer_store.has_answer(attempt.pk, q.question.pk)
    assert answer_store.answered_question_ids(attempt.pk) == set()


def test_write_after_deadline_is_dropped(started, exam_setup, clock):
    attempt = ExamAttempt.objects.get(pk=started.attempt_id)
    q = exam_setup.questions[0]
    answer_store.upsert_answer(attempt, q.question.pk, q.wrong.pk, clock.now())

    late = attempt.ends_at + timedelta(seconds=1)
    result = answer_store.upsert_answer(attempt, q.question.pk, q.correct.pk, late)

    assert result.status == UpsertStatus.EXPIRED
    assert answer_store.saved_selections(attempt.pk) == {q.question.pk: q.wrong.pk}


def test_write_on_submitted_attempt_is_refused(started, exam_setup, clock):
    attempt = ExamAttempt.objects.get(pk=started.attempt_id)
    attempt.state = ExamAttempt.State.SUBMITTED
    q = exam_setup.questions[0]

    result = answer_store.upsert_answer(attempt, q.question.pk, q.correct.pk, clock.now())

    assert result.status == UpsertStatus.NOT_ACTIVE
    assert not AttemptAnswer.objects.filter(attempt=attempt).exists()
