# assessments/services/lifecycle.py
"""
Attempt lifecycle: start/resume, state reads, answer saving, submission.

Every operation that reads and then writes an attempt runs inside one
transaction holding that attempt's row lock, so calls for the same attempt
are serialized while different attempts proceed in parallel.

States::

    (none) -> in_progress -> submitted

``submitted`` is terminal. An attempt reaches it through ``finalize`` or,
once its deadline has passed, the next time anything touches it (lazy
expiry). The sweeps in ``assessments.services.sweeper`` reuse the same path.
"""
import logging

from django.core.exceptions import PermissionDenied
from django.db import IntegrityError, transaction
from django.shortcuts import get_object_or_404
from rest_framework.exceptions import ValidationError

from assessments.models import ExamAttempt
from cores.models import AuditLog
from exams.models import Exam, Option, ScoringRule, SubTest, Track

from . import answer_store, grading, timing
from .clock import system_clock
from .navigation import compute_navigation, resume_index
from .outcomes import (
    AttemptOutcome,
    AttemptView,
    NavigationCheck,
    NavigationView,
    Rejection,
    ResultView,
    SaveResult,
    SubTestResultView,
)

logger = logging.getLogger(__name__)

AUDIT_ACTIONS = {
    'finalized': 'ATTEMPT_SUBMIT',
    'expired': 'ATTEMPT_EXPIRE',
    'exam_closed': 'ATTEMPT_CLOSE',
}


def default_visibility(exam, user):
    return exam.is_visible_to(user)


class AttemptLifecycle:
    """
    Args:
        clock:      object with ``now()`` returning an aware datetime.
        visibility: ``(exam, user) -> bool`` deciding who may see a
                    restricted exam. Defaults to the exam's allow-list.
    """

    def __init__(self, clock=None, visibility=None):
        self.clock = clock or system_clock
        self.visibility = visibility or default_visibility

    # ------------------------------------------------------------------
    # Start / resume
    # ------------------------------------------------------------------

    def start_or_resume(self, exam_id, user, track_id=None, subtest_id=None):
        exam = get_object_or_404(Exam, pk=exam_id)
        now = self.clock.now()

        with transaction.atomic():
            if ExamAttempt.objects.filter(exam=exam, user=user, state=ExamAttempt.State.SUBMITTED).exists():
                return Rejection(
                    AttemptOutcome.ALREADY_COMPLETED,
                    "You have already completed this exam. Only one attempt is allowed.",
                )

            active = (
                ExamAttempt.objects.select_for_update()
                .filter(exam=exam, user=user, state=ExamAttempt.State.IN_PROGRESS)
                .first()
            )
            if active is not None:
                return self._resume(active, user, now)

            checked = self._check_can_start(exam, user, now, track_id, subtest_id)
            if isinstance(checked, Rejection):
                return checked
            track, subtest, rule = checked

            try:
                with transaction.atomic():
                    attempt = ExamAttempt.objects.create(
                        exam=exam,
                        user=user,
                        track=track,
                        selected_subtest=subtest,
                        scoring_rule=rule,
                        started_at=now,
                        ends_at=timing.compute_end_time(now, exam.time_limit_minutes),
                        state=ExamAttempt.State.IN_PROGRESS,
                    )
            except IntegrityError:
                # A concurrent request created it first
                active = (
                    ExamAttempt.objects.select_for_update()
                    .get(exam=exam, user=user, state=ExamAttempt.State.IN_PROGRESS)
                )
                return self._resume(active, user, now)

            AuditLog.record(
                'ATTEMPT_START', attempt, actor=user,
                details=f"Started {exam.code} on track '{track.name}', ends at {attempt.ends_at.isoformat()}",
            )
            logger.info("Attempt %s started: exam=%s user=%s ends_at=%s",
                        attempt.pk, exam.pk, user.pk, attempt.ends_at.isoformat())
            return self._view(attempt, now)

    def _resume(self, attempt, user, now):
        expired = self._expire_if_due(attempt, now, actor=user)
        logger.info("Attempt %s resumed by user %s (expired=%s)", attempt.pk, user.pk, expired)
        return self._view(attempt, now, expired=expired, resumed=True)

    def _check_can_start(self, exam, user, now, track_id, subtest_id):
        if exam.status == Exam.Status.DRAFT:
            return Rejection(AttemptOutcome.NOT_AVAILABLE_YET, "This exam has not been published yet.")
        if exam.status == Exam.Status.CLOSED:
            return Rejection(AttemptOutcome.EXAM_CLOSED, "This exam is closed.")

        if timing.has_not_started(now, exam.valid_from):
            return Rejection(
                AttemptOutcome.NOT_AVAILABLE_YET,
                "This exam is not available yet.",
                {'valid_from': exam.valid_from},
            )
        if timing.has_ended(now, exam.valid_to):
            return Rejection(
                AttemptOutcome.EXPIRED,
                "The availability window of this exam is over.",
                {'valid_to': exam.valid_to},
            )

        if not self.visibility(exam, user):
            return Rejection(AttemptOutcome.NOT_VISIBLE, "You are not assigned to this exam.")

        track = Track.objects.filter(pk=track_id, exam=exam).first() if track_id else None
        if track is None:
            return Rejection(AttemptOutcome.TRACK_INVALID, "Choose a track that belongs to this exam.")

        if not track.is_independent:
            return track, None, None

        if not subtest_id:
            return Rejection(AttemptOutcome.SUBTEST_REQUIRED, "This track requires choosing one sub-test.")
        subtest = SubTest.objects.filter(pk=subtest_id, exam=exam).first()
        rule = ScoringRule.objects.filter(track=track, subtest=subtest).first() if subtest else None
        if rule is None:
            return Rejection(
                AttemptOutcome.SUBTEST_REQUIRED,
                "The chosen sub-test is not part of this exam or has no scoring rule for the track.",
                {'subtest_id': subtest_id},
            )
        return track, subtest, rule

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @transaction.atomic
    def get_state(self, attempt_id, user):
        attempt = self._lock_owned(attempt_id, user)
        now = self.clock.now()
        expired = self._expire_if_due(attempt, now, actor=user)
        return self._view(attempt, now, expired=expired)

    @transaction.atomic
    def get_result(self, attempt_id, user):
        attempt = self._lock_owned(attempt_id, user)
        self._expire_if_due(attempt, self.clock.now(), actor=user)
        if attempt.is_in_progress:
            return Rejection(AttemptOutcome.ATTEMPT_NOT_ACTIVE, "This attempt has not been submitted yet.")
        return self._result_view(attempt)

    @transaction.atomic
    def get_question(self, attempt_id, user, index):
        """Returns ``(exam_question, selected_option_id)`` for an open position."""
        attempt = self._lock_owned(attempt_id, user)
        links = list(attempt.exam.ordered_questions())
        self._check_index(index, len(links))

        now = self.clock.now()
        if self._expire_if_due(attempt, now, actor=user):
            return Rejection(AttemptOutcome.EXPIRED, "The time for this exam is over.")
        if not attempt.is_in_progress:
            return Rejection(AttemptOutcome.ATTEMPT_NOT_ACTIVE, "This attempt is no longer in progress.")

        question_ids = [link.question_id for link in links]
        selections = answer_store.saved_selections(attempt.pk)
        navigation = compute_navigation(question_ids, selections.keys())
        if not navigation.can_navigate_to(index):
            return Rejection(
                AttemptOutcome.QUESTION_LOCKED,
                "Answer the questions in order. You cannot skip ahead.",
                {'next_required_index': navigation.next_required_index},
            )
        link = links[index]
        return link, selections.get(link.question_id)

    def history(self, user):
        return (
            ExamAttempt.objects
            .filter(user=user, state=ExamAttempt.State.SUBMITTED)
            .select_related('exam', 'track')
            .order_by('-submitted_at')
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @transaction.atomic
    def save_answer(self, attempt_id, user, question_id, selected_option_id=None):
        attempt = self._lock_owned(attempt_id, user)
        if not attempt.is_in_progress:
            return Rejection(
                AttemptOutcome.ATTEMPT_NOT_ACTIVE,
                "This attempt is no longer in progress.",
                {'state': attempt.state},
            )

        question_ids = self._question_ids(attempt.exam)
        if question_id not in question_ids:
            raise ValidationError({'question_id': "This question is not part of the exam."})
        if selected_option_id is not None and not Option.objects.filter(
            pk=selected_option_id, question_id=question_id,
        ).exists():
            raise ValidationError({'selected_option_id': "This option does not belong to the question."})

        now = self.clock.now()
        if self._expire_if_due(attempt, now, actor=user):
            return SaveResult(
                saved=False,
                expired=True,
                navigation=self._navigation(attempt.pk, question_ids),
                question_id=question_id,
            )

        result = answer_store.upsert_answer(attempt, question_id, selected_option_id, now)
        return SaveResult(
            saved=result.saved,
            expired=False,
            navigation=self._navigation(attempt.pk, question_ids),
            question_id=question_id,
            selected_option_id=selected_option_id,
        )

    @transaction.atomic
    def validate_navigation(self, attempt_id, user, index):
        attempt = self._lock_owned(attempt_id, user)
        question_ids = self._question_ids(attempt.exam)
        self._check_index(index, len(question_ids))

        now = self.clock.now()
        if self._expire_if_due(attempt, now, actor=user):
            return Rejection(AttemptOutcome.EXPIRED, "The time for this exam is over.")
        if not attempt.is_in_progress:
            return Rejection(AttemptOutcome.ATTEMPT_NOT_ACTIVE, "This attempt is no longer in progress.")

        navigation = self._navigation(attempt.pk, question_ids)
        allowed = index in navigation.reachable_indices
        if allowed:
            attempt.last_seen_question_id = question_ids[index]
            attempt.save(update_fields=['last_seen_question'])
        return NavigationCheck(allowed=allowed, index=index, navigation=navigation)

    @transaction.atomic
    def finalize(self, attempt_id, user):
        attempt = self._lock_owned(attempt_id, user)
        if not attempt.is_in_progress:
            return Rejection(AttemptOutcome.ALREADY_COMPLETED, "This exam has already been submitted.")

        now = self.clock.now()
        if self._expire_if_due(attempt, now, actor=user):
            # Expiry scores whatever was saved; no completeness requirement
            return self._result_view(attempt)

        question_ids = self._question_ids(attempt.exam)
        answered = answer_store.answered_question_ids(attempt.pk)
        missing = [qid for qid in question_ids if qid not in answered]
        if missing:
            return Rejection(
                AttemptOutcome.INCOMPLETE_ATTEMPT,
                "Answer every question before submitting the exam.",
                {
                    'answered': len(question_ids) - len(missing),
                    'total_questions': len(question_ids),
                    'missing_question_ids': missing,
                },
            )

        self._submit(attempt, now, ExamAttempt.SubmissionReason.FINALIZED, actor=user)
        return self._result_view(attempt)

    @transaction.atomic
    def close_attempt(self, attempt_id, reason=ExamAttempt.SubmissionReason.EXPIRED):
        """
        Submits one attempt on behalf of a sweep. Expiry closes only attempts
        past their deadline; ``exam_closed`` closes them regardless.

        Returns True when this call submitted the attempt.
        """
        attempt = get_object_or_404(ExamAttempt.objects.select_for_update(), pk=attempt_id)
        if not attempt.is_in_progress:
            return False
        now = self.clock.now()
        if reason == ExamAttempt.SubmissionReason.EXPIRED and not timing.is_expired(now, attempt.ends_at):
            return False
        self._submit(attempt, now, reason)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock_owned(self, attempt_id, user):
        attempt = get_object_or_404(ExamAttempt.objects.select_for_update(), pk=attempt_id)
        if attempt.user_id != user.pk:
            logger.warning("User %s tried to access attempt %s owned by %s", user.pk, attempt.pk, attempt.user_id)
            raise PermissionDenied("This attempt belongs to another user.")
        return attempt

    def _expire_if_due(self, attempt, now, actor=None):
        if not attempt.is_in_progress:
            return False
        if attempt.exam.status == Exam.Status.CLOSED:
            self._submit(attempt, now, ExamAttempt.SubmissionReason.EXAM_CLOSED, actor=actor)
            return True
        if timing.is_expired(now, attempt.ends_at):
            self._submit(attempt, now, ExamAttempt.SubmissionReason.EXPIRED, actor=actor)
            return True
        return False

    def _submit(self, attempt, now, reason, actor=None):
        report = grading.grade_attempt(attempt)
        # ends_at keeps the original deadline; only the state moves
        attempt.state = ExamAttempt.State.SUBMITTED
        attempt.submitted_at = now
        attempt.submission_reason = reason
        attempt.save(update_fields=['state', 'submitted_at', 'submission_reason', 'total_score', 'is_approved'])

        AuditLog.record(
            AUDIT_ACTIONS[str(reason)], attempt, actor=actor,
            details=f"Score {report.total_score}, approved={report.is_approved} ({reason})",
        )
        logger.info("Attempt %s submitted (%s): score=%s approved=%s",
                    attempt.pk, reason, report.total_score, report.is_approved)
        return report

    @staticmethod
    def _check_index(index, count):
        if index < 0 or index >= count:
            raise ValidationError({'index': f"Question index must be between 0 and {count - 1}."})

    @staticmethod
    def _question_ids(exam):
        return list(exam.ordered_questions().values_list('question_id', flat=True))

    @staticmethod
    def _navigation(attempt_id, question_ids):
        navigation = compute_navigation(question_ids, answer_store.answered_question_ids(attempt_id))
        return NavigationView(
            reachable_indices=navigation.reachable_indices,
            next_required_index=navigation.next_required_index,
        )

    def _view(self, attempt, now, expired=False, resumed=False):
        question_ids = self._question_ids(attempt.exam)
        selections = answer_store.saved_selections(attempt.pk)
        navigation = compute_navigation(question_ids, selections.keys())
        return AttemptView(
            attempt_id=attempt.pk,
            exam_id=attempt.exam_id,
            state=attempt.state,
            started_at=attempt.started_at,
            ends_at=attempt.ends_at,
            remaining_seconds=timing.remaining_seconds(now, attempt.ends_at) if attempt.is_in_progress else 0,
            last_seen_question=attempt.last_seen_question_id,
            answered_question_ids=sorted(selections),
            reachable_indices=navigation.reachable_indices,
            next_required_index=navigation.next_required_index,
            resume_index=resume_index(question_ids, navigation, attempt.last_seen_question_id),
            saved_answers=selections,
            question_ids=question_ids,
            expired=expired,
            resumed=resumed,
        )

    @staticmethod
    def _result_view(attempt):
        results = attempt.subtest_results.select_related('subtest')
        if attempt.track.is_independent and attempt.selected_subtest_id:
            results = results.filter(subtest_id=attempt.selected_subtest_id)
        return ResultView(
            attempt_id=attempt.pk,
            total_score=attempt.total_score,
            is_approved=attempt.is_approved,
            submitted_at=attempt.submitted_at,
            submission_reason=attempt.submission_reason,
            per_subtest=[
                SubTestResultView(
                    subtest_id=r.subtest_id,
                    subtest_name=r.subtest.name,
                    score_obtained=r.score_obtained,
                    minimum_required=r.minimum_required,
                    is_approved=r.is_approved,
                    correct_count=r.correct_count,
                    total_questions=r.total_questions,
                )
                for r in results
            ],
        )
