# assessments/services/grading.py
"""Loads an attempt's scoring inputs, runs the scoring engine and stores the outcome."""
from assessments.models import AttemptAnswer, SubTestResult

from . import scoring
from .answer_store import saved_selections


def rule_input(rule, subtest_id=None):
    return scoring.RuleInput(
        subtest_id=subtest_id or rule.subtest_id,
        points_correct=rule.points_correct,
        points_incorrect=rule.points_incorrect,
        points_blank=rule.points_blank,
        minimum_required_score=rule.minimum_required_score,
    )


def build_rules(track):
    return {rule.subtest_id: rule_input(rule) for rule in track.scoring_rules.all()}


def attempt_rules(attempt):
    """Independent attempts are graded with the rule fixed at start; joint ones with the track's current rules."""
    if attempt.track.is_independent and attempt.scoring_rule_id:
        return {attempt.selected_subtest_id: rule_input(attempt.scoring_rule, attempt.selected_subtest_id)}
    return build_rules(attempt.track)


def build_questions(exam):
    links = exam.ordered_questions().prefetch_related('question__options')
    return [
        scoring.QuestionInput(
            question_id=link.question_id,
            subtest_id=link.subtest_id,
            correct_option_ids=frozenset(link.question.correct_option_ids()),
        )
        for link in links
    ]


def grade_attempt(attempt):
    """Scores the attempt and overwrites any earlier scoring rows. Caller holds the lock."""
    selections = {
        question_id: frozenset([option_id])
        for question_id, option_id in saved_selections(attempt.pk).items()
    }
    report = scoring.score_attempt(
        attempt.track.approval_mode,
        attempt_rules(attempt),
        build_questions(attempt.exam),
        selections,
        selected_subtest_id=attempt.selected_subtest_id,
    )
    store_report(attempt, report)
    return report


def store_report(attempt, report):
    by_question = {q.question_id: q for q in report.questions}

    answers = list(attempt.answers.all())
    for answer in answers:
        result = by_question.get(answer.question_id)
        answer.is_correct = result.is_correct if result else None
        answer.points_awarded = result.points_awarded if result else None
    if answers:
        AttemptAnswer.objects.bulk_update(answers, ['is_correct', 'points_awarded'])

    for subtest in report.subtests:
        SubTestResult.objects.update_or_create(
            attempt=attempt,
            subtest_id=subtest.subtest_id,
            defaults={
                'score_obtained': subtest.score_obtained,
                'minimum_required': subtest.minimum_required,
                'is_approved': subtest.is_approved,
                'correct_count': subtest.correct_count,
                'total_questions': subtest.total_questions,
            },
        )
    attempt.subtest_results.exclude(
        subtest_id__in=[s.subtest_id for s in report.subtests]
    ).delete()

    attempt.total_score = report.total_score
    attempt.is_approved = report.is_approved
