# assessments/services/scoring.py
"""
Scoring engine.

Pure functions over plain values: no ORM access, no persistence. Given the
answers of one attempt, the exam's question -> sub-test map and the rules of
the chosen track, computes per sub-test scores and the overall verdict.

Points are summed as Decimals and only the final figures are rounded, half
up, to two decimal places.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, FrozenSet, List, Optional, Sequence

TWO_PLACES = Decimal("0.01")

JOINT = "joint"
INDEPENDENT = "independent"


class MissingScoringRule(ValueError):
    """The sub-test an independent attempt is judged on has no scoring rule."""


@dataclass(frozen=True)
class RuleInput:
    subtest_id: int
    points_correct: Decimal
    points_incorrect: Decimal
    points_blank: Decimal
    minimum_required_score: Optional[Decimal] = None


@dataclass(frozen=True)
class QuestionInput:
    question_id: int
    subtest_id: int
    correct_option_ids: FrozenSet[int]


@dataclass(frozen=True)
class QuestionScore:
    question_id: int
    is_correct: Optional[bool]  # None when left blank
    points_awarded: Decimal


@dataclass(frozen=True)
class SubTestScore:
    subtest_id: int
    score_obtained: Decimal
    minimum_required: Optional[Decimal]
    is_approved: bool
    correct_count: int
    total_questions: int


@dataclass(frozen=True)
class ScoreReport:
    total_score: Decimal
    is_approved: bool
    subtests: List[SubTestScore] = field(default_factory=list)
    questions: List[QuestionScore] = field(default_factory=list)


def round_score(value) -> Decimal:
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def is_correct_selection(selected_option_ids, correct_option_ids) -> bool:
    """Exact set match; single-choice questions are the one-element case."""
    return set(selected_option_ids) == set(correct_option_ids)


def evaluated_subtests(approval_mode, rules: Dict[int, RuleInput], selected_subtest_id=None) -> List[int]:
    if approval_mode == INDEPENDENT:
        if selected_subtest_id is None or selected_subtest_id not in rules:
            raise MissingScoringRule("Independent approval needs a selected sub-test with a scoring rule.")
        return [selected_subtest_id]
    return list(rules)


def score_question(question: QuestionInput, rule: RuleInput, selected_option_ids) -> QuestionScore:
    if not selected_option_ids:
        return QuestionScore(question.question_id, None, rule.points_blank)
    if is_correct_selection(selected_option_ids, question.correct_option_ids):
        return QuestionScore(question.question_id, True, rule.points_correct)
    return QuestionScore(question.question_id, False, rule.points_incorrect)


def score_attempt(
    approval_mode: str,
    rules: Dict[int, RuleInput],
    questions: Sequence[QuestionInput],
    selections: Dict[int, FrozenSet[int]],
    selected_subtest_id: Optional[int] = None,
) -> ScoreReport:
    """
    Args:
        approval_mode: ``joint`` or ``independent``.
        rules:         scoring rules of the track, keyed by sub-test id.
        questions:     every question of the exam.
        selections:    {question_id: selected option ids}; missing or empty
                       means the question was left blank.
        selected_subtest_id: the sub-test chosen for independent approval.
    """
    subtest_ids = evaluated_subtests(approval_mode, rules, selected_subtest_id)

    by_subtest = defaultdict(list)
    for question in questions:
        by_subtest[question.subtest_id].append(question)

    subtest_scores = []
    question_scores = []
    raw_total = Decimal("0")
    for subtest_id in subtest_ids:
        rule = rules[subtest_id]
        score = Decimal("0")
        correct = 0
        for question in by_subtest.get(subtest_id, []):
            result = score_question(question, rule, selections.get(question.question_id))
            question_scores.append(result)
            score += result.points_awarded
            if result.is_correct:
                correct += 1

        raw_total += score
        minimum = rule.minimum_required_score
        subtest_scores.append(SubTestScore(
            subtest_id=subtest_id,
            score_obtained=round_score(score),
            minimum_required=minimum,
            is_approved=minimum is None or score >= minimum,
            correct_count=correct,
            total_questions=len(by_subtest.get(subtest_id, [])),
        ))

    if approval_mode == INDEPENDENT:
        approved = subtest_scores[0].is_approved
    else:
        # Sub-tests without a minimum never block approval
        approved = all(s.is_approved for s in subtest_scores if s.minimum_required is not None)

    return ScoreReport(
        total_score=round_score(raw_total),
        is_approved=approved,
        subtests=subtest_scores,
        questions=question_scores,
    )
