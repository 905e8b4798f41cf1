from decimal import Decimal

import pytest

from assessments.services.scoring import (
    MissingScoringRule,
    INDEPENDENT,
    JOINT,
    QuestionInput,
    RuleInput,
    round_score,
    score_attempt,
)

A, B = 1, 2


def questions_for(subtest_id, count, first_id):
    # Option 1 is the right answer everywhere
    return [QuestionInput(first_id + i, subtest_id, frozenset({1})) for i in range(count)]


def picks(question_specs, correct):
    """Answers the first ``correct`` questions right and the rest wrong."""
    return {
        q.question_id: frozenset({1}) if i < correct else frozenset({2})
        for i, q in enumerate(question_specs)
    }


def test_joint_mode_ignores_subtests_without_a_minimum():
    qa = questions_for(A, 10, 100)
    qb = questions_for(B, 5, 200)
    rules = {
        A: RuleInput(A, Decimal('2'), Decimal('0'), Decimal('0'), minimum_required_score=Decimal('10')),
        B: RuleInput(B, Decimal('2'), Decimal('0'), Decimal('0')),
    }
    selections = {**picks(qa, 6), **picks(qb, 0)}

    report = score_attempt(JOINT, rules, qa + qb, selections)

    by_subtest = {s.subtest_id: s for s in report.subtests}
    assert by_subtest[A].score_obtained == Decimal('12.00')
    assert by_subtest[A].is_approved
    assert by_subtest[A].correct_count == 6
    assert by_subtest[B].score_obtained == Decimal('0.00')
    assert by_subtest[B].is_approved
    assert report.is_approved
    assert report.total_score == Decimal('12.00')


def test_joint_mode_fails_when_any_minimum_is_missed():
    qa = questions_for(A, 4, 100)
    qb = questions_for(B, 4, 200)
    rules = {
        A: RuleInput(A, Decimal('1'), Decimal('0'), Decimal('0'), minimum_required_score=Decimal('2')),
        B: RuleInput(B, Decimal('1'), Decimal('0'), Decimal('0'), minimum_required_score=Decimal('3')),
    }
    report = score_attempt(JOINT, rules, qa + qb, {**picks(qa, 4), **picks(qb, 2)})
    assert not report.is_approved


def test_independent_mode_only_evaluates_the_chosen_subtest():
    qa = questions_for(A, 5, 100)
    qb = questions_for(B, 9, 200)
    rules = {
        A: RuleInput(A, Decimal('1'), Decimal('0'), Decimal('0'), minimum_required_score=Decimal('5')),
        B: RuleInput(B, Decimal('1'), Decimal('0'), Decimal('0'), minimum_required_score=Decimal('8')),
    }
    report = score_attempt(INDEPENDENT, rules, qa + qb, {**picks(qa, 0), **picks(qb, 9)}, selected_subtest_id=B)

    assert report.is_approved
    assert report.total_score == Decimal('9.00')
    assert [s.subtest_id for s in report.subtests] == [B]
    assert {q.question_id for q in report.questions} == {q.question_id for q in qb}


def test_independent_mode_requires_a_ruled_subtest():
    rules = {A: RuleInput(A, Decimal('1'), Decimal('0'), Decimal('0'))}
    with pytest.raises(MissingScoringRule):
        score_attempt(INDEPENDENT, rules, questions_for(A, 1, 100), {}, selected_subtest_id=B)


def test_partial_selection_of_a_multi_answer_question_is_incorrect():
    question = QuestionInput(7, A, frozenset({1, 3}))
    rules = {A: RuleInput(A, Decimal('2'), Decimal('-0.5'), Decimal('0'))}

    report = score_attempt(JOINT, rules, [question], {7: frozenset({1})})

    assert report.questions[0].is_correct is False
    assert report.questions[0].points_awarded == Decimal('-0.5')
    assert report.total_score == Decimal('-0.50')


def test_blank_and_missing_answers_earn_blank_points():
    qa = questions_for(A, 3, 100)
    rules = {A: RuleInput(A, Decimal('2'), Decimal('-1'), Decimal('0.25'))}
    # 100 saved blank, 101 never saved, 102 right
    report = score_attempt(JOINT, rules, qa, {100: frozenset(), 102: frozenset({1})})

    assert [q.is_correct for q in report.questions] == [None, None, True]
    assert report.total_score == Decimal('2.50')
    assert report.subtests[0].total_questions == 3


def test_zero_minimum_is_a_real_floor():
    qa = questions_for(A, 2, 100)
    rules = {A: RuleInput(A, Decimal('1'), Decimal('-1'), Decimal('0'), minimum_required_score=Decimal('0'))}
    report = score_attempt(JOINT, rules, qa, picks(qa, 0))
    assert report.total_score == Decimal('-2.00')
    assert not report.is_approved


def test_total_is_rounded_once_from_the_raw_sum():
    qa = questions_for(A, 1, 100)
    qb = questions_for(B, 1, 200)
    rules = {
        A: RuleInput(A, Decimal('0.005'), Decimal('0'), Decimal('0')),
        B: RuleInput(B, Decimal('0.005'), Decimal('0'), Decimal('0')),
    }
    report = score_attempt(JOINT, rules, qa + qb, {**picks(qa, 1), **picks(qb, 1)})
    assert [s.score_obtained for s in report.subtests] == [Decimal('0.01'), Decimal('0.01')]
    assert report.total_score == Decimal('0.01')


def test_round_score_is_half_up():
    assert round_score(Decimal('2.345')) == Decimal('2.35')
    assert round_score(Decimal('-2.345')) == Decimal('-2.35')


def test_scoring_is_deterministic():
    qa = questions_for(A, 3, 100)
    rules = {A: RuleInput(A, Decimal('1.5'), Decimal('-0.25'), Decimal('0'), minimum_required_score=Decimal('2'))}
    selections = picks(qa, 2)
    assert score_attempt(JOINT, rules, qa, selections) == score_attempt(JOINT, rules, qa, selections)
