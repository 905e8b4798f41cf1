from assessments.services.navigation import compute_navigation, resume_index

QUESTIONS = [11, 12, 13, 14]


def test_fresh_attempt_only_opens_the_first_question():
    nav = compute_navigation(QUESTIONS, [])
    assert nav.reachable_indices == [0]
    assert nav.next_required_index == 0


def test_answering_opens_the_next_position():
    nav = compute_navigation(QUESTIONS, [11, 12])
    assert nav.reachable_indices == [0, 1, 2]
    assert nav.next_required_index == 2
    assert not nav.can_navigate_to(3)


def test_answered_question_stays_open_after_an_earlier_blank():
    # 12 was cleared after 13 had been answered
    nav = compute_navigation(QUESTIONS, [11, 13])
    assert nav.reachable_indices == [0, 1, 2, 3]
    assert nav.next_required_index == 1


def test_everything_answered_points_at_the_last_question():
    nav = compute_navigation(QUESTIONS, QUESTIONS)
    assert nav.reachable_indices == [0, 1, 2, 3]
    assert nav.next_required_index == 3


def test_empty_exam():
    nav = compute_navigation([], [])
    assert nav.reachable_indices == []
    assert nav.next_required_index == 0


def test_resume_prefers_the_last_seen_question_when_open():
    nav = compute_navigation(QUESTIONS, [11, 12])
    assert resume_index(QUESTIONS, nav, last_seen_question_id=12) == 1
    assert resume_index(QUESTIONS, nav, last_seen_question_id=14) == 2
    assert resume_index(QUESTIONS, nav, last_seen_question_id=None) == 2
    assert resume_index(QUESTIONS, nav, last_seen_question_id=99) == 2
