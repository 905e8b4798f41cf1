import pytest

pytestmark = pytest.mark.django_db


def test_question_lists_its_correct_options(exam_setup):
    q = exam_setup.questions[0]
    assert q.question.correct_option_ids() == {q.correct.pk}


def test_exam_without_tracks_is_not_ready_to_publish(exam_setup):
    exam_setup.exam.tracks.all().delete()
    assert not exam_setup.exam.is_ready_to_publish()
