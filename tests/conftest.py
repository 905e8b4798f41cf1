from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from assessments.services.clock import FixedClock
from assessments.services.lifecycle import AttemptLifecycle
from assessments.views import AttemptAPIView
from exams.models import Exam, ExamQuestion, Option, Question, ScoringRule, SubTest, Track
from users.models import User


@pytest.fixture
def clock():
    return FixedClock(timezone.make_aware(datetime(2026, 3, 2, 9, 0, 0)))


@pytest.fixture
def lifecycle(clock):
    return AttemptLifecycle(clock=clock)


@pytest.fixture
def teacher(db):
    return User.objects.create_user(
        username='teacher1', email='teacher1@example.com', password='secret-pass', role=User.Role.TEACHER,
    )


@pytest.fixture
def other_teacher(db):
    return User.objects.create_user(
        username='teacher2', email='teacher2@example.com', password='secret-pass', role=User.Role.TEACHER,
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username='admin', email='admin@example.com', password='secret-pass',
        role=User.Role.ADMIN, is_staff=True,
    )


def add_question(exam, subtest, order):
    question = Question.objects.create(code=f"{exam.code}-Q{order}", statement=f"Question {order}")
    correct = Option.objects.create(question=question, content="Right", is_correct=True)
    wrong = Option.objects.create(question=question, content="Wrong", is_correct=False)
    ExamQuestion.objects.create(exam=exam, question=question, subtest=subtest, order=order)
    return SimpleNamespace(question=question, correct=correct, wrong=wrong)


@pytest.fixture
def exam_setup(db, clock):
    """
    Published 60 minute exam open around the clock's start time.

    Sub-test A holds questions 1-3, sub-test B questions 4-5 (answering order).
    The joint track scores A at +2 with a minimum of 4 and B at +1 without a
    minimum; the independent track gives B a minimum of 2.
    """
    now = clock.now()
    exam = Exam.objects.create(
        code='PROM-2026',
        title='Promotion 2026',
        time_limit_minutes=60,
        valid_from=now - timedelta(days=1),
        valid_to=now + timedelta(days=1),
        status=Exam.Status.PUBLISHED,
    )
    sub_a = SubTest.objects.create(exam=exam, name='Pedagogy', order=1)
    sub_b = SubTest.objects.create(exam=exam, name='Management', order=2)
    questions = [add_question(exam, sub_a, order) for order in (1, 2, 3)]
    questions += [add_question(exam, sub_b, order) for order in (4, 5)]

    joint = Track.objects.create(exam=exam, name='Level I', approval_mode=Track.ApprovalMode.JOINT)
    ScoringRule.objects.create(
        track=joint, subtest=sub_a, points_correct=Decimal('2'), minimum_required_score=Decimal('4'),
    )
    ScoringRule.objects.create(track=joint, subtest=sub_b, points_correct=Decimal('1'))

    independent = Track.objects.create(exam=exam, name='Level II', approval_mode=Track.ApprovalMode.INDEPENDENT)
    ScoringRule.objects.create(
        track=independent, subtest=sub_a, points_correct=Decimal('2'), minimum_required_score=Decimal('4'),
    )
    ScoringRule.objects.create(
        track=independent, subtest=sub_b, points_correct=Decimal('1'), minimum_required_score=Decimal('2'),
    )

    return SimpleNamespace(
        exam=exam,
        sub_a=sub_a,
        sub_b=sub_b,
        questions=questions,
        joint=joint,
        independent=independent,
    )


@pytest.fixture
def started(lifecycle, exam_setup, teacher):
    """An attempt on the joint track, started at the clock's current time."""
    return lifecycle.start_or_resume(exam_setup.exam.pk, teacher, track_id=exam_setup.joint.pk)


@pytest.fixture
def api_client(teacher, lifecycle, monkeypatch):
    monkeypatch.setattr(AttemptAPIView, 'lifecycle', lifecycle)
    client = APIClient()
    client.force_authenticate(user=teacher)
    return client
