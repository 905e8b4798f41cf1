from datetime import timedelta

import pytest
from rest_framework.test import APIClient

from assessments.models import ExamAttempt
from exams.models import Exam

pytestmark = pytest.mark.django_db


def start(client, exam_setup, **payload):
    payload.setdefault('track_id', exam_setup.joint.pk)
    return client.post(f'/api/exams/{exam_setup.exam.pk}/start/', payload, format='json')


def test_login_returns_tokens_and_profile(teacher):
    client = APIClient()
    response = client.post(
        '/api/auth/login/', {'email': 'teacher1@example.com', 'password': 'secret-pass'}, format='json',
    )
    assert response.status_code == 200
    assert 'access' in response.data
    assert response.data['user']['role'] == 'teacher'


def test_anonymous_requests_are_refused(exam_setup):
    response = APIClient().post(f'/api/exams/{exam_setup.exam.pk}/start/', {}, format='json')
    assert response.status_code == 401


def test_admins_do_not_take_exams(exam_setup, admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    assert start(client, exam_setup).status_code == 403


def test_exam_list_shows_visible_published_exams(api_client, exam_setup):
    Exam.objects.create(code='DRAFT', title='Draft', time_limit_minutes=10)
    Exam.objects.create(
        code='HIDDEN', title='Hidden', time_limit_minutes=10,
        status=Exam.Status.PUBLISHED, access_mode=Exam.AccessMode.RESTRICTED,
    )

    response = api_client.get('/api/exams/')

    assert response.status_code == 200
    assert [e['code'] for e in response.data] == ['PROM-2026']


def test_exam_detail_lists_tracks_without_answers(api_client, exam_setup):
    response = api_client.get(f'/api/exams/{exam_setup.exam.pk}/')

    assert response.status_code == 200
    tracks = {t['name']: t for t in response.data['tracks']}
    assert tracks['Level II']['approval_mode'] == 'independent'
    assert tracks['Level II']['subtest_ids'] == sorted([exam_setup.sub_a.pk, exam_setup.sub_b.pk])
    assert 'is_correct' not in str(response.data)


def test_start_then_resume(api_client, exam_setup):
    first = start(api_client, exam_setup)
    assert first.status_code == 201
    assert first.data['remaining_seconds'] == 3600
    assert len(first.data['questions']) == 5
    assert 'is_correct' not in first.data['questions'][0]['options'][0]

    second = start(api_client, exam_setup)
    assert second.status_code == 200
    assert second.data['resumed'] is True
    assert second.data['attempt_id'] == first.data['attempt_id']


def test_start_rejections_are_422(api_client, exam_setup):
    response = start(api_client, exam_setup, track_id=exam_setup.independent.pk)
    assert response.status_code == 422
    assert response.data['code'] == 'subtest_required'


def test_full_attempt_flow(api_client, exam_setup):
    attempt_id = start(api_client, exam_setup).data['attempt_id']

    locked = api_client.get(f'/api/attempts/{attempt_id}/questions/1/')
    assert locked.status_code == 422
    assert locked.data['code'] == 'question_locked'

    for q in exam_setup.questions:
        response = api_client.post(
            f'/api/attempts/{attempt_id}/answers/',
            {'question_id': q.question.pk, 'selected_option_id': q.correct.pk},
            format='json',
        )
        assert response.status_code == 200
        assert response.data['saved'] is True

    question = api_client.get(f'/api/attempts/{attempt_id}/questions/4/')
    assert question.status_code == 200
    assert question.data['selected_option_id'] == exam_setup.questions[4].correct.pk

    result = api_client.post(f'/api/attempts/{attempt_id}/finalize/')
    assert result.status_code == 200
    assert result.data['total_score'] == '8.00'
    assert result.data['is_approved'] is True
    assert result.data['submission_reason'] == 'finalized'

    again = api_client.post(f'/api/attempts/{attempt_id}/finalize/')
    assert again.status_code == 409
    assert again.data['code'] == 'already_completed'

    assert api_client.get(f'/api/attempts/{attempt_id}/result/').data['total_score'] == '8.00'
    history = api_client.get('/api/attempts/')
    assert [a['id'] for a in history.data] == [attempt_id]


def test_finalize_incomplete_attempt(api_client, exam_setup):
    attempt_id = start(api_client, exam_setup).data['attempt_id']
    response = api_client.post(f'/api/attempts/{attempt_id}/finalize/')
    assert response.status_code == 422
    assert response.data['code'] == 'incomplete_attempt'
    assert response.data['total_questions'] == 5


def test_navigation_endpoint(api_client, exam_setup):
    attempt_id = start(api_client, exam_setup).data['attempt_id']

    response = api_client.post(f'/api/attempts/{attempt_id}/navigate/', {'index': 1}, format='json')
    assert response.status_code == 200
    assert response.data['allowed'] is False

    out_of_range = api_client.post(f'/api/attempts/{attempt_id}/navigate/', {'index': 9}, format='json')
    assert out_of_range.status_code == 400


def test_save_after_deadline_is_soft(api_client, exam_setup, clock):
    attempt_id = start(api_client, exam_setup).data['attempt_id']
    q = exam_setup.questions[0]

    clock.advance(timedelta(minutes=61))
    response = api_client.post(
        f'/api/attempts/{attempt_id}/answers/',
        {'question_id': q.question.pk, 'selected_option_id': q.correct.pk},
        format='json',
    )

    assert response.status_code == 200
    assert response.data['saved'] is False
    assert response.data['expired'] is True


def test_bad_answer_payload_is_400(api_client, exam_setup):
    attempt_id = start(api_client, exam_setup).data['attempt_id']
    response = api_client.post(
        f'/api/attempts/{attempt_id}/answers/', {'question_id': 999999}, format='json',
    )
    assert response.status_code == 400


def test_other_teachers_attempt_is_forbidden(api_client, exam_setup, other_teacher):
    attempt_id = start(api_client, exam_setup).data['attempt_id']

    client = APIClient()
    client.force_authenticate(user=other_teacher)

    assert client.get(f'/api/attempts/{attempt_id}/').status_code == 403
    assert ExamAttempt.objects.get(pk=attempt_id).is_in_progress


def test_audit_log_is_admin_only(api_client, exam_setup, admin_user):
    attempt_id = start(api_client, exam_setup).data['attempt_id']
    assert api_client.get('/api/admin/audit-logs/').status_code == 403

    client = APIClient()
    client.force_authenticate(user=admin_user)
    response = client.get('/api/admin/audit-logs/', {'attempt_id': attempt_id})
    assert response.status_code == 200
    assert [row['action'] for row in response.data] == ['ATTEMPT_START']
