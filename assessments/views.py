from rest_framework import generics, status, views
from rest_framework.response import Response

from exams.models import Exam
from exams.serializers import ExamQuestionSerializer

from .permissions import IsActiveTeacher
from .serializers import (
    AttemptQuestionSerializer,
    AttemptStateSerializer,
    ExamAttemptSerializer,
    NavigateSerializer,
    NavigationCheckSerializer,
    ResultSerializer,
    SaveAnswerSerializer,
    SaveResultSerializer,
    StartAttemptSerializer,
)
from .services.lifecycle import AttemptLifecycle
from .services.outcomes import AttemptOutcome, Rejection


def rejection_response(rejection):
    """Business outcomes become 422, except a second attempt which is a 409."""
    if rejection.code == AttemptOutcome.ALREADY_COMPLETED:
        http_status = status.HTTP_409_CONFLICT
    else:
        http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    body = {'code': rejection.code.value, 'message': rejection.message}
    body.update(rejection.details)
    return Response(body, status=http_status)


class AttemptAPIView(views.APIView):
    permission_classes = [IsActiveTeacher]
    lifecycle = AttemptLifecycle()

    def attempt_payload(self, view):
        data = AttemptStateSerializer(view).data
        links = Exam.objects.get(pk=view.exam_id).ordered_questions().prefetch_related('question__options')
        data['questions'] = ExamQuestionSerializer(links, many=True).data
        return data


# --- TEACHER VIEWS ---

class StartAttemptView(AttemptAPIView):
    """
    Teacher starts an exam, or resumes the attempt already in progress.
    Returns the attempt state WITH questions.
    """

    def post(self, request, exam_id):
        payload = StartAttemptSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        outcome = self.lifecycle.start_or_resume(
            exam_id,
            request.user,
            track_id=payload.validated_data.get('track_id'),
            subtest_id=payload.validated_data.get('subtest_id'),
        )
        if isinstance(outcome, Rejection):
            return rejection_response(outcome)

        code = status.HTTP_200_OK if outcome.resumed else status.HTTP_201_CREATED
        return Response(self.attempt_payload(outcome), status=code)


class AttemptStateView(AttemptAPIView):
    def get(self, request, attempt_id):
        view = self.lifecycle.get_state(attempt_id, request.user)
        return Response(self.attempt_payload(view))


class SaveAnswerView(AttemptAPIView):
    """Saves (or clears) the selection for one question."""

    def post(self, request, attempt_id):
        payload = SaveAnswerSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        outcome = self.lifecycle.save_answer(
            attempt_id,
            request.user,
            payload.validated_data['question_id'],
            payload.validated_data.get('selected_option_id'),
        )
        if isinstance(outcome, Rejection):
            return rejection_response(outcome)
        return Response(SaveResultSerializer(outcome).data)


class AttemptNavigationView(AttemptAPIView):
    def post(self, request, attempt_id):
        payload = NavigateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        outcome = self.lifecycle.validate_navigation(attempt_id, request.user, payload.validated_data['index'])
        if isinstance(outcome, Rejection):
            return rejection_response(outcome)
        return Response(NavigationCheckSerializer(outcome).data)


class AttemptQuestionView(AttemptAPIView):
    def get(self, request, attempt_id, index):
        outcome = self.lifecycle.get_question(attempt_id, request.user, index)
        if isinstance(outcome, Rejection):
            return rejection_response(outcome)

        link, selected_option_id = outcome
        serializer = AttemptQuestionSerializer(
            link, context={'index': index, 'selected_option_id': selected_option_id},
        )
        return Response(serializer.data)


class FinalizeAttemptView(AttemptAPIView):
    """Teacher submits the exam. Every question must be answered."""

    def post(self, request, attempt_id):
        outcome = self.lifecycle.finalize(attempt_id, request.user)
        if isinstance(outcome, Rejection):
            return rejection_response(outcome)
        return Response(ResultSerializer(outcome).data)


class AttemptResultView(AttemptAPIView):
    def get(self, request, attempt_id):
        outcome = self.lifecycle.get_result(attempt_id, request.user)
        if isinstance(outcome, Rejection):
            return rejection_response(outcome)
        return Response(ResultSerializer(outcome).data)


class AttemptHistoryView(generics.ListAPIView):
    """List all submitted attempts of the logged-in teacher."""
    permission_classes = [IsActiveTeacher]
    serializer_class = ExamAttemptSerializer

    def get_queryset(self):
        return AttemptAPIView.lifecycle.history(self.request.user)
