from django.urls import path
from .views import (
    AttemptHistoryView,
    AttemptNavigationView,
    AttemptQuestionView,
    AttemptResultView,
    AttemptStateView,
    FinalizeAttemptView,
    SaveAnswerView,
    StartAttemptView,
)

urlpatterns = [
    # Teacher exam flow
    path('exams/<int:exam_id>/start/', StartAttemptView.as_view(), name='attempt-start'),
    path('attempts/', AttemptHistoryView.as_view(), name='attempt-history'),
    path('attempts/<int:attempt_id>/', AttemptStateView.as_view(), name='attempt-state'),
    path('attempts/<int:attempt_id>/answers/', SaveAnswerView.as_view(), name='attempt-save-answer'),
    path('attempts/<int:attempt_id>/navigate/', AttemptNavigationView.as_view(), name='attempt-navigate'),
    path('attempts/<int:attempt_id>/questions/<int:index>/', AttemptQuestionView.as_view(), name='attempt-question'),
    path('attempts/<int:attempt_id>/finalize/', FinalizeAttemptView.as_view(), name='attempt-finalize'),
    path('attempts/<int:attempt_id>/result/', AttemptResultView.as_view(), name='attempt-result'),
]
