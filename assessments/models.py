# assessments/models.py
from django.db import models
from django.conf import settings
from exams.models import Exam, Question, Option, ScoringRule, SubTest, Track

class ExamAttempt(models.Model):
    """Tracks one teacher's timed run through an exam."""

    class State(models.TextChoices):
        IN_PROGRESS = "in_progress", "In progress"
        SUBMITTED = "submitted", "Submitted"

    class SubmissionReason(models.TextChoices):
        FINALIZED = "finalized", "Finalized by the user"
        EXPIRED = "expired", "Time limit reached"
        EXAM_CLOSED = "exam_closed", "Exam closed"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='exam_attempts', on_delete=models.CASCADE)
    exam = models.ForeignKey(Exam, related_name='attempts', on_delete=models.CASCADE)
    track = models.ForeignKey(Track, related_name='attempts', on_delete=models.PROTECT)
    # Only set for independent-approval tracks
    selected_subtest = models.ForeignKey(SubTest, null=True, blank=True, related_name='selected_by_attempts', on_delete=models.PROTECT)
    # The chosen sub-test's rule, fixed when the attempt starts
    scoring_rule = models.ForeignKey(ScoringRule, null=True, blank=True, related_name='attempts', on_delete=models.PROTECT)

    started_at = models.DateTimeField()
    # Computed once at creation; editing the exam's time limit never moves it
    ends_at = models.DateTimeField()
    submitted_at = models.DateTimeField(null=True, blank=True)
    submission_reason = models.CharField(max_length=20, choices=SubmissionReason.choices, blank=True)

    last_seen_question = models.ForeignKey(Question, null=True, blank=True, related_name='+', on_delete=models.SET_NULL)
    state = models.CharField(max_length=20, choices=State.choices, default=State.IN_PROGRESS)

    total_score = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    is_approved = models.BooleanField(null=True)

    class Meta:
        ordering = ['-started_at']
        constraints = [
            models.UniqueConstraint(
                fields=['exam', 'user'],
                condition=models.Q(state='in_progress'),
                name='one_active_attempt_per_exam_user',
            ),
            models.UniqueConstraint(
                fields=['exam', 'user'],
                condition=models.Q(state='submitted'),
                name='one_submitted_attempt_per_exam_user',
            ),
        ]

    @property
    def is_in_progress(self):
        return self.state == self.State.IN_PROGRESS

    def __str__(self):
        return f"{self.user} - {self.exam.code} ({self.state})"

class AttemptAnswer(models.Model):
    attempt = models.ForeignKey(ExamAttempt, related_name='answers', on_delete=models.CASCADE)
    question = models.ForeignKey(Question, on_delete=models.CASCADE)

    # Null means seen but left blank
    selected_option = models.ForeignKey(Option, null=True, blank=True, on_delete=models.SET_NULL)

    # Filled in when the attempt is scored
    is_correct = models.BooleanField(null=True)
    points_awarded = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('attempt', 'question')

    def __str__(self):
        return f"{self.attempt_id}:{self.question_id} -> {self.selected_option_id}"

class SubTestResult(models.Model):
    attempt = models.ForeignKey(ExamAttempt, related_name='subtest_results', on_delete=models.CASCADE)
    subtest = models.ForeignKey(SubTest, related_name='results', on_delete=models.CASCADE)

    score_obtained = models.DecimalField(max_digits=10, decimal_places=2)
    minimum_required = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    is_approved = models.BooleanField()
    correct_count = models.PositiveIntegerField(default=0)
    total_questions = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = ('attempt', 'subtest')
        ordering = ['subtest__order', 'subtest_id']

    def __str__(self):
        return f"{self.attempt_id} / {self.subtest.name}: {self.score_obtained}"
