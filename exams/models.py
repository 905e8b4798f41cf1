# promotion_platform/exams/models.py
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class Exam(models.Model):
    class AccessMode(models.TextChoices):
        PUBLIC = "public", "Public"
        RESTRICTED = "restricted", "Restricted to assigned users"

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        CLOSED = "closed", "Closed"

    code = models.CharField(max_length=50, unique=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    # Copied onto each attempt as a deadline when the attempt starts
    time_limit_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    # Either bound may be empty, meaning unbounded on that side
    valid_from = models.DateTimeField(null=True, blank=True)
    valid_to = models.DateTimeField(null=True, blank=True)

    access_mode = models.CharField(max_length=20, choices=AccessMode.choices, default=AccessMode.PUBLIC)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)

    assigned_users = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through='ExamAssignment',
        related_name='assigned_exams',
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(condition=models.Q(time_limit_minutes__gt=0), name='exam_time_limit_positive'),
        ]

    def clean(self):
        if self.valid_from and self.valid_to and self.valid_from > self.valid_to:
            raise ValidationError({'valid_to': "The availability window ends before it starts."})

    def is_visible_to(self, user):
        if self.access_mode == self.AccessMode.PUBLIC:
            return True
        return self.assignments.filter(user=user).exists()

    def is_ready_to_publish(self):
        """Has sub-tests that all hold questions, and tracks that all carry scoring rules."""
        subtests = list(self.subtests.all())
        if not subtests or not self.tracks.exists():
            return False
        if any(not subtest.exam_questions.exists() for subtest in subtests):
            return False
        return not self.tracks.filter(scoring_rules__isnull=True).exists()

    def ordered_questions(self):
        """Exam questions in answering order, with their sub-test resolved."""
        return (
            self.exam_questions
            .select_related('question', 'subtest')
            .order_by('order', 'id')
        )

    def __str__(self):
        return f"{self.code} - {self.title}"


class ExamAssignment(models.Model):
    """Allow-list entry for restricted exams."""
    exam = models.ForeignKey(Exam, related_name='assignments', on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='exam_assignments', on_delete=models.CASCADE)
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('exam', 'user')

    def __str__(self):
        return f"{self.user} -> {self.exam.code}"


class SubTest(models.Model):
    exam = models.ForeignKey(Exam, related_name='subtests', on_delete=models.CASCADE)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return f"{self.exam.code} / {self.name}"


class Question(models.Model):
    # Questions live in the bank and are attached to exams through ExamQuestion
    code = models.CharField(max_length=50, unique=True)
    statement = models.TextField()
    category = models.CharField(max_length=100, blank=True)

    def correct_option_ids(self):
        return {option.id for option in self.options.all() if option.is_correct}

    def __str__(self):
        return f"{self.code}: {self.statement[:50]}..."


class Option(models.Model):
    question = models.ForeignKey(Question, related_name='options', on_delete=models.CASCADE)
    content = models.TextField()
    is_correct = models.BooleanField(default=False)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.content[:50]


class ExamQuestion(models.Model):
    exam = models.ForeignKey(Exam, related_name='exam_questions', on_delete=models.CASCADE)
    question = models.ForeignKey(Question, related_name='exam_links', on_delete=models.PROTECT)
    subtest = models.ForeignKey(SubTest, related_name='exam_questions', on_delete=models.PROTECT)
    order = models.PositiveIntegerField()

    class Meta:
        ordering = ['order', 'id']
        constraints = [
            models.UniqueConstraint(fields=['exam', 'question'], name='exam_question_once'),
            models.UniqueConstraint(fields=['exam', 'order'], name='exam_question_order_unique'),
        ]

    def clean(self):
        if self.subtest_id and self.exam_id and self.subtest.exam_id != self.exam_id:
            raise ValidationError({'subtest': "The sub-test belongs to another exam."})

    def __str__(self):
        return f"{self.exam.code} #{self.order} ({self.question.code})"


class Track(models.Model):
    """An application category (postulación) teachers are evaluated against."""

    class ApprovalMode(models.TextChoices):
        JOINT = "joint", "Joint (every sub-test with a minimum must pass)"
        INDEPENDENT = "independent", "Independent (one chosen sub-test decides)"

    exam = models.ForeignKey(Exam, related_name='tracks', on_delete=models.CASCADE)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    approval_mode = models.CharField(max_length=20, choices=ApprovalMode.choices, default=ApprovalMode.JOINT)

    class Meta:
        ordering = ['id']

    @property
    def is_independent(self):
        return self.approval_mode == self.ApprovalMode.INDEPENDENT

    def __str__(self):
        return f"{self.exam.code} / {self.name}"


class ScoringRule(models.Model):
    track = models.ForeignKey(Track, related_name='scoring_rules', on_delete=models.CASCADE)
    subtest = models.ForeignKey(SubTest, related_name='scoring_rules', on_delete=models.CASCADE)

    points_correct = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    points_incorrect = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    points_blank = models.DecimalField(max_digits=8, decimal_places=2, default=0)

    # Empty means no floor: the sub-test always counts as passed
    minimum_required_score = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['track', 'subtest'], name='one_rule_per_track_subtest'),
        ]

    def clean(self):
        if self.track_id and self.subtest_id and self.track.exam_id != self.subtest.exam_id:
            raise ValidationError("Track and sub-test must belong to the same exam.")

    def __str__(self):
        return f"{self.track} :: {self.subtest.name}"
