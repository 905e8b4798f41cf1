from django.db import models
from django.conf import settings


class AuditLog(models.Model):
    ACTION_CHOICES = [
        ('ATTEMPT_START', 'Attempt started'),
        ('ATTEMPT_SUBMIT', 'Attempt submitted'),
        ('ATTEMPT_EXPIRE', 'Attempt expired'),
        ('ATTEMPT_CLOSE', 'Attempt closed with its exam'),
        ('EXAM_PUBLISH', 'Exam published'),
        ('EXAM_CLOSE', 'Exam closed'),
    ]

    # Null for actions taken by scheduled commands
    actor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs')
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    target_model = models.CharField(max_length=50, help_text="e.g., ExamAttempt, Exam")
    target_object_id = models.CharField(max_length=100, blank=True, null=True)
    details = models.TextField(blank=True, help_text="Description of changes")
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp']

    @classmethod
    def record(cls, action, target, details='', actor=None):
        return cls.objects.create(
            actor=actor,
            action=action,
            target_model=type(target).__name__,
            target_object_id=str(target.pk),
            details=details,
        )

    def __str__(self):
        return f"{self.actor} - {self.action} - {self.timestamp}"
