from django.contrib import admin

from .models import AttemptAnswer, ExamAttempt, SubTestResult


class AttemptAnswerInline(admin.TabularInline):
    model = AttemptAnswer
    extra = 0
    readonly_fields = ('question', 'selected_option', 'is_correct', 'points_awarded', 'updated_at')
    can_delete = False


class SubTestResultInline(admin.TabularInline):
    model = SubTestResult
    extra = 0
    readonly_fields = (
        'subtest', 'score_obtained', 'minimum_required', 'is_approved', 'correct_count', 'total_questions',
    )
    can_delete = False


@admin.register(ExamAttempt)
class ExamAttemptAdmin(admin.ModelAdmin):
    # Attempts change only through the lifecycle service
    list_display = ('id', 'user', 'exam', 'track', 'state', 'started_at', 'ends_at', 'total_score', 'is_approved')
    list_filter = ('state', 'submission_reason', 'exam')
    search_fields = ('user__email', 'exam__code')
    readonly_fields = [f.name for f in ExamAttempt._meta.fields]
    inlines = [AttemptAnswerInline, SubTestResultInline]

    def has_add_permission(self, request):
        return False
