from django.contrib import admin

from .models import (
    Exam, ExamAssignment, ExamQuestion, Option, Question, ScoringRule, SubTest, Track,
)


class SubTestInline(admin.TabularInline):
    model = SubTest
    extra = 0


class ExamQuestionInline(admin.TabularInline):
    model = ExamQuestion
    extra = 0
    autocomplete_fields = ['question']


class TrackInline(admin.TabularInline):
    model = Track
    extra = 0


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ('code', 'title', 'status', 'access_mode', 'valid_from', 'valid_to', 'time_limit_minutes')
    list_filter = ('status', 'access_mode')
    search_fields = ('code', 'title')
    inlines = [SubTestInline, TrackInline, ExamQuestionInline]


class OptionInline(admin.TabularInline):
    model = Option
    extra = 0


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ('code', 'category')
    search_fields = ('code', 'statement')
    inlines = [OptionInline]


@admin.register(ScoringRule)
class ScoringRuleAdmin(admin.ModelAdmin):
    list_display = ('track', 'subtest', 'points_correct', 'points_incorrect', 'points_blank', 'minimum_required_score')
    list_filter = ('track__exam',)


admin.site.register(ExamAssignment)
