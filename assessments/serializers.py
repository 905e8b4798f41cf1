from rest_framework import serializers
from .models import ExamAttempt
from exams.serializers import ExamListSerializer, ExamQuestionSerializer

# --- Request payloads ---

class StartAttemptSerializer(serializers.Serializer):
    track_id = serializers.IntegerField(required=False, allow_null=True)
    subtest_id = serializers.IntegerField(required=False, allow_null=True)

class SaveAnswerSerializer(serializers.Serializer):
    question_id = serializers.IntegerField()
    # null clears the selection, leaving the question blank
    selected_option_id = serializers.IntegerField(required=False, allow_null=True)

class NavigateSerializer(serializers.Serializer):
    index = serializers.IntegerField()

# --- Responses built from service views ---

class NavigationSerializer(serializers.Serializer):
    reachable_indices = serializers.ListField(child=serializers.IntegerField())
    next_required_index = serializers.IntegerField()

class AttemptStateSerializer(serializers.Serializer):
    attempt_id = serializers.IntegerField()
    exam_id = serializers.IntegerField()
    state = serializers.CharField()
    started_at = serializers.DateTimeField()
    ends_at = serializers.DateTimeField()
    remaining_seconds = serializers.IntegerField()
    last_seen_question = serializers.IntegerField(allow_null=True)
    answered_question_ids = serializers.ListField(child=serializers.IntegerField())
    reachable_indices = serializers.ListField(child=serializers.IntegerField())
    next_required_index = serializers.IntegerField()
    resume_index = serializers.IntegerField()
    saved_answers = serializers.DictField(child=serializers.IntegerField())
    question_ids = serializers.ListField(child=serializers.IntegerField())
    expired = serializers.BooleanField()
    resumed = serializers.BooleanField()

class SaveResultSerializer(serializers.Serializer):
    saved = serializers.BooleanField()
    expired = serializers.BooleanField()
    question_id = serializers.IntegerField(allow_null=True)
    selected_option_id = serializers.IntegerField(allow_null=True)
    navigation = NavigationSerializer()

class NavigationCheckSerializer(serializers.Serializer):
    allowed = serializers.BooleanField()
    index = serializers.IntegerField()
    navigation = NavigationSerializer()

class SubTestResultSerializer(serializers.Serializer):
    subtest_id = serializers.IntegerField()
    subtest_name = serializers.CharField()
    score_obtained = serializers.DecimalField(max_digits=10, decimal_places=2)
    minimum_required = serializers.DecimalField(max_digits=8, decimal_places=2, allow_null=True)
    is_approved = serializers.BooleanField()
    correct_count = serializers.IntegerField()
    total_questions = serializers.IntegerField()

class ResultSerializer(serializers.Serializer):
    attempt_id = serializers.IntegerField()
    total_score = serializers.DecimalField(max_digits=10, decimal_places=2)
    is_approved = serializers.BooleanField()
    submitted_at = serializers.DateTimeField(allow_null=True)
    submission_reason = serializers.CharField()
    per_subtest = SubTestResultSerializer(many=True)

class AttemptQuestionSerializer(ExamQuestionSerializer):
    """One exam question as shown inside an attempt, with the saved selection."""
    index = serializers.SerializerMethodField()
    selected_option_id = serializers.SerializerMethodField()

    class Meta(ExamQuestionSerializer.Meta):
        fields = ['index', 'selected_option_id'] + ExamQuestionSerializer.Meta.fields

    def get_index(self, obj):
        return self.context['index']

    def get_selected_option_id(self, obj):
        return self.context.get('selected_option_id')

# --- Model serializers ---

class ExamAttemptSerializer(serializers.ModelSerializer):
    """Lightweight serializer for the history list."""
    exam = ExamListSerializer(read_only=True)
    track = serializers.CharField(source='track.name', read_only=True)

    class Meta:
        model = ExamAttempt
        fields = [
            'id', 'exam', 'track', 'selected_subtest', 'state', 'started_at', 'ends_at',
            'submitted_at', 'submission_reason', 'total_score', 'is_approved',
        ]
        read_only_fields = fields
