# promotion_platform/exams/serializers.py
from rest_framework import serializers
from .models import Exam, ExamQuestion, Option, SubTest, Track

# --- Helper Serializers ---

class OptionSerializer(serializers.ModelSerializer):
    # Correctness is never exposed to the teacher taking the exam
    class Meta:
        model = Option
        fields = ['id', 'content']

class SubTestSerializer(serializers.ModelSerializer):
    total_questions = serializers.IntegerField(source='exam_questions.count', read_only=True)

    class Meta:
        model = SubTest
        fields = ['id', 'name', 'description', 'order', 'total_questions']

class TrackSerializer(serializers.ModelSerializer):
    # Sub-tests a teacher may pick when the track is independent
    subtest_ids = serializers.SerializerMethodField()

    class Meta:
        model = Track
        fields = ['id', 'name', 'description', 'approval_mode', 'subtest_ids']

    def get_subtest_ids(self, obj):
        return sorted(rule.subtest_id for rule in obj.scoring_rules.all())

# --- Question Serializers ---

class ExamQuestionSerializer(serializers.ModelSerializer):
    question_id = serializers.IntegerField(source='question.id', read_only=True)
    code = serializers.CharField(source='question.code', read_only=True)
    statement = serializers.CharField(source='question.statement', read_only=True)
    options = OptionSerializer(source='question.options', many=True, read_only=True)

    class Meta:
        model = ExamQuestion
        fields = ['order', 'question_id', 'code', 'statement', 'subtest', 'options']

# --- Exam Serializers ---

class ExamListSerializer(serializers.ModelSerializer):
    total_questions = serializers.IntegerField(source='exam_questions.count', read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'code', 'title', 'time_limit_minutes',
            'valid_from', 'valid_to', 'status', 'total_questions',
        ]

class ExamDetailSerializer(ExamListSerializer):
    """Detailed view for teachers choosing a track before starting."""
    subtests = SubTestSerializer(many=True, read_only=True)
    tracks = TrackSerializer(many=True, read_only=True)

    class Meta(ExamListSerializer.Meta):
        fields = ExamListSerializer.Meta.fields + ['description', 'access_mode', 'subtests', 'tracks']
