from rest_framework import serializers

from exams.answers import client_value, load_answer
from exams.serializers import ExamListSerializer

from .attempts import time_left
from .models import ExamAttempt, Response, Result, SectionResult


class ResponseSerializer(serializers.ModelSerializer):
    answer = serializers.SerializerMethodField()

    class Meta:
        model = Response
        fields = ['question', 'answer', 'is_marked_for_review', 'sequence', 'updated_at']

    def get_answer(self, obj):
        return client_value(load_answer(obj.question.question_type, obj.student_answer))


class SaveResponseSerializer(serializers.Serializer):
    # Option id (MCQ), list of option ids (MSQ) or a string (NAT); null clears it
    answer = serializers.JSONField(allow_null=True, required=False)
    marked_for_review = serializers.BooleanField(required=False, allow_null=True, default=None)
    sequence = serializers.IntegerField(required=False, min_value=0, allow_null=True, default=None)

    def validate(self, attrs):
        if 'answer' not in attrs and attrs.get('marked_for_review') is None:
            raise serializers.ValidationError("Send an answer, a review flag, or both.")
        return attrs


class SubmitAttemptSerializer(serializers.Serializer):
    auto = serializers.BooleanField(default=False)


class ExamAttemptSerializer(serializers.ModelSerializer):
    """Lightweight attempt payload for start / lists / submit."""
    exam = ExamListSerializer(read_only=True)
    remaining_seconds = serializers.SerializerMethodField()
    has_result = serializers.SerializerMethodField()

    class Meta:
        model = ExamAttempt
        fields = [
            'id', 'exam', 'status', 'started_at', 'submitted_at',
            'auto_submitted', 'remaining_seconds', 'has_result'
        ]
        read_only_fields = fields

    def get_remaining_seconds(self, obj):
        return time_left(obj)

    def get_has_result(self, obj):
        return hasattr(obj, 'result')


class SectionResultSerializer(serializers.ModelSerializer):
    section_title = serializers.CharField(source='section.title', read_only=True)

    class Meta:
        model = SectionResult
        fields = [
            'section', 'section_title', 'section_order', 'total_marks',
            'obtained_marks', 'correct_answers', 'wrong_answers', 'unanswered'
        ]


class ResultSerializer(serializers.ModelSerializer):
    section_results = SectionResultSerializer(many=True, read_only=True)

    class Meta:
        model = Result
        fields = ['id', 'attempt', 'total_marks', 'obtained_marks', 'percentage', 'created_at', 'section_results']
