# exams/serializers.py
from rest_framework import serializers

from assessments.models import ExamAttempt

from .models import Exam, Lesson, Option, Question, Section

# --- Option Serializers ---

class OptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Option
        fields = ['id', 'text', 'option_order', 'is_correct']


class StudentOptionSerializer(serializers.ModelSerializer):
    """Options as shown while an attempt is running: no answer key."""
    class Meta:
        model = Option
        fields = ['id', 'text', 'option_order']

# --- Question Serializers ---

class OptionInputSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=255)
    is_correct = serializers.BooleanField(default=False)


class QuestionSerializer(serializers.ModelSerializer):
    # Options come in as a list of {text, is_correct} and go out with ids
    options = OptionInputSerializer(many=True, required=False, write_only=True)
    options_data = OptionSerializer(source='options', many=True, read_only=True)

    class Meta:
        model = Question
        fields = [
            'id', 'section', 'question_order', 'text', 'question_type',
            'marks', 'negative_marks', 'correct_answer', 'explanation',
            'options', 'options_data'
        ]

    # Fields that change how an answer is graded
    SCORING_FIELDS = ('section', 'question_type', 'marks', 'negative_marks', 'correct_answer')

    def validate(self, attrs):
        q_type = attrs.get('question_type', getattr(self.instance, 'question_type', Question.QuestionType.MCQ))
        options = attrs.get('options')

        if q_type == Question.QuestionType.NAT:
            if options:
                raise serializers.ValidationError({"options": "Numerical questions do not take options."})
            correct_answer = attrs.get('correct_answer', getattr(self.instance, 'correct_answer', ''))
            if not (correct_answer or '').strip():
                raise serializers.ValidationError({"correct_answer": "Numerical questions need a correct answer."})
        elif options is not None:
            correct = sum(1 for opt in options if opt['is_correct'])
            if q_type == Question.QuestionType.MCQ and correct != 1:
                raise serializers.ValidationError({"options": "Single choice questions need exactly one correct option."})
            if q_type == Question.QuestionType.MSQ and correct < 1:
                raise serializers.ValidationError({"options": "Multiple choice questions need at least one correct option."})

        self._check_not_in_use(attrs)
        return attrs

    def _check_not_in_use(self, attrs):
        """Grading content is frozen while any attempt at the exam is running."""
        sections = {attrs['section']} if 'section' in attrs else set()
        if self.instance is not None:
            sections.add(self.instance.section)
        exam_ids = {section.exam_id for section in sections}
        running = ExamAttempt.objects.filter(exam_id__in=exam_ids, status=ExamAttempt.Status.IN_PROGRESS)
        if not running.exists():
            return

        if self.instance is None:
            raise serializers.ValidationError("Questions cannot be added while attempts at this exam are in progress.")
        changed = [
            name for name in self.SCORING_FIELDS
            if name in attrs and attrs[name] != getattr(self.instance, name)
        ]
        if 'options' in attrs and not self._same_options(attrs['options']):
            changed.append('options')
        if changed:
            raise serializers.ValidationError(
                {name: "Cannot change while attempts at this exam are in progress." for name in changed}
            )

    def _same_options(self, options):
        current = [(opt.text, opt.is_correct) for opt in self.instance.options.order_by('option_order', 'id')]
        return current == [(opt['text'], opt['is_correct']) for opt in options]

    def _write_options(self, question, options):
        # Update in place by position so saved answers keep pointing at the same ids
        existing = list(question.options.order_by('option_order', 'id'))
        for index, (option, data) in enumerate(zip(existing, options)):
            option.text = data['text']
            option.is_correct = data['is_correct']
            option.option_order = index
            option.save(update_fields=['text', 'is_correct', 'option_order'])

        Option.objects.filter(pk__in=[opt.pk for opt in existing[len(options):]]).delete()
        Option.objects.bulk_create([
            Option(question=question, text=data['text'], is_correct=data['is_correct'], option_order=index)
            for index, data in enumerate(options)
            if index >= len(existing)
        ])

    def create(self, validated_data):
        options = validated_data.pop('options', [])
        question = Question.objects.create(**validated_data)
        if options:
            self._write_options(question, options)
        return question

    def update(self, instance, validated_data):
        options = validated_data.pop('options', None)
        question = super().update(instance, validated_data)
        if options is not None:
            self._write_options(question, options)
        return question


class StudentQuestionSerializer(serializers.ModelSerializer):
    options = StudentOptionSerializer(many=True, read_only=True)

    class Meta:
        model = Question
        fields = ['id', 'question_order', 'text', 'question_type', 'marks', 'negative_marks', 'options']

# --- Section Serializers ---

class SectionSerializer(serializers.ModelSerializer):
    total_marks = serializers.DecimalField(max_digits=8, decimal_places=2, read_only=True)

    class Meta:
        model = Section
        fields = ['id', 'exam', 'title', 'section_order', 'total_marks']


class StudentSectionSerializer(serializers.ModelSerializer):
    total_marks = serializers.DecimalField(max_digits=8, decimal_places=2, read_only=True)
    questions = StudentQuestionSerializer(many=True, read_only=True)

    class Meta:
        model = Section
        fields = ['id', 'title', 'section_order', 'total_marks', 'questions']

# --- Exam Serializers ---

class ExamSerializer(serializers.ModelSerializer):
    # Read-only counts
    total_questions = serializers.SerializerMethodField()

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'description', 'status',
            'duration_minutes', 'total_marks', 'max_attempts',
            'start_time', 'end_time', 'negative_marking',
            'result_visibility', 'result_release_time', 'show_answers',
            'total_questions', 'created_at'
        ]
        read_only_fields = ['created_at']

    def get_total_questions(self, obj):
        return Question.objects.filter(section__exam=obj).count()

    def validate(self, attrs):
        start = attrs.get('start_time', getattr(self.instance, 'start_time', None))
        end = attrs.get('end_time', getattr(self.instance, 'end_time', None))
        if start and end and end <= start:
            raise serializers.ValidationError({"end_time": "End time must be after the start time."})

        visibility = attrs.get('result_visibility', getattr(self.instance, 'result_visibility', None))
        release = attrs.get('result_release_time', getattr(self.instance, 'result_release_time', None))
        if visibility == Exam.ResultVisibility.SCHEDULED and not release:
            raise serializers.ValidationError({"result_release_time": "Scheduled results need a release time."})
        return attrs


class ExamListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Exam
        fields = ['id', 'title', 'duration_minutes', 'total_marks', 'max_attempts', 'start_time', 'end_time']


class ExamDetailSerializer(ExamSerializer):
    """Exam with its sections and questions, answer key stripped."""
    sections = StudentSectionSerializer(many=True, read_only=True)

    class Meta(ExamSerializer.Meta):
        fields = ExamSerializer.Meta.fields + ['sections']


class LessonSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lesson
        fields = ['id', 'title', 'exam', 'sequential_unlock', 'prerequisite']

    def validate(self, attrs):
        prerequisite = attrs.get('prerequisite')
        if prerequisite is not None and self.instance is not None and prerequisite.pk == self.instance.pk:
            raise serializers.ValidationError({"prerequisite": "A lesson cannot be its own prerequisite."})
        return attrs
