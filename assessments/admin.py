from django.contrib import admin

from .models import ExamAttempt, Response, Result, SectionResult


class SectionResultInline(admin.TabularInline):
    model = SectionResult
    extra = 0
    can_delete = False
    readonly_fields = ['section', 'total_marks', 'obtained_marks', 'correct_answers', 'wrong_answers', 'unanswered']


@admin.register(ExamAttempt)
class ExamAttemptAdmin(admin.ModelAdmin):
    list_display = ['student', 'exam', 'status', 'started_at', 'submitted_at', 'auto_submitted', 'grading_failures']
    list_filter = ['status', 'auto_submitted', 'exam']
    readonly_fields = ['started_at', 'submitted_at', 'last_grading_error']


@admin.register(Result)
class ResultAdmin(admin.ModelAdmin):
    list_display = ['attempt', 'obtained_marks', 'total_marks', 'percentage', 'created_at']
    inlines = [SectionResultInline]


admin.site.register(Response)
