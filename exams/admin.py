from django.contrib import admin

from .models import Exam, Lesson, Option, Question, Section


class SectionInline(admin.TabularInline):
    model = Section
    extra = 0


class OptionInline(admin.TabularInline):
    model = Option
    extra = 0


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ['title', 'status', 'duration_minutes', 'total_marks', 'max_attempts', 'result_visibility']
    list_filter = ['status', 'result_visibility']
    search_fields = ['title']
    inlines = [SectionInline]


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'section', 'question_type', 'marks', 'negative_marks']
    list_filter = ['question_type', 'section__exam']
    inlines = [OptionInline]


admin.site.register(Section)
admin.site.register(Option)
admin.site.register(Lesson)
