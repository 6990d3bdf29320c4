from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ExamViewSet, LessonViewSet, QuestionViewSet, SectionViewSet

router = DefaultRouter()
router.register(r'exams', ExamViewSet, basename='exams')
router.register(r'sections', SectionViewSet, basename='sections')
router.register(r'questions', QuestionViewSet, basename='questions')
router.register(r'lessons', LessonViewSet, basename='lessons')

urlpatterns = [
    path('', include(router.urls)),
]
