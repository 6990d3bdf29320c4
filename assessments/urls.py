from django.urls import path

from .views import (
    AdminStatsView, AttemptDetailView, AttemptResultView, PendingResultListView,
    SaveResponseView, StudentExamAttemptsView, SubmitAttemptView,
)

urlpatterns = [
    # --- Admin Dashboard ---
    path('admin/stats/', AdminStatsView.as_view(), name='admin-stats'),
    path('admin/results/pending/', PendingResultListView.as_view(), name='results-pending'),

    # --- Student Attempt Flow ---
    path('attempts/', StudentExamAttemptsView.as_view(), name='student-attempts'),
    path('attempts/<int:attempt_id>/', AttemptDetailView.as_view(), name='attempt-detail'),
    path(
        'attempts/<int:attempt_id>/responses/<int:question_id>/',
        SaveResponseView.as_view(),
        name='attempt-save-response',
    ),
    path('attempts/<int:attempt_id>/submit/', SubmitAttemptView.as_view(), name='attempt-submit'),
    path('attempts/<int:attempt_id>/result/', AttemptResultView.as_view(), name='attempt-result'),
]
