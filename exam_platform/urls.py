from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Authentication & Profile ---
    path('api/auth/', include('users.urls')),

    # --- Platform Settings & Audit Trail (Admin) ---
    path('api/admin/', include('cores.urls')),

    # --- Attempt Flow (resume / autosave / submit / result) ---
    path('api/', include('assessments.urls')),

    # --- Exams, Eligibility & Start ---
    path('api/', include('exams.urls')),
]
