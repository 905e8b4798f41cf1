from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Authentication & profile ---
    path('api/', include('users.urls')),

    # --- Exams & attempts ---
    path('api/', include('exams.urls')),
    path('api/', include('assessments.urls')),

    # --- Audit trail (admin) ---
    path('api/', include('cores.urls')),
]
