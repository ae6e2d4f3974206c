"""
URL patterns for core health and auth endpoints.
"""

from django.urls import path
from .views import (
    HealthCheckView,
    LivenessView,
    ReadinessView,
    CurrentUserView,
    UsersByRoleView,
)

app_name = 'core'

urlpatterns = [
    # Health checks
    path('health/', HealthCheckView.as_view(), name='health'),

    # Probes
    path('livez/', LivenessView.as_view(), name='liveness'),
    path('readyz/', ReadinessView.as_view(), name='readiness'),
]

# Auth URLs - mounted at /api/auth/ in main urls.py
auth_urlpatterns = [
    path('me/', CurrentUserView.as_view(), name='current_user'),
    path('users/', UsersByRoleView.as_view(), name='users_by_role'),
]
