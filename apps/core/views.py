"""
Health check and current-user views.
"""

import logging

from django.db import connection
from django.db.utils import DatabaseError
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from django.contrib.auth import get_user_model
from django.db.models import Q
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.core.exceptions import ValidationFailed, success_response
from apps.core.permissions import IsAdmin, Role
from apps.core.serializers import UserSerializer

logger = logging.getLogger(__name__)


def check_database():
    """Run a trivial query; returns (ok, message)."""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        return True, "Database connection OK"
    except DatabaseError as exc:
        logger.error("Database health check failed: %s", exc)
        return False, str(exc)


@method_decorator(csrf_exempt, name='dispatch')
class HealthCheckView(View):
    """
    Health check endpoint.

    GET /health/ - Database connectivity plus service status
    """

    def get(self, request):
        ok, message = check_database()
        return JsonResponse({
            "status": "healthy" if ok else "unhealthy",
            "checks": {
                "database": {"status": "healthy" if ok else "unhealthy", "message": message},
            },
        }, status=200 if ok else 503)


@method_decorator(csrf_exempt, name='dispatch')
class LivenessView(View):
    """
    Liveness probe endpoint.

    Returns 200 if the application is running.
    """

    def get(self, request):
        return JsonResponse({"status": "alive"})


@method_decorator(csrf_exempt, name='dispatch')
class ReadinessView(View):
    """
    Readiness probe endpoint.

    Returns 200 once the database answers.
    """

    def get(self, request):
        ok, message = check_database()
        if ok:
            return JsonResponse({"status": "ready"})
        return JsonResponse({
            "status": "not_ready",
            "reason": message,
        }, status=503)


class CurrentUserView(APIView):
    """
    GET /api/auth/me/ - Current user with editorial role
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return success_response(UserSerializer(request.user).data)


class UsersByRoleView(generics.ListAPIView):
    """
    GET /api/auth/users/?role=reviewer - Users holding a role (admin only)

    Feeds the reviewer picker when assigning articles. Superusers count as
    admins whatever their profile says.
    """
    permission_classes = [IsAdmin]
    serializer_class = UserSerializer

    def get_queryset(self):
        value = self.request.query_params.get('role')
        try:
            role = Role.from_string(value)
        except ValueError:
            raise ValidationFailed(
                "Invalid role provided",
                field='role',
                details={'allowed': [r.value for r in Role]},
            )

        users = get_user_model().objects.select_related('editorial_profile').order_by('username')
        if role is Role.ADMIN:
            return users.filter(Q(is_superuser=True) | Q(editorial_profile__role=role.value))
        return users.filter(editorial_profile__role=role.value, is_superuser=False)
