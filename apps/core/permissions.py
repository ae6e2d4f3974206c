"""
Role-Based Permissions for PublishDesk.

Maps EditorialProfile.role to a closed ``Role`` enum, an ``Actor`` value
passed into every workflow operation, and DRF permission classes.

Roles:
- admin: routes articles to reviewers, approves, rejects and publishes
- author: drafts and submits own articles, answers revision requests
- reviewer: reviews articles they are assigned to

Usage:
    from apps.core.permissions import Actor, IsAdmin

    class MyView(APIView):
        permission_classes = [IsAuthenticated, IsAdmin]

        def post(self, request):
            actor = Actor.from_user(request.user)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from rest_framework.permissions import BasePermission

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Editorial roles."""
    ADMIN = 'admin'
    AUTHOR = 'author'
    REVIEWER = 'reviewer'

    @classmethod
    def from_string(cls, value: str) -> 'Role':
        """Convert string to Role."""
        for role in cls:
            if role.value == value:
                return role
        raise ValueError(f"Unknown role: {value}")

    @property
    def label(self) -> str:
        return self.value.capitalize()


def get_user_role(user) -> Optional[Role]:
    """
    Resolve a user's editorial role.

    Superusers are always admins. Users without a profile are authors.
    """
    if not user or not user.is_authenticated:
        return None

    if user.is_superuser:
        return Role.ADMIN

    profile = getattr(user, 'editorial_profile', None)
    if profile is None:
        return Role.AUTHOR
    return Role.from_string(profile.role)


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing an operation."""
    id: Any
    role: Role

    @classmethod
    def from_user(cls, user) -> 'Actor':
        role = get_user_role(user)
        if role is None:
            raise ValueError("Cannot build an actor from an anonymous user")
        return cls(id=user.pk, role=role)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_author(self) -> bool:
        return self.role == Role.AUTHOR

    @property
    def is_reviewer(self) -> bool:
        return self.role == Role.REVIEWER


class RolePermission(BasePermission):
    """Base class for role-based permissions."""

    # Override in subclasses
    allowed_roles = ()

    def has_permission(self, request, view):
        """Check if user has required role."""
        return get_user_role(request.user) in self.allowed_roles


class IsAdmin(RolePermission):
    """Allow access to admin users only."""
    allowed_roles = (Role.ADMIN,)
    message = "Admin access required."


class IsAuthorOrAdmin(RolePermission):
    """Allow access to authors and admins (article creation)."""
    allowed_roles = (Role.AUTHOR, Role.ADMIN)
    message = "Author or admin access required."


class IsReviewerOrAdmin(RolePermission):
    """Allow access to reviewers and admins."""
    allowed_roles = (Role.REVIEWER, Role.ADMIN)
    message = "Reviewer or admin access required."
