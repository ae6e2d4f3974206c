"""
Review assignment registry and review decisions.
"""

import logging
from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from apps.core.exceptions import (
    DuplicateAssignment,
    NoPriorAssignment,
    NotFoundError,
    ValidationFailed,
)
from apps.core.permissions import Role, get_user_role
from .models import ReviewAssignment, ReviewDecision

logger = logging.getLogger(__name__)

FEEDBACK_REQUIRED = frozenset({ReviewDecision.REJECT, ReviewDecision.REQUEST_REVISION})


def feedback_limits():
    return (
        getattr(settings, 'EDITORIAL_FEEDBACK_MIN_LENGTH', 10),
        getattr(settings, 'EDITORIAL_FEEDBACK_MAX_LENGTH', 1000),
    )


def validate_feedback(decision: str, feedback: Optional[str]) -> str:
    """
    Check a review decision and its feedback.

    Feedback is mandatory for reject and request_revision; when given it
    must fit the configured length window.
    """
    if decision not in dict(ReviewDecision.DECISION_CHOICES):
        raise ValidationFailed(f"Unknown review decision: {decision}", field='decision')

    feedback = (feedback or '').strip()
    min_length, max_length = feedback_limits()

    if decision in FEEDBACK_REQUIRED and len(feedback) < min_length:
        raise ValidationFailed(
            f"Feedback of at least {min_length} characters is required",
            field='feedback',
            details={'min_length': min_length, 'length': len(feedback)},
        )
    if len(feedback) > max_length:
        raise ValidationFailed(
            f"Feedback may not exceed {max_length} characters",
            field='feedback',
            details={'max_length': max_length, 'length': len(feedback)},
        )
    return feedback


class ReviewAssignmentRegistry:

    def resolve_reviewer(self, reviewer_id):
        """Load the user behind ``reviewer_id`` and check they review."""
        User = get_user_model()
        try:
            reviewer = User.objects.get(pk=reviewer_id)
        except (User.DoesNotExist, ValueError, TypeError, DjangoValidationError):
            raise NotFoundError("Reviewer not found", field='reviewer_id')

        if get_user_role(reviewer) is not Role.REVIEWER:
            raise ValidationFailed("Selected user is not a reviewer", field='reviewer_id')
        return reviewer

    def assign(self, article, reviewer, assigned_by_id) -> ReviewAssignment:
        if ReviewAssignment.objects.filter(article=article, reviewer=reviewer).exists():
            raise DuplicateAssignment(
                "Reviewer already assigned to this article",
                details={'reviewer_id': str(reviewer.pk)},
            )
        return self._create(article, reviewer, assigned_by_id)

    def reassign(self, article, reviewer, assigned_by_id) -> ReviewAssignment:
        """
        Open another review round. Needs a completed assignment on the
        article; the new reviewer must not already hold an active one.
        """
        if not self.last_completed(article):
            raise NoPriorAssignment(
                "No previous review assignment found",
                details={'article_id': str(article.pk)},
            )
        if self.active_for(article, reviewer.pk):
            raise DuplicateAssignment(
                "Reviewer already holds an active assignment on this article",
                details={'reviewer_id': str(reviewer.pk)},
            )
        return self._create(article, reviewer, assigned_by_id)

    def complete(self, assignment: ReviewAssignment) -> ReviewAssignment:
        assignment.status = ReviewAssignment.COMPLETED
        assignment.completed_at = timezone.now()
        assignment.save(update_fields=['status', 'completed_at', 'updated_at'])
        return assignment

    def get(self, assignment_id) -> ReviewAssignment:
        try:
            return ReviewAssignment.objects.select_related('article').get(pk=assignment_id)
        except (ReviewAssignment.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError("Review assignment not found")

    def active_for(self, article, reviewer_id) -> Optional[ReviewAssignment]:
        return (
            ReviewAssignment.objects
            .filter(article=article, reviewer_id=reviewer_id, status=ReviewAssignment.ASSIGNED)
            .order_by('-assigned_at')
            .first()
        )

    def last_completed(self, article) -> Optional[ReviewAssignment]:
        return (
            ReviewAssignment.objects
            .filter(article=article, status=ReviewAssignment.COMPLETED)
            .order_by('-completed_at')
            .first()
        )

    def for_reviewer(self, reviewer_id, status: Optional[str] = None):
        queryset = ReviewAssignment.objects.filter(reviewer_id=reviewer_id).select_related('article')
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    def record_decision(self, article, reviewer_id, decision, feedback, assignment=None) -> ReviewDecision:
        return ReviewDecision.objects.create(
            article=article,
            reviewer_id=reviewer_id,
            assignment=assignment,
            decision=decision,
            feedback=feedback,
        )

    def _create(self, article, reviewer, assigned_by_id) -> ReviewAssignment:
        assignment = ReviewAssignment.objects.create(
            article=article,
            reviewer=reviewer,
            assigned_by_id=assigned_by_id,
            status=ReviewAssignment.ASSIGNED,
        )
        logger.info(f"Reviewer {reviewer.pk} assigned to article {article.pk}")
        return assignment
