"""
Capability checks for editorial entities.

One policy object per entity. Each ``can_*`` method answers a named
question for an ``Actor``; ``authorize`` turns a negative answer into
``UnauthorizedError``. Status preconditions that belong to the transition
table are left to ``ArticleStateMachine``; the only status checks here are
the edit and delete windows.
"""

import logging

from apps.core.exceptions import UnauthorizedError
from apps.core.permissions import Actor
from .state_machine import ArticleStatus

logger = logging.getLogger(__name__)

AUTHOR_EDITABLE_STATES = frozenset({ArticleStatus.DRAFT, ArticleStatus.REVISION_REQUESTED})


def _same(left, right) -> bool:
    return left is not None and str(left) == str(right)


class BasePolicy:
    """Shared ``authorize`` helper."""

    def authorize(self, capability: str, actor: Actor, *args, message=None):
        check = getattr(self, f'can_{capability}')
        if not check(actor, *args):
            logger.info(
                "Denied %s.%s for actor %s (%s)",
                type(self).__name__, capability, actor.id, actor.role.value,
            )
            raise UnauthorizedError(
                message or f"Not allowed to {capability.replace('_', ' ')}",
                details={'capability': capability},
            )


class ArticlePolicy(BasePolicy):

    def is_owner(self, actor: Actor, article) -> bool:
        return _same(article.author_id, actor.id)

    def has_active_assignment(self, actor: Actor, article) -> bool:
        from .models import ReviewAssignment
        return ReviewAssignment.objects.filter(
            article=article,
            reviewer_id=actor.id,
            status=ReviewAssignment.ASSIGNED,
        ).exists()

    def has_any_assignment(self, actor: Actor, article) -> bool:
        from .models import ReviewAssignment
        return ReviewAssignment.objects.filter(article=article, reviewer_id=actor.id).exists()

    def can_view(self, actor: Actor, article) -> bool:
        if actor.is_admin or self.is_owner(actor, article):
            return True
        return actor.is_reviewer and self.has_active_assignment(actor, article)

    def can_create(self, actor: Actor) -> bool:
        return actor.is_author or actor.is_admin

    def can_update(self, actor: Actor, article) -> bool:
        status = article.status_enum
        if actor.is_admin:
            return status is not ArticleStatus.PUBLISHED
        return (
            actor.is_author
            and self.is_owner(actor, article)
            and status in AUTHOR_EDITABLE_STATES
        )

    def can_delete(self, actor: Actor, article) -> bool:
        status = article.status_enum
        if actor.is_admin:
            return status is not ArticleStatus.PUBLISHED
        return (
            actor.is_author
            and self.is_owner(actor, article)
            and status is ArticleStatus.DRAFT
        )

    def can_submit(self, actor: Actor, article) -> bool:
        return actor.is_author and self.is_owner(actor, article)

    def can_approve(self, actor: Actor, article) -> bool:
        return actor.is_admin

    def can_reject(self, actor: Actor, article) -> bool:
        return actor.is_admin

    def can_assign_reviewer(self, actor: Actor, article) -> bool:
        return actor.is_admin

    def can_publish(self, actor: Actor, article) -> bool:
        return actor.is_admin

    def can_review(self, actor: Actor, article) -> bool:
        """Admins always; reviewers only while holding an active assignment."""
        if actor.is_admin:
            return True
        return actor.is_reviewer and self.has_active_assignment(actor, article)

    def can_request_revision(self, actor: Actor, article) -> bool:
        return self.is_owner(actor, article)

    def can_track_changes(self, actor: Actor, article) -> bool:
        return actor.is_admin or self.is_owner(actor, article)

    def can_comment(self, actor: Actor, article) -> bool:
        if actor.is_admin:
            return True
        return actor.is_reviewer and self.has_any_assignment(actor, article)


class ChangeRecordPolicy(BasePolicy):

    def can_view(self, actor: Actor, change) -> bool:
        return article_policy.can_view(actor, change.article)

    def can_approve(self, actor: Actor, change=None) -> bool:
        return actor.is_admin

    def can_reject(self, actor: Actor, change=None) -> bool:
        return actor.is_admin


class RevisionRequestPolicy(BasePolicy):
    """
    Revision requests are opened and rejected by admins, and accepted or
    completed by the author they target.
    """

    def is_target(self, actor: Actor, request) -> bool:
        return _same(request.requested_from_id, actor.id)

    def can_view(self, actor: Actor, request) -> bool:
        return actor.is_admin or self.is_target(actor, request)

    def can_create(self, actor: Actor) -> bool:
        return actor.is_admin

    def can_approve(self, actor: Actor, request) -> bool:
        return self.is_target(actor, request)

    def can_reject(self, actor: Actor, request) -> bool:
        return actor.is_admin

    def can_complete(self, actor: Actor, request) -> bool:
        return self.is_target(actor, request)


class CommentPolicy(BasePolicy):

    def can_view(self, actor: Actor, comment) -> bool:
        return (
            actor.is_admin
            or _same(comment.reviewer_id, actor.id)
            or _same(comment.article.author_id, actor.id)
        )

    def can_update(self, actor: Actor, comment) -> bool:
        return actor.is_admin or _same(comment.reviewer_id, actor.id)

    def can_delete(self, actor: Actor, comment) -> bool:
        return self.can_update(actor, comment)


article_policy = ArticlePolicy()
change_policy = ChangeRecordPolicy()
revision_policy = RevisionRequestPolicy()
comment_policy = CommentPolicy()
