"""
Editorial workflow services.

``ArticleWorkflow`` is the only writer of ``Article.status``. Every
operation follows the same shape inside one transaction:

    1. lock the article row (``select_for_update``)
    2. authorize the actor through the entity policy
    3. validate the status through ``ArticleStateMachine``
    4. write side records (versions, changes, assignments, requests)
    5. apply the transition

A concurrent operation that loses the lock race re-reads the committed
status in step 1 and fails in step 3 with ``InvalidStateTransition``.
"""

import logging
from typing import List, Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import (
    InvalidStateTransition,
    NotFoundError,
    NotPending,
    UnauthorizedError,
    ValidationFailed,
)
from apps.core.permissions import Actor
from .changes import ChangeApprovalLedger
from .diff import LineDiff, diff_engine
from .models import (
    Article,
    ArticleVersion,
    ChangeRecord,
    ReviewAssignment,
    ReviewDecision,
    RevisionRequest,
)
from .policies import article_policy, change_policy, revision_policy
from .reviews import ReviewAssignmentRegistry, validate_feedback
from .revisions import RevisionRequestLedger, require_reason
from .state_machine import ArticleStateMachine, ArticleStatus, WorkflowAction
from .versioning import VersionStore

logger = logging.getLogger(__name__)

REVIEW_OUTCOMES = {
    ReviewDecision.ACCEPT: WorkflowAction.ACCEPT_REVIEW,
    ReviewDecision.REJECT: WorkflowAction.REJECT_REVIEW,
    ReviewDecision.REQUEST_REVISION: WorkflowAction.REQUEST_REVIEW_REVISION,
}

PENDING_APPROVAL_STATES = (
    ArticleStatus.SUBMITTED.value,
    ArticleStatus.UNDER_REVIEW.value,
    ArticleStatus.REVISION_REQUESTED.value,
)


class ArticleWorkflow:
    """
    Orchestrates article status changes and their side records.
    """

    def __init__(self):
        self.versions = VersionStore()
        self.changes = ChangeApprovalLedger()
        self.reviews = ReviewAssignmentRegistry()
        self.revisions = RevisionRequestLedger()

    # ------------------------------------------------------------------
    # Article lifecycle
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_article(self, actor: Actor, title: str, content: str = '') -> Article:
        article_policy.authorize('create', actor, message="Only authors and admins can create articles")
        if not title or not title.strip():
            raise ValidationFailed("Title is required", field='title')

        article = Article.objects.create(
            title=title.strip(),
            content=content or '',
            status=ArticleStatus.DRAFT.value,
            version=1,
            author_id=actor.id,
        )
        self.versions.initial(article, created_by_id=actor.id)

        logger.info(f"Article {article.pk} created by {actor.id}")
        return article

    @transaction.atomic
    def update_article(
        self,
        actor: Actor,
        article,
        content: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Article:
        """
        Direct edit. A new version is created only when the content string
        actually changes.
        """
        article = self._lock(article)
        article_policy.authorize('update', actor, article, message="Not allowed to edit this article")

        if title is not None:
            if not title.strip():
                raise ValidationFailed("Title may not be blank", field='title')
            article.title = title.strip()

        content_changed = content is not None and content != article.content
        if content_changed:
            article.content = content
        article.save()

        if content_changed:
            self.versions.snapshot(article, content, created_by_id=actor.id, summary='Article updated')

        return article

    @transaction.atomic
    def delete_article(self, actor: Actor, article) -> Article:
        article = self._lock(article)
        article_policy.authorize('delete', actor, article, message="Not allowed to delete this article")

        article.deleted_at = timezone.now()
        article.save(update_fields=['deleted_at', 'updated_at'])

        logger.info(f"Article {article.pk} soft-deleted by {actor.id}")
        return article

    @transaction.atomic
    def submit_article(self, actor: Actor, article) -> Article:
        article = self._lock(article)
        article_policy.authorize('submit', actor, article, message="Only the article's author can submit it")
        ArticleStateMachine(article).transition(WorkflowAction.SUBMIT, actor_id=actor.id)
        return article

    @transaction.atomic
    def approve_article(self, actor: Actor, article) -> Article:
        article = self._lock(article)
        article_policy.authorize('approve', actor, article, message="Only admins can approve articles")
        ArticleStateMachine(article).transition(WorkflowAction.APPROVE, actor_id=actor.id)
        return article

    @transaction.atomic
    def reject_article(self, actor: Actor, article, reason: Optional[str] = None) -> Article:
        article = self._lock(article)
        article_policy.authorize('reject', actor, article, message="Only admins can reject articles")
        machine = ArticleStateMachine(article)
        machine.ensure(WorkflowAction.REJECT)
        reason = require_reason(reason)

        article.rejection_reason = reason
        machine.transition(WorkflowAction.REJECT, actor_id=actor.id, note=reason)
        return article

    @transaction.atomic
    def publish_article(self, actor: Actor, article) -> Article:
        article = self._lock(article)
        article_policy.authorize('publish', actor, article, message="Only admins can publish articles")
        ArticleStateMachine(article).transition(WorkflowAction.PUBLISH, actor_id=actor.id)
        return article

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    @transaction.atomic
    def assign_reviewer(self, actor: Actor, article, reviewer_id) -> ReviewAssignment:
        article = self._lock(article)
        article_policy.authorize('assign_reviewer', actor, article, message="Only admins can assign reviewers")
        machine = ArticleStateMachine(article)
        machine.ensure(WorkflowAction.ASSIGN_REVIEWER)

        reviewer = self.reviews.resolve_reviewer(reviewer_id)
        assignment = self.reviews.assign(article, reviewer, assigned_by_id=actor.id)
        machine.transition(WorkflowAction.ASSIGN_REVIEWER, actor_id=actor.id)
        return assignment

    @transaction.atomic
    def reassign_reviewer(self, actor: Actor, article, reviewer_id) -> ReviewAssignment:
        article = self._lock(article)
        article_policy.authorize('assign_reviewer', actor, article, message="Only admins can reassign reviewers")
        machine = ArticleStateMachine(article)
        machine.ensure(WorkflowAction.REASSIGN_REVIEWER)

        reviewer = self.reviews.resolve_reviewer(reviewer_id)
        assignment = self.reviews.reassign(article, reviewer, assigned_by_id=actor.id)
        machine.transition(WorkflowAction.REASSIGN_REVIEWER, actor_id=actor.id)
        return assignment

    @transaction.atomic
    def submit_review(self, actor: Actor, target, decision: str, feedback: Optional[str] = None) -> ReviewDecision:
        """
        Record a review decision and move the article accordingly.

        ``target`` is either an Article (the reviewer's active assignment is
        looked up) or a ReviewAssignment.
        """
        if isinstance(target, ReviewAssignment):
            assignment = target
            article = self._lock(assignment.article_id)
            if not (actor.is_admin or str(assignment.reviewer_id) == str(actor.id)):
                raise UnauthorizedError("Not assigned as reviewer for this assignment")
            assignment = ReviewAssignment.objects.select_for_update().get(pk=assignment.pk)
            if not assignment.is_active:
                raise NotPending(
                    "Review assignment already completed",
                    details={'assignment_id': str(assignment.pk)},
                )
        else:
            article = self._lock(target)
            article_policy.authorize('review', actor, article, message="Not assigned as reviewer for this article")
            assignment = self.reviews.active_for(article, actor.id)

        if decision not in REVIEW_OUTCOMES:
            raise ValidationFailed(f"Unknown review decision: {decision}", field='decision')
        action = REVIEW_OUTCOMES[decision]

        machine = ArticleStateMachine(article)
        machine.ensure(action)
        feedback = validate_feedback(decision, feedback)

        review = self.reviews.record_decision(
            article, actor.id, decision, feedback, assignment=assignment,
        )
        if assignment is not None:
            self.reviews.complete(assignment)

        machine.transition(action, actor_id=actor.id, note=feedback)
        logger.info(f"Review {decision} recorded on article {article.pk} by {actor.id}")
        return review

    # ------------------------------------------------------------------
    # Revision requests
    # ------------------------------------------------------------------

    @transaction.atomic
    def request_revision(self, actor: Actor, article, reason: str) -> RevisionRequest:
        """Author asks to revise their rejected article."""
        article = self._lock(article)
        article_policy.authorize(
            'request_revision', actor, article,
            message="Only the article's author can request a revision",
        )
        machine = ArticleStateMachine(article)
        machine.ensure(WorkflowAction.REQUEST_REVISION)

        request = self.revisions.create(
            article,
            requested_by_id=actor.id,
            requested_from_id=article.author_id,
            reason=reason,
        )
        machine.transition(WorkflowAction.REQUEST_REVISION, actor_id=actor.id, note=request.reason)
        return request

    @transaction.atomic
    def open_revision_request(self, actor: Actor, article, reason: str) -> RevisionRequest:
        """Admin asks the article's author for a revision."""
        article = self._lock(article)
        revision_policy.authorize('create', actor, message="Only admins can open revision requests")
        machine = ArticleStateMachine(article)
        machine.ensure(WorkflowAction.OPEN_REVISION_REQUEST)

        request = self.revisions.create(
            article,
            requested_by_id=actor.id,
            requested_from_id=article.author_id,
            reason=reason,
        )
        machine.transition(WorkflowAction.OPEN_REVISION_REQUEST, actor_id=actor.id, note=request.reason)
        return request

    @transaction.atomic
    def approve_revision(self, actor: Actor, article) -> RevisionRequest:
        article = self._lock(article)
        article_policy.authorize('approve', actor, article, message="Only admins can approve revisions")
        machine = ArticleStateMachine(article)
        machine.ensure(WorkflowAction.APPROVE_REVISION)

        request = self.revisions.approve(self.revisions.require_pending_for(article))
        machine.transition(WorkflowAction.APPROVE_REVISION, actor_id=actor.id)
        return request

    @transaction.atomic
    def reject_revision(self, actor: Actor, article, reason: Optional[str] = None) -> RevisionRequest:
        article = self._lock(article)
        article_policy.authorize('reject', actor, article, message="Only admins can reject revisions")
        machine = ArticleStateMachine(article)
        machine.ensure(WorkflowAction.REJECT_REVISION)
        reason = require_reason(reason)

        request = self.revisions.reject(self.revisions.require_pending_for(article), reason)
        article.rejection_reason = reason
        machine.transition(WorkflowAction.REJECT_REVISION, actor_id=actor.id, note=reason)
        return request

    @transaction.atomic
    def complete_revision(self, actor: Actor, revision_request) -> Article:
        """Target author finishes the revision; the article returns to draft."""
        request, article = self._lock_request(revision_request)
        revision_policy.authorize(
            'complete', actor, request,
            message="Not authorized to complete this revision request",
        )
        machine = ArticleStateMachine(article)
        machine.ensure(WorkflowAction.COMPLETE_REVISION)

        self.revisions.complete(request)
        machine.transition(WorkflowAction.COMPLETE_REVISION, actor_id=actor.id)
        return article

    @transaction.atomic
    def respond_to_revision_request(self, actor: Actor, revision_request) -> RevisionRequest:
        """Target author accepts a pending request. Article status is untouched."""
        request, _ = self._lock_request(revision_request)
        revision_policy.authorize('approve', actor, request, message="Only the requested author can accept")
        return self.revisions.approve(request)

    @transaction.atomic
    def decline_revision_request(self, actor: Actor, revision_request, reason: Optional[str] = None) -> RevisionRequest:
        """Admin rejects a pending request directly. Article status is untouched."""
        request, _ = self._lock_request(revision_request)
        revision_policy.authorize('reject', actor, request, message="Only admins can reject revision requests")
        return self.revisions.reject(request, reason)

    # ------------------------------------------------------------------
    # Tracked changes
    # ------------------------------------------------------------------

    @transaction.atomic
    def track_changes(
        self,
        actor: Actor,
        article,
        old_content: str,
        new_content: str,
    ) -> Tuple[ArticleVersion, List[ChangeRecord]]:
        """
        Snapshot ``new_content`` as the next version and record the
        document diff as pending changes. ``article.content`` is left as is
        until the changes are reviewed.
        """
        article = self._lock(article)
        article_policy.authorize('track_changes', actor, article, message="Not allowed to track changes")
        if article.status_enum.is_terminal:
            raise InvalidStateTransition(
                "Cannot track changes on a published article",
                details={'status': article.status},
            )

        version = self.versions.snapshot(
            article, new_content, created_by_id=actor.id, summary='Content updated',
        )
        records = self.changes.record_pending(
            article, version, diff_engine.document_changes(old_content, new_content),
        )
        return version, records

    @transaction.atomic
    def approve_change(self, actor: Actor, change_id) -> ChangeRecord:
        """
        Approve one change. When no pending change remains for the article
        afterwards, the article advances to ready_for_review.
        """
        change, article = self._lock_change(change_id)
        change_policy.authorize('approve', actor, change, message="Only admins can approve changes")

        self.changes.approve(change, actor.id)
        if self.changes.pending_count(article) == 0:
            self._advance_after_changes(article, actor)
        return change

    @transaction.atomic
    def reject_change(self, actor: Actor, change_id, reason: Optional[str] = None) -> ChangeRecord:
        change, _ = self._lock_change(change_id)
        change_policy.authorize('reject', actor, change, message="Only admins can reject changes")
        return self.changes.reject(change, actor.id, reason)

    @transaction.atomic
    def approve_all_changes(self, actor: Actor, article) -> int:
        """Approve every pending change. With nothing pending this is a no-op."""
        article = self._lock(article)
        change_policy.authorize('approve', actor, message="Only admins can approve changes")

        if self.changes.pending_count(article) == 0:
            return 0
        approved = self.changes.approve_all(article, actor.id)
        self._advance_after_changes(article, actor)

        logger.info(f"Approved {approved} change(s) on article {article.pk}")
        return approved

    @transaction.atomic
    def reject_all_changes(self, actor: Actor, article, reason: str = '') -> int:
        article = self._lock(article)
        change_policy.authorize('reject', actor, message="Only admins can reject changes")

        rejected = self.changes.reject_all(article, actor.id, reason)
        if rejected:
            logger.info(f"Rejected {rejected} change(s) on article {article.pk}")
        return rejected

    def compare_versions(self, article, version_from: int, version_to: int) -> List[LineDiff]:
        return self.versions.compare(article, version_from, version_to)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_article(self, actor: Actor, article_id) -> Article:
        try:
            article = Article.objects.select_related('author').get(pk=article_id)
        except (Article.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError("Article not found", details={'article_id': str(article_id)})
        article_policy.authorize('view', actor, article, message="Not allowed to view this article")
        return article

    def visible_articles(self, actor: Actor):
        return Article.objects.visible_to(actor).select_related('author')

    def pending_approval(self):
        return Article.objects.filter(status__in=PENDING_APPROVAL_STATES).select_related('author')

    def assignments_for(self, actor: Actor, status: Optional[str] = None):
        return self.reviews.for_reviewer(actor.id, status=status)

    def revision_requests_for(self, actor: Actor, status: Optional[str] = None):
        return self.revisions.for_author(actor.id, status=status)

    def changes_for(self, article, status: Optional[str] = None):
        return self.changes.for_article(article, status=status)

    def pending_changes(self, article):
        return self.changes.pending(article).order_by('created_at')

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock(self, article) -> Article:
        """Re-read the article under a row lock."""
        article_id = article.pk if isinstance(article, Article) else article
        try:
            return Article.objects.select_for_update().get(pk=article_id)
        except (Article.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError("Article not found", details={'article_id': str(article_id)})

    def _lock_request(self, revision_request) -> Tuple[RevisionRequest, Article]:
        """
        Lock the owning article, then the request row.

        Article rows are always locked before their child rows so that
        per-record and per-article operations never wait on each other in a cycle.
        """
        request_id = revision_request.pk if isinstance(revision_request, RevisionRequest) else revision_request
        article = self._lock(self.revisions.get(request_id).article_id)
        return self.revisions.get(request_id, for_update=True), article

    def _lock_change(self, change_id) -> Tuple[ChangeRecord, Article]:
        """Lock the owning article, then the change record."""
        article = self._lock(self.changes.get(change_id).article_id)
        return self.changes.get(change_id, for_update=True), article

    def _advance_after_changes(self, article, actor: Actor):
        machine = ArticleStateMachine(article)
        if not machine.can(WorkflowAction.APPROVE_CHANGES):
            logger.info(
                "Article %s left in %s after change approval",
                article.pk, article.status,
            )
            return
        machine.transition(WorkflowAction.APPROVE_CHANGES, actor_id=actor.id)


workflow = ArticleWorkflow()
