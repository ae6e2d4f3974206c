"""
Tests for revision requests.

Tests cover:
- Author-initiated requests on rejected articles
- Admin-initiated requests and the one-pending rule
- Approve / reject / complete, and NotPending guards
"""

from unittest.mock import patch

import pytest

from apps.articles.models import RevisionRequest
from apps.articles.services import workflow
from apps.core.exceptions import (
    DuplicatePendingRequest,
    InvalidStateTransition,
    NotFoundError,
    NotPending,
    UnauthorizedError,
    ValidationFailed,
)

REASON = 'Updated figures are now available.'


@pytest.fixture
def rejected_article(admin, submitted_article):
    return workflow.reject_article(admin, submitted_article, 'Figures are out of date')


@pytest.fixture
def pending_request(author, rejected_article):
    return workflow.request_revision(author, rejected_article, REASON)


# ============================================================================
# Author Requests
# ============================================================================

@pytest.mark.django_db
class TestAuthorRequests:
    """Test request_revision by the article's author."""

    def test_request_on_rejected(self, author, author_user, rejected_article, pending_request):
        rejected_article.refresh_from_db()

        assert rejected_article.status == 'revision_pending'
        assert pending_request.status == RevisionRequest.PENDING
        assert pending_request.requested_from_id == author_user.pk
        assert pending_request.reason == REASON

    def test_only_from_rejected(self, author, draft_article):
        with pytest.raises(InvalidStateTransition):
            workflow.request_revision(author, draft_article, REASON)

    def test_only_owner(self, other_author, rejected_article):
        with pytest.raises(UnauthorizedError):
            workflow.request_revision(other_author, rejected_article, REASON)

    def test_reason_required(self, author, rejected_article):
        with pytest.raises(ValidationFailed):
            workflow.request_revision(author, rejected_article, '')


# ============================================================================
# Admin Decisions on Article
# ============================================================================

@pytest.mark.django_db
class TestAdminDecisions:
    """Test approve_revision / reject_revision."""

    def test_approve(self, admin, rejected_article, pending_request):
        request = workflow.approve_revision(admin, rejected_article)

        assert request.pk == pending_request.pk
        assert request.status == RevisionRequest.APPROVED
        assert request.responded_at is not None
        rejected_article.refresh_from_db()
        assert rejected_article.status == 'revision_approved'

    def test_reject(self, admin, rejected_article, pending_request):
        request = workflow.reject_revision(admin, rejected_article, 'Not worth another pass')

        assert request.status == RevisionRequest.REJECTED
        assert request.rejection_reason == 'Not worth another pass'
        rejected_article.refresh_from_db()
        assert rejected_article.status == 'rejected'

    def test_reject_needs_reason(self, admin, rejected_article, pending_request):
        with pytest.raises(ValidationFailed):
            workflow.reject_revision(admin, rejected_article, None)

    def test_approve_without_pending(self, admin, rejected_article):
        with pytest.raises(NotFoundError):
            workflow.approve_revision(admin, rejected_article)

    def test_author_cannot_approve(self, author, rejected_article, pending_request):
        with pytest.raises(UnauthorizedError):
            workflow.approve_revision(author, rejected_article)


# ============================================================================
# Completion
# ============================================================================

@pytest.mark.django_db
class TestCompletion:
    """Test complete_revision."""

    def test_complete_returns_to_draft(self, admin, author, rejected_article, pending_request):
        workflow.approve_revision(admin, rejected_article)

        article = workflow.complete_revision(author, pending_request)

        assert article.status == 'draft'
        pending_request.refresh_from_db()
        assert pending_request.status == RevisionRequest.APPROVED

    def test_complete_by_id(self, author, pending_request):
        article = workflow.complete_revision(author, str(pending_request.pk))
        assert article.status == 'draft'

    def test_complete_rejected_request(self, admin, author, rejected_article, pending_request):
        workflow.reject_revision(admin, rejected_article, 'No')

        with pytest.raises(NotPending):
            workflow.complete_revision(author, pending_request)

    def test_only_target_completes(self, other_author, pending_request):
        with pytest.raises(UnauthorizedError):
            workflow.complete_revision(other_author, pending_request)

    def test_author_can_resubmit_after_completion(self, author, pending_request):
        article = workflow.complete_revision(author, pending_request)
        article = workflow.submit_article(author, article)

        assert article.status == 'submitted'


# ============================================================================
# Admin-opened Requests
# ============================================================================

@pytest.mark.django_db
class TestAdminOpenedRequests:
    """Test open / respond / decline."""

    def test_open_request(self, admin, author_user, submitted_article):
        request = workflow.open_revision_request(admin, submitted_article, REASON)

        submitted_article.refresh_from_db()
        assert submitted_article.status == 'revision_requested'
        assert request.requested_by_id == admin.id
        assert request.requested_from_id == author_user.pk

    def test_one_pending_per_article(self, admin, submitted_article):
        workflow.open_revision_request(admin, submitted_article, REASON)

        with pytest.raises(DuplicatePendingRequest):
            workflow.open_revision_request(admin, submitted_article, REASON)

    def test_author_cannot_open(self, author, submitted_article):
        with pytest.raises(UnauthorizedError):
            workflow.open_revision_request(author, submitted_article, REASON)

    def test_target_responds(self, admin, author, submitted_article):
        request = workflow.open_revision_request(admin, submitted_article, REASON)

        request = workflow.respond_to_revision_request(author, request.pk)

        assert request.status == RevisionRequest.APPROVED
        submitted_article.refresh_from_db()
        assert submitted_article.status == 'revision_requested'

    def test_admin_cannot_respond(self, admin, submitted_article):
        request = workflow.open_revision_request(admin, submitted_article, REASON)

        with pytest.raises(UnauthorizedError):
            workflow.respond_to_revision_request(admin, request)

    def test_decline_then_respond(self, admin, author, submitted_article):
        request = workflow.open_revision_request(admin, submitted_article, REASON)
        workflow.decline_revision_request(admin, request, 'Opened by mistake')

        with pytest.raises(NotPending):
            workflow.respond_to_revision_request(author, request)

    def test_author_cannot_decline(self, admin, author, submitted_article):
        request = workflow.open_revision_request(admin, submitted_article, REASON)

        with pytest.raises(UnauthorizedError):
            workflow.decline_revision_request(author, request, 'No thanks')

    def test_requests_for_author(self, admin, author, other_author, submitted_article):
        workflow.open_revision_request(admin, submitted_article, REASON)

        assert workflow.revision_requests_for(author).count() == 1
        assert workflow.revision_requests_for(other_author).count() == 0

    def test_unknown_request(self, author, db):
        with pytest.raises(NotFoundError):
            workflow.respond_to_revision_request(author, 'nope')


# ============================================================================
# Lock Ordering
# ============================================================================

@pytest.mark.django_db
class TestLockOrdering:
    """Request operations lock the article before the request row."""

    def test_complete_locks_article_first(self, author, pending_request):
        calls = []
        lock_article = workflow._lock
        get_request = workflow.revisions.get

        def lock(article):
            calls.append('article')
            return lock_article(article)

        def get(request_id, for_update=False):
            if for_update:
                calls.append('request')
            return get_request(request_id, for_update=for_update)

        with patch.object(workflow, '_lock', side_effect=lock), \
                patch.object(workflow.revisions, 'get', side_effect=get):
            workflow.complete_revision(author, pending_request)

        assert calls == ['article', 'request']
