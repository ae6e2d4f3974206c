"""
Tests for capability checks in the entity policies.
"""

import pytest

from apps.articles.models import Article, RevisionRequest
from apps.articles.policies import article_policy, revision_policy
from apps.core.exceptions import UnauthorizedError
from apps.core.permissions import Actor, Role


def article_with_status(author_user, status):
    return Article.objects.create(
        title='Policy subject', content='Body', status=status, author=author_user,
    )


# ============================================================================
# Article Policy
# ============================================================================

@pytest.mark.django_db
class TestArticleView:
    """Test who may view an article."""

    def test_owner_admin_and_assigned_reviewer(self, admin, author, reviewer, reviewed_article):
        assert article_policy.can_view(author, reviewed_article)
        assert article_policy.can_view(admin, reviewed_article)
        assert article_policy.can_view(reviewer, reviewed_article)

    def test_unassigned_reviewer_and_other_author(self, other_author, second_reviewer, reviewed_article):
        assert not article_policy.can_view(other_author, reviewed_article)
        assert not article_policy.can_view(second_reviewer, reviewed_article)


@pytest.mark.django_db
class TestArticleEditWindows:
    """Test update and delete windows per status."""

    @pytest.mark.parametrize('status, allowed', [
        ('draft', True),
        ('revision_requested', True),
        ('submitted', False),
        ('approved', False),
    ])
    def test_author_update(self, author, author_user, status, allowed):
        article = article_with_status(author_user, status)
        assert article_policy.can_update(author, article) is allowed

    @pytest.mark.parametrize('status, allowed', [
        ('draft', True),
        ('approved', True),
        ('published', False),
    ])
    def test_admin_update_and_delete(self, admin, author_user, status, allowed):
        article = article_with_status(author_user, status)
        assert article_policy.can_update(admin, article) is allowed
        assert article_policy.can_delete(admin, article) is allowed

    def test_author_delete_only_draft(self, author, author_user):
        assert article_policy.can_delete(author, article_with_status(author_user, 'draft'))
        assert not article_policy.can_delete(author, article_with_status(author_user, 'revision_requested'))

    def test_non_owner_cannot_update(self, other_author, author_user):
        assert not article_policy.can_update(other_author, article_with_status(author_user, 'draft'))


@pytest.mark.django_db
class TestArticleRoles:
    """Test admin-only and owner-only capabilities."""

    def test_admin_only(self, admin, author, reviewer, draft_article):
        for capability in ('approve', 'reject', 'assign_reviewer', 'publish'):
            check = getattr(article_policy, f'can_{capability}')
            assert check(admin, draft_article)
            assert not check(author, draft_article)
            assert not check(reviewer, draft_article)

    def test_submit_owner_only(self, author, other_author, admin, draft_article):
        assert article_policy.can_submit(author, draft_article)
        assert not article_policy.can_submit(other_author, draft_article)
        assert not article_policy.can_submit(admin, draft_article)

    def test_authorize_raises(self, reviewer, draft_article):
        with pytest.raises(UnauthorizedError) as exc_info:
            article_policy.authorize('publish', reviewer, draft_article)

        assert exc_info.value.error_details == {'capability': 'publish'}
        assert exc_info.value.status_code == 403

    def test_authorize_custom_message(self, reviewer, draft_article):
        with pytest.raises(UnauthorizedError, match='Admins only'):
            article_policy.authorize('publish', reviewer, draft_article, message='Admins only')

    def test_comment_needs_any_assignment(self, admin, reviewer, second_reviewer, reviewed_article):
        assert article_policy.can_comment(admin, reviewed_article)
        assert article_policy.can_comment(reviewer, reviewed_article)
        assert not article_policy.can_comment(second_reviewer, reviewed_article)


# ============================================================================
# Revision Request Policy
# ============================================================================

@pytest.mark.django_db
class TestRevisionRequestPolicy:
    """Test capabilities on revision requests."""

    @pytest.fixture
    def request_obj(self, admin_user, author_user, draft_article):
        return RevisionRequest.objects.create(
            article=draft_article,
            requested_by=admin_user,
            requested_from=author_user,
            reason='Please revise',
        )

    def test_target_approves_and_completes(self, author, request_obj):
        assert revision_policy.can_approve(author, request_obj)
        assert revision_policy.can_complete(author, request_obj)
        assert not revision_policy.can_reject(author, request_obj)

    def test_admin_rejects_and_creates(self, admin, request_obj):
        assert revision_policy.can_reject(admin, request_obj)
        assert revision_policy.can_create(admin)
        assert not revision_policy.can_approve(admin, request_obj)

    def test_view(self, admin, author, other_author, request_obj):
        assert revision_policy.can_view(admin, request_obj)
        assert revision_policy.can_view(author, request_obj)
        assert not revision_policy.can_view(other_author, request_obj)


class TestActorRoles:
    """Actors built directly, without a database."""

    def test_role_flags(self):
        actor = Actor(id=1, role=Role.REVIEWER)
        assert actor.is_reviewer
        assert not actor.is_admin
        assert not actor.is_author
