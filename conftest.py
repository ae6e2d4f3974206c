"""
Shared fixtures for PublishDesk tests.

One user per editorial role, their actors, and a draft article owned by
the author.
"""

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.core.permissions import Actor

BODY = (
    "Port congestion eased this week as carriers restored weekly sailings "
    "between the main hubs."
)


def make_user(username, role):
    user = get_user_model().objects.create_user(
        username=username,
        email=f'{username}@example.com',
        password='test-pass-1234',
    )
    profile = user.editorial_profile
    profile.role = role
    profile.save()
    return user


# ============================================================================
# Users and actors
# ============================================================================

@pytest.fixture
def admin_user(db):
    return make_user('editor', 'admin')


@pytest.fixture
def author_user(db):
    return make_user('writer', 'author')


@pytest.fixture
def other_author_user(db):
    return make_user('other_writer', 'author')


@pytest.fixture
def reviewer_user(db):
    return make_user('checker', 'reviewer')


@pytest.fixture
def second_reviewer_user(db):
    return make_user('second_checker', 'reviewer')


@pytest.fixture
def admin(admin_user):
    return Actor.from_user(admin_user)


@pytest.fixture
def author(author_user):
    return Actor.from_user(author_user)


@pytest.fixture
def other_author(other_author_user):
    return Actor.from_user(other_author_user)


@pytest.fixture
def reviewer(reviewer_user):
    return Actor.from_user(reviewer_user)


@pytest.fixture
def second_reviewer(second_reviewer_user):
    return Actor.from_user(second_reviewer_user)


# ============================================================================
# Articles
# ============================================================================

@pytest.fixture
def draft_article(author):
    from apps.articles.services import workflow
    return workflow.create_article(author, 'Shipping lanes reopen', BODY)


@pytest.fixture
def submitted_article(author, draft_article):
    from apps.articles.services import workflow
    return workflow.submit_article(author, draft_article)


@pytest.fixture
def reviewed_article(admin, reviewer_user, submitted_article):
    """Article under review with ``reviewer_user`` holding the assignment."""
    from apps.articles.services import workflow
    workflow.assign_reviewer(admin, submitted_article, reviewer_user.pk)
    submitted_article.refresh_from_db()
    return submitted_article


@pytest.fixture
def api_client():
    return APIClient()
