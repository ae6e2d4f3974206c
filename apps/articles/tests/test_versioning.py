"""
Tests for VersionStore and article version bookkeeping.
"""

import pytest

from apps.articles.models import ArticleVersion
from apps.articles.services import workflow
from apps.core.exceptions import NotFoundError


def assert_version_in_sync(article):
    """Article.version should equal the highest ArticleVersion number."""
    article.refresh_from_db()
    numbers = ArticleVersion.objects.filter(article=article).values_list('version_number', flat=True)
    assert article.version == max(numbers)


@pytest.mark.django_db
class TestVersionStore:
    """Test version creation and lookups."""

    def test_create_makes_version_one(self, draft_article):
        versions = workflow.versions.history(draft_article)

        assert [v.version_number for v in versions] == [1]
        assert versions[0].content == draft_article.content
        assert versions[0].changes_summary == 'Initial version'
        assert draft_article.version == 1

    def test_snapshot_increments(self, author, draft_article):
        version = workflow.versions.snapshot(draft_article, 'Second body', author.id, 'Edited')

        assert version.version_number == 2
        assert_version_in_sync(draft_article)

    def test_snapshot_leaves_content(self, author, draft_article):
        original = draft_article.content
        workflow.versions.snapshot(draft_article, 'Other body', author.id)

        draft_article.refresh_from_db()
        assert draft_article.content == original

    def test_history_newest_first(self, author, draft_article):
        workflow.versions.snapshot(draft_article, 'v2', author.id)
        workflow.versions.snapshot(draft_article, 'v3', author.id)

        numbers = [v.version_number for v in workflow.versions.history(draft_article)]
        assert numbers == [3, 2, 1]

    def test_get_missing_version(self, draft_article):
        with pytest.raises(NotFoundError):
            workflow.versions.get(draft_article, 7)

    def test_compare_is_line_oriented(self, author, draft_article):
        """Comparing a\\nb\\nc with a\\nX\\nc should give one entry for line 2."""
        workflow.versions.snapshot(draft_article, "a\nb\nc", author.id)
        workflow.versions.snapshot(draft_article, "a\nX\nc", author.id)

        diffs = workflow.compare_versions(draft_article, 2, 3)

        assert [d.to_dict() for d in diffs] == [
            {'line': 2, 'old': 'b', 'new': 'X', 'type': 'modified'},
        ]


@pytest.mark.django_db
class TestUpdateVersioning:
    """Direct edits create a version only when content changes."""

    def test_changed_content_bumps_version(self, author, draft_article):
        article = workflow.update_article(author, draft_article, content='A rewritten body')

        assert article.version == 2
        assert article.content == 'A rewritten body'
        assert workflow.versions.get(article, 2).changes_summary == 'Article updated'
        assert_version_in_sync(article)

    def test_unchanged_content_keeps_version(self, author, draft_article):
        article = workflow.update_article(author, draft_article, content=draft_article.content)

        assert article.version == 1
        assert ArticleVersion.objects.filter(article=article).count() == 1

    def test_title_only_keeps_version(self, author, draft_article):
        article = workflow.update_article(author, draft_article, title='A better headline')

        assert article.title == 'A better headline'
        assert article.version == 1

    def test_version_in_sync_after_mixed_operations(self, admin, author, draft_article):
        workflow.update_article(author, draft_article, content='Edit one')
        workflow.track_changes(admin, draft_article, 'Edit one', 'Edit one, extended')
        workflow.update_article(author, draft_article, content='Edit two')

        assert_version_in_sync(draft_article)
        draft_article.refresh_from_db()
        assert draft_article.version == 4
