"""
Immutable numbered content snapshots.

``Article.version`` always mirrors the number of the newest ArticleVersion;
both are written together inside the caller's transaction.
"""

import logging
from typing import List

from apps.core.exceptions import NotFoundError
from .diff import diff_engine
from .models import ArticleVersion

logger = logging.getLogger(__name__)


class VersionStore:
    """Creates and reads ArticleVersion rows."""

    def initial(self, article, created_by_id, summary='Initial version') -> ArticleVersion:
        version = ArticleVersion.objects.create(
            article=article,
            content=article.content,
            version_number=1,
            changes_summary=summary,
            created_by_id=created_by_id,
        )
        if article.version != 1:
            article.version = 1
            article.save(update_fields=['version', 'updated_at'])
        return version

    def snapshot(self, article, content, created_by_id, summary='') -> ArticleVersion:
        """
        Record ``content`` as version N+1 and bump ``article.version``.

        Does not touch ``article.content``; callers decide whether the
        snapshot becomes the live content.
        """
        number = self.latest_number(article) + 1
        version = ArticleVersion.objects.create(
            article=article,
            content=content,
            version_number=number,
            changes_summary=summary,
            created_by_id=created_by_id,
        )
        article.version = number
        article.save(update_fields=['version', 'updated_at'])

        logger.info(f"Article {article.pk} now at version {number}")
        return version

    def latest_number(self, article) -> int:
        latest = (
            ArticleVersion.objects.filter(article=article)
            .order_by('-version_number')
            .values_list('version_number', flat=True)
            .first()
        )
        return latest or 0

    def history(self, article) -> List[ArticleVersion]:
        """All versions, newest first."""
        return list(ArticleVersion.objects.filter(article=article).order_by('-version_number'))

    def get(self, article, version_number) -> ArticleVersion:
        try:
            return ArticleVersion.objects.get(article=article, version_number=version_number)
        except ArticleVersion.DoesNotExist:
            raise NotFoundError(
                f"Version {version_number} not found for this article",
                details={'version_number': version_number},
            )

    def compare(self, article, from_number, to_number):
        old = self.get(article, from_number)
        new = self.get(article, to_number)
        return diff_engine.line_changes(old.content, new.content)
