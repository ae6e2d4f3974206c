"""
Reviewer comments anchored to spans of article text.
"""

import logging
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from apps.core.exceptions import NotFoundError, ValidationFailed
from apps.core.permissions import Actor
from .models import Article, Comment
from .policies import article_policy, comment_policy

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('comment_text', 'selected_text', 'highlight_color', 'start_position', 'end_position', 'status')


def _check_span(start: int, end: int):
    if start < 0 or end < 0:
        raise ValidationFailed("Positions must not be negative", field='start_position')
    if start > end:
        raise ValidationFailed(
            "start_position must not be after end_position",
            field='end_position',
            details={'start_position': start, 'end_position': end},
        )


class ReviewComments:

    @transaction.atomic
    def add(
        self,
        actor: Actor,
        article: Article,
        comment_text: str,
        selected_text: Optional[str] = None,
        highlight_color: str = '#FFFF00',
        start_position: int = 0,
        end_position: int = 0,
    ) -> Comment:
        article_policy.authorize('comment', actor, article, message="Not assigned as reviewer for this article")
        if not comment_text or not comment_text.strip():
            raise ValidationFailed("Comment text is required", field='comment_text')
        _check_span(start_position, end_position)

        comment = Comment.objects.create(
            article=article,
            reviewer_id=actor.id,
            comment_text=comment_text.strip(),
            selected_text=selected_text,
            highlight_color=highlight_color or '#FFFF00',
            start_position=start_position,
            end_position=end_position,
        )
        logger.debug(f"Comment {comment.pk} added to article {article.pk}")
        return comment

    @transaction.atomic
    def update(self, actor: Actor, comment: Comment, **fields) -> Comment:
        comment_policy.authorize('update', actor, comment, message="Not allowed to edit this comment")

        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationFailed(f"Cannot update: {', '.join(sorted(unknown))}")
        if fields.get('status') not in (None, Comment.PENDING, Comment.ADDRESSED):
            raise ValidationFailed(f"Unknown comment status: {fields['status']}", field='status')

        for name, value in fields.items():
            setattr(comment, name, value)
        _check_span(comment.start_position, comment.end_position)

        comment.save()
        return comment

    @transaction.atomic
    def delete(self, actor: Actor, comment: Comment):
        comment_policy.authorize('delete', actor, comment, message="Not allowed to delete this comment")
        comment.delete()

    def get(self, actor: Actor, comment_id) -> Comment:
        try:
            comment = Comment.objects.select_related('article').get(pk=comment_id)
        except (Comment.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError("Comment not found")
        comment_policy.authorize('view', actor, comment, message="Not allowed to view this comment")
        return comment

    def for_article(self, actor: Actor, article: Article):
        """Authors and admins see every comment; reviewers see their own."""
        queryset = Comment.objects.filter(article=article).select_related('reviewer')
        if actor.is_admin or article_policy.is_owner(actor, article):
            return queryset
        return queryset.filter(reviewer_id=actor.id)


review_comments = ReviewComments()
