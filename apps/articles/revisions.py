"""
Revision request ledger.

At most one ``pending`` request exists per article at a time.
"""

import logging
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from apps.core.exceptions import (
    DuplicatePendingRequest,
    NotFoundError,
    NotPending,
    ValidationFailed,
)
from .models import RevisionRequest

logger = logging.getLogger(__name__)


def require_reason(reason: Optional[str], field='reason') -> str:
    if not reason or not reason.strip():
        raise ValidationFailed("A reason is required", field=field)
    return reason.strip()


class RevisionRequestLedger:

    def create(self, article, requested_by_id, requested_from_id, reason) -> RevisionRequest:
        reason = require_reason(reason)
        if self.pending_for(article):
            raise DuplicatePendingRequest(details={'article_id': str(article.pk)})

        request = RevisionRequest.objects.create(
            article=article,
            requested_by_id=requested_by_id,
            requested_from_id=requested_from_id,
            reason=reason,
            status=RevisionRequest.PENDING,
        )
        logger.info(f"Revision request {request.pk} opened for article {article.pk}")
        return request

    def get(self, request_id, for_update=False) -> RevisionRequest:
        queryset = RevisionRequest.objects.select_related('article')
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=request_id)
        except (RevisionRequest.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError("Revision request not found")

    def pending_for(self, article) -> Optional[RevisionRequest]:
        return (
            RevisionRequest.objects
            .filter(article=article, status=RevisionRequest.PENDING)
            .order_by('-requested_at')
            .first()
        )

    def require_pending_for(self, article) -> RevisionRequest:
        request = self.pending_for(article)
        if request is None:
            raise NotFoundError(
                "No pending revision request found",
                details={'article_id': str(article.pk)},
            )
        return request

    def approve(self, request: RevisionRequest) -> RevisionRequest:
        self._ensure_pending(request)
        request.status = RevisionRequest.APPROVED
        request.responded_at = timezone.now()
        request.save(update_fields=['status', 'responded_at', 'updated_at'])
        return request

    def reject(self, request: RevisionRequest, reason: Optional[str] = None) -> RevisionRequest:
        self._ensure_pending(request)
        request.status = RevisionRequest.REJECTED
        request.responded_at = timezone.now()
        request.rejection_reason = (reason or '').strip()
        request.save(update_fields=['status', 'responded_at', 'rejection_reason', 'updated_at'])
        return request

    def complete(self, request: RevisionRequest) -> RevisionRequest:
        """Author finished the revision; rejected requests cannot be completed."""
        if request.status == RevisionRequest.REJECTED:
            raise NotPending(
                "Revision request was rejected",
                details={'request_id': str(request.pk), 'status': request.status},
            )
        request.status = RevisionRequest.APPROVED
        if request.responded_at is None:
            request.responded_at = timezone.now()
        request.save(update_fields=['status', 'responded_at', 'updated_at'])
        return request

    def for_author(self, author_id, status: Optional[str] = None):
        queryset = RevisionRequest.objects.filter(requested_from_id=author_id).select_related('article')
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    def _ensure_pending(self, request: RevisionRequest):
        if not request.is_pending:
            raise NotPending(
                f"Revision request already {request.status}",
                details={'request_id': str(request.pk), 'status': request.status},
            )
