"""
Change approval ledger.

Tracked changes start ``pending`` and move once, to ``approved`` or
``rejected``. Bulk operations act on every pending record of an article.
"""

import logging
from typing import Iterable, List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from apps.core.exceptions import NotPending, NotFoundError, ValidationFailed
from .diff import DocumentChange
from .models import ChangeRecord

logger = logging.getLogger(__name__)


class ChangeApprovalLedger:

    def record_pending(self, article, version, changes: Iterable[DocumentChange]) -> List[ChangeRecord]:
        records = [
            ChangeRecord.objects.create(
                article=article,
                version=version,
                change_type=change.change_type,
                old_text=change.old_text,
                new_text=change.new_text,
                position=change.position,
                status=ChangeRecord.PENDING,
            )
            for change in changes
        ]
        logger.info(f"Recorded {len(records)} pending change(s) for article {article.pk}")
        return records

    def get(self, change_id, for_update=False) -> ChangeRecord:
        queryset = ChangeRecord.objects.select_related('article')
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=change_id)
        except (ChangeRecord.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError("Change record not found", details={'change_id': str(change_id)})

    def approve(self, change: ChangeRecord, approver_id) -> ChangeRecord:
        self._ensure_pending(change)
        change.status = ChangeRecord.APPROVED
        change.reviewed_by_id = approver_id
        change.reviewed_at = timezone.now()
        change.save(update_fields=['status', 'reviewed_by', 'reviewed_at', 'updated_at'])
        return change

    def reject(self, change: ChangeRecord, approver_id, reason: Optional[str]) -> ChangeRecord:
        if not reason or not reason.strip():
            raise ValidationFailed("A rejection reason is required", field='reason')
        self._ensure_pending(change)
        change.status = ChangeRecord.REJECTED
        change.reviewed_by_id = approver_id
        change.reviewed_at = timezone.now()
        change.rejection_reason = reason
        change.save(update_fields=[
            'status', 'reviewed_by', 'reviewed_at', 'rejection_reason', 'updated_at',
        ])
        return change

    def approve_all(self, article, approver_id) -> int:
        """Approve every pending record of the article. Returns the count."""
        return self.pending(article).update(
            status=ChangeRecord.APPROVED,
            reviewed_by_id=approver_id,
            reviewed_at=timezone.now(),
            updated_at=timezone.now(),
        )

    def reject_all(self, article, approver_id, reason: str = '') -> int:
        return self.pending(article).update(
            status=ChangeRecord.REJECTED,
            reviewed_by_id=approver_id,
            reviewed_at=timezone.now(),
            rejection_reason=reason or '',
            updated_at=timezone.now(),
        )

    def pending(self, article):
        return ChangeRecord.objects.filter(article=article, status=ChangeRecord.PENDING)

    def pending_count(self, article) -> int:
        return self.pending(article).count()

    def for_article(self, article, status: Optional[str] = None):
        queryset = ChangeRecord.objects.filter(article=article).order_by('created_at')
        if status:
            if status not in dict(ChangeRecord.STATUS_CHOICES):
                raise ValidationFailed(f"Unknown change status: {status}", field='status')
            queryset = queryset.filter(status=status)
        return queryset

    def _ensure_pending(self, change: ChangeRecord):
        if not change.is_pending:
            raise NotPending(
                f"Change already {change.status}",
                details={'change_id': str(change.pk), 'status': change.status},
            )
