"""
Article models for PublishDesk.
Articles, their immutable versions, and the side records created by the
editorial workflow (tracked changes, review assignments and decisions,
revision requests, reviewer comments, status history).
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.models import BaseModel
from .state_machine import ArticleStatus


class ArticleQuerySet(models.QuerySet):

    def alive(self):
        return self.filter(deleted_at__isnull=True)

    def visible_to(self, actor):
        """Articles the actor may list: own (author), actively assigned (reviewer), all (admin)."""
        if actor.is_admin:
            return self
        if actor.is_reviewer:
            return self.filter(
                review_assignments__reviewer_id=actor.id,
                review_assignments__status=ReviewAssignment.ASSIGNED,
            ).distinct()
        return self.filter(author_id=actor.id)


class ArticleManager(models.Manager.from_queryset(ArticleQuerySet)):
    """Default manager; hides soft-deleted articles."""

    def get_queryset(self):
        return super().get_queryset().alive()


class Article(BaseModel):
    """
    A content item moving through the editorial pipeline.
    """

    title = models.CharField(
        max_length=255,
        verbose_name='Title',
        help_text='Article title'
    )

    content = models.TextField(
        blank=True,
        verbose_name='Content',
        help_text='Current article body'
    )

    status = models.CharField(
        max_length=30,
        choices=ArticleStatus.choices(),
        default=ArticleStatus.DRAFT.value,
        db_index=True,
        verbose_name='Status',
        help_text='Current workflow status'
    )

    version = models.PositiveIntegerField(
        default=1,
        verbose_name='Version',
        help_text='Number of the most recent ArticleVersion'
    )

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='articles',
        verbose_name='Author',
        help_text='Owning author'
    )

    rejection_reason = models.TextField(
        blank=True,
        verbose_name='Rejection Reason',
        help_text='Reason given by the admin on the last rejection'
    )

    published_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Published At',
        help_text='When the article was published'
    )

    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name='Deleted At',
        help_text='Soft-delete timestamp'
    )

    objects = ArticleManager()
    all_objects = ArticleQuerySet.as_manager()

    class Meta:
        db_table = 'articles'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['author', 'status'], name='article_author_status_idx'),
        ]
        verbose_name = 'Article'
        verbose_name_plural = 'Articles'

    def __str__(self):
        return f"{self.title[:50]} (v{self.version}, {self.status})"

    @property
    def status_enum(self) -> ArticleStatus:
        return ArticleStatus.from_string(self.status)

    @property
    def is_deleted(self):
        return self.deleted_at is not None


class ArticleVersion(BaseModel):
    """
    Immutable numbered snapshot of article content.
    """

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='versions',
        verbose_name='Article'
    )

    content = models.TextField(
        blank=True,
        verbose_name='Content',
        help_text='Content snapshot'
    )

    version_number = models.PositiveIntegerField(
        verbose_name='Version Number',
        help_text='Strictly increasing per article, starts at 1'
    )

    changes_summary = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Changes Summary'
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='article_versions',
        verbose_name='Created By'
    )

    class Meta:
        db_table = 'article_versions'
        ordering = ['-version_number']
        constraints = [
            models.UniqueConstraint(
                fields=['article', 'version_number'],
                name='unique_article_version_number',
            ),
        ]
        verbose_name = 'Article Version'
        verbose_name_plural = 'Article Versions'

    def __str__(self):
        return f"{self.article_id} v{self.version_number}"


class ChangeRecord(BaseModel):
    """
    A tracked content delta awaiting admin approval.
    """

    ADD = 'add'
    DELETE = 'delete'
    MODIFY = 'modify'
    CHANGE_TYPE_CHOICES = [
        (ADD, 'Add'),
        (DELETE, 'Delete'),
        (MODIFY, 'Modify'),
    ]

    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
    ]

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='change_records',
        verbose_name='Article'
    )

    version = models.ForeignKey(
        ArticleVersion,
        on_delete=models.CASCADE,
        related_name='change_records',
        verbose_name='Originating Version'
    )

    change_type = models.CharField(
        max_length=10,
        choices=CHANGE_TYPE_CHOICES,
        verbose_name='Change Type'
    )

    old_text = models.TextField(null=True, blank=True, verbose_name='Old Text')
    new_text = models.TextField(null=True, blank=True, verbose_name='New Text')

    position = models.PositiveIntegerField(default=0, verbose_name='Position')

    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=PENDING,
        db_index=True,
        verbose_name='Status'
    )

    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_changes',
        verbose_name='Reviewed By',
        help_text='Admin who approved or rejected the change'
    )

    reviewed_at = models.DateTimeField(null=True, blank=True, verbose_name='Reviewed At')

    rejection_reason = models.TextField(blank=True, verbose_name='Rejection Reason')

    class Meta:
        db_table = 'change_records'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['article', 'status'], name='change_article_status_idx'),
        ]
        verbose_name = 'Change Record'
        verbose_name_plural = 'Change Records'

    def __str__(self):
        return f"{self.change_type} @{self.position} ({self.status})"

    @property
    def is_pending(self):
        return self.status == self.PENDING


class ReviewAssignment(BaseModel):
    """
    A reviewer's responsibility for an article.
    """

    ASSIGNED = 'assigned'
    COMPLETED = 'completed'
    STATUS_CHOICES = [
        (ASSIGNED, 'Assigned'),
        (COMPLETED, 'Completed'),
    ]

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='review_assignments',
        verbose_name='Article'
    )

    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='review_assignments',
        verbose_name='Reviewer'
    )

    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='assignments_made',
        verbose_name='Assigned By'
    )

    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=ASSIGNED,
        db_index=True,
        verbose_name='Status'
    )

    assigned_at = models.DateTimeField(default=timezone.now, verbose_name='Assigned At')
    completed_at = models.DateTimeField(null=True, blank=True, verbose_name='Completed At')

    class Meta:
        db_table = 'review_assignments'
        ordering = ['-assigned_at']
        indexes = [
            models.Index(fields=['article', 'reviewer', 'status'], name='assignment_lookup_idx'),
        ]
        verbose_name = 'Review Assignment'
        verbose_name_plural = 'Review Assignments'

    def __str__(self):
        return f"{self.reviewer_id} → {self.article_id} ({self.status})"

    @property
    def is_active(self):
        return self.status == self.ASSIGNED


class ReviewDecision(BaseModel):
    """
    A reviewer's verdict. Append-only.
    """

    ACCEPT = 'accept'
    REJECT = 'reject'
    REQUEST_REVISION = 'request_revision'
    DECISION_CHOICES = [
        (ACCEPT, 'Accepted'),
        (REJECT, 'Rejected'),
        (REQUEST_REVISION, 'Revision Requested'),
    ]

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='review_decisions',
        verbose_name='Article'
    )

    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='review_decisions',
        verbose_name='Reviewer'
    )

    assignment = models.ForeignKey(
        ReviewAssignment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='decisions',
        verbose_name='Assignment',
        help_text='Assignment completed by this decision, if any'
    )

    decision = models.CharField(
        max_length=20,
        choices=DECISION_CHOICES,
        verbose_name='Decision'
    )

    feedback = models.TextField(blank=True, verbose_name='Feedback')

    class Meta:
        db_table = 'review_decisions'
        ordering = ['-created_at']
        verbose_name = 'Review Decision'
        verbose_name_plural = 'Review Decisions'

    def __str__(self):
        return f"{self.decision} by {self.reviewer_id}"


class RevisionRequest(BaseModel):
    """
    A formal ask for the author to revise an article.
    """

    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
    ]

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='revision_requests',
        verbose_name='Article'
    )

    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='revision_requests_made',
        verbose_name='Requested By'
    )

    requested_from = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='revision_requests_received',
        verbose_name='Requested From',
        help_text='Target author'
    )

    reason = models.TextField(verbose_name='Reason')

    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=PENDING,
        db_index=True,
        verbose_name='Status'
    )

    requested_at = models.DateTimeField(default=timezone.now, verbose_name='Requested At')
    responded_at = models.DateTimeField(null=True, blank=True, verbose_name='Responded At')

    rejection_reason = models.TextField(blank=True, verbose_name='Rejection Reason')

    class Meta:
        db_table = 'revision_requests'
        ordering = ['-requested_at']
        indexes = [
            models.Index(fields=['article', 'status'], name='revision_article_status_idx'),
        ]
        verbose_name = 'Revision Request'
        verbose_name_plural = 'Revision Requests'

    def __str__(self):
        return f"Revision of {self.article_id} ({self.status})"

    @property
    def is_pending(self):
        return self.status == self.PENDING


class Comment(BaseModel):
    """
    Reviewer comment anchored to a span of the article text.
    """

    PENDING = 'pending'
    ADDRESSED = 'addressed'
    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (ADDRESSED, 'Addressed'),
    ]

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='comments',
        verbose_name='Article'
    )

    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='article_comments',
        verbose_name='Reviewer'
    )

    selected_text = models.TextField(null=True, blank=True, verbose_name='Selected Text')
    comment_text = models.TextField(verbose_name='Comment')

    highlight_color = models.CharField(
        max_length=7,
        default='#FFFF00',
        verbose_name='Highlight Color'
    )

    start_position = models.PositiveIntegerField(default=0)
    end_position = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=PENDING,
        verbose_name='Status'
    )

    class Meta:
        db_table = 'article_comments'
        ordering = ['start_position', 'created_at']
        verbose_name = 'Comment'
        verbose_name_plural = 'Comments'

    def __str__(self):
        return f"{self.comment_text[:40]} ({self.status})"


class ArticleStatusChange(BaseModel):
    """
    Audit row written for every applied workflow transition.
    """

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='status_changes',
        verbose_name='Article'
    )

    from_status = models.CharField(max_length=30, verbose_name='From')
    to_status = models.CharField(max_length=30, verbose_name='To')
    action = models.CharField(max_length=40, verbose_name='Action')

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='status_changes',
        verbose_name='Actor'
    )

    note = models.TextField(blank=True, verbose_name='Note')

    class Meta:
        db_table = 'article_status_changes'
        ordering = ['created_at']
        verbose_name = 'Status Change'
        verbose_name_plural = 'Status Changes'

    def __str__(self):
        return f"{self.from_status} → {self.to_status} ({self.action})"
