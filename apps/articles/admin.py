"""
Admin interface for articles and their workflow records.

Status is read-only here; transitions go through ArticleWorkflow.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import (
    Article,
    ArticleStatusChange,
    ArticleVersion,
    ChangeRecord,
    Comment,
    ReviewAssignment,
    ReviewDecision,
    RevisionRequest,
)

STATUS_COLORS = {
    'draft': 'gray',
    'submitted': 'steelblue',
    'under_review': 'orange',
    'revision_requested': 'darkorange',
    'rejected': 'red',
    'approved': 'green',
    'published': 'darkgreen',
}


class ArticleVersionInline(admin.TabularInline):
    model = ArticleVersion
    extra = 0
    can_delete = False
    fields = ['version_number', 'changes_summary', 'created_by', 'created_at']
    readonly_fields = fields


class StatusChangeInline(admin.TabularInline):
    model = ArticleStatusChange
    extra = 0
    can_delete = False
    fields = ['from_status', 'to_status', 'action', 'actor', 'note', 'created_at']
    readonly_fields = fields


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    """
    Admin interface for Article model.
    """

    list_display = [
        'title_short',
        'author',
        'status_badge',
        'version',
        'published_at',
        'created_at',
    ]

    list_filter = [
        'status',
        ('created_at', admin.DateFieldListFilter),
    ]

    search_fields = ['title', 'content', 'author__username']

    readonly_fields = [
        'id',
        'status',
        'version',
        'published_at',
        'deleted_at',
        'created_at',
        'updated_at',
    ]

    raw_id_fields = ['author']

    inlines = [ArticleVersionInline, StatusChangeInline]

    fieldsets = (
        ('Basic Information', {
            'fields': ('title', 'author', 'content'),
        }),
        ('Workflow', {
            'fields': ('status', 'version', 'rejection_reason', 'published_at', 'deleted_at'),
        }),
        ('System Fields', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def get_queryset(self, request):
        return Article.all_objects.select_related('author')

    def title_short(self, obj):
        """Display shortened title."""
        max_length = 60
        if len(obj.title) > max_length:
            return obj.title[:max_length] + '...'
        return obj.title
    title_short.short_description = 'Title'
    title_short.admin_order_field = 'title'

    def status_badge(self, obj):
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            STATUS_COLORS.get(obj.status, 'purple'),
            obj.status_enum.label,
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'


@admin.register(ChangeRecord)
class ChangeRecordAdmin(admin.ModelAdmin):
    list_display = ['article', 'change_type', 'position', 'status', 'reviewed_by', 'created_at']
    list_filter = ['status', 'change_type']
    raw_id_fields = ['article', 'version', 'reviewed_by']
    readonly_fields = ['status', 'reviewed_by', 'reviewed_at', 'rejection_reason']


@admin.register(ReviewAssignment)
class ReviewAssignmentAdmin(admin.ModelAdmin):
    list_display = ['article', 'reviewer', 'assigned_by', 'status', 'assigned_at', 'completed_at']
    list_filter = ['status']
    raw_id_fields = ['article', 'reviewer', 'assigned_by']


@admin.register(ReviewDecision)
class ReviewDecisionAdmin(admin.ModelAdmin):
    list_display = ['article', 'reviewer', 'decision', 'created_at']
    list_filter = ['decision']
    raw_id_fields = ['article', 'reviewer', 'assignment']


@admin.register(RevisionRequest)
class RevisionRequestAdmin(admin.ModelAdmin):
    list_display = ['article', 'requested_by', 'requested_from', 'status', 'requested_at', 'responded_at']
    list_filter = ['status']
    raw_id_fields = ['article', 'requested_by', 'requested_from']


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ['article', 'reviewer', 'status', 'start_position', 'end_position', 'created_at']
    list_filter = ['status']
    raw_id_fields = ['article', 'reviewer']
