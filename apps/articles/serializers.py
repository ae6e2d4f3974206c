"""
Article API serializers.

Output serializers render models; input serializers validate request
bodies before they reach ``ArticleWorkflow``.
"""

from rest_framework import serializers

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
from .state_machine import ArticleStatus

HEX_COLOR_REGEX = r'^#[0-9A-Fa-f]{6}$'


class UserSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)


# ============================================================================
# Output Serializers
# ============================================================================

class ArticleListSerializer(serializers.ModelSerializer):
    """Compact serializer for article lists."""

    author = UserSummarySerializer(read_only=True)
    status_label = serializers.SerializerMethodField()

    class Meta:
        model = Article
        fields = [
            'id',
            'title',
            'status',
            'status_label',
            'version',
            'author',
            'published_at',
            'created_at',
            'updated_at',
        ]

    def get_status_label(self, obj):
        return obj.status_enum.label


class ArticleDetailSerializer(ArticleListSerializer):
    """Full article with content and review context."""

    pending_changes_count = serializers.SerializerMethodField()
    active_reviewers = serializers.SerializerMethodField()

    class Meta(ArticleListSerializer.Meta):
        fields = ArticleListSerializer.Meta.fields + [
            'content',
            'rejection_reason',
            'pending_changes_count',
            'active_reviewers',
        ]

    def get_pending_changes_count(self, obj):
        return obj.change_records.filter(status=ChangeRecord.PENDING).count()

    def get_active_reviewers(self, obj):
        return [
            str(reviewer_id) for reviewer_id in obj.review_assignments
            .filter(status=ReviewAssignment.ASSIGNED)
            .values_list('reviewer_id', flat=True)
        ]


class ArticleVersionSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = ArticleVersion
        fields = ['id', 'version_number', 'content', 'changes_summary', 'created_by', 'created_at']


class ArticleVersionListSerializer(serializers.ModelSerializer):
    """Version history rows without the content snapshot."""

    class Meta:
        model = ArticleVersion
        fields = ['id', 'version_number', 'changes_summary', 'created_by', 'created_at']


class ChangeRecordSerializer(serializers.ModelSerializer):
    version_number = serializers.IntegerField(source='version.version_number', read_only=True)

    class Meta:
        model = ChangeRecord
        fields = [
            'id',
            'article',
            'version',
            'version_number',
            'change_type',
            'old_text',
            'new_text',
            'position',
            'status',
            'reviewed_by',
            'reviewed_at',
            'rejection_reason',
            'created_at',
        ]


class ReviewAssignmentSerializer(serializers.ModelSerializer):
    article_title = serializers.CharField(source='article.title', read_only=True)
    article_status = serializers.CharField(source='article.status', read_only=True)

    class Meta:
        model = ReviewAssignment
        fields = [
            'id',
            'article',
            'article_title',
            'article_status',
            'reviewer',
            'assigned_by',
            'status',
            'assigned_at',
            'completed_at',
        ]


class ReviewDecisionSerializer(serializers.ModelSerializer):

    class Meta:
        model = ReviewDecision
        fields = ['id', 'article', 'reviewer', 'assignment', 'decision', 'feedback', 'created_at']


class RevisionRequestSerializer(serializers.ModelSerializer):
    article_title = serializers.CharField(source='article.title', read_only=True)

    class Meta:
        model = RevisionRequest
        fields = [
            'id',
            'article',
            'article_title',
            'requested_by',
            'requested_from',
            'reason',
            'status',
            'requested_at',
            'responded_at',
            'rejection_reason',
        ]


class CommentSerializer(serializers.ModelSerializer):

    class Meta:
        model = Comment
        fields = [
            'id',
            'article',
            'reviewer',
            'selected_text',
            'comment_text',
            'highlight_color',
            'start_position',
            'end_position',
            'status',
            'created_at',
            'updated_at',
        ]


class StatusChangeSerializer(serializers.ModelSerializer):

    class Meta:
        model = ArticleStatusChange
        fields = ['from_status', 'to_status', 'action', 'actor', 'note', 'created_at']


class LineDiffSerializer(serializers.Serializer):
    line = serializers.IntegerField()
    old = serializers.CharField(allow_blank=True)
    new = serializers.CharField(allow_blank=True)
    type = serializers.CharField()


# ============================================================================
# Input Serializers
# ============================================================================

class ArticleCreateSerializer(serializers.Serializer):
    title = serializers.CharField(min_length=5, max_length=255)
    content = serializers.CharField(min_length=50)


class ArticleUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(min_length=5, max_length=255, required=False)
    content = serializers.CharField(min_length=50, required=False)


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True, required=False, default='')


class AssignReviewerSerializer(serializers.Serializer):
    reviewer_id = serializers.IntegerField()


class ReviewDecisionInputSerializer(serializers.Serializer):
    """Shape only; feedback length rules live in the workflow."""

    decision = serializers.ChoiceField(choices=ReviewDecision.DECISION_CHOICES)
    feedback = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class TrackChangesSerializer(serializers.Serializer):
    old_content = serializers.CharField(min_length=50)
    new_content = serializers.CharField(min_length=50)


class RevisionRequestCreateSerializer(serializers.Serializer):
    article_id = serializers.UUIDField()
    reason = serializers.CharField(min_length=10, max_length=500)


class CommentCreateSerializer(serializers.Serializer):
    comment_text = serializers.CharField(min_length=3, max_length=1000)
    selected_text = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    highlight_color = serializers.RegexField(HEX_COLOR_REGEX, required=False, default='#FFFF00')
    start_position = serializers.IntegerField(min_value=0, required=False, default=0)
    end_position = serializers.IntegerField(min_value=0, required=False, default=0)


class CommentUpdateSerializer(serializers.Serializer):
    comment_text = serializers.CharField(min_length=3, max_length=1000, required=False)
    selected_text = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    highlight_color = serializers.RegexField(HEX_COLOR_REGEX, required=False)
    start_position = serializers.IntegerField(min_value=0, required=False)
    end_position = serializers.IntegerField(min_value=0, required=False)
    status = serializers.ChoiceField(choices=Comment.STATUS_CHOICES, required=False)


class CompareVersionsSerializer(serializers.Serializer):
    version_from = serializers.IntegerField(min_value=1)
    version_to = serializers.IntegerField(min_value=1)


class ChangeStatusFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ChangeRecord.STATUS_CHOICES, required=False)


class ArticleStatusFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ArticleStatus.choices(), required=False)
