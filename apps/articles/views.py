"""
Editorial workflow API views.

Views authenticate, build the ``Actor``, validate the request body and
hand off to ``ArticleWorkflow``. They never assign ``Article.status``.
"""

import logging

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.core.exceptions import created_response, success_response
from apps.core.permissions import Actor, IsAdmin, IsAuthorOrAdmin, IsReviewerOrAdmin

from .comments import review_comments
from .models import RevisionRequest
from .policies import revision_policy
from .serializers import (
    ArticleCreateSerializer,
    ArticleDetailSerializer,
    ArticleListSerializer,
    ArticleStatusFilterSerializer,
    ArticleUpdateSerializer,
    ArticleVersionListSerializer,
    ArticleVersionSerializer,
    AssignReviewerSerializer,
    ChangeRecordSerializer,
    ChangeStatusFilterSerializer,
    CommentCreateSerializer,
    CommentSerializer,
    CommentUpdateSerializer,
    CompareVersionsSerializer,
    LineDiffSerializer,
    ReasonSerializer,
    ReviewAssignmentSerializer,
    ReviewDecisionInputSerializer,
    ReviewDecisionSerializer,
    RevisionRequestCreateSerializer,
    RevisionRequestSerializer,
    StatusChangeSerializer,
    TrackChangesSerializer,
)
from .services import workflow

logger = logging.getLogger(__name__)


def validated(serializer_class, data):
    serializer = serializer_class(data=data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class EditorialViewMixin:
    """Actor resolution and article lookup shared by the viewsets."""

    permission_classes = [IsAuthenticated]

    @property
    def actor(self) -> Actor:
        return Actor.from_user(self.request.user)

    def load_article(self, pk):
        return workflow.get_article(self.actor, pk)

    def paginated(self, queryset, serializer_class):
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(serializer_class(page, many=True).data)
        return success_response(serializer_class(queryset, many=True).data)


class ArticleViewSet(EditorialViewMixin, viewsets.GenericViewSet):
    """
    Article workflow API.

    GET    /api/articles/                          - Articles visible to the actor
    POST   /api/articles/                          - Create (author/admin)
    GET    /api/articles/pending/                  - Awaiting admin action
    GET    /api/articles/{id}/                     - Detail
    PATCH  /api/articles/{id}/                     - Edit title/content
    DELETE /api/articles/{id}/                     - Soft delete
    POST   /api/articles/{id}/submit/              - Author submits
    POST   /api/articles/{id}/approve/             - Admin approves
    POST   /api/articles/{id}/reject/              - Admin rejects
    POST   /api/articles/{id}/assign-reviewer/     - Admin assigns
    POST   /api/articles/{id}/reassign-reviewer/   - Admin reassigns
    POST   /api/articles/{id}/review/              - Reviewer decision
    POST   /api/articles/{id}/request-revision/    - Author asks to revise
    POST   /api/articles/{id}/approve-revision/    - Admin approves revision
    POST   /api/articles/{id}/reject-revision/     - Admin rejects revision
    POST   /api/articles/{id}/publish/             - Admin publishes
    GET    /api/articles/{id}/history/             - Status history
    GET    /api/articles/{id}/versions/            - Version list
    GET    /api/articles/{id}/versions/{n}/        - One version
    GET    /api/articles/{id}/compare/?from=&to=   - Line diff
    GET    /api/articles/{id}/changes/?status=     - Tracked changes
    POST   /api/articles/{id}/track-changes/       - Record pending changes
    POST   /api/articles/{id}/changes/approve-all/ - Admin approves all pending
    POST   /api/articles/{id}/changes/reject-all/  - Admin rejects all pending
    GET    /api/articles/{id}/comments/            - Comments
    POST   /api/articles/{id}/comments/            - Add comment
    """

    serializer_class = ArticleDetailSerializer

    def get_queryset(self):
        queryset = workflow.visible_articles(self.actor)
        filters = validated(ArticleStatusFilterSerializer, self.request.query_params)
        if filters.get('status'):
            queryset = queryset.filter(status=filters['status'])
        return queryset

    def get_permissions(self):
        if self.action == 'create':
            return [IsAuthenticated(), IsAuthorOrAdmin()]
        if self.action == 'pending':
            return [IsAuthenticated(), IsAdmin()]
        return super().get_permissions()

    def list(self, request):
        return self.paginated(self.get_queryset(), ArticleListSerializer)

    def create(self, request):
        data = validated(ArticleCreateSerializer, request.data)
        article = workflow.create_article(self.actor, data['title'], data['content'])
        return created_response(ArticleDetailSerializer(article).data, "Article created successfully")

    def retrieve(self, request, pk=None):
        article = self.load_article(pk)
        return success_response(ArticleDetailSerializer(article).data)

    def partial_update(self, request, pk=None):
        data = validated(ArticleUpdateSerializer, request.data)
        article = self.load_article(pk)
        article = workflow.update_article(
            self.actor, article, content=data.get('content'), title=data.get('title'),
        )
        return success_response(ArticleDetailSerializer(article).data, "Article updated successfully")

    def update(self, request, pk=None):
        return self.partial_update(request, pk)

    def destroy(self, request, pk=None):
        article = self.load_article(pk)
        workflow.delete_article(self.actor, article)
        return success_response(None, "Article deleted successfully")

    @action(detail=False, methods=['get'])
    def pending(self, request):
        return self.paginated(workflow.pending_approval(), ArticleListSerializer)

    # ========================================================================
    # Workflow transitions
    # ========================================================================

    @action(detail=True, methods=['post'])
    def submit(self, request, pk=None):
        article = workflow.submit_article(self.actor, self.load_article(pk))
        return success_response(ArticleDetailSerializer(article).data, "Article submitted for review")

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        article = workflow.approve_article(self.actor, self.load_article(pk))
        return success_response(ArticleDetailSerializer(article).data, "Article approved")

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        data = validated(ReasonSerializer, request.data)
        article = workflow.reject_article(self.actor, self.load_article(pk), data['reason'])
        return success_response(ArticleDetailSerializer(article).data, "Article rejected")

    @action(detail=True, methods=['post'], url_path='assign-reviewer')
    def assign_reviewer(self, request, pk=None):
        data = validated(AssignReviewerSerializer, request.data)
        assignment = workflow.assign_reviewer(self.actor, self.load_article(pk), data['reviewer_id'])
        return created_response(ReviewAssignmentSerializer(assignment).data, "Reviewer assigned")

    @action(detail=True, methods=['post'], url_path='reassign-reviewer')
    def reassign_reviewer(self, request, pk=None):
        data = validated(AssignReviewerSerializer, request.data)
        assignment = workflow.reassign_reviewer(self.actor, self.load_article(pk), data['reviewer_id'])
        return created_response(ReviewAssignmentSerializer(assignment).data, "Article reassigned for review")

    @action(detail=True, methods=['post'])
    def review(self, request, pk=None):
        data = validated(ReviewDecisionInputSerializer, request.data)
        decision = workflow.submit_review(
            self.actor, self.load_article(pk), data['decision'], data.get('feedback'),
        )
        return created_response(ReviewDecisionSerializer(decision).data, "Review submitted successfully")

    @action(detail=True, methods=['post'], url_path='request-revision')
    def request_revision(self, request, pk=None):
        data = validated(ReasonSerializer, request.data)
        revision = workflow.request_revision(self.actor, self.load_article(pk), data['reason'])
        return created_response(RevisionRequestSerializer(revision).data, "Revision request submitted")

    @action(detail=True, methods=['post'], url_path='approve-revision')
    def approve_revision(self, request, pk=None):
        revision = workflow.approve_revision(self.actor, self.load_article(pk))
        return success_response(RevisionRequestSerializer(revision).data, "Revision approved")

    @action(detail=True, methods=['post'], url_path='reject-revision')
    def reject_revision(self, request, pk=None):
        data = validated(ReasonSerializer, request.data)
        revision = workflow.reject_revision(self.actor, self.load_article(pk), data['reason'])
        return success_response(RevisionRequestSerializer(revision).data, "Revision rejected")

    @action(detail=True, methods=['post'])
    def publish(self, request, pk=None):
        article = workflow.publish_article(self.actor, self.load_article(pk))
        return success_response(ArticleDetailSerializer(article).data, "Article published successfully")

    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        article = self.load_article(pk)
        return success_response(StatusChangeSerializer(article.status_changes.all(), many=True).data)

    # ========================================================================
    # Versions
    # ========================================================================

    @action(detail=True, methods=['get'])
    def versions(self, request, pk=None):
        article = self.load_article(pk)
        versions = workflow.versions.history(article)
        return success_response(ArticleVersionListSerializer(versions, many=True).data)

    @action(detail=True, methods=['get'], url_path=r'versions/(?P<version_number>\d+)')
    def version_detail(self, request, pk=None, version_number=None):
        article = self.load_article(pk)
        version = workflow.versions.get(article, int(version_number))
        return success_response(ArticleVersionSerializer(version).data)

    @action(detail=True, methods=['get'])
    def compare(self, request, pk=None):
        params = request.query_params
        data = validated(CompareVersionsSerializer, {
            'version_from': params.get('from', params.get('version_from')),
            'version_to': params.get('to', params.get('version_to')),
        })
        article = self.load_article(pk)
        changes = workflow.compare_versions(article, data['version_from'], data['version_to'])
        return success_response({
            'version_from': data['version_from'],
            'version_to': data['version_to'],
            'changes': LineDiffSerializer([c.to_dict() for c in changes], many=True).data,
        }, "Versions compared successfully")

    # ========================================================================
    # Tracked changes
    # ========================================================================

    @action(detail=True, methods=['get'])
    def changes(self, request, pk=None):
        filters = validated(ChangeStatusFilterSerializer, request.query_params)
        article = self.load_article(pk)
        changes = workflow.changes_for(article, status=filters.get('status'))
        return success_response(ChangeRecordSerializer(changes, many=True).data)

    @action(detail=True, methods=['post'], url_path='track-changes')
    def track_changes(self, request, pk=None):
        data = validated(TrackChangesSerializer, request.data)
        version, records = workflow.track_changes(
            self.actor, self.load_article(pk), data['old_content'], data['new_content'],
        )
        return created_response({
            'version': ArticleVersionListSerializer(version).data,
            'changes': ChangeRecordSerializer(records, many=True).data,
        }, "Changes tracked successfully")

    @action(detail=True, methods=['post'], url_path='changes/approve-all')
    def approve_all_changes(self, request, pk=None):
        approved = workflow.approve_all_changes(self.actor, self.load_article(pk))
        return success_response({'approved': approved}, "All pending changes approved")

    @action(detail=True, methods=['post'], url_path='changes/reject-all')
    def reject_all_changes(self, request, pk=None):
        data = validated(ReasonSerializer, request.data)
        rejected = workflow.reject_all_changes(self.actor, self.load_article(pk), data['reason'])
        return success_response({'rejected': rejected}, "All pending changes rejected")

    # ========================================================================
    # Comments
    # ========================================================================

    @action(detail=True, methods=['get', 'post'])
    def comments(self, request, pk=None):
        article = self.load_article(pk)
        if request.method == 'GET':
            comments = review_comments.for_article(self.actor, article)
            return success_response(CommentSerializer(comments, many=True).data)

        data = validated(CommentCreateSerializer, request.data)
        comment = review_comments.add(self.actor, article, **data)
        return created_response(CommentSerializer(comment).data, "Comment added successfully")


class ChangeRecordViewSet(EditorialViewMixin, viewsets.GenericViewSet):
    """
    POST /api/changes/{id}/approve/ - Admin approves one change
    POST /api/changes/{id}/reject/  - Admin rejects one change (reason required)
    """

    def get_permissions(self):
        return [IsAuthenticated(), IsAdmin()]

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        change = workflow.approve_change(self.actor, pk)
        return success_response(ChangeRecordSerializer(change).data, "Change approved successfully")

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        data = validated(ReasonSerializer, request.data)
        change = workflow.reject_change(self.actor, pk, data['reason'])
        return success_response(ChangeRecordSerializer(change).data, "Change rejected successfully")


class CommentViewSet(EditorialViewMixin, viewsets.GenericViewSet):
    """
    PATCH  /api/comments/{id}/ - Edit (comment's reviewer or admin)
    DELETE /api/comments/{id}/ - Delete (comment's reviewer or admin)
    """

    def partial_update(self, request, pk=None):
        data = validated(CommentUpdateSerializer, request.data)
        comment = review_comments.get(self.actor, pk)
        comment = review_comments.update(self.actor, comment, **data)
        return success_response(CommentSerializer(comment).data, "Comment updated successfully")

    def destroy(self, request, pk=None):
        comment = review_comments.get(self.actor, pk)
        review_comments.delete(self.actor, comment)
        return success_response(None, "Comment deleted successfully")


class ReviewAssignmentViewSet(EditorialViewMixin, viewsets.GenericViewSet):
    """
    GET  /api/assignments/mine/          - Reviewer's assignments
    POST /api/assignments/{id}/decision/ - Decision on one assignment
    """

    def get_permissions(self):
        return [IsAuthenticated(), IsReviewerOrAdmin()]

    @action(detail=False, methods=['get'])
    def mine(self, request):
        assignments = workflow.assignments_for(self.actor, status=request.query_params.get('status'))
        return self.paginated(assignments, ReviewAssignmentSerializer)

    @action(detail=True, methods=['post'])
    def decision(self, request, pk=None):
        data = validated(ReviewDecisionInputSerializer, request.data)
        assignment = workflow.reviews.get(pk)
        decision = workflow.submit_review(self.actor, assignment, data['decision'], data.get('feedback'))
        return created_response(ReviewDecisionSerializer(decision).data, "Review decision submitted successfully")


class RevisionRequestViewSet(EditorialViewMixin, viewsets.GenericViewSet):
    """
    GET  /api/revision-requests/                - All requests (admin)
    POST /api/revision-requests/                - Open a request (admin)
    GET  /api/revision-requests/mine/           - Requests addressed to the author
    GET  /api/revision-requests/{id}/           - Detail
    POST /api/revision-requests/{id}/approve/   - Target author accepts
    POST /api/revision-requests/{id}/reject/    - Admin rejects
    POST /api/revision-requests/{id}/complete/  - Target author completes
    """

    def get_permissions(self):
        if self.action in ('list', 'create'):
            return [IsAuthenticated(), IsAdmin()]
        return super().get_permissions()

    def list(self, request):
        queryset = RevisionRequest.objects.select_related('article')
        return self.paginated(queryset, RevisionRequestSerializer)

    def create(self, request):
        data = validated(RevisionRequestCreateSerializer, request.data)
        article = self.load_article(data['article_id'])
        revision = workflow.open_revision_request(self.actor, article, data['reason'])
        return created_response(RevisionRequestSerializer(revision).data, "Revision request created successfully")

    def retrieve(self, request, pk=None):
        revision = workflow.revisions.get(pk)
        revision_policy.authorize('view', self.actor, revision, message="Not allowed to view this request")
        return success_response(RevisionRequestSerializer(revision).data)

    @action(detail=False, methods=['get'])
    def mine(self, request):
        requests = workflow.revision_requests_for(self.actor, status=request.query_params.get('status'))
        return self.paginated(requests, RevisionRequestSerializer)

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        revision = workflow.respond_to_revision_request(self.actor, pk)
        return success_response(RevisionRequestSerializer(revision).data, "Revision request approved successfully")

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        data = validated(ReasonSerializer, request.data)
        revision = workflow.decline_revision_request(self.actor, pk, data['reason'])
        return success_response(RevisionRequestSerializer(revision).data, "Revision request rejected successfully")

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        article = workflow.complete_revision(self.actor, pk)
        return success_response(
            ArticleDetailSerializer(article).data,
            "Article updated based on revision request successfully",
        )
