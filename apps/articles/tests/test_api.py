"""
Tests for the editorial workflow HTTP API.

Tests cover:
- Response envelopes for success and error bodies
- Role gates on endpoints
- Workflow transitions driven over HTTP
"""

import uuid

import pytest

from apps.articles.models import ChangeRecord, RevisionRequest
from apps.articles.services import workflow

BODY = (
    "Port congestion eased this week as carriers restored weekly sailings "
    "between the main hubs."
)
FEEDBACK = 'The headline overstates the findings.'


@pytest.fixture
def client_for(api_client):
    """Return an APIClient authenticated as the given user."""
    def _client(user):
        api_client.force_authenticate(user=user)
        return api_client
    return _client


def url(path):
    return f'/api/{path}'


# ============================================================================
# Envelope Tests
# ============================================================================

@pytest.mark.django_db
class TestEnvelopes:
    """Test success and error body shapes."""

    def test_unauthenticated(self, api_client):
        response = api_client.get(url('articles/'))

        assert response.status_code == 401
        assert response.data['error']['code'] == 'AUTHENTICATION_REQUIRED'
        assert 'request_id' in response.data

    def test_create_returns_data_and_message(self, client_for, author_user):
        response = client_for(author_user).post(
            url('articles/'), {'title': 'Canal fees rise', 'content': BODY}, format='json',
        )

        assert response.status_code == 201
        assert response.data['message'] == 'Article created successfully'
        assert response.data['data']['status'] == 'draft'
        assert response.data['data']['version'] == 1

    def test_serializer_errors(self, client_for, author_user):
        response = client_for(author_user).post(
            url('articles/'), {'title': 'Tiny', 'content': 'short'}, format='json',
        )

        assert response.status_code == 400
        assert response.data['error']['code'] == 'VALIDATION_ERROR'
        assert set(response.data['error']['details']) == {'title', 'content'}

    def test_unknown_article(self, client_for, admin_user):
        response = client_for(admin_user).get(url(f'articles/{uuid.uuid4()}/'))

        assert response.status_code == 404
        assert response.data['error']['code'] == 'NOT_FOUND'

    def test_request_id_echoed(self, client_for, admin_user):
        request_id = str(uuid.uuid4())
        response = client_for(admin_user).get(
            url(f'articles/{uuid.uuid4()}/'), HTTP_X_REQUEST_ID=request_id,
        )

        assert response['X-Request-ID'] == request_id
        assert response.data['request_id'] == request_id

    def test_invalid_transition_is_conflict(self, client_for, admin_user, submitted_article):
        response = client_for(admin_user).post(url(f'articles/{submitted_article.pk}/publish/'))

        assert response.status_code == 409
        assert response.data['error']['code'] == 'INVALID_STATE_TRANSITION'


# ============================================================================
# Role Gates
# ============================================================================

@pytest.mark.django_db
class TestRoleGates:
    """Test endpoint-level role checks."""

    def test_reviewer_cannot_create(self, client_for, reviewer_user):
        response = client_for(reviewer_user).post(
            url('articles/'), {'title': 'Canal fees rise', 'content': BODY}, format='json',
        )
        assert response.status_code == 403
        assert response.data['error']['code'] == 'PERMISSION_DENIED'

    def test_pending_is_admin_only(self, client_for, author_user, admin_user, submitted_article):
        assert client_for(author_user).get(url('articles/pending/')).status_code == 403

        response = client_for(admin_user).get(url('articles/pending/'))
        assert response.status_code == 200
        assert response.data['count'] == 1

    def test_other_author_cannot_view(self, client_for, other_author_user, draft_article):
        response = client_for(other_author_user).get(url(f'articles/{draft_article.pk}/'))
        assert response.status_code == 403

    def test_list_only_own(self, client_for, other_author_user, draft_article):
        response = client_for(other_author_user).get(url('articles/'))

        assert response.status_code == 200
        assert response.data['count'] == 0

    def test_change_endpoints_admin_only(self, client_for, author_user, admin, draft_article):
        _, records = workflow.track_changes(admin, draft_article, 'old', 'old and new')

        response = client_for(author_user).post(url(f'changes/{records[0].pk}/approve/'))
        assert response.status_code == 403


# ============================================================================
# Workflow over HTTP
# ============================================================================

@pytest.mark.django_db
class TestWorkflowEndpoints:
    """Drive the workflow through the API."""

    def test_publish_path(self, client_for, author_user, admin_user, reviewer_user, draft_article):
        base = f'articles/{draft_article.pk}'

        assert client_for(author_user).post(url(f'{base}/submit/')).status_code == 200

        response = client_for(admin_user).post(
            url(f'{base}/assign-reviewer/'), {'reviewer_id': reviewer_user.pk}, format='json',
        )
        assert response.status_code == 201
        assert response.data['data']['status'] == 'assigned'

        response = client_for(reviewer_user).post(
            url(f'{base}/review/'), {'decision': 'accept'}, format='json',
        )
        assert response.status_code == 201

        response = client_for(admin_user).post(url(f'{base}/publish/'))
        assert response.status_code == 200
        assert response.data['data']['status'] == 'published'

        history = client_for(admin_user).get(url(f'{base}/history/')).data['data']
        assert [row['action'] for row in history][-1] == 'publish'

    def test_short_feedback_rejected(self, client_for, reviewer_user, reviewed_article):
        response = client_for(reviewer_user).post(
            url(f'articles/{reviewed_article.pk}/review/'),
            {'decision': 'reject', 'feedback': 'bad'},
            format='json',
        )

        assert response.status_code == 422
        assert response.data['error']['field'] == 'feedback'

    def test_assignment_decision(self, client_for, reviewer_user, reviewed_article):
        assignment = reviewed_article.review_assignments.get()

        response = client_for(reviewer_user).post(
            url(f'assignments/{assignment.pk}/decision/'),
            {'decision': 'request_revision', 'feedback': FEEDBACK},
            format='json',
        )

        assert response.status_code == 201
        reviewed_article.refresh_from_db()
        assert reviewed_article.status == 'revision_requested'

    def test_my_assignments(self, client_for, reviewer_user, reviewed_article):
        response = client_for(reviewer_user).get(url('assignments/mine/'))

        assert response.status_code == 200
        assert response.data['count'] == 1

    def test_duplicate_assignment_conflict(self, client_for, admin_user, reviewer_user, reviewed_article):
        response = client_for(admin_user).post(
            url(f'articles/{reviewed_article.pk}/assign-reviewer/'),
            {'reviewer_id': reviewer_user.pk},
            format='json',
        )
        assert response.status_code == 409
        assert response.data['error']['code'] == 'DUPLICATE_ASSIGNMENT'

    def test_update_creates_version(self, client_for, author_user, draft_article):
        new_body = BODY + ' Freight rates followed.'
        response = client_for(author_user).patch(
            url(f'articles/{draft_article.pk}/'), {'content': new_body}, format='json',
        )

        assert response.status_code == 200
        assert response.data['data']['version'] == 2

        versions = client_for(author_user).get(url(f'articles/{draft_article.pk}/versions/'))
        assert [v['version_number'] for v in versions.data['data']] == [2, 1]

        one = client_for(author_user).get(url(f'articles/{draft_article.pk}/versions/1/'))
        assert one.data['data']['content'] == BODY

    def test_delete_draft(self, client_for, author_user, draft_article):
        response = client_for(author_user).delete(url(f'articles/{draft_article.pk}/'))
        assert response.status_code == 200

        assert client_for(author_user).get(url(f'articles/{draft_article.pk}/')).status_code == 404


# ============================================================================
# Versions and Changes over HTTP
# ============================================================================

@pytest.mark.django_db
class TestVersionAndChangeEndpoints:
    """Test compare, track-changes and change decisions."""

    def test_compare(self, client_for, author, author_user, draft_article):
        workflow.update_article(author, draft_article, content="a\nb\nc")
        workflow.update_article(author, draft_article, content="a\nX\nc")

        response = client_for(author_user).get(
            url(f'articles/{draft_article.pk}/compare/'), {'from': 2, 'to': 3},
        )

        assert response.status_code == 200
        assert response.data['data']['changes'] == [
            {'line': 2, 'old': 'b', 'new': 'X', 'type': 'modified'},
        ]

    def test_compare_missing_version(self, client_for, author_user, draft_article):
        response = client_for(author_user).get(
            url(f'articles/{draft_article.pk}/compare/'), {'from': 1, 'to': 9},
        )
        assert response.status_code == 404

    def test_track_and_approve(self, client_for, admin_user, draft_article):
        client = client_for(admin_user)
        response = client.post(
            url(f'articles/{draft_article.pk}/track-changes/'),
            {'old_content': BODY, 'new_content': BODY + ' Extra line added.'},
            format='json',
        )

        assert response.status_code == 201
        change_id = response.data['data']['changes'][0]['id']
        assert response.data['data']['changes'][0]['change_type'] == ChangeRecord.ADD

        response = client.post(url(f'changes/{change_id}/approve/'))
        assert response.status_code == 200
        assert response.data['data']['status'] == ChangeRecord.APPROVED

        draft_article.refresh_from_db()
        assert draft_article.status == 'ready_for_review'

    def test_reject_change_needs_reason(self, client_for, admin, admin_user, draft_article):
        _, records = workflow.track_changes(admin, draft_article, 'old', 'old and new')

        response = client_for(admin_user).post(url(f'changes/{records[0].pk}/reject/'), {}, format='json')

        assert response.status_code == 422

    def test_approve_all_empty(self, client_for, admin_user, draft_article):
        response = client_for(admin_user).post(url(f'articles/{draft_article.pk}/changes/approve-all/'))

        assert response.status_code == 200
        assert response.data['data'] == {'approved': 0}

    def test_changes_filter(self, client_for, admin, admin_user, draft_article):
        workflow.track_changes(admin, draft_article, 'old', 'old and new')

        response = client_for(admin_user).get(
            url(f'articles/{draft_article.pk}/changes/'), {'status': 'pending'},
        )
        assert len(response.data['data']) == 1


# ============================================================================
# Revision Requests and Comments over HTTP
# ============================================================================

@pytest.mark.django_db
class TestRevisionAndCommentEndpoints:
    """Test revision-request and comment routes."""

    def test_admin_opens_and_author_completes(self, client_for, admin_user, author_user, submitted_article):
        response = client_for(admin_user).post(
            url('revision-requests/'),
            {'article_id': str(submitted_article.pk), 'reason': 'Please add the latest figures.'},
            format='json',
        )
        assert response.status_code == 201
        request_id = response.data['data']['id']

        mine = client_for(author_user).get(url('revision-requests/mine/'))
        assert mine.data['count'] == 1

        response = client_for(author_user).post(url(f'revision-requests/{request_id}/complete/'))
        assert response.status_code == 200
        assert response.data['data']['status'] == 'draft'
        assert RevisionRequest.objects.get(pk=request_id).status == RevisionRequest.APPROVED

    def test_author_cannot_list_requests(self, client_for, author_user):
        assert client_for(author_user).get(url('revision-requests/')).status_code == 403

    def test_comment_round_trip(self, client_for, reviewer_user, author_user, reviewed_article):
        response = client_for(reviewer_user).post(
            url(f'articles/{reviewed_article.pk}/comments/'),
            {'comment_text': 'Add a source here.', 'start_position': 0, 'end_position': 4},
            format='json',
        )
        assert response.status_code == 201
        comment_id = response.data['data']['id']

        response = client_for(reviewer_user).patch(
            url(f'comments/{comment_id}/'), {'status': 'addressed'}, format='json',
        )
        assert response.status_code == 200
        assert response.data['data']['status'] == 'addressed'

        listing = client_for(author_user).get(url(f'articles/{reviewed_article.pk}/comments/'))
        assert len(listing.data['data']) == 1

    def test_bad_highlight_color(self, client_for, reviewer_user, reviewed_article):
        response = client_for(reviewer_user).post(
            url(f'articles/{reviewed_article.pk}/comments/'),
            {'comment_text': 'Add a source here.', 'highlight_color': 'yellow'},
            format='json',
        )
        assert response.status_code == 400
