"""
Tests for health probes, the current-user endpoint and the users-by-role listing.
"""

from unittest.mock import patch

import pytest
from django.contrib.auth import get_user_model


@pytest.mark.django_db
class TestHealthEndpoints:
    """Test health, liveness and readiness."""

    def test_health(self, client):
        response = client.get('/health/')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'
        assert response.json()['checks']['database']['status'] == 'healthy'

    def test_health_database_down(self, client):
        with patch('apps.core.views.check_database', return_value=(False, 'connection refused')):
            response = client.get('/health/')

        assert response.status_code == 503
        assert response.json()['status'] == 'unhealthy'

    def test_liveness(self, client):
        assert client.get('/livez/').json() == {'status': 'alive'}

    def test_readiness(self, client):
        response = client.get('/readyz/')

        assert response.status_code == 200
        assert response.json() == {'status': 'ready'}

    def test_request_id_header(self, client):
        response = client.get('/livez/')
        assert response['X-Request-ID']


@pytest.mark.django_db
class TestCurrentUser:
    """Test /api/auth/me/."""

    def test_me(self, api_client, reviewer_user):
        api_client.force_authenticate(user=reviewer_user)

        response = api_client.get('/api/auth/me/')

        assert response.status_code == 200
        assert response.data['data']['username'] == reviewer_user.username
        assert response.data['data']['role'] == 'reviewer'

    def test_me_requires_auth(self, api_client):
        assert api_client.get('/api/auth/me/').status_code == 401


@pytest.mark.django_db
class TestUsersByRole:
    """Test /api/auth/users/?role=..."""

    def test_lists_reviewers(self, api_client, admin_user, reviewer_user, second_reviewer_user, author_user):
        api_client.force_authenticate(user=admin_user)

        response = api_client.get('/api/auth/users/', {'role': 'reviewer'})

        assert response.status_code == 200
        assert response.data['count'] == 2
        assert {row['role'] for row in response.data['results']} == {'reviewer'}

    def test_superuser_listed_as_admin(self, api_client, admin_user, reviewer_user):
        root = get_user_model().objects.create_superuser('root', 'root@example.com', 'root-pass-1234')
        api_client.force_authenticate(user=admin_user)

        response = api_client.get('/api/auth/users/', {'role': 'admin'})

        assert {row['username'] for row in response.data['results']} == {admin_user.username, root.username}

    def test_invalid_role(self, api_client, admin_user):
        api_client.force_authenticate(user=admin_user)

        response = api_client.get('/api/auth/users/', {'role': 'editor'})

        assert response.status_code == 422
        assert response.data['error']['field'] == 'role'

    def test_admin_only(self, api_client, author_user):
        api_client.force_authenticate(user=author_user)

        assert api_client.get('/api/auth/users/', {'role': 'reviewer'}).status_code == 403
