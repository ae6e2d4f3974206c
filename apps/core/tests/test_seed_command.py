"""
Tests for the seed_editorial_users management command.
"""

from io import StringIO

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command

from apps.core.permissions import Role, get_user_role


@pytest.mark.django_db
class TestSeedEditorialUsers:
    """Test seeding one user per role."""

    def test_creates_one_user_per_role(self):
        out = StringIO()
        call_command('seed_editorial_users', stdout=out)

        User = get_user_model()
        for role in Role:
            user = User.objects.get(username=role.value)
            assert get_user_role(user) is role
            assert user.check_password('publishdesk')
        assert 'Created admin (admin)' in out.getvalue()

    def test_idempotent(self):
        call_command('seed_editorial_users', stdout=StringIO())
        out = StringIO()
        call_command('seed_editorial_users', '--password', 'changed-pass', stdout=out)

        User = get_user_model()
        assert User.objects.filter(username__in=[r.value for r in Role]).count() == 3
        assert User.objects.get(username='author').check_password('publishdesk')
        assert 'Updated reviewer (reviewer)' in out.getvalue()

    def test_prefix(self):
        call_command('seed_editorial_users', '--prefix', 'demo', stdout=StringIO())

        assert get_user_model().objects.filter(username='demo_reviewer').exists()
