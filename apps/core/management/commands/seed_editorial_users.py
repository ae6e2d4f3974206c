"""
Management command for creating one user per editorial role.

Safe to run repeatedly: existing users keep their passwords, only the
editorial role on their profile is reset.

Usage:
    python manage.py seed_editorial_users
    python manage.py seed_editorial_users --password "s3cret-pass" --prefix demo
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.core.models import EditorialProfile

ROLES = ['admin', 'author', 'reviewer']


class Command(BaseCommand):
    help = 'Create (or update) an admin, an author and a reviewer account'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            type=str,
            default='publishdesk',
            help='Password for newly created users (default: publishdesk)'
        )
        parser.add_argument(
            '--prefix',
            type=str,
            default='',
            help='Username prefix, e.g. "demo" gives demo_admin, demo_author ...'
        )

    @transaction.atomic
    def handle(self, *args, **options):
        User = get_user_model()
        prefix = f"{options['prefix']}_" if options['prefix'] else ''

        for role in ROLES:
            username = f'{prefix}{role}'
            user, created = User.objects.get_or_create(
                username=username,
                defaults={'email': f'{username}@publishdesk.local'},
            )
            if created:
                user.set_password(options['password'])
                user.save(update_fields=['password'])

            profile, _ = EditorialProfile.objects.get_or_create(user=user)
            profile.role = role
            profile.display_name = profile.display_name or role.title()
            profile.save(update_fields=['role', 'display_name', 'updated_at'])

            verb = 'Created' if created else 'Updated'
            self.stdout.write(self.style.SUCCESS(f'{verb} {username} ({role})'))
