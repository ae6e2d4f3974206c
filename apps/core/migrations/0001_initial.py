# Initial migration for the core app
# Adds: EditorialProfile

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='EditorialProfile',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('author', 'Author'), ('reviewer', 'Reviewer')], db_index=True, default='author', help_text='Editorial role determining permissions', max_length=20, verbose_name='Role')),
                ('display_name', models.CharField(blank=True, help_text='Name shown next to articles, reviews and comments', max_length=150, verbose_name='Display Name')),
                ('user', models.OneToOneField(help_text='The associated Django user account', on_delete=django.db.models.deletion.CASCADE, related_name='editorial_profile', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Editorial Profile',
                'verbose_name_plural': 'Editorial Profiles',
                'db_table': 'editorial_profiles',
            },
        ),
    ]
