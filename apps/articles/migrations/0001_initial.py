# Initial migration for the articles app
# Adds: Article, ArticleVersion, ChangeRecord, ReviewAssignment, ReviewDecision,
#       RevisionRequest, Comment, ArticleStatusChange

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


STATUS_CHOICES = [
    ('draft', 'Draft'),
    ('submitted', 'Submitted for Review'),
    ('under_review', 'Under Review'),
    ('revision_requested', 'Revision Requested'),
    ('rejected', 'Rejected'),
    ('approved', 'Approved'),
    ('published', 'Published'),
    ('ready_for_review', 'Ready for Review'),
    ('revision_pending', 'Revision Pending'),
    ('revision_approved', 'Revision Approved'),
    ('review_rejected', 'Review Rejected'),
]


def base_fields():
    return [
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
        ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
        ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Article',
            fields=base_fields() + [
                ('title', models.CharField(help_text='Article title', max_length=255, verbose_name='Title')),
                ('content', models.TextField(blank=True, help_text='Current article body', verbose_name='Content')),
                ('status', models.CharField(choices=STATUS_CHOICES, db_index=True, default='draft', help_text='Current workflow status', max_length=30, verbose_name='Status')),
                ('version', models.PositiveIntegerField(default=1, help_text='Number of the most recent ArticleVersion', verbose_name='Version')),
                ('rejection_reason', models.TextField(blank=True, help_text='Reason given by the admin on the last rejection', verbose_name='Rejection Reason')),
                ('published_at', models.DateTimeField(blank=True, help_text='When the article was published', null=True, verbose_name='Published At')),
                ('deleted_at', models.DateTimeField(blank=True, db_index=True, help_text='Soft-delete timestamp', null=True, verbose_name='Deleted At')),
                ('author', models.ForeignKey(help_text='Owning author', on_delete=django.db.models.deletion.CASCADE, related_name='articles', to=settings.AUTH_USER_MODEL, verbose_name='Author')),
            ],
            options={
                'verbose_name': 'Article',
                'verbose_name_plural': 'Articles',
                'db_table': 'articles',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['author', 'status'], name='article_author_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='ArticleVersion',
            fields=base_fields() + [
                ('content', models.TextField(blank=True, help_text='Content snapshot', verbose_name='Content')),
                ('version_number', models.PositiveIntegerField(help_text='Strictly increasing per article, starts at 1', verbose_name='Version Number')),
                ('changes_summary', models.CharField(blank=True, max_length=255, verbose_name='Changes Summary')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='versions', to='articles.article', verbose_name='Article')),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='article_versions', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
            ],
            options={
                'verbose_name': 'Article Version',
                'verbose_name_plural': 'Article Versions',
                'db_table': 'article_versions',
                'ordering': ['-version_number'],
                'constraints': [models.UniqueConstraint(fields=('article', 'version_number'), name='unique_article_version_number')],
            },
        ),
        migrations.CreateModel(
            name='ChangeRecord',
            fields=base_fields() + [
                ('change_type', models.CharField(choices=[('add', 'Add'), ('delete', 'Delete'), ('modify', 'Modify')], max_length=10, verbose_name='Change Type')),
                ('old_text', models.TextField(blank=True, null=True, verbose_name='Old Text')),
                ('new_text', models.TextField(blank=True, null=True, verbose_name='New Text')),
                ('position', models.PositiveIntegerField(default=0, verbose_name='Position')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=10, verbose_name='Status')),
                ('reviewed_at', models.DateTimeField(blank=True, null=True, verbose_name='Reviewed At')),
                ('rejection_reason', models.TextField(blank=True, verbose_name='Rejection Reason')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='change_records', to='articles.article', verbose_name='Article')),
                ('version', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='change_records', to='articles.articleversion', verbose_name='Originating Version')),
                ('reviewed_by', models.ForeignKey(blank=True, help_text='Admin who approved or rejected the change', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviewed_changes', to=settings.AUTH_USER_MODEL, verbose_name='Reviewed By')),
            ],
            options={
                'verbose_name': 'Change Record',
                'verbose_name_plural': 'Change Records',
                'db_table': 'change_records',
                'ordering': ['created_at'],
                'indexes': [models.Index(fields=['article', 'status'], name='change_article_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='ReviewAssignment',
            fields=base_fields() + [
                ('status', models.CharField(choices=[('assigned', 'Assigned'), ('completed', 'Completed')], db_index=True, default='assigned', max_length=10, verbose_name='Status')),
                ('assigned_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Assigned At')),
                ('completed_at', models.DateTimeField(blank=True, null=True, verbose_name='Completed At')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='review_assignments', to='articles.article', verbose_name='Article')),
                ('reviewer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='review_assignments', to=settings.AUTH_USER_MODEL, verbose_name='Reviewer')),
                ('assigned_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assignments_made', to=settings.AUTH_USER_MODEL, verbose_name='Assigned By')),
            ],
            options={
                'verbose_name': 'Review Assignment',
                'verbose_name_plural': 'Review Assignments',
                'db_table': 'review_assignments',
                'ordering': ['-assigned_at'],
                'indexes': [models.Index(fields=['article', 'reviewer', 'status'], name='assignment_lookup_idx')],
            },
        ),
        migrations.CreateModel(
            name='ReviewDecision',
            fields=base_fields() + [
                ('decision', models.CharField(choices=[('accept', 'Accepted'), ('reject', 'Rejected'), ('request_revision', 'Revision Requested')], max_length=20, verbose_name='Decision')),
                ('feedback', models.TextField(blank=True, verbose_name='Feedback')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='review_decisions', to='articles.article', verbose_name='Article')),
                ('reviewer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='review_decisions', to=settings.AUTH_USER_MODEL, verbose_name='Reviewer')),
                ('assignment', models.ForeignKey(blank=True, help_text='Assignment completed by this decision, if any', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='decisions', to='articles.reviewassignment', verbose_name='Assignment')),
            ],
            options={
                'verbose_name': 'Review Decision',
                'verbose_name_plural': 'Review Decisions',
                'db_table': 'review_decisions',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='RevisionRequest',
            fields=base_fields() + [
                ('reason', models.TextField(verbose_name='Reason')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=10, verbose_name='Status')),
                ('requested_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Requested At')),
                ('responded_at', models.DateTimeField(blank=True, null=True, verbose_name='Responded At')),
                ('rejection_reason', models.TextField(blank=True, verbose_name='Rejection Reason')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='revision_requests', to='articles.article', verbose_name='Article')),
                ('requested_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='revision_requests_made', to=settings.AUTH_USER_MODEL, verbose_name='Requested By')),
                ('requested_from', models.ForeignKey(help_text='Target author', on_delete=django.db.models.deletion.CASCADE, related_name='revision_requests_received', to=settings.AUTH_USER_MODEL, verbose_name='Requested From')),
            ],
            options={
                'verbose_name': 'Revision Request',
                'verbose_name_plural': 'Revision Requests',
                'db_table': 'revision_requests',
                'ordering': ['-requested_at'],
                'indexes': [models.Index(fields=['article', 'status'], name='revision_article_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='Comment',
            fields=base_fields() + [
                ('selected_text', models.TextField(blank=True, null=True, verbose_name='Selected Text')),
                ('comment_text', models.TextField(verbose_name='Comment')),
                ('highlight_color', models.CharField(default='#FFFF00', max_length=7, verbose_name='Highlight Color')),
                ('start_position', models.PositiveIntegerField(default=0)),
                ('end_position', models.PositiveIntegerField(default=0)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('addressed', 'Addressed')], default='pending', max_length=10, verbose_name='Status')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='comments', to='articles.article', verbose_name='Article')),
                ('reviewer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='article_comments', to=settings.AUTH_USER_MODEL, verbose_name='Reviewer')),
            ],
            options={
                'verbose_name': 'Comment',
                'verbose_name_plural': 'Comments',
                'db_table': 'article_comments',
                'ordering': ['start_position', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='ArticleStatusChange',
            fields=base_fields() + [
                ('from_status', models.CharField(max_length=30, verbose_name='From')),
                ('to_status', models.CharField(max_length=30, verbose_name='To')),
                ('action', models.CharField(max_length=40, verbose_name='Action')),
                ('note', models.TextField(blank=True, verbose_name='Note')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='status_changes', to='articles.article', verbose_name='Article')),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='status_changes', to=settings.AUTH_USER_MODEL, verbose_name='Actor')),
            ],
            options={
                'verbose_name': 'Status Change',
                'verbose_name_plural': 'Status Changes',
                'db_table': 'article_status_changes',
                'ordering': ['created_at'],
            },
        ),
    ]
