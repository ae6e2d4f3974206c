"""
Core models for PublishDesk.
Base classes and the editorial profile attached to every user.
"""

import uuid
from django.conf import settings
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone


class BaseModel(models.Model):
    """
    Abstract base model with common fields for all PublishDesk models.
    Provides UUID primary key and timestamp tracking.
    """
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name='ID',
        help_text='Unique identifier (UUID)'
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        verbose_name='Created At',
        help_text='Timestamp when record was created'
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Updated At',
        help_text='Timestamp when record was last updated'
    )

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        """
        Default string representation.
        Should be overridden in child classes.
        """
        return f"{self.__class__.__name__} ({self.id})"


class EditorialProfile(BaseModel):
    """
    Editorial role of a user.
    Linked 1:1 with Django User model.
    """

    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('author', 'Author'),
        ('reviewer', 'Reviewer'),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='editorial_profile',
        verbose_name='User',
        help_text='The associated Django user account'
    )

    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default='author',
        db_index=True,
        verbose_name='Role',
        help_text='Editorial role determining permissions'
    )

    display_name = models.CharField(
        max_length=150,
        blank=True,
        verbose_name='Display Name',
        help_text='Name shown next to articles, reviews and comments'
    )

    class Meta:
        db_table = 'editorial_profiles'
        verbose_name = 'Editorial Profile'
        verbose_name_plural = 'Editorial Profiles'

    def __str__(self):
        return f"{self.user.username} ({self.role})"

    @property
    def is_admin(self):
        """Check if user has admin role."""
        return self.role == 'admin'


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_editorial_profile(sender, instance, created, **kwargs):
    """Auto-create EditorialProfile when a new User is created."""
    if created:
        role = 'admin' if instance.is_superuser else getattr(
            settings, 'EDITORIAL_DEFAULT_ROLE', 'author'
        )
        EditorialProfile.objects.create(user=instance, role=role)
