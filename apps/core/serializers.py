"""
Core serializers for users and editorial profiles.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import EditorialProfile
from .permissions import get_user_role

User = get_user_model()


class EditorialProfileSerializer(serializers.ModelSerializer):
    """Serializer for EditorialProfile."""

    class Meta:
        model = EditorialProfile
        fields = ['role', 'display_name', 'created_at', 'updated_at']
        read_only_fields = ['role', 'created_at', 'updated_at']


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User with nested profile and resolved role."""

    profile = EditorialProfileSerializer(source='editorial_profile', read_only=True)
    role = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'first_name',
            'last_name',
            'role',
            'profile',
        ]
        read_only_fields = fields

    def get_role(self, obj):
        role = get_user_role(obj)
        return role.value if role else None
