"""
Serializers for authentication endpoints.
"""

from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """
    Read-only representation of a user.

    Used for /api/v1/auth/me/ and embedded wherever a user is shown.
    """

    full_name = serializers.SerializerMethodField()
    effective_permissions = serializers.ListField(
        child=serializers.CharField(), read_only=True
    )

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "full_name",
            "role",
            "effective_permissions",
            "is_active",
            "date_joined",
        ]
        read_only_fields = fields

    def get_full_name(self, obj):
        return obj.get_full_name()
