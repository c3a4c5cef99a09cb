from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Basic member serializer for profile display."""

    full_display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'first_name',
            'last_name',
            'display_name',
            'full_display_name',
            'mobile',
            'created_at',
            'last_login',
        ]
        read_only_fields = ['id', 'email', 'created_at', 'last_login']

    def get_full_display_name(self, obj):
        return obj.get_display_name()


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal member info for nested serialization."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'display_name']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()
