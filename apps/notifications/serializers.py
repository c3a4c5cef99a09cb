from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for in-app notifications."""

    class Meta:
        model = Notification
        fields = ['id', 'kind', 'title', 'body', 'link', 'is_read', 'created_at']
        read_only_fields = fields


class NotificationFilterSerializer(serializers.Serializer):
    """Validate query parameters for the notification list."""

    unread = serializers.BooleanField(required=False, default=False)


class MarkAllReadResponseSerializer(serializers.Serializer):
    updated = serializers.IntegerField()
