from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'recipient', 'kind', 'is_read', 'created_at']
    list_filter = ['kind', 'is_read', 'created_at']
    search_fields = ['title', 'body', 'recipient__email']
    readonly_fields = ['created_at']
    ordering = ['-created_at']

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('recipient')
