from django.contrib import admin
from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('title', 'kind', 'recipient_user', 'recipient_role', 'is_read', 'sent', 'created_at')
    list_filter = ('kind', 'recipient_role', 'is_read', 'sent', 'created_at')
    search_fields = ('recipient_user__username', 'title', 'body')
