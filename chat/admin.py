from django.contrib import admin
from .models import Conversation, Message

@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "user", "conversation_type", "status", "staff_user", "last_message_at")
    list_filter = ("conversation_type", "status")
    search_fields = ("title", "user__username")

@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("id", "conversation", "sender", "is_staff", "is_read", "created_at")
    list_filter = ("is_staff", "is_read")
