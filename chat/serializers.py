from rest_framework import serializers

from accounts.models import display_name
from .models import Conversation, Message


class MessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = ["id", "conversation", "sender", "sender_name", "message", "is_staff", "is_read", "created_at"]
        read_only_fields = fields

    def get_sender_name(self, obj):
        return display_name(obj.sender)


class ConversationSerializer(serializers.ModelSerializer):
    customer_name = serializers.SerializerMethodField()
    unread = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Conversation
        fields = [
            "id",
            "user",
            "customer_name",
            "conversation_type",
            "reference_id",
            "title",
            "status",
            "staff_user",
            "last_message_at",
            "created_at",
            "unread",
        ]
        read_only_fields = ["user", "status", "staff_user", "last_message_at", "created_at"]

    def get_customer_name(self, obj):
        return display_name(obj.user)


class ConversationCreateSerializer(serializers.Serializer):
    conversation_type = serializers.ChoiceField(choices=Conversation.TYPE_CHOICES, default="support")
    reference_id = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    title = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    message = serializers.CharField(required=False, allow_blank=True, default="")
