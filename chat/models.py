# chat/models.py
#
# Purpose:
# - Live chat between customers and venue staff.
#
# Design:
# - Conversation: one thread per (user, type, reference) while active.
#   "support" threads are general; "booking"/"party"/"event" threads carry
#   the id of the row they are about in reference_id.
# - Message: is_staff marks staff-authored messages; is_read is set when the
#   other side opens the thread.
#
from django.conf import settings
from django.db import models


class Conversation(models.Model):
    TYPE_CHOICES = [
        ("support", "Support"),
        ("booking", "Booking"),
        ("party", "Party"),
        ("event", "Event"),
    ]
    STATUS_CHOICES = [
        ("active", "Active"),
        ("closed", "Closed"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="conversations")
    conversation_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="support")
    reference_id = models.CharField(max_length=64, blank=True)
    title = models.CharField(max_length=200)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="active")
    staff_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_conversations",
    )
    last_message_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-last_message_at", "-created_at"]

    def __str__(self):
        return f"{self.title} ({self.status})"


class Message(models.Model):
    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="chat_messages")
    message = models.TextField()
    is_staff = models.BooleanField(default=False)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"#{self.pk} in conversation {self.conversation_id}"
