# notifications/models.py
#
# Purpose:
# - In-app notifications and an audit of emails sent to customers.
#
# Design:
# - A notification goes either to one user (recipient_user) or to every
#   staff member holding a role (recipient_role), e.g. "snacks" for new paid
#   orders. Role notifications are a shared team inbox: one read flag.
# - 'sent' records whether the matching email was delivered.
#
from django.conf import settings
from django.db import models


class Notification(models.Model):
    KIND_CHOICES = [
        ("booking_confirmed", "Booking confirmed"),
        ("booking_cancelled", "Booking cancelled"),
        ("order_paid", "New paid order"),
        ("party_request", "New party request"),
        ("support_message", "New support message"),
    ]

    recipient_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
    )
    recipient_role = models.CharField(max_length=30, blank=True)
    kind = models.CharField(max_length=30, choices=KIND_CHOICES)
    title = models.CharField(max_length=200)
    body = models.TextField(blank=True)
    link_path = models.CharField(max_length=200, blank=True)
    is_read = models.BooleanField(default=False)
    sent = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient_user", "is_read"]),
            models.Index(fields=["recipient_role", "is_read"]),
        ]

    def __str__(self) -> str:
        target = self.recipient_user or f"role:{self.recipient_role}"
        return f"{self.title} -> {target} at {self.created_at:%Y-%m-%d %H:%M}"
