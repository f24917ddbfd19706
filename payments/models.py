# payments/models.py
#
# Purpose:
# - Cards a customer saved during Stripe Checkout.
# - Log of processed Stripe webhook events (idempotency + audit trail).
#
from django.conf import settings
from django.db import models


class SavedCard(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="saved_cards")
    stripe_customer_id = models.CharField(max_length=100)
    stripe_payment_method_id = models.CharField(max_length=100, unique=True)
    card_brand = models.CharField(max_length=30, default="unknown")
    card_last4 = models.CharField(max_length=4, default="0000")
    card_exp_month = models.PositiveSmallIntegerField(default=1)
    card_exp_year = models.PositiveSmallIntegerField(default=2099)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.card_brand} •••• {self.card_last4}"


class WebhookEvent(models.Model):
    RESULT_CHOICES = [
        ("success", "Success"),
        ("skipped", "Skipped"),
        ("error", "Error"),
    ]

    event_id = models.CharField(max_length=100, unique=True)
    event_type = models.CharField(max_length=100)
    reference_type = models.CharField(max_length=20, blank=True)
    reference_id = models.CharField(max_length=64, blank=True)
    processing_result = models.CharField(max_length=10, choices=RESULT_CHOICES)
    error_message = models.TextField(blank=True)
    processed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-processed_at"]

    def __str__(self):
        return f"{self.event_type} {self.event_id} ({self.processing_result})"
