# events/models.py
#
# Purpose:
# - Venue events/programs and customer registrations.
#
# Design:
# - EventRegistration is unique per (event, user). Cancelling keeps the row
#   (status="cancelled") and registering again reactivates it.
# - current_participants is a denormalized sum of confirmed party sizes,
#   recomputed by events.services on every registration change.
#
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Event(models.Model):
    TYPE_CHOICES = [
        ("event", "Event"),
        ("program", "Program"),
        ("tournament", "Tournament"),
        ("workshop", "Workshop"),
    ]

    title = models.CharField(max_length=200)
    description = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="event")
    category = models.CharField(max_length=100, blank=True)
    event_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField(null=True, blank=True)
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    location = models.CharField(max_length=200, blank=True)
    instructor = models.CharField(max_length=200, blank=True)
    price = models.DecimalField(max_digits=8, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    max_participants = models.PositiveIntegerField(null=True, blank=True)
    current_participants = models.PositiveIntegerField(default=0)
    requirements = models.JSONField(default=list, blank=True)
    image = models.ImageField(upload_to="events/", blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["event_date", "start_time"]

    def __str__(self):
        return f"{self.title} ({self.event_date})"

    @property
    def spots_left(self):
        if self.max_participants is None:
            return None
        return max(0, self.max_participants - self.current_participants)


class EventRegistration(models.Model):
    STATUS_CHOICES = [
        ("confirmed", "Confirmed"),
        ("cancelled", "Cancelled"),
    ]
    PAYMENT_CHOICES = [
        ("unpaid", "Unpaid"),
        ("paid", "Paid"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="event_registrations")
    participant_name = models.CharField(max_length=200)
    participant_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=20)
    party_size = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="confirmed")
    payment_status = models.CharField(max_length=10, choices=PAYMENT_CHOICES, default="unpaid")
    amount_paid = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    payment_method = models.CharField(max_length=30, blank=True)
    stripe_payment_id = models.CharField(max_length=100, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "user"], name="uniq_registration_per_event_user"),
        ]

    def __str__(self):
        return f"{self.participant_name} → {self.event.title} ({self.status})"
