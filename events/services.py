"""
services.py
-----------
Event registration rules.

- Phone numbers are UAE mobiles entered without the country code and stored
  with the +971 prefix.
- One registration row per (event, user); a cancelled row is reactivated on
  re-registration.
- Capacity counts confirmed party sizes against max_participants.
- Paid events stay "unpaid" until the payments app confirms the checkout;
  free events are marked paid immediately.
"""

import logging
from datetime import datetime
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from booking.services.slot_utils import is_phone_valid
from .models import Event, EventRegistration

logger = logging.getLogger(__name__)

PHONE_PREFIX = "+971"


class RegistrationError(ValueError):
    """The user cannot register (already registered, closed event, bad input)."""


class EventFullError(RegistrationError):
    def __init__(self, spots_left=0):
        super().__init__(
            "This event is full." if not spots_left
            else f"Only {spots_left} spot(s) left for this event."
        )
        self.spots_left = spots_left


def event_start(event):
    return timezone.make_aware(
        datetime.combine(event.event_date, event.start_time),
        timezone.get_current_timezone(),
    )


def confirmed_headcount(event, exclude_id=None) -> int:
    qs = EventRegistration.objects.filter(event=event, status="confirmed")
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs.aggregate(total=Sum("party_size"))["total"] or 0


def recount_participants(event) -> int:
    total = confirmed_headcount(event)
    Event.objects.filter(pk=event.pk).update(current_participants=total)
    event.current_participants = total
    return total


def register(event, user, participant_name, contact_phone, party_size=1, participant_email="", notes=""):
    """
    Create or reactivate the user's registration.

    Returns:
        (registration, requires_payment)

    Raises:
        RegistrationError / EventFullError
    """
    phone = (contact_phone or "").strip()
    if phone.startswith(PHONE_PREFIX):
        phone = phone[len(PHONE_PREFIX):]
    if not is_phone_valid(phone):
        raise RegistrationError("Enter a valid UAE mobile number (e.g., 50xxxxxxx).")
    if not (participant_name or "").strip():
        raise RegistrationError("Participant name is required.")
    party_size = max(1, int(party_size or 1))

    try:
        with transaction.atomic():
            # Lock the event so concurrent registrations see each other's headcount.
            locked = Event.objects.select_for_update().get(pk=event.pk)
            if not locked.is_active:
                raise RegistrationError("Registration is closed for this event.")
            if event_start(locked) <= timezone.now():
                raise RegistrationError("This event has already started.")

            existing = EventRegistration.objects.filter(event=locked, user=user).first()
            if existing and existing.status == "confirmed":
                raise RegistrationError("You're already registered for this event.")

            if locked.max_participants is not None:
                taken = confirmed_headcount(locked)
                spots_left = max(0, locked.max_participants - taken)
                if party_size > spots_left:
                    raise EventFullError(spots_left)

            price = Decimal(locked.price or 0)
            requires_payment = price > 0
            fields = {
                "participant_name": participant_name.strip(),
                "participant_email": (participant_email or "").strip(),
                "contact_phone": f"{PHONE_PREFIX}{phone}",
                "party_size": party_size,
                "notes": notes or "",
                "status": "confirmed",
                "payment_status": "unpaid" if requires_payment else "paid",
                "amount_paid": price * party_size,
                "cancelled_at": None,
                "cancelled_by": None,
            }
            if existing:
                for key, value in fields.items():
                    setattr(existing, key, value)
                existing.save()
                registration = existing
            else:
                registration = EventRegistration.objects.create(event=locked, user=user, **fields)

            recount_participants(locked)
    except IntegrityError as e:
        # Lost a race against a duplicate insert for the same (event, user).
        raise RegistrationError("You're already registered for this event.") from e

    logger.info(
        "User %s registered for event %s (party of %s, payment required: %s)",
        user.pk, event.pk, party_size, requires_payment,
    )
    return registration, requires_payment


@transaction.atomic
def cancel_registration(event, user, cancelled_by=None):
    registration = (
        EventRegistration.objects.select_for_update()
        .filter(event=event, user=user, status="confirmed")
        .first()
    )
    if registration is None:
        raise RegistrationError("You're not registered for this event.")

    registration.status = "cancelled"
    registration.cancelled_at = timezone.now()
    registration.cancelled_by = cancelled_by or user
    registration.save(update_fields=["status", "cancelled_at", "cancelled_by", "updated_at"])
    recount_participants(event)
    return registration


@transaction.atomic
def mark_paid(registration, payment_method="card", stripe_payment_id="", amount=None):
    """Called by the payments app once checkout completes."""
    registration.payment_status = "paid"
    registration.status = "confirmed"
    registration.payment_method = payment_method or "card"
    if stripe_payment_id:
        registration.stripe_payment_id = stripe_payment_id
    if amount is not None:
        registration.amount_paid = amount
    registration.cancelled_at = None
    registration.cancelled_by = None
    registration.save()
    recount_participants(registration.event)
    return registration
