"""
booking_manager.py
------------------
Coordinates room booking creation, confirmation and cancellation.

Rules:
- Only active rooms, durations of 1..6 hours, dates from today on.
- The start slot must be one of the day's business-hour slots.
- Double-booking prevention: the room row is locked for the duration of the
  transaction and the overlap check is repeated under the lock, so of two
  concurrent requests for the same slot exactly one succeeds and the other
  gets SlotUnavailableError.
- Customers do not cancel directly; they ask staff through a booking chat
  thread (request_cancellation). Staff cancel with cancel_booking.
"""

import logging

from django.db import transaction
from django.utils import timezone

from ..models import Room, RoomBooking
from .availability_engine import AvailabilityEngine
from .price_display import PriceDisplayService
from .slot_utils import MAX_DURATION_HOURS, build_time_slots, is_phone_valid, slot_bounds

logger = logging.getLogger(__name__)


class BookingValidationError(ValueError):
    """The booking request breaks a form-level rule."""


class SlotUnavailableError(ValueError):
    """The requested slot overlaps an existing booking."""

    def __init__(self, message="This time slot is no longer available. Please pick another time."):
        super().__init__(message)


class BookingManager:
    def __init__(self):
        self.availability = AvailabilityEngine()

    def _validate(self, room, booking_date, start_slot, duration_hours, contact_phone):
        if not room.is_active:
            raise BookingValidationError("This room is not currently available.")
        if not 1 <= duration_hours <= MAX_DURATION_HOURS:
            raise BookingValidationError(f"Duration must be between 1 and {MAX_DURATION_HOURS} hours.")
        if booking_date < timezone.localdate():
            raise BookingValidationError("Booking date must be today or later.")
        if contact_phone and not is_phone_valid(contact_phone):
            raise BookingValidationError("Enter a valid UAE mobile number (e.g., 50xxxxxxx).")
        if start_slot not in build_time_slots(booking_date, duration_hours):
            raise BookingValidationError("Selected start time is outside business hours for that duration.")

        start, end = slot_bounds(booking_date, start_slot, duration_hours)
        if start <= timezone.now():
            raise BookingValidationError("Selected start time has already passed.")
        return start, end

    def create_booking(
        self,
        user,
        room,
        booking_date,
        start_slot,
        duration_hours,
        contact_phone="",
        contact_email="",
        notes="",
    ):
        """
        Create a pending booking after validating and checking for overlap.

        Args:
            user: booking owner
            room: Room instance
            booking_date: date
            start_slot: "HH:00"
            duration_hours: int (1..6)

        Raises:
            BookingValidationError: the request breaks a form rule.
            SlotUnavailableError: the slot overlaps an existing booking.
        """
        start, end = self._validate(room, booking_date, start_slot, duration_hours, contact_phone)

        with transaction.atomic():
            # Serializes concurrent bookers of the same room.
            locked_room = Room.objects.select_for_update().get(pk=room.pk)
            if not self.availability.is_slot_available(locked_room, start, end):
                logger.info(
                    "Slot conflict for room %s on %s at %s (%sh)",
                    room.pk, booking_date, start_slot, duration_hours,
                )
                raise SlotUnavailableError()

            booking = RoomBooking.objects.create(
                user=user,
                room=locked_room,
                booking_date=booking_date,
                start_time=start,
                end_time=end,
                duration_hours=duration_hours,
                total_amount=PriceDisplayService.booking_total(locked_room, duration_hours),
                contact_phone=contact_phone,
                contact_email=contact_email,
                notes=notes,
            )

        logger.info("Created booking %s for room %s", booking.pk, room.pk)
        return booking

    @transaction.atomic
    def confirm_booking(self, booking, payment_method="card", stripe_payment_id=""):
        """
        Mark a booking paid and confirmed. Saving with 'status' in update_fields
        lets notifications/signals.py send the confirmation email.
        """
        if booking.status == RoomBooking.STATUS_CANCELLED:
            raise ValueError("Cannot confirm a cancelled booking.")
        if booking.status == RoomBooking.STATUS_CONFIRMED and booking.payment_status == "paid":
            return booking

        booking.status = RoomBooking.STATUS_CONFIRMED
        booking.payment_status = "paid"
        booking.payment_method = payment_method or "card"
        if stripe_payment_id:
            booking.stripe_payment_id = stripe_payment_id
        booking.save(update_fields=["status", "payment_status", "payment_method", "stripe_payment_id", "updated_at"])
        return booking

    @transaction.atomic
    def cancel_booking(self, booking, reason=""):
        """
        Cancel a booking (staff action). Frees the slot immediately.
        """
        if booking.status == RoomBooking.STATUS_CANCELLED:
            raise ValueError("This booking is already cancelled.")

        booking.status = RoomBooking.STATUS_CANCELLED
        booking.cancellation_time = timezone.now()
        if reason:
            booking.notes = (booking.notes or "") + f"\n[Cancel reason] {reason}"
        booking.save(update_fields=["status", "cancellation_time", "notes", "updated_at"])
        logger.info("Cancelled booking %s", booking.pk)
        return booking

    def request_cancellation(self, booking, user, reason=""):
        """
        Open (or reuse) the booking's chat thread and post a cancellation and
        refund request for staff to handle.
        """
        from chat.services import open_conversation, post_message

        if booking.status == RoomBooking.STATUS_CANCELLED:
            raise ValueError("This booking is already cancelled.")

        local_start = timezone.localtime(booking.start_time)
        conversation = open_conversation(
            user=user,
            conversation_type="booking",
            reference_id=str(booking.pk),
            title=f"Booking #{booking.pk}: {booking.room.name}",
        )
        text = (
            "Hi, I'd like to cancel my booking and request a refund if applicable:\n"
            f"- Room: {booking.room.name}\n"
            f"- Date: {local_start:%Y-%m-%d}\n"
            f"- Time: {local_start:%H:%M} ({booking.duration_hours}h)\n"
            f"- Booking ID: {booking.pk}"
        )
        if reason:
            text += f"\n- Reason: {reason}"
        post_message(conversation, user, text)
        return conversation
