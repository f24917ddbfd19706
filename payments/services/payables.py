"""
payables.py
-----------
Everything that can be paid through Stripe Checkout, looked up by
(kind, reference id):

- order:   snacks.Order       amount = subtotal + fees + tip
- booking: booking.RoomBooking amount = total_amount
- party:   booking.PartyRequest amount = staff estimated_cost
- event:   events.EventRegistration amount = price x party size

Amounts are pre-VAT; VAT is added when the Checkout session is built.
"""

from decimal import Decimal

from booking.models import PartyRequest, RoomBooking
from booking.services.booking_manager import BookingManager
from events.models import EventRegistration
from events import services as event_services
from snacks.models import Order
from snacks.services import order_service

KINDS = ("order", "booking", "event", "party")


class PayableError(ValueError):
    """The referenced row does not exist, is not the user's, or cannot be paid."""


def _get(model, reference_id, user=None):
    qs = model.objects.filter(pk=reference_id)
    if user is not None:
        qs = qs.filter(user=user)
    obj = qs.first()
    if obj is None:
        raise PayableError("Nothing to pay for with that reference.")
    return obj


def resolve(kind, reference_id, user):
    """
    Returns:
        (obj, amount, item_name) for a payable that belongs to `user`.
    """
    if kind not in KINDS:
        raise PayableError(f"Unknown payment type: {kind}")
    if not str(reference_id).isdigit():
        raise PayableError("Invalid reference.")

    if kind == "order":
        order = _get(Order, reference_id, user)
        if order.payment_status == "paid":
            raise PayableError("This order is already paid.")
        if order.status != Order.STATUS_PENDING:
            raise PayableError("This order can no longer be paid.")
        return order, order.subtotal + order.fees + order.tip, f"Pixoul Hub {order.label}"

    if kind == "booking":
        booking = _get(RoomBooking, reference_id, user)
        if booking.payment_status == "paid":
            raise PayableError("This booking is already paid.")
        if booking.status == RoomBooking.STATUS_CANCELLED:
            raise PayableError("This booking was cancelled.")
        name = f"{booking.room.name} - {booking.duration_hours}h on {booking.booking_date:%Y-%m-%d}"
        return booking, booking.total_amount, name

    if kind == "party":
        party = _get(PartyRequest, reference_id, user)
        if party.payment_status == "paid":
            raise PayableError("This party is already paid.")
        if party.status != "approved" or not party.estimated_cost:
            raise PayableError("This party request has not been approved with a price yet.")
        return party, party.estimated_cost, f"{party.get_party_type_display()} party - {party.name}"

    registration = _get(EventRegistration, reference_id, user)
    if registration.payment_status == "paid":
        raise PayableError("This registration is already paid.")
    if registration.status != "confirmed":
        raise PayableError("This registration was cancelled.")
    amount = Decimal(registration.event.price) * registration.party_size
    return registration, amount, registration.event.title


def mark_paid(kind, reference_id, payment_method="card", payment_intent_id="", amount_total_cents=None):
    """
    Apply a completed payment to the referenced row. Safe to call twice.

    Returns:
        True if the row was updated, False if it was already paid.
    """
    if kind == "order":
        order = _get(Order, reference_id)
        if order.payment_status == "paid":
            return False
        order_service.mark_paid(order, payment_method=payment_method, stripe_payment_id=payment_intent_id)
        return True

    if kind == "booking":
        booking = _get(RoomBooking, reference_id)
        if booking.payment_status == "paid":
            return False
        BookingManager().confirm_booking(
            booking, payment_method=payment_method, stripe_payment_id=payment_intent_id
        )
        return True

    if kind == "party":
        party = _get(PartyRequest, reference_id)
        if party.payment_status == "paid":
            return False
        party.status = "confirmed"
        party.payment_status = "paid"
        party.payment_method = payment_method
        party.stripe_payment_id = payment_intent_id or party.stripe_payment_id
        party.save(update_fields=["status", "payment_status", "payment_method", "stripe_payment_id", "updated_at"])
        return True

    if kind == "event":
        registration = _get(EventRegistration, reference_id)
        if registration.payment_status == "paid":
            return False
        amount = None
        if amount_total_cents is not None:
            amount = Decimal(int(amount_total_cents)) / 100
        event_services.mark_paid(
            registration,
            payment_method=payment_method,
            stripe_payment_id=payment_intent_id,
            amount=amount,
        )
        return True

    raise PayableError(f"Unknown payment type: {kind}")
