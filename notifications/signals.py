# notifications/signals.py
#
# Purpose:
# - Customer emails + notifications when a RoomBooking status changes.
#   * CONFIRMED: on create, or when status is saved as confirmed
#   * CANCELLED: on update when status is set to cancelled (+ venue alert)
# - Staff team notifications:
#   * paid snack order        -> "snacks" role
#   * new party request       -> "booking" role
#   * customer chat message   -> roles that handle that conversation type
#
# Notes:
# - Uses DEFAULT_FROM_EMAIL from settings.
# - Works with either console backend (dev) or SMTP (demo/prod).
# - Does not crash the request on email failures (logs instead).
#
import logging
from smtplib import SMTPException

from django.conf import settings
from django.core.mail import send_mail
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone

from accounts.models import display_name
from booking.models import RoomBooking, PartyRequest
from chat.models import Message
from chat.services import ROLES_BY_TYPE
from snacks.models import Order
from staff.models import StaffRole
from notifications.models import Notification

logger = logging.getLogger(__name__)


def _send(subject: str, body: str, to_email: str) -> bool:
    """
    Send a single email. Returns True when the backend accepted it.

    We never let a delivery error bubble up and break the request.
    """
    if not to_email:
        return False
    try:
        send_mail(
            subject=subject,
            message=body,
            from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
            recipient_list=[to_email],
            fail_silently=False,  # raise so we can log; we still catch it below
        )
    except (SMTPException, OSError) as e:
        logger.error("Email send error to %s: %s", to_email, e)
        return False
    return True


def _status_saved(created, update_fields) -> bool:
    return created or update_fields is None or "status" in update_fields


def _booking_email(instance: RoomBooking) -> str:
    return instance.contact_email or instance.user.email


@receiver(post_save, sender=RoomBooking)
def booking_status_emails(sender, instance: RoomBooking, created: bool, update_fields=None, **kwargs):
    """
    - CONFIRMED: on create, or on update when 'status' was saved
    - CANCELLED: only on update (a booking is never created cancelled)
    """
    local_start = timezone.localtime(instance.start_time)
    dt_str = local_start.strftime("%A, %B %d, %Y at %I:%M %p")
    customer = display_name(instance.user)

    # =========================
    # 1) Booking CONFIRMED flow
    # =========================
    if instance.status == RoomBooking.STATUS_CONFIRMED and _status_saved(created, update_fields):
        body = (
            f"Hi {customer},\n\n"
            f"Your room booking is confirmed.\n\n"
            f"Booking ID: {instance.id}\n"
            f"Room: {instance.room.name}\n"
            f"Date & Time: {dt_str}\n"
            f"Duration: {instance.duration_hours} hour(s)\n\n"
            f"See you at Pixoul Hub!\n"
        )
        sent = _send("Booking Confirmation", body, _booking_email(instance))
        Notification.objects.create(
            recipient_user=instance.user,
            kind="booking_confirmed",
            title=f"Booking #{instance.id} confirmed",
            body=body,
            link_path="/my-bookings",
            sent=sent,
        )

    # =========================
    # 2) Booking CANCELLED flow
    # =========================
    if instance.status == RoomBooking.STATUS_CANCELLED and not created and _status_saved(created, update_fields):
        body_client = (
            f"Dear {customer},\n\n"
            f"Your booking of {instance.room.name} on {dt_str} has been cancelled.\n"
            f"If this was unexpected, please reply to this email or message us in the app.\n"
        )
        sent = _send(f"Booking #{instance.id} Cancelled", body_client, _booking_email(instance))
        Notification.objects.create(
            recipient_user=instance.user,
            kind="booking_cancelled",
            title=f"Booking #{instance.id} cancelled",
            body=body_client,
            link_path="/my-bookings",
            sent=sent,
        )

        # Venue inbox alert: only if EMAIL_HOST_USER is configured
        owner_email = getattr(settings, "EMAIL_HOST_USER", None)
        if owner_email:
            cancelled_at = timezone.localtime(instance.cancellation_time or timezone.now())
            body_owner = (
                f"ALERT: Booking #{instance.id} cancelled.\n"
                f"Customer: {customer} ({_booking_email(instance)})\n"
                f"Room: {instance.room.name}\n"
                f"Original Time: {dt_str}\n"
                f"Cancellation Time: {cancelled_at:%Y-%m-%d %H:%M:%S}\n"
            )
            _send(f"ALERT: Booking #{instance.id} CANCELLED", body_owner, owner_email)


def _notify_role(role, kind, title, body="", link_path=""):
    return Notification.objects.create(
        recipient_role=role,
        kind=kind,
        title=title,
        body=body,
        link_path=link_path,
    )


@receiver(post_save, sender=Order)
def paid_order_alert(sender, instance: Order, created: bool, update_fields=None, **kwargs):
    if instance.payment_status != "paid" or instance.status != Order.STATUS_NEW:
        return
    link = f"/staff/orders/{instance.pk}"
    if Notification.objects.filter(kind="order_paid", link_path=link).exists():
        return
    where = instance.room_location if instance.fulfillment == "room" else "pickup"
    _notify_role(
        StaffRole.SNACKS,
        "order_paid",
        f"New {instance.label} ({where})",
        f"Total AED {instance.total}",
        link,
    )


@receiver(post_save, sender=PartyRequest)
def new_party_request_alert(sender, instance: PartyRequest, created: bool, **kwargs):
    if not created:
        return
    _notify_role(
        StaffRole.BOOKING,
        "party_request",
        f"New {instance.get_party_type_display().lower()} party request",
        f"{instance.name}: {instance.guest_count} guests on {instance.preferred_date}",
        f"/staff/parties/{instance.pk}",
    )


@receiver(post_save, sender=Message)
def customer_message_alert(sender, instance: Message, created: bool, **kwargs):
    if not created or instance.is_staff:
        return
    conversation = instance.conversation
    preview = instance.message[:140]
    for role in ROLES_BY_TYPE.get(conversation.conversation_type, (StaffRole.SUPPORT,)):
        _notify_role(
            role,
            "support_message",
            f"New message from {display_name(instance.sender)}",
            preview,
            f"/staff/chat/{conversation.pk}",
        )
