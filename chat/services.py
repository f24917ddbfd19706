"""
services.py
-----------
Conversation helpers shared by the chat API and the booking/party
"request cancellation" flows.
"""

import logging

from django.db import transaction

from staff.models import StaffRole
from staff.roles import has_role, is_staff_member
from .models import Conversation, Message

logger = logging.getLogger(__name__)

# Which staff roles can see and answer each conversation type.
ROLES_BY_TYPE = {
    "support": (StaffRole.SUPPORT,),
    "booking": (StaffRole.SUPPORT, StaffRole.BOOKING),
    "party": (StaffRole.SUPPORT, StaffRole.BOOKING),
    "event": (StaffRole.SUPPORT, StaffRole.EVENTS_PROGRAMS),
}

MAX_MESSAGE_LENGTH = 2000


def staff_types_for(user):
    """Conversation types the user may handle as staff."""
    return [t for t, roles in ROLES_BY_TYPE.items() if has_role(user, *roles)]


def can_access(user, conversation) -> bool:
    if conversation.user_id == user.id:
        return True
    return conversation.conversation_type in staff_types_for(user)


def open_conversation(user, conversation_type="support", reference_id="", title=""):
    """
    Return the user's active conversation for (type, reference), creating it
    if there is none.
    """
    if conversation_type not in ROLES_BY_TYPE:
        raise ValueError(f"Unknown conversation type: {conversation_type}")

    existing = (
        Conversation.objects.filter(
            user=user,
            conversation_type=conversation_type,
            reference_id=reference_id or "",
            status="active",
        )
        .order_by("-created_at")
        .first()
    )
    if existing:
        return existing
    return Conversation.objects.create(
        user=user,
        conversation_type=conversation_type,
        reference_id=reference_id or "",
        title=title or "Support",
    )


@transaction.atomic
def post_message(conversation, sender, text):
    """
    Append a message. Staff replies are flagged is_staff and the first staff
    member to answer is assigned to the thread. Posting reopens a closed thread.
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("Message cannot be empty.")
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValueError(f"Message is too long (max {MAX_MESSAGE_LENGTH} characters).")

    from_staff = sender.id != conversation.user_id and is_staff_member(sender)
    msg = Message.objects.create(
        conversation=conversation,
        sender=sender,
        message=text,
        is_staff=from_staff,
    )

    update_fields = ["last_message_at"]
    conversation.last_message_at = msg.created_at
    if from_staff and conversation.staff_user_id is None:
        conversation.staff_user = sender
        update_fields.append("staff_user")
    if conversation.status != "active":
        conversation.status = "active"
        update_fields.append("status")
    conversation.save(update_fields=update_fields)
    return msg


def mark_read(conversation, reader) -> int:
    """
    Mark the other side's messages as read. Returns the number updated.
    """
    qs = conversation.messages.filter(is_read=False)
    if reader.id == conversation.user_id:
        qs = qs.filter(is_staff=True)
    else:
        qs = qs.filter(is_staff=False)
    return qs.update(is_read=True)


def unread_count(user) -> int:
    """Unread messages addressed to the user (staff replies on own threads)."""
    if user is None or not user.is_authenticated:
        return 0
    return Message.objects.filter(
        conversation__user=user, is_staff=True, is_read=False
    ).count()


def set_status(conversation, status):
    if status not in ("active", "closed"):
        raise ValueError("Status must be 'active' or 'closed'.")
    conversation.status = status
    conversation.save(update_fields=["status"])
    logger.info("Conversation %s is now %s", conversation.pk, status)
    return conversation
