"""Business logic for Stripe webhook events.

Kept apart from the HTTP view so the same code path serves the webhook and
the client-side "verify payment" call, and can be tested without HTTP.
"""

import logging

import stripe
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from ..models import SavedCard, WebhookEvent
from . import payables
from .stripe_service import PaymentServiceError, StripeService, to_plain

logger = logging.getLogger(__name__)


def _get(obj, key, default=None):
    """Read a key from a dict or a StripeObject (which has no .get)."""
    if isinstance(obj, dict):
        value = obj.get(key, default)
    elif isinstance(obj, stripe.StripeObject):
        value = obj[key] if key in obj else default
    else:
        value = getattr(obj, key, default)
    return default if value is None else value


def _as_id(value):
    """Expandable Stripe fields arrive as an id string or an object."""
    if value is None or isinstance(value, str):
        return value or ""
    return _get(value, "id", "")


class WebhookHandler:
    """Processes Stripe events and updates the paid rows.

    Idempotency: every event id is stored in WebhookEvent; a repeated
    delivery is answered as a duplicate without touching the rows again.
    """

    def __init__(self, stripe_service: StripeService | None = None) -> None:
        self._stripe = stripe_service or StripeService()

    def is_event_already_processed(self, event_id: str) -> bool:
        return bool(event_id) and WebhookEvent.objects.filter(event_id=event_id).exists()

    def log_event(self, event_id, event_type, processing_result, metadata=None, error_message=""):
        if not event_id:
            return
        metadata = metadata or {}
        try:
            with transaction.atomic():
                WebhookEvent.objects.create(
                    event_id=event_id,
                    event_type=event_type,
                    reference_type=_get(metadata, "type", ""),
                    reference_id=_get(metadata, "referenceId", ""),
                    processing_result=processing_result,
                    error_message=error_message or "",
                )
        except IntegrityError:
            logger.info("Webhook event %s already logged", event_id)

    def handle_event(self, event: dict) -> str:
        """
        Returns:
            "success", "duplicate", "skipped" or "error"
        """
        event = to_plain(event)
        event_id = _get(event, "id", "")
        event_type = _get(event, "type", "")

        if self.is_event_already_processed(event_id):
            logger.info("Duplicate webhook event %s ignored", event_id)
            return "duplicate"

        if event_type != "checkout.session.completed":
            logger.debug("Ignoring webhook event type %s", event_type)
            return "skipped"

        session = _get(_get(event, "data", {}), "object", {})
        metadata = _get(session, "metadata", {})
        try:
            result = self.apply_session(session)
        except ValueError as e:
            logger.warning("Webhook %s could not be applied: %s", event_id, e)
            self.log_event(event_id, event_type, "error", metadata, str(e))
            return "error"

        self.log_event(event_id, event_type, result, metadata)
        return result

    def apply_session(self, session) -> str:
        """
        Mark the referenced row paid for a completed Checkout session.

        Returns:
            "success" when applied (or already applied), "skipped" when the
            session is not paid yet.
        """
        session = to_plain(session)
        metadata = _get(session, "metadata", {})
        kind = _get(metadata, "type", "")
        reference_id = _get(metadata, "referenceId", "")
        if not kind or not reference_id:
            raise payables.PayableError("Missing type/referenceId in session metadata.")

        payment_status = _get(session, "payment_status", "")
        if payment_status != "paid":
            logger.warning("Session %s has payment_status=%s, not 'paid'", _get(session, "id"), payment_status)
            return "skipped"

        method_types = _get(session, "payment_method_types", []) or []
        payment_method = method_types[0] if method_types else "card"
        payment_intent_id = _as_id(_get(session, "payment_intent"))

        with transaction.atomic():
            updated = payables.mark_paid(
                kind,
                reference_id,
                payment_method=payment_method,
                payment_intent_id=payment_intent_id,
                amount_total_cents=_get(session, "amount_total"),
            )
        if updated:
            logger.info("Payment applied: %s %s (intent %s)", kind, reference_id, payment_intent_id)
        else:
            logger.info("Payment for %s %s was already applied", kind, reference_id)

        self.save_card(session, metadata, payment_intent_id)
        return "success"

    def save_card(self, session, metadata, payment_intent_id) -> SavedCard | None:
        """Upsert the card used for this session. Failures are logged only."""
        user_id = _get(metadata, "userId", "")
        customer_id = _as_id(_get(session, "customer"))
        if not user_id or not customer_id:
            return None
        user = get_user_model().objects.filter(pk=user_id).first()
        if user is None:
            return None

        try:
            payment_method_id = _as_id(_get(session, "payment_method"))
            if not payment_method_id and payment_intent_id:
                intent = self._stripe.retrieve_payment_intent(payment_intent_id)
                payment_method_id = _as_id(_get(intent, "payment_method"))
            if not payment_method_id:
                return None
            method = self._stripe.retrieve_payment_method(payment_method_id)
        except PaymentServiceError as e:
            logger.warning("Could not save card for user %s: %s", user_id, e)
            return None

        card = _get(method, "card", {})
        saved, _ = SavedCard.objects.update_or_create(
            stripe_payment_method_id=payment_method_id,
            defaults={
                "user": user,
                "stripe_customer_id": customer_id,
                "card_brand": _get(card, "brand", "unknown"),
                "card_last4": _get(card, "last4", "0000"),
                "card_exp_month": _get(card, "exp_month", 1),
                "card_exp_year": _get(card, "exp_year", 2099),
            },
        )
        return saved
