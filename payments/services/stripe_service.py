"""Stripe integration for checkout sessions, webhooks and saved cards.

Uses the StripeClient pattern. The secret key comes from
settings.STRIPE_SECRET_KEY; without it every call raises PaymentServiceError
so the API answers 503 instead of failing deep inside stripe.
"""

import json
import logging
from decimal import Decimal, ROUND_HALF_UP

import stripe
from django.conf import settings
from stripe import StripeClient

logger = logging.getLogger(__name__)


class PaymentServiceError(Exception):
    """Raised when a Stripe operation fails or payments are not configured."""

    def __init__(self, message: str, stripe_error_code: str | None = None) -> None:
        super().__init__(message)
        self.stripe_error_code = stripe_error_code


def to_plain(obj):
    """
    Stripe responses are StripeObjects, not dicts. Convert them (recursively)
    so callers can use ordinary dict access. Plain values pass through.
    """
    if isinstance(obj, stripe.StripeObject):
        return obj.to_dict()
    return obj


def compute_vat(amount) -> dict:
    """
    Convert an AED amount to Stripe cents and add VAT on top.

    Returns:
        dict with "subtotal", "vat" and "total" in cents.
    """
    subtotal = int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    vat = int((subtotal * settings.VAT_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return {"subtotal": subtotal, "vat": vat, "total": subtotal + vat}


class StripeService:
    """Thin wrapper around StripeClient.

    Usage:
        svc = StripeService()
        session = svc.create_checkout_session(
            kind="booking", reference_id="42", user=request.user,
            amount=Decimal("220"), item_name="VIP Room", origin="https://...",
        )
    """

    def __init__(self, secret_key: str | None = None, webhook_secret: str | None = None) -> None:
        self._secret_key = secret_key if secret_key is not None else settings.STRIPE_SECRET_KEY
        self._webhook_secret = webhook_secret if webhook_secret is not None else settings.STRIPE_WEBHOOK_SECRET
        self._client: StripeClient | None = None

    def _get_client(self) -> StripeClient:
        if self._client is None:
            if not self._secret_key:
                raise PaymentServiceError("Payments are not configured.")
            self._client = StripeClient(self._secret_key)
        return self._client

    def get_or_create_customer(self, email: str, user_id) -> str:
        """Stripe customer id for this email, creating the customer if needed."""
        client = self._get_client()
        try:
            customers = client.customers.list(params={"email": email, "limit": 1})
            if customers.data:
                return customers.data[0].id
            customer = client.customers.create(
                params={"email": email, "metadata": {"user_id": str(user_id)}}
            )
            logger.info("Created Stripe customer %s for user %s", customer.id, user_id)
            return customer.id
        except stripe.StripeError as e:
            raise PaymentServiceError(f"Failed to look up customer: {e}", getattr(e, "code", None)) from e

    def create_checkout_session(
        self,
        *,
        kind: str,
        reference_id: str,
        user,
        amount,
        item_name: str,
        origin: str,
        description: str = "",
    ) -> dict:
        """Create a Checkout session for one payable item.

        Args:
            kind: order, booking, event or party.
            reference_id: primary key of the row being paid for.
            user: paying user; their email identifies the Stripe customer.
            amount: amount in AED before VAT.
            item_name: line item name shown on the Stripe page.
            origin: frontend origin used for the success/cancel redirects.

        Returns:
            Dict with session_id, url and the cent breakdown.

        Raises:
            PaymentServiceError: If the session cannot be created.
        """
        client = self._get_client()
        cents = compute_vat(amount)
        params = {
            "mode": "payment",
            "line_items": [
                {
                    "price_data": {
                        "currency": settings.PAYMENT_CURRENCY,
                        "unit_amount": cents["total"],
                        "product_data": {"name": item_name or "Payment"},
                    },
                    "quantity": 1,
                }
            ],
            "payment_intent_data": {"setup_future_usage": "off_session"},
            "success_url": f"{origin}/payment-success?type={kind}&id={reference_id}&session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{origin}/payment-cancelled?type={kind}&id={reference_id}",
            "metadata": {
                "type": kind,
                "referenceId": str(reference_id),
                "userId": str(user.pk),
                "subtotal": str(cents["subtotal"]),
                "vat": str(cents["vat"]),
                "total": str(cents["total"]),
            },
        }
        if description:
            params["line_items"][0]["price_data"]["product_data"]["description"] = description
        if user.email:
            params["customer"] = self.get_or_create_customer(user.email, user.pk)

        try:
            logger.info("Creating checkout session for %s %s, %d cents", kind, reference_id, cents["total"])
            session = client.checkout.sessions.create(params=params)
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            logger.error("Stripe checkout session creation failed: %s (code: %s)", e, error_code)
            raise PaymentServiceError(f"Failed to create checkout session: {e}", error_code) from e

        return {"session_id": session.id, "url": session.url, **cents}

    def retrieve_session(self, session_id: str) -> dict:
        client = self._get_client()
        try:
            return to_plain(client.checkout.sessions.retrieve(session_id))
        except stripe.StripeError as e:
            raise PaymentServiceError(f"Failed to retrieve session: {e}", getattr(e, "code", None)) from e

    def verify_webhook(self, payload: bytes, signature: str | None) -> dict:
        """Verify the Stripe-Signature header when a secret is configured.

        Without STRIPE_WEBHOOK_SECRET the body is trusted as-is (local dev).

        Raises:
            PaymentServiceError: If the signature or payload is invalid.
        """
        if self._webhook_secret:
            try:
                event = stripe.Webhook.construct_event(payload, signature or "", self._webhook_secret)
            except stripe.SignatureVerificationError as e:
                logger.warning("Invalid webhook signature: %s", e)
                raise PaymentServiceError("Invalid webhook signature") from e
            except ValueError as e:
                raise PaymentServiceError("Invalid webhook payload") from e
            return to_plain(event)

        try:
            return json.loads(payload)
        except ValueError as e:
            raise PaymentServiceError("Invalid webhook payload") from e

    def retrieve_payment_method(self, payment_method_id: str) -> dict:
        client = self._get_client()
        try:
            return to_plain(client.payment_methods.retrieve(payment_method_id))
        except stripe.StripeError as e:
            raise PaymentServiceError(f"Failed to retrieve payment method: {e}", getattr(e, "code", None)) from e

    def retrieve_payment_intent(self, payment_intent_id: str) -> dict:
        client = self._get_client()
        try:
            return to_plain(client.payment_intents.retrieve(payment_intent_id))
        except stripe.StripeError as e:
            raise PaymentServiceError(f"Failed to retrieve payment intent: {e}", getattr(e, "code", None)) from e

    def detach_payment_method(self, payment_method_id: str) -> None:
        client = self._get_client()
        try:
            client.payment_methods.detach(payment_method_id)
            logger.info("Detached payment method %s", payment_method_id)
        except stripe.StripeError as e:
            raise PaymentServiceError(f"Failed to remove card: {e}", getattr(e, "code", None)) from e
