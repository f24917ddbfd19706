# payments/views.py
#
# Purpose:
# - Start Stripe Checkout for an order, room booking, party or event registration.
# - Receive Stripe webhooks and apply completed payments.
# - Let the success page verify a session directly (webhooks can lag).
# - List and remove saved cards.
#
import logging

from django.conf import settings
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import SavedCard
from .serializers import CheckoutRequestSerializer, SavedCardSerializer, VerifyPaymentSerializer
from .services import payables
from .services.stripe_service import PaymentServiceError, StripeService, to_plain
from .services.webhook_handler import WebhookHandler

logger = logging.getLogger(__name__)


def _frontend_origin(request):
    return request.headers.get("Origin") or settings.FRONTEND_ORIGIN


class CheckoutView(APIView):
    """
    POST /api/payments/checkout/  {"type": "booking", "id": 42}
    -> {"session_id", "url", "subtotal", "vat", "total"} (cents)
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        payload = CheckoutRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        kind, reference_id = payload.validated_data["type"], payload.validated_data["id"]

        try:
            obj, amount, item_name = payables.resolve(kind, reference_id, request.user)
        except payables.PayableError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        if amount <= 0:
            return Response({"detail": "Nothing to pay."}, status=status.HTTP_400_BAD_REQUEST)

        try:
            session = StripeService().create_checkout_session(
                kind=kind,
                reference_id=str(obj.pk),
                user=request.user,
                amount=amount,
                item_name=item_name,
                origin=_frontend_origin(request),
            )
        except PaymentServiceError as e:
            return Response({"detail": str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(session, status=status.HTTP_201_CREATED)


@method_decorator(csrf_exempt, name="dispatch")
class StripeWebhookView(APIView):
    """
    POST /api/payments/webhook/ (called by Stripe, no session auth)
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        service = StripeService()
        try:
            event = service.verify_webhook(request.body, request.headers.get("Stripe-Signature"))
        except PaymentServiceError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        result = WebhookHandler(service).handle_event(event)
        if result == "error":
            return Response({"received": True, "result": result}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"received": True, "result": result})


class VerifyPaymentView(APIView):
    """
    POST /api/payments/verify/  {"session_id": "cs_..."}
    Applies the payment if Stripe reports the session as paid.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        payload = VerifyPaymentSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        service = StripeService()
        try:
            session = to_plain(service.retrieve_session(payload.validated_data["session_id"]))
        except PaymentServiceError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        metadata = session.get("metadata") or {}
        if str(metadata.get("userId", "")) != str(request.user.pk):
            return Response({"detail": "This payment belongs to another account."}, status=status.HTTP_403_FORBIDDEN)

        try:
            result = WebhookHandler(service).apply_session(session)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({
            "paid": result == "success",
            "type": metadata.get("type"),
            "id": metadata.get("referenceId"),
        })


class SavedCardViewSet(viewsets.ModelViewSet):
    serializer_class = SavedCardSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "delete", "head", "options"]

    def get_queryset(self):
        return SavedCard.objects.filter(user=self.request.user)

    def destroy(self, request, *args, **kwargs):
        card = self.get_object()
        try:
            StripeService().detach_payment_method(card.stripe_payment_method_id)
        except PaymentServiceError as e:
            return Response({"detail": str(e)}, status=status.HTTP_502_BAD_GATEWAY)
        card.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
