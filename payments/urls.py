from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import CheckoutView, StripeWebhookView, VerifyPaymentView, SavedCardViewSet

router = DefaultRouter()
router.register(r"cards", SavedCardViewSet, basename="saved-card")

urlpatterns = [
    path("checkout/", CheckoutView.as_view(), name="payments-checkout"),
    path("webhook/", StripeWebhookView.as_view(), name="payments-webhook"),
    path("verify/", VerifyPaymentView.as_view(), name="payments-verify"),
    path("", include(router.urls)),
]
