from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    SnackViewSet,
    OrderViewSet,
    CartView,
    CartItemsView,
    CartItemDetailView,
    CartClearView,
    CartCountView,
    CheckoutView,
)

router = DefaultRouter()
router.register(r"menu", SnackViewSet, basename="snack")
router.register(r"orders", OrderViewSet, basename="order")

urlpatterns = [
    path("cart/", CartView.as_view(), name="cart"),
    path("cart/items/", CartItemsView.as_view(), name="cart-items"),
    path("cart/items/<int:item_id>/", CartItemDetailView.as_view(), name="cart-item-detail"),
    path("cart/clear/", CartClearView.as_view(), name="cart-clear"),
    path("cart/count/", CartCountView.as_view(), name="cart-count"),
    path("cart/checkout/", CheckoutView.as_view(), name="cart-checkout"),
    path("", include(router.urls)),
]
