# snacks/views.py
#
# Purpose:
# - Snack menu (public read, "snacks" staff write).
# - The signed-in user's cart and checkout.
# - Orders: customers see their own, snacks staff see and advance all.
#
# Endpoints (mounted at /api/snacks/):
# - /menu/                               CRUD (staff), list (anyone)
# - GET    /cart/                        current cart with totals
# - POST   /cart/items/                  {menu_item_id, qty}
# - PATCH  /cart/items/{id}/             {qty}; 0 removes
# - DELETE /cart/items/{id}/
# - POST   /cart/clear/
# - GET    /cart/count/
# - POST   /cart/checkout/               creates a pending order
# - GET    /orders/                      own orders (staff: all, ?status=)
# - POST   /orders/{id}/status/          staff
# - POST   /orders/{id}/cancel/          staff
#
import logging

from django.db.models import Prefetch
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from staff.models import StaffRole
from staff.permissions import HasStaffRole, StaffRoleOrReadOnly
from staff.roles import has_role
from .models import Snack, Order, OrderItem
from .serializers import (
    SnackSerializer,
    CartSerializer,
    AddToCartSerializer,
    UpdateQuantitySerializer,
    CheckoutSerializer,
    OrderSerializer,
    OrderStatusSerializer,
)
from .services.cart_service import CartService, CartError
from .services import order_service
from .services.order_service import OrderStatusError

logger = logging.getLogger(__name__)


class SnackViewSet(viewsets.ModelViewSet):
    serializer_class = SnackSerializer
    permission_classes = [StaffRoleOrReadOnly]
    staff_role = StaffRole.SNACKS

    def get_queryset(self):
        qs = Snack.objects.all()
        if not has_role(self.request.user, StaffRole.SNACKS):
            qs = qs.filter(available=True)
        category = self.request.query_params.get("category")
        if category:
            qs = qs.filter(category=category)
        return qs


def _cart_response(user, code=status.HTTP_200_OK):
    cart = CartService.get_or_create_active_cart(user)
    return Response(CartSerializer(cart).data, status=code)


class CartView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return _cart_response(request.user)


class CartItemsView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        payload = AddToCartSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            CartService.add_to_cart(request.user, **payload.validated_data)
        except CartError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return _cart_response(request.user, status.HTTP_201_CREATED)


class CartItemDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, item_id):
        payload = UpdateQuantitySerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            CartService.update_quantity(request.user, item_id, payload.validated_data["qty"])
        except CartError as e:
            return Response({"detail": str(e)}, status=status.HTTP_404_NOT_FOUND)
        return _cart_response(request.user)

    def delete(self, request, item_id):
        try:
            CartService.remove_item(request.user, item_id)
        except CartError as e:
            return Response({"detail": str(e)}, status=status.HTTP_404_NOT_FOUND)
        return _cart_response(request.user)


class CartClearView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        CartService.clear_cart(request.user)
        return _cart_response(request.user)


class CartCountView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({"count": CartService.item_count(request.user)})


class CheckoutView(APIView):
    """
    Creates a pending, unpaid order from the active cart. The client then
    starts payment with POST /api/payments/checkout/ {type: "order", id}.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        payload = CheckoutSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        cart = CartService.get_or_create_active_cart(request.user)
        try:
            order = order_service.create_order(cart, **payload.validated_data)
        except OrderStatusError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = OrderSerializer
    staff_role = StaffRole.SNACKS

    def get_queryset(self):
        user = self.request.user
        qs = Order.objects.prefetch_related(Prefetch("items", queryset=OrderItem.objects.order_by("id")))
        if has_role(user, StaffRole.SNACKS):
            status_filter = self.request.query_params.get("status")
            if status_filter:
                qs = qs.filter(status=status_filter)
            elif self.request.query_params.get("paid") == "1":
                qs = qs.filter(payment_status="paid")
            return qs.order_by("-created_at")
        if not user.is_authenticated:
            return qs.none()
        return qs.filter(user=user).order_by("-created_at")

    @action(detail=True, methods=["post"], url_path="status", permission_classes=[HasStaffRole])
    def set_status(self, request, pk=None):
        order = self.get_object()
        payload = OrderStatusSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            order = order_service.update_status(order, payload.validated_data["status"])
        except OrderStatusError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], permission_classes=[HasStaffRole])
    def cancel(self, request, pk=None):
        order = self.get_object()
        try:
            order = order_service.cancel_order(order)
        except OrderStatusError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(OrderSerializer(order).data)
