# snacks/services/cart_service.py
#
# Purpose:
# - Shopping cart operations for the snack bar and venue packages.
# - Keep cart totals in sync after every change.
#
# Rules:
# - One active cart per user.
# - Adding an item that is already in the cart increases its quantity.
# - Prices come from the Snack row or the package catalog, never from the client.
# - Tax is VAT_RATE of the subtotal; fees and tip are zero for now.

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import IntegrityError, transaction

from booking.services.package_catalog import get_package_option
from ..models import Cart, CartItem, Snack

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
MAX_QTY = 99


class CartError(ValueError):
    """Raised when an item cannot be added or updated."""


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


class CartService:
    """
    Handles all cart operations for a signed-in user.
    """

    @staticmethod
    def get_or_create_active_cart(user):
        """
        Returns:
            Cart: the user's single active cart (created if missing)
        """
        cart = Cart.objects.filter(user=user, status="active").first()
        if cart:
            return cart
        try:
            with transaction.atomic():
                return Cart.objects.create(user=user, status="active")
        except IntegrityError:
            # Another request created it first
            return Cart.objects.get(user=user, status="active")

    @staticmethod
    def resolve_menu_item(menu_item_id):
        """
        Look up name, price and image for a snack id or package option UUID.

        Returns:
            dict: {"menu_item_id", "name", "unit_price", "image_url"}

        Raises:
            CartError: unknown or unavailable item
        """
        menu_item_id = str(menu_item_id or "").strip()
        if not menu_item_id:
            raise CartError("Missing menu item.")

        option = get_package_option(menu_item_id)
        if option is not None:
            return {
                "menu_item_id": option["menu_item_id"],
                "name": f"{option['name']} ({option['label']})",
                "unit_price": _money(option["price"]),
                "image_url": "",
            }

        if not menu_item_id.isdigit():
            raise CartError("Unknown menu item.")
        snack = Snack.objects.filter(pk=int(menu_item_id)).first()
        if snack is None:
            raise CartError("Unknown menu item.")
        if not snack.available:
            raise CartError(f"{snack.name} is currently unavailable.")
        return {
            "menu_item_id": menu_item_id,
            "name": snack.name,
            "unit_price": _money(snack.price),
            "image_url": snack.image.url if snack.image else "",
        }

    @staticmethod
    @transaction.atomic
    def add_to_cart(user, menu_item_id, qty=1):
        """
        Add an item, merging with an existing line for the same menu item.

        Returns:
            CartItem: the created or updated line
        """
        qty = int(qty)
        if qty < 1:
            raise CartError("Quantity must be at least 1.")

        item = CartService.resolve_menu_item(menu_item_id)
        cart = CartService.get_or_create_active_cart(user)
        cart = Cart.objects.select_for_update().get(pk=cart.pk)

        line = CartItem.objects.filter(cart=cart, menu_item_id=item["menu_item_id"]).first()
        if line:
            line.qty = min(MAX_QTY, line.qty + qty)
            line.unit_price = item["unit_price"]
        else:
            line = CartItem(cart=cart, qty=min(MAX_QTY, qty), **item)
        line.line_total = _money(line.unit_price * line.qty)
        line.save()

        CartService.calculate_totals(cart)
        return line

    @staticmethod
    @transaction.atomic
    def update_quantity(user, item_id, qty):
        """
        Set a line's quantity. Zero or less removes the line.

        Returns:
            CartItem or None when removed
        """
        cart = CartService.get_or_create_active_cart(user)
        line = CartItem.objects.filter(cart=cart, pk=item_id).first()
        if line is None:
            raise CartError("Item is not in your cart.")

        qty = int(qty)
        if qty <= 0:
            line.delete()
            CartService.calculate_totals(cart)
            return None

        line.qty = min(MAX_QTY, qty)
        line.line_total = _money(line.unit_price * line.qty)
        line.save(update_fields=["qty", "line_total"])
        CartService.calculate_totals(cart)
        return line

    @staticmethod
    def remove_item(user, item_id):
        return CartService.update_quantity(user, item_id, 0)

    @staticmethod
    @transaction.atomic
    def clear_cart(user):
        cart = CartService.get_or_create_active_cart(user)
        cart.items.all().delete()
        CartService.calculate_totals(cart)
        return cart

    @staticmethod
    def calculate_totals(cart):
        """
        Recompute subtotal, tax and total from the cart lines and save them.

        Returns:
            Cart: the same instance with updated totals
        """
        subtotal = sum((line.line_total for line in cart.items.all()), Decimal("0"))
        cart.subtotal = _money(subtotal)
        cart.tax = _money(cart.subtotal * settings.VAT_RATE)
        cart.fees = Decimal("0.00")
        cart.tip = Decimal("0.00")
        cart.total = cart.subtotal + cart.tax + cart.fees + cart.tip
        cart.save(update_fields=["subtotal", "tax", "fees", "tip", "total", "updated_at"])
        return cart

    @staticmethod
    def item_count(user) -> int:
        cart = Cart.objects.filter(user=user, status="active").first()
        if cart is None:
            return 0
        return sum(cart.items.values_list("qty", flat=True))
