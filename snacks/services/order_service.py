# snacks/services/order_service.py
#
# Purpose:
# - Turn the active cart into an order and move orders through the kitchen.
#
# Lifecycle:
#   pending (awaiting payment) --paid--> new -> preparing -> ready -> completed
#   any non-final state --------------------------------------------> cancelled
#
# Payment confirmation (pending -> new) is done by payments.webhook_handler.

import logging

from django.db import IntegrityError, transaction
from django.db.models import Max

from ..models import Cart, Order, OrderItem

logger = logging.getLogger(__name__)

ORDER_NUMBER_START = 1000
ORDER_NUMBER_ATTEMPTS = 5

KITCHEN_FLOW = [Order.STATUS_NEW, Order.STATUS_PREPARING, Order.STATUS_READY, Order.STATUS_COMPLETED]
FINAL_STATES = (Order.STATUS_COMPLETED, Order.STATUS_CANCELLED)


class OrderStatusError(ValueError):
    pass


def _next_order_number() -> int:
    current = Order.objects.aggregate(top=Max("order_number"))["top"]
    return (current or ORDER_NUMBER_START) + 1


def _create_numbered_order(fields) -> Order:
    """
    Insert the order under the next free number. Two checkouts at the same
    moment can both read the same Max(order_number); the loser's insert fails
    the unique constraint inside its savepoint and retries with a fresh number.
    """
    for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
        number = _next_order_number()
        try:
            with transaction.atomic():
                return Order.objects.create(order_number=number, **fields)
        except IntegrityError:
            logger.warning("Order number %s taken (attempt %s), retrying", number, attempt)
    raise OrderStatusError("Checkout is busy right now. Please try again.")


@transaction.atomic
def create_order(cart, fulfillment="pickup", room_location="", room_details="", inside_pixoul_confirmed=False, notes=""):
    """
    Snapshot the cart into a pending/unpaid order. The cart stays active
    until the payment is confirmed so an abandoned checkout loses nothing.
    """
    cart = Cart.objects.select_for_update().get(pk=cart.pk)
    if cart.status != "active":
        raise OrderStatusError("This cart has already been checked out.")
    lines = list(cart.items.all())
    if not lines:
        raise OrderStatusError("Your cart is empty.")
    if fulfillment == "room":
        if not (room_location or "").strip():
            raise OrderStatusError("Tell us which room to deliver to.")
        if not inside_pixoul_confirmed:
            raise OrderStatusError("Room delivery is only available inside Pixoul Hub.")

    fields = dict(
        user=cart.user,
        cart=cart,
        subtotal=cart.subtotal,
        tax=cart.tax,
        fees=cart.fees,
        tip=cart.tip,
        total=cart.total,
        fulfillment=fulfillment,
        room_location=(room_location or "").strip(),
        room_details=(room_details or "").strip(),
        inside_pixoul_confirmed=bool(inside_pixoul_confirmed),
        notes=notes or "",
    )
    order = _create_numbered_order(fields)
    OrderItem.objects.bulk_create([
        OrderItem(
            order=order,
            menu_item_id=line.menu_item_id,
            name=line.name,
            unit_price=line.unit_price,
            qty=line.qty,
            line_total=line.line_total,
        )
        for line in lines
    ])
    logger.info("%s created from cart %s (total %s)", order.label, cart.pk, order.total)
    return order


@transaction.atomic
def mark_paid(order, payment_method="card", stripe_payment_id=""):
    """
    Payment confirmed: the order enters the kitchen queue and the cart is
    closed. Calling it again for a paid order is a no-op.
    """
    order = Order.objects.select_for_update().get(pk=order.pk)
    if order.payment_status == "paid":
        return order
    order.payment_status = "paid"
    order.payment_method = payment_method or "card"
    if stripe_payment_id:
        order.stripe_payment_id = stripe_payment_id
    if order.status == Order.STATUS_PENDING:
        order.status = Order.STATUS_NEW
    order.save()
    if order.cart_id:
        Cart.objects.filter(pk=order.cart_id).update(status="completed")
    logger.info("%s paid via %s", order.label, order.payment_method)
    return order


@transaction.atomic
def update_status(order, new_status):
    """
    Kitchen transitions only move one step forward along KITCHEN_FLOW.
    """
    order = Order.objects.select_for_update().get(pk=order.pk)
    if new_status == Order.STATUS_CANCELLED:
        return cancel_order(order)
    if order.status not in KITCHEN_FLOW:
        raise OrderStatusError(f"{order.label} is {order.get_status_display().lower()} and cannot be updated.")
    if new_status not in KITCHEN_FLOW:
        raise OrderStatusError(f"Unknown status: {new_status}")

    current_idx = KITCHEN_FLOW.index(order.status)
    if KITCHEN_FLOW.index(new_status) != current_idx + 1:
        raise OrderStatusError(f"Cannot move {order.label} from {order.status} to {new_status}.")

    old = order.status
    order.status = new_status
    order.save(update_fields=["status", "updated_at"])
    logger.info("%s: %s -> %s", order.label, old, new_status)
    return order


@transaction.atomic
def cancel_order(order):
    order = Order.objects.select_for_update().get(pk=order.pk)
    if order.status in FINAL_STATES:
        raise OrderStatusError(f"{order.label} is already {order.status}.")
    old = order.status
    order.status = Order.STATUS_CANCELLED
    order.save(update_fields=["status", "updated_at"])
    logger.info("%s: %s -> cancelled", order.label, old)
    return order
