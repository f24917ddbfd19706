from decimal import Decimal
from unittest import mock

from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework.test import APIClient

from snacks.models import Cart, Order, Snack
from snacks.services import order_service
from snacks.services.cart_service import CartError, CartService
from snacks.services.order_service import OrderStatusError
from staff.models import StaffRole

VIP_1H = "22222222-2222-4222-8222-222222222221"


class CartServiceTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username="jane", password="pass12345")
        self.nachos = Snack.objects.create(name="Nachos", category="snacks", price=Decimal("18.00"))

    def test_single_active_cart(self):
        first = CartService.get_or_create_active_cart(self.user)
        self.assertEqual(CartService.get_or_create_active_cart(self.user).pk, first.pk)

    def test_adding_same_item_merges_lines(self):
        CartService.add_to_cart(self.user, self.nachos.id, 1)
        line = CartService.add_to_cart(self.user, str(self.nachos.id), 2)
        self.assertEqual(line.qty, 3)
        self.assertEqual(line.line_total, Decimal("54.00"))
        self.assertEqual(CartService.item_count(self.user), 3)

    def test_totals_include_vat(self):
        CartService.add_to_cart(self.user, self.nachos.id, 2)
        CartService.add_to_cart(self.user, VIP_1H, 1)
        cart = Cart.objects.get(user=self.user, status="active")
        self.assertEqual(cart.subtotal, Decimal("66.00"))
        self.assertEqual(cart.tax, Decimal("3.30"))
        self.assertEqual(cart.total, Decimal("69.30"))

    def test_package_item_priced_from_catalog(self):
        line = CartService.add_to_cart(self.user, VIP_1H)
        self.assertEqual(line.name, "VIP Rooms (1 Hour)")
        self.assertEqual(line.unit_price, Decimal("30.00"))

    def test_unknown_and_unavailable_items_rejected(self):
        with self.assertRaises(CartError):
            CartService.add_to_cart(self.user, "not-a-thing")
        with self.assertRaises(CartError):
            CartService.add_to_cart(self.user, "999")
        self.nachos.available = False
        self.nachos.save()
        with self.assertRaises(CartError):
            CartService.add_to_cart(self.user, self.nachos.id)

    def test_quantity_is_capped(self):
        CartService.add_to_cart(self.user, self.nachos.id, 90)
        line = CartService.add_to_cart(self.user, self.nachos.id, 20)
        self.assertEqual(line.qty, 99)

    def test_zero_quantity_removes_line(self):
        line = CartService.add_to_cart(self.user, self.nachos.id, 2)
        self.assertIsNone(CartService.update_quantity(self.user, line.id, 0))
        cart = CartService.get_or_create_active_cart(self.user)
        self.assertEqual(cart.items.count(), 0)
        self.assertEqual(cart.total, Decimal("0.00"))

    def test_clear_cart(self):
        CartService.add_to_cart(self.user, self.nachos.id, 2)
        cart = CartService.clear_cart(self.user)
        self.assertEqual(cart.subtotal, Decimal("0.00"))
        self.assertEqual(CartService.item_count(self.user), 0)


class OrderServiceTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username="jane", password="pass12345")
        snack = Snack.objects.create(name="Water", category="drinks", price=Decimal("5.00"))
        CartService.add_to_cart(self.user, snack.id, 2)
        self.cart = CartService.get_or_create_active_cart(self.user)

    def test_create_order_snapshots_cart(self):
        order = order_service.create_order(self.cart)
        self.assertEqual(order.order_number, 1001)
        self.assertEqual(order.label, "Order #1001")
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.total, Decimal("10.50"))
        self.assertEqual([(i.name, i.qty) for i in order.items.all()], [("Water", 2)])
        # The cart stays open until payment
        self.cart.refresh_from_db()
        self.assertEqual(self.cart.status, "active")

    def test_order_numbers_increase(self):
        first = order_service.create_order(self.cart)
        second = order_service.create_order(self.cart)
        self.assertEqual(second.order_number, first.order_number + 1)

    def test_taken_order_number_is_retried(self):
        first = order_service.create_order(self.cart)
        # A concurrent checkout read the same Max(order_number) before our insert
        with mock.patch.object(order_service, "_next_order_number", side_effect=[first.order_number, 1002]):
            with self.assertLogs("snacks.services.order_service", level="WARNING"):
                second = order_service.create_order(self.cart)
        self.assertEqual(second.order_number, 1002)
        self.assertEqual(Order.objects.count(), 2)

    def test_order_number_retries_are_bounded(self):
        first = order_service.create_order(self.cart)
        with mock.patch.object(order_service, "_next_order_number", return_value=first.order_number):
            with self.assertRaises(OrderStatusError):
                order_service.create_order(self.cart)
        self.assertEqual(Order.objects.count(), 1)

    def test_empty_cart_rejected(self):
        CartService.clear_cart(self.user)
        with self.assertRaises(OrderStatusError):
            order_service.create_order(self.cart)

    def test_room_delivery_requirements(self):
        with self.assertRaises(OrderStatusError):
            order_service.create_order(self.cart, fulfillment="room", inside_pixoul_confirmed=True)
        with self.assertRaises(OrderStatusError):
            order_service.create_order(self.cart, fulfillment="room", room_location="VIP 1")
        order = order_service.create_order(
            self.cart, fulfillment="room", room_location="VIP 1", inside_pixoul_confirmed=True
        )
        self.assertEqual(order.room_location, "VIP 1")

    def test_mark_paid_starts_kitchen_flow_and_closes_cart(self):
        order = order_service.create_order(self.cart)
        order = order_service.mark_paid(order, payment_method="card", stripe_payment_id="pi_1")
        self.assertEqual((order.status, order.payment_status), (Order.STATUS_NEW, "paid"))
        self.cart.refresh_from_db()
        self.assertEqual(self.cart.status, "completed")
        # A fresh cart is handed out afterwards
        self.assertNotEqual(CartService.get_or_create_active_cart(self.user).pk, self.cart.pk)
        # Idempotent
        self.assertEqual(order_service.mark_paid(order).stripe_payment_id, "pi_1")

    def test_kitchen_moves_one_step_at_a_time(self):
        order = order_service.mark_paid(order_service.create_order(self.cart))
        with self.assertRaises(OrderStatusError):
            order_service.update_status(order, Order.STATUS_READY)
        for step in (Order.STATUS_PREPARING, Order.STATUS_READY, Order.STATUS_COMPLETED):
            order = order_service.update_status(order, step)
        self.assertEqual(order.status, Order.STATUS_COMPLETED)
        with self.assertRaises(OrderStatusError):
            order_service.cancel_order(order)

    def test_unpaid_order_cannot_enter_kitchen(self):
        order = order_service.create_order(self.cart)
        with self.assertRaises(OrderStatusError):
            order_service.update_status(order, Order.STATUS_PREPARING)
        self.assertEqual(order_service.cancel_order(order).status, Order.STATUS_CANCELLED)


class SnacksApiTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="jane", password="pass12345")
        self.kitchen = User.objects.create_user(username="kitchen", password="pass12345")
        StaffRole.objects.create(user=self.kitchen, role=StaffRole.SNACKS)
        self.fries = Snack.objects.create(name="Loaded Fries", category="snacks", price=Decimal("22.00"))
        Snack.objects.create(name="Sold out", category="snacks", price=Decimal("1.00"), available=False)

    def test_menu_hides_unavailable_for_customers(self):
        names = [s["name"] for s in self.client.get("/api/snacks/menu/").data]
        self.assertEqual(names, ["Loaded Fries"])
        self.client.force_authenticate(self.kitchen)
        self.assertEqual(len(self.client.get("/api/snacks/menu/").data), 2)

    def test_menu_writes_need_snacks_role(self):
        payload = {"name": "Brownie", "category": "desserts", "price": "14.00"}
        self.client.force_authenticate(self.user)
        self.assertEqual(self.client.post("/api/snacks/menu/", payload, format="json").status_code, 403)
        self.client.force_authenticate(self.kitchen)
        self.assertEqual(self.client.post("/api/snacks/menu/", payload, format="json").status_code, 201)

    def test_cart_endpoints(self):
        self.client.force_authenticate(self.user)
        resp = self.client.post("/api/snacks/cart/items/", {"menu_item_id": str(self.fries.id), "qty": 2}, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["item_count"], 2)
        self.assertEqual(resp.data["total"], "46.20")
        item_id = resp.data["items"][0]["id"]

        resp = self.client.patch(f"/api/snacks/cart/items/{item_id}/", {"qty": 1}, format="json")
        self.assertEqual(resp.data["subtotal"], "22.00")
        self.assertEqual(self.client.get("/api/snacks/cart/count/").data, {"count": 1})

        resp = self.client.delete(f"/api/snacks/cart/items/{item_id}/")
        self.assertEqual(resp.data["items"], [])
        self.assertEqual(self.client.delete(f"/api/snacks/cart/items/{item_id}/").status_code, 404)

    def test_checkout_and_staff_flow(self):
        self.client.force_authenticate(self.user)
        self.client.post("/api/snacks/cart/items/", {"menu_item_id": str(self.fries.id)}, format="json")
        resp = self.client.post("/api/snacks/cart/checkout/", {"fulfillment": "pickup"}, format="json")
        self.assertEqual(resp.status_code, 201)
        order_id = resp.data["id"]
        self.assertEqual(resp.data["status"], "pending")

        resp = self.client.post(f"/api/snacks/orders/{order_id}/status/", {"status": "preparing"}, format="json")
        self.assertEqual(resp.status_code, 403)

        order_service.mark_paid(Order.objects.get(pk=order_id))
        self.client.force_authenticate(self.kitchen)
        resp = self.client.get("/api/snacks/orders/", {"status": "new"})
        self.assertEqual([o["id"] for o in resp.data], [order_id])
        resp = self.client.post(f"/api/snacks/orders/{order_id}/status/", {"status": "ready"}, format="json")
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post(f"/api/snacks/orders/{order_id}/status/", {"status": "preparing"}, format="json")
        self.assertEqual(resp.data["status"], "preparing")
        resp = self.client.post(f"/api/snacks/orders/{order_id}/cancel/")
        self.assertEqual(resp.data["status"], "cancelled")

    def test_checkout_empty_cart(self):
        self.client.force_authenticate(self.user)
        self.assertEqual(self.client.post("/api/snacks/cart/checkout/", {}, format="json").status_code, 400)

    def test_customers_see_own_orders_only(self):
        other = User.objects.create_user(username="omar", password="pass12345")
        CartService.add_to_cart(other, self.fries.id)
        order_service.create_order(CartService.get_or_create_active_cart(other))
        self.client.force_authenticate(self.user)
        self.assertEqual(self.client.get("/api/snacks/orders/").data, [])
