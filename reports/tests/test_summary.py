from datetime import timedelta
from decimal import Decimal

from django.contrib.auth.models import User
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from booking.models import Room
from booking.services.booking_manager import BookingManager
from snacks.models import Snack
from snacks.services import order_service
from snacks.services.cart_service import CartService
from staff.models import StaffRole


class ReportsSummaryTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.customer = User.objects.create_user(username="jane", password="pass12345")
        self.manager_user = User.objects.create_user(username="boss", password="pass12345")
        StaffRole.objects.create(user=self.manager_user, role=StaffRole.BOOKING)

        today = timezone.localdate()
        day = today + timedelta(days=7 - today.weekday())
        vip = Room.objects.create(name="VIP Room 1", capacity=5, hourly_rate=Decimal("30.00"))
        social = Room.objects.create(name="Social Gaming Room", capacity=15, hourly_rate=Decimal("300.00"))
        manager = BookingManager()
        manager.create_booking(self.customer, vip, day, "10:00", 1)
        manager.create_booking(self.customer, vip, day, "12:00", 1)
        manager.create_booking(self.customer, social, day, "10:00", 1)
        manager.cancel_booking(manager.create_booking(self.customer, social, day, "14:00", 1))

        snack = Snack.objects.create(name="Nachos", category="snacks", price=Decimal("18.00"))
        CartService.add_to_cart(self.customer, snack.id, 2)
        order_service.mark_paid(order_service.create_order(CartService.get_or_create_active_cart(self.customer)))

    def test_summary(self):
        self.client.force_authenticate(self.manager_user)
        resp = self.client.get("/api/reports/summary")
        self.assertEqual(resp.status_code, 200)
        data = resp.data
        self.assertEqual(sum(d["count"] for d in data["bookings_per_day"]), 4)
        self.assertEqual(sum(d["count"] for d in data["cancellations_per_day"]), 1)
        self.assertEqual(
            [(r["room_name"], r["count"]) for r in data["top_rooms"]],
            [("VIP Room 1", 2), ("Social Gaming Room", 1)],
        )
        self.assertEqual(data["paid_orders"], 1)
        self.assertEqual(Decimal(data["order_revenue"]), Decimal("37.80"))

    def test_snacks_staff_can_read(self):
        kitchen = User.objects.create_user(username="kitchen", password="pass12345")
        StaffRole.objects.create(user=kitchen, role=StaffRole.SNACKS)
        self.client.force_authenticate(kitchen)
        self.assertEqual(self.client.get("/api/reports/summary").status_code, 200)

    def test_customers_are_refused(self):
        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.get("/api/reports/summary").status_code, 403)
