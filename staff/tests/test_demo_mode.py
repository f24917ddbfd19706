from datetime import time, timedelta
from decimal import Decimal

from django.contrib.auth.models import User
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from booking.models import Room
from chat.models import Conversation, Message
from events.models import Event


@override_settings(DEMO_MODE=True)
class DemoModeSweepTests(TestCase):
    """Anonymous visitors in demo mode can browse every read endpoint."""

    def setUp(self):
        self.client = APIClient()
        customer = User.objects.create_user(username="jane", password="pass12345")
        self.room = Room.objects.create(name="VIP Room 1", type="vip", capacity=5, hourly_rate=Decimal("30.00"))
        self.event = Event.objects.create(
            title="Friday Cup", description="-", type="tournament",
            event_date=timezone.localdate() + timedelta(days=10), start_time=time(18, 0),
        )
        conversation = Conversation.objects.create(user=customer, conversation_type="support", title="Help")
        Message.objects.create(conversation=conversation, sender=customer, message="Hi")
        self.day = (timezone.localdate() + timedelta(days=3)).isoformat()

    def test_read_endpoints_answer_anonymous_visitors(self):
        urls = [
            "/api/rooms/",
            f"/api/rooms/{self.room.id}/",
            f"/api/rooms/{self.room.id}/availability/?date={self.day}&duration=2",
            "/api/business-hours/",
            "/api/packages/",
            "/api/bookings/",
            "/api/party-requests/",
            "/api/bookings-calendar/",
            "/api/booking-packages/",
            "/api/party-gallery/",
            "/api/party-pricing/",
            "/api/events/",
            f"/api/events/{self.event.id}/",
            f"/api/events/{self.event.id}/registrations/",
            "/api/gallery/photos/",
            "/api/snacks/menu/",
            "/api/snacks/orders/",
            "/api/chat/conversations/",
            "/api/chat/conversations/unread-count/",
            "/api/content/announcements/",
            "/api/content/guides/",
            "/api/reports/summary",
            "/api/auth/profiles/",
        ]
        for url in urls:
            with self.subTest(url=url):
                self.assertEqual(self.client.get(url).status_code, 200)

    def test_anonymous_unread_count_is_zero(self):
        resp = self.client.get("/api/chat/conversations/unread-count/")
        self.assertEqual(resp.data, {"unread": 0})

    def test_anonymous_visitor_sees_no_private_rows(self):
        self.assertEqual(len(self.client.get("/api/chat/conversations/").data), 0)
        self.assertEqual(len(self.client.get("/api/bookings/").data), 0)

    def test_personal_endpoints_still_need_sign_in(self):
        for url in ("/api/auth/me", "/api/staff/me", "/api/snacks/cart/", "/api/notifications/",
                    "/api/events/my-registrations/", "/api/payments/cards/"):
            with self.subTest(url=url):
                self.assertEqual(self.client.get(url).status_code, 403)

    def test_writes_are_refused(self):
        self.assertEqual(self.client.post("/api/chat/conversations/", {}, format="json").status_code, 403)
        self.assertEqual(self.client.post("/api/rooms/", {}, format="json").status_code, 403)
