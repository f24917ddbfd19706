from datetime import timedelta
from decimal import Decimal

from django.contrib.auth.models import User
from django.core import mail
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from booking.models import Room, RoomBooking, PartyRequest
from booking.services.booking_manager import BookingManager, SlotUnavailableError
from chat.models import Conversation
from staff.models import StaffRole


def next_monday(weeks_ahead=1):
    today = timezone.localdate()
    return today + timedelta(days=(7 - today.weekday()) + 7 * (weeks_ahead - 1))


class BookingTestBase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.customer = User.objects.create_user(username="jane", password="pass12345", email="jane@example.com")
        self.other = User.objects.create_user(username="omar", password="pass12345", email="omar@example.com")
        self.staff = User.objects.create_user(username="desk", password="pass12345", email="desk@staffportal.com")
        StaffRole.objects.create(user=self.staff, role=StaffRole.BOOKING)
        self.room = Room.objects.create(name="VIP Room 1", type="vip", capacity=5, hourly_rate=Decimal("30.00"))
        self.day = next_monday()

    def book(self, user, start="14:00", duration=2, room=None):
        self.client.force_authenticate(user)
        return self.client.post(
            "/api/bookings/",
            {
                "room": (room or self.room).id,
                "booking_date": self.day.isoformat(),
                "start_time": start,
                "duration_hours": duration,
                "contact_phone": "501234567",
            },
            format="json",
        )


class BookingCreateTests(BookingTestBase):

    def test_create_booking_is_pending_and_priced(self):
        resp = self.book(self.customer)
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["status"], "pending")
        self.assertEqual(resp.data["payment_status"], "unpaid")
        self.assertEqual(Decimal(resp.data["total_amount"]), Decimal("60.00"))

    def test_overlapping_booking_gets_409(self):
        self.assertEqual(self.book(self.customer, "14:00", 2).status_code, 201)
        resp = self.book(self.other, "15:00", 2)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.data["code"], "slot_unavailable")
        self.assertEqual(RoomBooking.objects.count(), 1)

    def test_back_to_back_bookings_are_allowed(self):
        self.assertEqual(self.book(self.customer, "14:00", 2).status_code, 201)
        self.assertEqual(self.book(self.other, "16:00", 2).status_code, 201)

    def test_cancelled_booking_frees_the_slot(self):
        self.book(self.customer, "14:00", 2)
        BookingManager().cancel_booking(RoomBooking.objects.get())
        self.assertEqual(self.book(self.other, "14:00", 2).status_code, 201)

    def test_slot_past_closing_is_rejected(self):
        resp = self.book(self.customer, "21:00", 2)
        self.assertEqual(resp.status_code, 400)

    def test_invalid_phone_is_rejected(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.post(
            "/api/bookings/",
            {"room": self.room.id, "booking_date": self.day.isoformat(), "start_time": "12:00",
             "duration_hours": 1, "contact_phone": "12345"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)

    def test_manager_raises_on_conflict(self):
        manager = BookingManager()
        manager.create_booking(self.customer, self.room, self.day, "10:00", 3)
        with self.assertRaises(SlotUnavailableError):
            manager.create_booking(self.other, self.room, self.day, "12:00", 1)

    def test_anonymous_cannot_book(self):
        self.client.force_authenticate(None)
        resp = self.client.post("/api/bookings/", {}, format="json")
        self.assertEqual(resp.status_code, 403)


class AvailabilityTests(BookingTestBase):

    def test_availability_marks_taken_slots(self):
        self.book(self.customer, "14:00", 2)
        self.client.force_authenticate(None)
        resp = self.client.get(f"/api/rooms/{self.room.id}/availability/", {"date": self.day.isoformat(), "duration": 2})
        self.assertEqual(resp.status_code, 200)
        by_start = {s["start"]: s["available"] for s in resp.data["slots"]}
        self.assertEqual(by_start["12:00"], True)
        self.assertEqual(by_start["13:00"], False)
        self.assertEqual(by_start["15:00"], False)
        self.assertEqual(by_start["16:00"], True)
        self.assertEqual(list(by_start)[-1], "20:00")

    def test_availability_accepts_datetime_string(self):
        resp = self.client.get(
            f"/api/rooms/{self.room.id}/availability/",
            {"date": f"{self.day.isoformat()}T00:00:00.000Z", "duration": 1},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["date"], self.day.isoformat())

    def test_availability_rejects_bad_input(self):
        url = f"/api/rooms/{self.room.id}/availability/"
        self.assertEqual(self.client.get(url, {"date": "tomorrow"}).status_code, 400)
        self.assertEqual(self.client.get(url, {"date": self.day.isoformat(), "duration": 9}).status_code, 400)
        self.assertEqual(self.client.get(url).status_code, 400)


class BookingStaffTests(BookingTestBase):

    def test_customer_cannot_confirm(self):
        booking_id = self.book(self.customer).data["id"]
        resp = self.client.post(f"/api/bookings/{booking_id}/confirm/")
        self.assertEqual(resp.status_code, 403)

    def test_staff_confirm_sends_email(self):
        booking_id = self.book(self.customer).data["id"]
        self.client.force_authenticate(self.staff)
        resp = self.client.post(f"/api/bookings/{booking_id}/confirm/", {"payment_method": "cash"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], "confirmed")
        self.assertEqual(resp.data["payment_status"], "paid")
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("confirmed", mail.outbox[0].body)

    def test_staff_cancel(self):
        booking_id = self.book(self.customer).data["id"]
        self.client.force_authenticate(self.staff)
        resp = self.client.post(f"/api/bookings/{booking_id}/cancel/", {"reason": "Maintenance"}, format="json")
        self.assertEqual(resp.status_code, 200)
        booking = RoomBooking.objects.get(pk=booking_id)
        self.assertEqual(booking.status, "cancelled")
        self.assertIsNotNone(booking.cancellation_time)
        # Cancelling twice is an error
        resp = self.client.post(f"/api/bookings/{booking_id}/cancel/")
        self.assertEqual(resp.status_code, 400)

    def test_customers_only_see_their_own_bookings(self):
        self.book(self.customer, "10:00", 1)
        self.book(self.other, "12:00", 1)
        self.client.force_authenticate(self.customer)
        resp = self.client.get("/api/bookings/")
        self.assertEqual(len(resp.data), 1)
        self.client.force_authenticate(self.staff)
        resp = self.client.get("/api/bookings/")
        self.assertEqual(len(resp.data), 2)

    def test_request_cancellation_opens_booking_chat(self):
        booking_id = self.book(self.customer).data["id"]
        resp = self.client.post(f"/api/bookings/{booking_id}/request-cancellation/", {"reason": "Sick"}, format="json")
        self.assertEqual(resp.status_code, 201)
        conversation = Conversation.objects.get(pk=resp.data["conversation_id"])
        self.assertEqual(conversation.conversation_type, "booking")
        self.assertEqual(conversation.reference_id, str(booking_id))
        self.assertIn("Reason: Sick", conversation.messages.get().message)
        # The booking itself is untouched until staff act
        self.assertEqual(RoomBooking.objects.get(pk=booking_id).status, "pending")

    def test_calendar_lists_active_bookings(self):
        self.book(self.customer, "10:00", 1)
        cancelled_id = self.book(self.other, "12:00", 1).data["id"]
        BookingManager().cancel_booking(RoomBooking.objects.get(pk=cancelled_id))

        self.client.force_authenticate(self.staff)
        resp = self.client.get("/api/bookings-calendar/", {"year": self.day.year, "month": self.day.month})
        self.assertEqual(resp.status_code, 200)
        day_cell = next(c for c in resp.data["cells"] if not c["blank"] and c["day"] == self.day.day)
        self.assertEqual([b["time"] for b in day_cell["bookings"]], ["10:00"])

    def test_calendar_requires_booking_role(self):
        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.get("/api/bookings-calendar/").status_code, 403)

    def test_calendar_out_of_range_year_falls_back_to_current_month(self):
        self.client.force_authenticate(self.staff)
        today = timezone.localdate()
        for year in ("0", "10000", "-5"):
            resp = self.client.get("/api/bookings-calendar/", {"year": year, "month": "1"})
            self.assertEqual(resp.status_code, 200)
            self.assertEqual((resp.data["year"], resp.data["month"]), (today.year, today.month))

    def test_calendar_rejects_non_numeric_room(self):
        self.client.force_authenticate(self.staff)
        resp = self.client.get("/api/bookings-calendar/", {"room": "abc"})
        self.assertEqual(resp.status_code, 400)

    def test_calendar_filters_by_room(self):
        second = Room.objects.create(name="VIP Room 2", type="vip", capacity=5, hourly_rate=Decimal("30.00"))
        self.book(self.customer, "10:00", 1)
        self.book(self.other, "12:00", 1, room=second)

        self.client.force_authenticate(self.staff)
        resp = self.client.get(
            "/api/bookings-calendar/",
            {"year": self.day.year, "month": self.day.month, "room": str(second.id)},
        )
        day_cell = next(c for c in resp.data["cells"] if not c["blank"] and c["day"] == self.day.day)
        self.assertEqual([b["room"] for b in day_cell["bookings"]], ["VIP Room 2"])


class RoomAdminTests(BookingTestBase):

    def test_only_booking_staff_can_create_rooms(self):
        payload = {"name": "Private Room", "type": "private", "capacity": 6, "hourly_rate": "40.00", "amenities": []}
        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.post("/api/rooms/", payload, format="json").status_code, 403)
        self.client.force_authenticate(self.staff)
        self.assertEqual(self.client.post("/api/rooms/", payload, format="json").status_code, 201)

    def test_deleting_booked_room_deactivates_it(self):
        self.book(self.customer)
        self.client.force_authenticate(self.staff)
        resp = self.client.delete(f"/api/rooms/{self.room.id}/")
        self.assertEqual(resp.status_code, 200)
        self.room.refresh_from_db()
        self.assertFalse(self.room.is_active)

    def test_inactive_rooms_hidden_from_public(self):
        Room.objects.create(name="Closed", capacity=2, hourly_rate=10, is_active=False)
        resp = self.client.get("/api/rooms/")
        self.assertEqual([r["name"] for r in resp.data], ["VIP Room 1"])


class PartyRequestTests(BookingTestBase):

    def payload(self, **overrides):
        data = {
            "name": "Sara's 10th",
            "party_type": "birthday",
            "age": 10,
            "preferred_date": self.day.isoformat(),
            "preferred_time_start": "15:00",
            "preferred_time_end": "18:00",
            "guest_count": 12,
            "contact_phone": "551234567",
        }
        data.update(overrides)
        return data

    def test_birthday_requires_age(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.post("/api/party-requests/", self.payload(age=None), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("age", resp.data)

    def test_graduation_requires_school(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.post("/api/party-requests/", self.payload(party_type="graduation"), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("school_name", resp.data)

    def test_end_must_follow_start(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.post("/api/party-requests/", self.payload(preferred_time_end="14:00"), format="json")
        self.assertEqual(resp.status_code, 400)

    def test_staff_reviews_request(self):
        self.client.force_authenticate(self.customer)
        party_id = self.client.post("/api/party-requests/", self.payload(), format="json").data["id"]

        resp = self.client.patch(f"/api/party-requests/{party_id}/", {"status": "approved"}, format="json")
        self.assertEqual(resp.status_code, 403)

        self.client.force_authenticate(self.staff)
        resp = self.client.patch(
            f"/api/party-requests/{party_id}/",
            {"status": "approved", "estimated_cost": "1500.00", "staff_notes": "Cake included"},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        party = PartyRequest.objects.get(pk=party_id)
        self.assertEqual(party.status, "approved")
        self.assertEqual(party.estimated_cost, Decimal("1500.00"))


@override_settings(DEMO_MODE=True)
class DemoModeTests(BookingTestBase):

    def test_demo_mode_allows_anonymous_reads_only(self):
        self.client.force_authenticate(None)
        self.assertEqual(self.client.get("/api/bookings/").status_code, 200)
        self.assertEqual(self.client.get("/api/bookings-calendar/").status_code, 200)
        self.assertEqual(self.client.post("/api/bookings/", {}, format="json").status_code, 403)


class PackagesAndHoursTests(TestCase):

    def test_packages_listed(self):
        resp = APIClient().get("/api/packages/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([g["id"] for g in resp.data["groups"]], ["pc-gaming", "social-gaming"])

    def test_business_hours_for_friday(self):
        resp = APIClient().get("/api/business-hours/", {"date": "2030-01-11", "duration": "1"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual((resp.data["open"], resp.data["close"]), (10, 24))
        self.assertEqual(resp.data["slots"][-1], "23:00")

    def test_business_hours_rejects_out_of_range_duration(self):
        for duration in ("0", "7", "two"):
            resp = APIClient().get("/api/business-hours/", {"date": "2030-01-11", "duration": duration})
            self.assertEqual(resp.status_code, 400, duration)
