# booking/views.py
#
# Purpose:
# - Rooms catalog (public read, booking staff write).
# - Availability endpoint with robust date parsing.
# - Room bookings: create (double-booking safe), staff confirm/cancel,
#   customer cancellation request through chat.
# - Party requests and the package catalog.
#
# Permissions:
# - Room writes, booking confirm/cancel and party review need the "booking"
#   staff role (staff.permissions.HasStaffRole).
# - Customers only ever see their own bookings and party requests.
#
import logging

from django.shortcuts import get_object_or_404
from django.utils import timezone

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from staff.models import StaffRole
from staff.permissions import HasStaffRole, StaffRoleOrReadOnly
from staff.roles import has_role
from .models import Room, RoomBooking, PartyRequest
from .serializers import (
    RoomSerializer,
    RoomBookingSerializer,
    BookingCreateSerializer,
    PartyRequestSerializer,
    PartyRequestStaffSerializer,
)
from .services.availability_engine import AvailabilityEngine
from .services.booking_manager import BookingManager, BookingValidationError, SlotUnavailableError
from .services.package_catalog import active_groups
from .services.slot_utils import MAX_DURATION_HOURS, get_business_hours, build_time_slots, parse_date

logger = logging.getLogger(__name__)


def _is_booking_staff(user) -> bool:
    return has_role(user, StaffRole.BOOKING)


# -------------------- Rooms --------------------
class RoomViewSet(viewsets.ModelViewSet):
    """
    Rooms:
    - Anyone can list active rooms.
    - Booking staff can see inactive rooms and create/update/delete.
    """
    serializer_class = RoomSerializer
    permission_classes = [StaffRoleOrReadOnly]
    staff_role = StaffRole.BOOKING

    def get_queryset(self):
        qs = Room.objects.all().order_by("id")
        if _is_booking_staff(self.request.user):
            return qs
        return qs.filter(is_active=True)

    def destroy(self, request, *args, **kwargs):
        """
        Rooms with bookings are deactivated rather than deleted so booking
        history keeps pointing at them.
        """
        room = self.get_object()
        if room.bookings.exists():
            room.is_active = False
            room.save(update_fields=["is_active"])
            return Response({"detail": "Room has bookings; it was deactivated instead."})
        room.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], permission_classes=[AllowAny])
    def availability(self, request, pk=None):
        """
        GET /api/rooms/{id}/availability/?date=YYYY-MM-DD&duration=N
        Also accepts dates that include time; we trim to the date part.
        Slots that already started are left out.
        """
        room = self.get_object()
        date_raw = (request.query_params.get("date") or "").strip()
        duration_raw = (request.query_params.get("duration") or "1").strip()

        if not date_raw:
            return Response({"detail": "Missing 'date'."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            day = parse_date(date_raw)
        except ValueError:
            return Response(
                {"detail": "Invalid date format. Use YYYY-MM-DD."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            duration = int(duration_raw)
        except ValueError:
            duration = 0
        if not 1 <= duration <= MAX_DURATION_HOURS:
            return Response(
                {"detail": f"Duration must be between 1 and {MAX_DURATION_HOURS} hours."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        data = AvailabilityEngine().find_available_slots(room, day, duration)
        open_hour, close_hour = get_business_hours(day)
        data.update({"date": day.isoformat(), "open": open_hour, "close": close_hour, "duration": duration})
        return Response(data)


class BusinessHoursView(APIView):
    """
    GET /api/business-hours/?date=YYYY-MM-DD[&duration=N]
    Without a date, returns the default Sunday to Thursday window.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        date_raw = (request.query_params.get("date") or "").strip()
        day = None
        if date_raw:
            try:
                day = parse_date(date_raw)
            except ValueError:
                return Response({"detail": "Invalid date format. Use YYYY-MM-DD."}, status=400)
        open_hour, close_hour = get_business_hours(day)
        data = {"date": day.isoformat() if day else None, "open": open_hour, "close": close_hour}
        duration_raw = (request.query_params.get("duration") or "").strip()
        if duration_raw:
            duration = int(duration_raw) if duration_raw.isdigit() else 0
            if not 1 <= duration <= MAX_DURATION_HOURS:
                return Response(
                    {"detail": f"Duration must be between 1 and {MAX_DURATION_HOURS} hours."},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            data["slots"] = build_time_slots(day, duration)
        return Response(data)


# -------------------- Bookings --------------------
class BookingViewSet(viewsets.ModelViewSet):
    """
    Endpoints:
    - GET    /api/bookings/                              own bookings (booking staff: all)
    - POST   /api/bookings/                              create (pending payment)
    - POST   /api/bookings/{id}/confirm/                 staff marks paid/confirmed
    - POST   /api/bookings/{id}/cancel/                  staff cancels
    - POST   /api/bookings/{id}/request-cancellation/    owner asks staff via chat
    """
    serializer_class = RoomBookingSerializer
    staff_role = StaffRole.BOOKING
    http_method_names = ["get", "post", "head", "options"]
    manager = BookingManager()

    def get_queryset(self):
        user = self.request.user
        qs = RoomBooking.objects.select_related("room").order_by("-start_time")
        if _is_booking_staff(user):
            status_filter = self.request.query_params.get("status")
            if status_filter:
                qs = qs.filter(status=status_filter)
            return qs
        if not user.is_authenticated:
            return qs.none()
        return qs.filter(user=user)

    def create(self, request, *args, **kwargs):
        """
        Create a booking from the booking form payload:
        - Requires: room, booking_date (YYYY-MM-DD), start_time ("HH:00"), duration_hours.
        - Optional: contact_phone, contact_email, notes.
        - 409 when the slot was taken (possibly by a concurrent request).
        """
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            booking = self.manager.create_booking(
                user=request.user,
                room=data["room"],
                booking_date=data["booking_date"],
                start_slot=data["start_time"],
                duration_hours=data["duration_hours"],
                contact_phone=data.get("contact_phone", ""),
                contact_email=data.get("contact_email", "") or request.user.email,
                notes=data.get("notes", ""),
            )
        except SlotUnavailableError as e:
            return Response({"detail": str(e), "code": "slot_unavailable"}, status=status.HTTP_409_CONFLICT)
        except BookingValidationError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        out = RoomBookingSerializer(booking)
        headers = self.get_success_headers(out.data)
        return Response(out.data, status=status.HTTP_201_CREATED, headers=headers)

    @action(detail=True, methods=["post"], permission_classes=[HasStaffRole])
    def confirm(self, request, pk=None):
        """
        Staff confirmation for bookings paid at the venue (cash/card terminal).
        """
        booking = get_object_or_404(RoomBooking, pk=pk)
        method = (request.data.get("payment_method") or "cash").strip()
        try:
            self.manager.confirm_booking(booking, payment_method=method)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(RoomBookingSerializer(booking).data)

    @action(detail=True, methods=["post"], permission_classes=[HasStaffRole])
    def cancel(self, request, pk=None):
        """
        Cancel a booking (staff). The slot becomes bookable again immediately.
        """
        booking = get_object_or_404(RoomBooking, pk=pk)
        reason = (request.data.get("reason") or "").strip()
        try:
            self.manager.cancel_booking(booking, reason=reason)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"detail": "Booking cancelled."}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="request-cancellation")
    def request_cancellation(self, request, pk=None):
        """
        Customers cannot cancel directly; this opens a chat with staff who
        confirm the cancellation and any refund.
        """
        booking = self.get_object()
        if booking.user_id != request.user.id:
            return Response({"detail": "Not your booking."}, status=status.HTTP_403_FORBIDDEN)
        reason = (request.data.get("reason") or "").strip()
        try:
            conversation = self.manager.request_cancellation(booking, request.user, reason=reason)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(
            {"detail": "Cancellation request sent to staff.", "conversation_id": conversation.id},
            status=status.HTTP_201_CREATED,
        )


# -------------------- Party requests --------------------
class PartyRequestViewSet(viewsets.ModelViewSet):
    """
    - Customers create and list their own party requests.
    - Booking staff list all requests and update status/estimate/notes.
    """
    staff_role = StaffRole.BOOKING
    http_method_names = ["get", "post", "patch", "head", "options"]

    def get_queryset(self):
        user = self.request.user
        qs = PartyRequest.objects.all().order_by("-created_at")
        if _is_booking_staff(user):
            return qs
        if not user.is_authenticated:
            return qs.none()
        return qs.filter(user=user)

    def get_serializer_class(self):
        if self.action in ("update", "partial_update"):
            return PartyRequestStaffSerializer
        return PartyRequestSerializer

    def get_permissions(self):
        if self.action in ("update", "partial_update"):
            return [HasStaffRole()]
        return super().get_permissions()

    def perform_create(self, serializer):
        party = serializer.save(user=self.request.user)
        logger.info("Party request %s submitted by user %s", party.pk, self.request.user.pk)

    @action(detail=True, methods=["post"], url_path="request-cancellation")
    def request_cancellation(self, request, pk=None):
        from chat.services import open_conversation, post_message

        party = self.get_object()
        if party.user_id != request.user.id:
            return Response({"detail": "Not your party request."}, status=status.HTTP_403_FORBIDDEN)
        if party.status == "cancelled":
            return Response({"detail": "This party request is already cancelled."}, status=400)

        conversation = open_conversation(
            user=request.user,
            conversation_type="party",
            reference_id=str(party.pk),
            title=f"Party request #{party.pk}",
        )
        post_message(
            conversation,
            request.user,
            f"Hi, I'd like to cancel my party request #{party.pk} for {party.preferred_date:%Y-%m-%d}.",
        )
        return Response(
            {"detail": "Cancellation request sent to staff.", "conversation_id": conversation.id},
            status=status.HTTP_201_CREATED,
        )


class PackagesView(APIView):
    """
    GET /api/packages/
    Room/food packages that can be added to the cart (staff-managed rows,
    or the fixed catalog while none is active).
    """
    permission_classes = [AllowAny]

    def get(self, request):
        groups = []
        for group in active_groups():
            items = []
            for item in group["items"]:
                options = [{**o, "price": str(o["price"])} for o in item["options"]]
                items.append({**item, "options": options})
            groups.append({**group, "items": items})
        return Response({"groups": groups, "generated_at": timezone.now().isoformat()})
