# reports/views.py

from django.db.models import Count, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone
from rest_framework.views import APIView
from rest_framework.response import Response

from booking.models import RoomBooking
from snacks.models import Order
from staff.models import StaffRole
from staff.permissions import HasStaffRole

REPORT_DAYS = 30


def _per_day(qs, field):
    rows = (
        qs.annotate(day=TruncDate(field))
        .values("day")
        .annotate(count=Count("id"))
        .order_by("day")
    )
    return [{"day": row["day"].isoformat(), "count": row["count"]} for row in rows]


class ReportsView(APIView):
    """
    GET /api/reports/summary

    Returns JSON with:
    - bookings_per_day: [{ "day": "YYYY-MM-DD", "count": N }, ...]
    - cancellations_per_day: [{ "day": "YYYY-MM-DD", "count": N }, ...]
    - top_rooms: [{ "room_id": X, "room_name": "...", "count": N }, ...]
    - order_revenue / paid_orders: paid snack orders in the window

    Only accessible by booking or snacks staff.
    """
    permission_classes = [HasStaffRole]
    staff_role = (StaffRole.BOOKING, StaffRole.SNACKS)

    def get(self, request):
        # Look back 30 days from now
        start = timezone.now() - timezone.timedelta(days=REPORT_DAYS)

        recent = RoomBooking.objects.filter(start_time__gte=start)
        cancelled = recent.filter(status=RoomBooking.STATUS_CANCELLED)

        # Top rooms by non-cancelled bookings, top 5
        top_rooms = (
            recent.exclude(status=RoomBooking.STATUS_CANCELLED)
            .values("room", "room__name")
            .annotate(count=Count("id"))
            .order_by("-count", "room__name")[:5]
        )

        paid_orders = Order.objects.filter(payment_status="paid", created_at__gte=start)
        totals = paid_orders.aggregate(revenue=Sum("total"), count=Count("id"))

        data = {
            "since": start.date().isoformat(),
            "bookings_per_day": _per_day(recent, "start_time"),
            "cancellations_per_day": _per_day(cancelled, "start_time"),
            "top_rooms": [
                {"room_id": row["room"], "room_name": row["room__name"], "count": row["count"]}
                for row in top_rooms
            ],
            "order_revenue": str(totals["revenue"] or 0),
            "paid_orders": totals["count"],
        }
        return Response(data)
