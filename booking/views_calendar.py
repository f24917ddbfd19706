# booking/views_calendar.py
#
# Purpose:
# - Staff month-view calendar of room bookings at /api/bookings-calendar/.
# - Returns a flat month grid (leading blanks + one cell per day) so the
#   staff panel can render it without date math of its own.
#
# Behavior:
# - Only "booking" staff can access.
# - Query params: ?year=YYYY&month=MM[&room=ID] (defaults to current month if missing/invalid;
#   a non-numeric room id is a 400).
# - Excludes bookings with status = "cancelled" so the calendar reflects occupancy.
#
from datetime import datetime
import calendar

from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from staff.models import StaffRole
from staff.permissions import HasStaffRole
from .models import RoomBooking

# Years outside this window fall back to the current month.
MIN_YEAR, MAX_YEAR = 2000, 2100


def _month_bounds(year, month, tz):
    _, last_day_num = calendar.monthrange(year, month)
    start_dt = timezone.make_aware(datetime(year, month, 1, 0, 0, 0), tz)
    end_dt = timezone.make_aware(datetime(year, month, last_day_num, 23, 59, 59), tz)
    return start_dt, end_dt, last_day_num


def build_month_grid(year, month, bookings, tz):
    """
    Flat list of cells: blanks before the 1st (weeks start on Monday), then
    one cell per day holding that day's bookings in local time.
    """
    _, last_day_num = calendar.monthrange(year, month)
    days_map = {d: [] for d in range(1, last_day_num + 1)}
    for b in bookings:
        local_start = timezone.localtime(b.start_time, tz)
        days_map[local_start.day].append({
            "id": b.id,
            "time": local_start.strftime("%H:%M"),
            "duration_hours": b.duration_hours,
            "room": b.room.name,
            "customer": b.user.get_username(),
            "status": b.status,
            "payment_status": b.payment_status,
        })

    first_weekday = calendar.monthrange(year, month)[0]  # 0=Mon, 6=Sun
    cells = [{"blank": True} for _ in range(first_weekday)]
    for d in range(1, last_day_num + 1):
        cells.append({"blank": False, "day": d, "bookings": days_map[d]})
    return cells


class BookingsCalendarView(APIView):
    permission_classes = [HasStaffRole]
    staff_role = StaffRole.BOOKING

    def get(self, request):
        tz = timezone.get_current_timezone()
        today = timezone.localtime(timezone.now(), tz)

        room_id = (request.query_params.get("room") or "").strip()
        if room_id and not room_id.isdigit():
            return Response({"detail": "'room' must be a room id."}, status=status.HTTP_400_BAD_REQUEST)

        # Parse year/month safely with fallbacks
        try:
            year = int(request.query_params.get("year", today.year))
            month = int(request.query_params.get("month", today.month))
            if not (MIN_YEAR <= year <= MAX_YEAR and 1 <= month <= 12):
                raise ValueError()
        except ValueError:
            year, month = today.year, today.month

        start_dt, end_dt, _ = _month_bounds(year, month, tz)

        qs = (
            RoomBooking.objects
            .filter(start_time__gte=start_dt, start_time__lte=end_dt)
            .exclude(status=RoomBooking.STATUS_CANCELLED)
            .select_related("room", "user")
            .order_by("start_time")
        )
        if room_id:
            qs = qs.filter(room_id=int(room_id))

        # Previous/next month for navigation (Dec -> Jan next year, Jan -> Dec previous year)
        prev_y, prev_m = (year - 1, 12) if month == 1 else (year, month - 1)
        next_y, next_m = (year + 1, 1) if month == 12 else (year, month + 1)

        return Response({
            "year": year,
            "month": month,
            "month_name": calendar.month_name[month],
            "cells": build_month_grid(year, month, qs, tz),
            "prev_year": prev_y, "prev_month": prev_m,
            "next_year": next_y, "next_month": next_m,
        })
