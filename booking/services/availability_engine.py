"""
availability_engine.py
----------------------
Computes room availability by checking candidate hourly slots against the
room's existing (non-cancelled) bookings.

Overlap is symmetric and half-open:
    existing_start < new_end AND existing_end > new_start
so a booking ending at 16:00 does not block one starting at 16:00.
"""

from django.utils import timezone

from ..models import RoomBooking
from .slot_utils import build_time_slots, date_to_range, intervals_overlap, slot_bounds


class AvailabilityEngine:
    def active_bookings(self, room, start, end, exclude_id=None):
        """Non-cancelled bookings of `room` that touch the window [start, end)."""
        qs = (
            RoomBooking.objects.filter(room=room, start_time__lt=end, end_time__gt=start)
            .exclude(status=RoomBooking.STATUS_CANCELLED)
        )
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return qs

    def booked_intervals(self, room, day):
        """
        [(start, end), ...] for the room on `day`, including bookings that
        spill over from the previous evening.
        """
        day_start, day_end = date_to_range(day)
        return [
            (b.start_time, b.end_time)
            for b in self.active_bookings(room, day_start, day_end).order_by("start_time")
        ]

    def is_slot_available(self, room, start, end, exclude_id=None) -> bool:
        for b in self.active_bookings(room, start, end, exclude_id=exclude_id):
            if intervals_overlap(start, end, b.start_time, b.end_time):
                return False
        return True

    def find_available_slots(self, room, day, duration_hours: int):
        """
        Every candidate start slot for `day` with an `available` flag.
        Slots that have already started are dropped.
        """
        booked = self.booked_intervals(room, day)
        now = timezone.now()

        results = []
        for slot in build_time_slots(day, duration_hours):
            start, end = slot_bounds(day, slot, duration_hours)
            if start <= now:
                continue
            taken = any(intervals_overlap(start, end, b_start, b_end) for b_start, b_end in booked)
            results.append({
                "start": slot,
                "start_time": start.isoformat(),
                "end_time": end.isoformat(),
                "available": not taken,
            })
        return {"slots": results}
