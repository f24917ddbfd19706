"""
slot_utils.py
-------------
Pure helpers for the room-booking form:
- venue business hours by day of week,
- hourly start slots that fit before closing for a given duration,
- half-open interval overlap,
- converting a (date, "HH:00", duration) choice into timezone-aware datetimes.

Hours are whole numbers; closing hour 24 means midnight at the end of the day.
"""

import re
from datetime import date as date_cls, datetime, timedelta

from django.utils import timezone

DEFAULT_OPEN = 10
DEFAULT_CLOSE = 22
DEFAULT_CLOSE_WEEKEND = 24

# Friday and Saturday (date.weekday(): Monday == 0)
WEEKEND_DAYS = (4, 5)

MAX_DURATION_HOURS = 6

PHONE_RE = re.compile(r"^(50|52|54|55|56|58)\d{7}$")


def is_phone_valid(phone: str) -> bool:
    """UAE mobile number without the +971 prefix, e.g. 501234567."""
    return bool(PHONE_RE.match((phone or "").strip()))


def _parse_hour(value: str) -> int:
    h, m = value.strip().split(":")
    hour, minute = int(h), int(m)
    if minute != 0 or not 0 <= hour <= 24:
        raise ValueError(f"Business hours must be whole hours, got {value!r}")
    return hour


def _configured_hour(key: str, default: int) -> int:
    from configmgr.models import SystemSetting

    raw = SystemSetting.get_value(key)
    if raw is None:
        return default
    try:
        return _parse_hour(raw)
    except ValueError:
        return default


def get_business_hours(day: date_cls | None = None):
    """
    Return (open_hour, close_hour) for the given day.

    - No date yet: the Sunday to Thursday window (10, 22).
    - Friday/Saturday: (10, 24).
    - Other days: (10, 22).
    SystemSetting rows BUSINESS_OPEN / BUSINESS_CLOSE / BUSINESS_CLOSE_WEEKEND
    override the defaults.
    """
    open_hour = _configured_hour("BUSINESS_OPEN", DEFAULT_OPEN)
    if day is not None and day.weekday() in WEEKEND_DAYS:
        close_hour = _configured_hour("BUSINESS_CLOSE_WEEKEND", DEFAULT_CLOSE_WEEKEND)
    else:
        close_hour = _configured_hour("BUSINESS_CLOSE", DEFAULT_CLOSE)
    return open_hour, close_hour


def build_time_slots(day: date_cls | None, duration_hours: int) -> list[str]:
    """
    Hourly start slots ("HH:00") from opening while start + duration <= close.
    For 10 to 22 and a 2 hour booking the last slot is "20:00".
    """
    open_hour, close_hour = get_business_hours(day)
    slots = []
    hour = open_hour
    while hour + duration_hours <= close_hour:
        slots.append(f"{hour:02d}:00")
        hour += 1
    return slots


def intervals_overlap(a_start, a_end, b_start, b_end) -> bool:
    """Half-open overlap: [a_start, a_end) intersects [b_start, b_end)."""
    return a_start < b_end and a_end > b_start


def _make_aware(dt_naive: datetime):
    """
    Convert a naive datetime to an aware one using Django's current timezone.
    """
    if timezone.is_aware(dt_naive):
        return dt_naive
    return timezone.make_aware(dt_naive, timezone.get_current_timezone())


def parse_date(date_str: str) -> date_cls:
    """
    Parse 'YYYY-MM-DD'. Inputs that include a time part are trimmed to the date.
    Raises ValueError on anything else.
    """
    date_str = (date_str or "").strip()
    if "T" in date_str:
        date_str = date_str.split("T", 1)[0]
    elif " " in date_str:
        date_str = date_str.split(" ", 1)[0]
    y, m, d = map(int, date_str.split("-"))
    return date_cls(y, m, d)


def date_to_range(day: date_cls):
    """
    Timezone-aware day window [start, end).
    """
    day_start = _make_aware(datetime(day.year, day.month, day.day, 0, 0, 0))
    return day_start, day_start + timedelta(days=1)


def slot_bounds(day: date_cls, slot: str, duration_hours: int):
    """
    Convert a start slot like "14:00" into aware (start, end) datetimes.
    """
    hour = _parse_hour(slot)
    day_start, _ = date_to_range(day)
    start = day_start + timedelta(hours=hour)
    end = start + timedelta(hours=duration_hours)
    return start, end
