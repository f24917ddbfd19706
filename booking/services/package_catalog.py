"""
package_catalog.py
------------------
Packages and offers sold through the snack cart: a fixed catalog, replaced
by the staff-managed BookingPackage rows once any of them is active.

Every option carries a stable UUID (`menu_item_id`) so the cart can merge
repeated adds of the same option and orders can tell packages from snacks.
"""

import uuid
from decimal import Decimal

from django.utils.text import slugify

from ..models import BookingPackage

_OPTION_IDS = {
    "training-1h": "11111111-1111-4111-8111-111111111111",
    "training-4h": "11111111-1111-4111-8111-111111111114",
    "training-6h": "11111111-1111-4111-8111-111111111116",
    "vip-1h": "22222222-2222-4222-8222-222222222221",
    "vip-4h": "22222222-2222-4222-8222-222222222224",
    "vip-6h": "22222222-2222-4222-8222-222222222226",
    "private-1h": "33333333-3333-4333-8333-333333333331",
    "private-3h": "33333333-3333-4333-8333-333333333333",
    "private-5h": "33333333-3333-4333-8333-333333333335",
    "social-1": "44444444-4444-4444-8444-444444444441",
    "social-2": "44444444-4444-4444-8444-444444444442",
    "social-3": "44444444-4444-4444-8444-444444444443",
}


def _option(option_id, label, price, duration_hours=None):
    return {
        "id": option_id,
        "label": label,
        "duration_hours": duration_hours,
        "price": Decimal(price),
        "menu_item_id": _OPTION_IDS[option_id],
    }


PACKAGE_GROUPS = [
    {
        "id": "pc-gaming",
        "title": "PC Gaming",
        "subtitle": "Training, VIP, and Private rooms",
        "items": [
            {
                "id": "training-room",
                "name": "Training Room",
                "description": "Flexible slots for practice sessions",
                "options": [
                    _option("training-1h", "1 Hour", "20", 1),
                    _option("training-4h", "4 Hours", "60", 4),
                    _option("training-6h", "6 Hours", "80", 6),
                ],
            },
            {
                "id": "vip-rooms",
                "name": "VIP Rooms",
                "description": "Premium setups with concierge support",
                "options": [
                    _option("vip-1h", "1 Hour", "30", 1),
                    _option("vip-4h", "4 Hours", "95", 4),
                    _option("vip-6h", "6 Hours", "140", 6),
                ],
            },
            {
                "id": "private-rooms",
                "name": "Private Rooms",
                "description": "Dedicated rooms for small squads",
                "options": [
                    _option("private-1h", "1 Hour", "40", 1),
                    _option("private-3h", "3 Hours", "95", 3),
                    _option("private-5h", "5 Hours", "140", 5),
                ],
            },
        ],
    },
    {
        "id": "social-gaming",
        "title": "Social Gaming Room",
        "subtitle": "Room + food bundles for your crew",
        "items": [
            {
                "id": "social-package-1",
                "name": "Package 1",
                "description": "1 hour in room + food for 5 pax",
                "options": [_option("social-1", "1 Hour", "300", 1)],
            },
            {
                "id": "social-package-2",
                "name": "Package 2",
                "description": "1 hour in room + food for 10 pax",
                "options": [_option("social-2", "1 Hour", "675", 1)],
            },
            {
                "id": "social-package-3",
                "name": "Package 3",
                "description": "1 hour in room + food for 15 pax",
                "options": [_option("social-3", "1 Hour", "1000", 1)],
            },
        ],
    },
]

_OPTIONS_BY_MENU_ID = {
    option["menu_item_id"]: {
        **option,
        "name": item["name"],
        "group_id": group["id"],
        "item_id": item["id"],
    }
    for group in PACKAGE_GROUPS
    for item in group["items"]
    for option in item["options"]
}


def _db_option(row):
    return {
        "id": str(row.id),
        "label": row.option_label,
        "duration_hours": row.duration_hours,
        "price": row.price,
        "menu_item_id": str(row.id),
    }


def _groups_from_rows(rows):
    """
    Group active BookingPackage rows the way the fixed catalog is laid out:
    group_key -> package_name -> options, keeping the rows' order.
    """
    groups = {}
    for row in rows:
        group = groups.setdefault(row.group_key, {
            "id": row.group_key,
            "title": row.group_title,
            "subtitle": row.group_subtitle,
            "items": {},
        })
        slug = slugify(row.package_name) or "package"
        item = group["items"].setdefault(slug, {
            "id": f"{row.group_key}-{slug}",
            "name": row.package_name,
            "description": row.description,
            "options": [],
        })
        item["options"].append(_db_option(row))
    return [{**group, "items": list(group["items"].values())} for group in groups.values()]


def active_groups():
    """
    Packages offered to customers: the staff-managed rows when any are
    active, otherwise the fixed catalog.
    """
    rows = list(BookingPackage.objects.filter(is_active=True).order_by("group_key", "sort_order", "created_at"))
    if not rows:
        return PACKAGE_GROUPS
    return _groups_from_rows(rows)


def _active_row(menu_item_id):
    try:
        key = uuid.UUID(str(menu_item_id))
    except ValueError:
        return None
    return BookingPackage.objects.filter(pk=key, is_active=True).first()


def is_package_menu_item(menu_item_id) -> bool:
    if not menu_item_id:
        return False
    return str(menu_item_id) in _OPTIONS_BY_MENU_ID or _active_row(menu_item_id) is not None


def get_package_option(menu_item_id):
    """Flattened option (with item name and group id) or None."""
    option = _OPTIONS_BY_MENU_ID.get(str(menu_item_id))
    if option is not None:
        return option
    row = _active_row(menu_item_id)
    if row is None:
        return None
    slug = slugify(row.package_name) or "package"
    return {
        **_db_option(row),
        "name": row.package_name,
        "group_id": row.group_key,
        "item_id": f"{row.group_key}-{slug}",
    }
