"""
seed_catalog.py
---------------
Seeds (creates or updates) the venue's bookable rooms and the snack menu.
You can run this any time; it upserts rooms and snacks by unique name.

Usage:
    python manage.py seed_catalog
    python manage.py seed_catalog --rooms-only
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from booking.models import Room
from snacks.models import Snack


ROOMS = [
    {"name": "Training Room", "type": "training", "capacity": 10, "hourly_rate": Decimal("20.00"),
     "description": "Flexible slots for practice sessions", "amenities": ["High-refresh monitors", "Headsets"]},
    {"name": "VIP Room 1", "type": "vip", "capacity": 5, "hourly_rate": Decimal("30.00"),
     "description": "Premium setups with concierge support", "amenities": ["Recliners", "Snack service", "4K TV"]},
    {"name": "VIP Room 2", "type": "vip", "capacity": 5, "hourly_rate": Decimal("30.00"),
     "description": "Premium setups with concierge support", "amenities": ["Recliners", "Snack service", "4K TV"]},
    {"name": "Private Room", "type": "private", "capacity": 6, "hourly_rate": Decimal("40.00"),
     "description": "Dedicated room for small squads", "amenities": ["Closed door", "Streaming setup"]},
    {"name": "Social Gaming Room", "type": "social", "capacity": 15, "hourly_rate": Decimal("300.00"),
     "description": "Consoles, party games and food for your crew", "amenities": ["Consoles", "Projector", "Catering"]},
]

SNACKS = [
    {"name": "Nachos",              "category": "snacks",   "price": Decimal("18.00")},
    {"name": "Loaded Fries",        "category": "snacks",   "price": Decimal("22.00")},
    {"name": "Popcorn",             "category": "snacks",   "price": Decimal("12.00")},
    {"name": "Chicken Wings (6)",   "category": "meals",    "price": Decimal("32.00")},
    {"name": "Beef Burger",         "category": "meals",    "price": Decimal("38.00")},
    {"name": "Margherita Pizza",    "category": "meals",    "price": Decimal("35.00")},
    {"name": "Soft Drink",          "category": "drinks",   "price": Decimal("8.00")},
    {"name": "Energy Drink",        "category": "drinks",   "price": Decimal("15.00")},
    {"name": "Water",               "category": "drinks",   "price": Decimal("5.00")},
    {"name": "Brownie",             "category": "desserts", "price": Decimal("14.00")},
]


def _upsert(model, lookup, values):
    """Returns 'created', 'updated' or None (unchanged)."""
    obj, created = model.objects.get_or_create(**lookup, defaults=values)
    if created:
        return "created"
    changed = False
    for field, value in values.items():
        if getattr(obj, field) != value:
            setattr(obj, field, value)
            changed = True
    if changed:
        obj.save()
        return "updated"
    return None


class Command(BaseCommand):
    help = "Seed or update the room catalog and snack menu."

    def add_arguments(self, parser):
        parser.add_argument("--rooms-only", action="store_true", help="Skip the snack menu.")

    @transaction.atomic
    def handle(self, *args, **options):
        counts = {"created": 0, "updated": 0}

        for item in ROOMS:
            values = {k: v for k, v in item.items() if k != "name"}
            values["is_active"] = True
            result = _upsert(Room, {"name": item["name"]}, values)
            if result:
                counts[result] += 1

        if not options["rooms_only"]:
            for item in SNACKS:
                values = {"category": item["category"], "price": item["price"], "available": True}
                result = _upsert(Snack, {"name": item["name"]}, values)
                if result:
                    counts[result] += 1

        self.stdout.write(self.style.SUCCESS(
            f"Seed complete. Created={counts['created']}, Updated={counts['updated']}"
        ))
