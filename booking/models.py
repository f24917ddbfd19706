# booking/models.py
#
# Purpose:
# - Core domain models for room booking and party requests.
#
# Design highlights:
# - Room: bookable space with an hourly rate; "is_active" controls visibility.
# - RoomBooking:
#   • start_time / end_time are timezone-aware datetimes. A Friday booking
#     that runs to closing ends at midnight of the next day.
#   • status is "pending" (awaiting payment), "confirmed" or "cancelled".
#   • payment_status is "unpaid" or "paid"; the payments app flips it.
# - PartyRequest: free-form party enquiry that staff price and confirm.
# - BookingPackage, PartyGalleryItem/Image, PartyPricingContent: content of the
#   packages and party pages that booking staff edit.
#
# Notes for developers:
# - Double-booking prevention is done in BookingManager.create_booking while
#   holding a row lock on the Room, so two people racing for the same slot
#   are serialized and the loser gets a "slot unavailable" error.
#
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


# -------------------------
# Bookable room
# -------------------------
class Room(models.Model):
    TYPE_CHOICES = [
        ("training", "Training room"),
        ("vip", "VIP room"),
        ("private", "Private room"),
        ("social", "Social gaming room"),
    ]

    name = models.CharField(max_length=200)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="training")
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    hourly_rate = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    description = models.TextField(blank=True)
    amenities = models.JSONField(default=list, blank=True)
    image = models.ImageField(upload_to="rooms/", blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} (AED {self.hourly_rate}/h)"


# -------------------------
# Room booking record
# -------------------------
class RoomBooking(models.Model):
    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending payment"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]
    PAYMENT_CHOICES = [
        ("unpaid", "Unpaid"),
        ("paid", "Paid"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="room_bookings")
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name="bookings")
    booking_date = models.DateField()
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    duration_hours = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(6)]
    )
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    contact_phone = models.CharField(max_length=20, blank=True)
    contact_email = models.EmailField(blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    payment_status = models.CharField(max_length=10, choices=PAYMENT_CHOICES, default="unpaid")
    payment_method = models.CharField(max_length=30, blank=True)
    stripe_payment_id = models.CharField(max_length=100, blank=True)
    cancellation_time = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the booking was cancelled (if applicable).",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_time"]
        indexes = [models.Index(fields=["room", "booking_date"])]

    def __str__(self):
        return f"{self.room.name} on {self.start_time:%Y-%m-%d %H:%M} ({self.duration_hours}h)"


# -------------------------
# Party enquiry
# -------------------------
class PartyRequest(models.Model):
    PARTY_TYPES = [
        ("birthday", "Birthday"),
        ("graduation", "Graduation"),
        ("corporate", "Corporate"),
        ("other", "Other"),
    ]
    STATUS_CHOICES = [
        ("pending", "Pending review"),
        ("approved", "Approved"),
        ("confirmed", "Confirmed"),
        ("rejected", "Rejected"),
        ("cancelled", "Cancelled"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="party_requests")
    name = models.CharField(max_length=200)
    party_type = models.CharField(max_length=20, choices=PARTY_TYPES)
    age = models.PositiveSmallIntegerField(null=True, blank=True)
    school_name = models.CharField(max_length=200, blank=True)
    preferred_date = models.DateField()
    preferred_time_start = models.TimeField(null=True, blank=True)
    preferred_time_end = models.TimeField(null=True, blank=True)
    guest_count = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    theme = models.CharField(max_length=200, blank=True)
    special_notes = models.TextField(blank=True)
    contact_phone = models.CharField(max_length=20)
    contact_email = models.EmailField(blank=True)
    estimated_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    staff_notes = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="pending")
    payment_status = models.CharField(max_length=10, choices=RoomBooking.PAYMENT_CHOICES, default="unpaid")
    payment_method = models.CharField(max_length=30, blank=True)
    stripe_payment_id = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.get_party_type_display()} party for {self.name} on {self.preferred_date}"


# -------------------------
# Staff-editable package option
# -------------------------
class BookingPackage(models.Model):
    """
    One purchasable option of a package ("VIP Rooms / 4 Hours").
    Rows sharing group_key form a group; rows sharing package_name inside a
    group form one package card. The row id doubles as the cart menu item id.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group_key = models.SlugField(max_length=50)
    group_title = models.CharField(max_length=100)
    group_subtitle = models.CharField(max_length=200, blank=True)
    package_name = models.CharField(max_length=100)
    option_label = models.CharField(max_length=50)
    duration_hours = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=8, decimal_places=2, validators=[MinValueValidator(0)])
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["group_key", "sort_order", "created_at"]

    def __str__(self):
        return f"{self.package_name} ({self.option_label}) AED {self.price}"


# -------------------------
# Party gallery (past events shown on the party booking page)
# -------------------------
class PartyGalleryItem(models.Model):
    CATEGORY_CHOICES = [
        ("birthday", "Birthday Parties"),
        ("other", "Other Events"),
    ]
    MAX_UPLOAD_IMAGES = 10

    category = models.CharField(max_length=10, choices=CATEGORY_CHOICES, default="birthday")
    caption = models.CharField(max_length=300, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.get_category_display()}: {self.caption or self.pk}"


class PartyGalleryImage(models.Model):
    item = models.ForeignKey(PartyGalleryItem, on_delete=models.CASCADE, related_name="images")
    image = models.ImageField(upload_to="party-gallery/")
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]


# -------------------------
# Party pricing text (single row, edited by booking staff)
# -------------------------
class PartyPricingContent(models.Model):
    DEFAULT_KEY = "default"
    DEFAULTS = {
        "title": "Birthday Bash pricing",
        "weekday_text": "Weekdays (Mon-Thu): AED 199 / kid",
        "weekend_text": "Weekends (Fri-Sun): AED 235 / kid",
    }

    key = models.CharField(max_length=20, primary_key=True, default=DEFAULT_KEY)
    title = models.CharField(max_length=200, blank=True)
    weekday_text = models.CharField(max_length=200, blank=True)
    weekend_text = models.CharField(max_length=200, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title or self.DEFAULTS["title"]

    @classmethod
    def current(cls) -> dict:
        """Pricing text with defaults filled in for missing or blank fields."""
        row = cls.objects.filter(key=cls.DEFAULT_KEY).first()
        data = {field: (getattr(row, field, "") or default) for field, default in cls.DEFAULTS.items()}
        data["updated_at"] = row.updated_at if row else None
        return data
