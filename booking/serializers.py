from rest_framework import serializers
from django.utils import timezone

from .models import (
    BookingPackage,
    PartyGalleryImage,
    PartyGalleryItem,
    PartyPricingContent,
    PartyRequest,
    Room,
    RoomBooking,
)
from .services.price_display import format_price
from .services.slot_utils import MAX_DURATION_HOURS, is_phone_valid


class RoomSerializer(serializers.ModelSerializer):
    price_formatted = serializers.SerializerMethodField()

    class Meta:
        model = Room
        fields = [
            "id", "name", "type", "capacity", "hourly_rate", "price_formatted",
            "description", "amenities", "image", "is_active",
        ]

    def get_price_formatted(self, obj):
        return format_price(obj.hourly_rate)

    def validate_amenities(self, value):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise serializers.ValidationError("Amenities must be a list of strings.")
        return value


class RoomBookingSerializer(serializers.ModelSerializer):
    room_name = serializers.CharField(source="room.name", read_only=True)

    class Meta:
        model = RoomBooking
        fields = [
            "id",
            "user",
            "room",
            "room_name",
            "booking_date",
            "start_time",
            "end_time",
            "duration_hours",
            "total_amount",
            "contact_phone",
            "contact_email",
            "notes",
            "status",
            "payment_status",
            "payment_method",
            "cancellation_time",
            "created_at",
        ]
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    """
    Payload of the booking form. Slot rules (business hours, overlap) are
    enforced by BookingManager; this only checks shapes.
    """
    room = serializers.PrimaryKeyRelatedField(queryset=Room.objects.all())
    booking_date = serializers.DateField()
    start_time = serializers.RegexField(r"^\d{2}:00$", error_messages={"invalid": "Use HH:00."})
    duration_hours = serializers.IntegerField(min_value=1, max_value=MAX_DURATION_HOURS)
    contact_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    contact_email = serializers.EmailField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class PartyRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = PartyRequest
        fields = [
            "id",
            "user",
            "name",
            "party_type",
            "age",
            "school_name",
            "preferred_date",
            "preferred_time_start",
            "preferred_time_end",
            "guest_count",
            "theme",
            "special_notes",
            "contact_phone",
            "contact_email",
            "estimated_cost",
            "staff_notes",
            "status",
            "payment_status",
            "created_at",
        ]
        read_only_fields = ["user", "estimated_cost", "staff_notes", "status", "payment_status", "created_at"]

    def validate(self, attrs):
        party_type = attrs.get("party_type")
        if party_type == "birthday" and not attrs.get("age"):
            raise serializers.ValidationError({"age": "Please enter the age for birthday parties."})
        if party_type == "graduation" and not (attrs.get("school_name") or "").strip():
            raise serializers.ValidationError(
                {"school_name": "Please enter the school or university name for graduation parties."}
            )
        # Conditional fields only apply to their party type
        if party_type != "birthday":
            attrs["age"] = None
        if party_type != "graduation":
            attrs["school_name"] = ""

        preferred_date = attrs.get("preferred_date")
        if preferred_date and preferred_date < timezone.localdate():
            raise serializers.ValidationError({"preferred_date": "Preferred date must be today or later."})

        start = attrs.get("preferred_time_start")
        end = attrs.get("preferred_time_end")
        if start and end and end <= start:
            raise serializers.ValidationError({"preferred_time_end": "End time must be after start time."})

        phone = (attrs.get("contact_phone") or "").strip()
        if not is_phone_valid(phone):
            raise serializers.ValidationError({"contact_phone": "Enter a valid UAE mobile number (e.g., 50xxxxxxx)."})
        attrs["contact_phone"] = phone
        return attrs


class PartyRequestStaffSerializer(serializers.ModelSerializer):
    """Fields staff may change when reviewing a party request."""

    class Meta:
        model = PartyRequest
        fields = ["id", "status", "estimated_cost", "staff_notes"]

    def validate_estimated_cost(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError("Estimated cost must be greater than zero.")
        return value


class BookingPackageSerializer(serializers.ModelSerializer):
    price_formatted = serializers.SerializerMethodField()

    class Meta:
        model = BookingPackage
        fields = [
            "id", "group_key", "group_title", "group_subtitle", "package_name", "option_label",
            "duration_hours", "price", "price_formatted", "description", "is_active", "sort_order",
            "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def get_price_formatted(self, obj):
        return format_price(obj.price)

    def validate(self, attrs):
        for field in ("group_title", "package_name", "option_label"):
            if field in attrs:
                attrs[field] = attrs[field].strip()
                if not attrs[field]:
                    raise serializers.ValidationError({field: "This field may not be blank."})
        return attrs


class PartyGalleryImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = PartyGalleryImage
        fields = ["id", "image", "position"]


class PartyGalleryItemSerializer(serializers.ModelSerializer):
    images = PartyGalleryImageSerializer(many=True, read_only=True)

    class Meta:
        model = PartyGalleryItem
        fields = ["id", "category", "caption", "images", "created_at"]
        read_only_fields = fields


class PartyGalleryUploadSerializer(serializers.Serializer):
    """
    Multipart form for a party album. On create at least one image is
    required; on edit the new images are added after the existing ones.
    """
    category = serializers.ChoiceField(choices=PartyGalleryItem.CATEGORY_CHOICES, default="birthday")
    caption = serializers.CharField(max_length=300, required=False, allow_blank=True, default="")
    images = serializers.ListField(
        child=serializers.ImageField(),
        max_length=PartyGalleryItem.MAX_UPLOAD_IMAGES,
        required=False,
        default=list,
    )

    def validate(self, attrs):
        if self.instance is None and not attrs.get("images"):
            raise serializers.ValidationError({"images": "Add at least one image."})
        return attrs


class PartyPricingSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)
    weekday_text = serializers.CharField(max_length=200, required=False, allow_blank=True)
    weekend_text = serializers.CharField(max_length=200, required=False, allow_blank=True)

    def validate_title(self, value):
        return value.strip() or PartyPricingContent.DEFAULTS["title"]
