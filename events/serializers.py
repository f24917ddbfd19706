from rest_framework import serializers

from booking.services.price_display import format_price
from .models import Event, EventRegistration


class EventSerializer(serializers.ModelSerializer):
    spots_left = serializers.IntegerField(read_only=True)
    price_formatted = serializers.SerializerMethodField()
    is_registered = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            "id", "title", "description", "type", "category",
            "event_date", "start_time", "end_time", "duration_minutes",
            "location", "instructor", "price", "price_formatted",
            "max_participants", "current_participants", "spots_left",
            "requirements", "image", "is_active", "is_registered",
        ]
        read_only_fields = ["current_participants"]

    def get_price_formatted(self, obj):
        return format_price(obj.price)

    def get_is_registered(self, obj):
        registered = self.context.get("registered_ids")
        if registered is None:
            return False
        return obj.id in registered

    def validate_requirements(self, value):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise serializers.ValidationError("Requirements must be a list of strings.")
        return value

    def validate(self, attrs):
        start = attrs.get("start_time", getattr(self.instance, "start_time", None))
        end = attrs.get("end_time", getattr(self.instance, "end_time", None))
        if start and end and end <= start:
            raise serializers.ValidationError({"end_time": "End time must be after start time."})
        return attrs


class RegistrationCreateSerializer(serializers.Serializer):
    participant_name = serializers.CharField(max_length=200)
    participant_email = serializers.EmailField(required=False, allow_blank=True, default="")
    contact_phone = serializers.CharField(max_length=20)
    party_size = serializers.IntegerField(min_value=1, max_value=50, default=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class EventRegistrationSerializer(serializers.ModelSerializer):
    event_title = serializers.CharField(source="event.title", read_only=True)
    event_date = serializers.DateField(source="event.event_date", read_only=True)

    class Meta:
        model = EventRegistration
        fields = [
            "id", "event", "event_title", "event_date", "user",
            "participant_name", "participant_email", "contact_phone",
            "party_size", "notes", "status", "payment_status",
            "amount_paid", "payment_method", "cancelled_at", "created_at",
        ]
        read_only_fields = fields
