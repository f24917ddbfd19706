from rest_framework import serializers
from .models import Profile

AVATAR_COLORS = ["purple", "blue", "green", "orange", "pink", "teal"]


class ProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source="user.id", read_only=True)

    class Meta:
        model = Profile
        fields = ["id", "user_id", "name", "full_name", "avatar_color", "phone", "created_at", "updated_at"]
        read_only_fields = ["created_at", "updated_at"]

    def validate_name(self, value):
        value = (value or "").strip()
        if len(value) < 3:
            raise serializers.ValidationError("Username must be at least 3 characters.")
        qs = Profile.objects.filter(name__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("That username is already taken.")
        return value

    def validate_phone(self, value):
        from booking.services.slot_utils import is_phone_valid
        value = (value or "").strip()
        if value and not is_phone_valid(value):
            raise serializers.ValidationError("Enter a valid UAE mobile number (e.g., 50xxxxxxx).")
        return value


class PublicProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source="user.id", read_only=True)

    class Meta:
        model = Profile
        fields = ["user_id", "name", "full_name", "avatar_color"]
