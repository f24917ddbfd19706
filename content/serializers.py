from rest_framework import serializers

from .models import Announcement, Guide


class AnnouncementSerializer(serializers.ModelSerializer):
    class Meta:
        model = Announcement
        fields = ["id", "title", "excerpt", "content", "pinned", "published", "created_at", "updated_at"]
        read_only_fields = ["created_at", "updated_at"]


class GuideSerializer(serializers.ModelSerializer):
    class Meta:
        model = Guide
        fields = [
            "id", "title", "game_name", "category", "overview",
            "setup_instructions", "how_to_play", "tips_and_scoring",
            "duration_minutes", "intensity_level", "age_rating", "tags",
            "is_published", "created_at", "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]

    def validate_tags(self, value):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise serializers.ValidationError("Tags must be a list of strings.")
        return [v.strip().lower() for v in value if v.strip()]
