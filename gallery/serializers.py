from rest_framework import serializers

from accounts.models import display_name
from .models import GalleryItem, PhotoComment


class GalleryItemSerializer(serializers.ModelSerializer):
    author_name = serializers.SerializerMethodField()
    user_has_liked = serializers.BooleanField(read_only=True, default=False)

    class Meta:
        model = GalleryItem
        fields = [
            "id", "user", "author_name", "image", "thumbnail", "caption",
            "visibility", "aspect", "width", "height",
            "like_count", "comment_count", "is_official", "user_has_liked", "created_at",
        ]
        read_only_fields = fields

    def get_author_name(self, obj):
        if obj.is_official:
            return "Pixoul Hub"
        return display_name(obj.user)


class UploadSerializer(serializers.Serializer):
    """
    Multipart upload. The crop fields are the client cropper's state at the
    moment the user pressed "done"; without them the photo is only resized.
    """
    image = serializers.ImageField()
    caption = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    official = serializers.BooleanField(required=False, default=False)
    frame_w = serializers.FloatField(required=False, min_value=1)
    frame_h = serializers.FloatField(required=False, min_value=1)
    scale = serializers.FloatField(required=False, min_value=0.0001)
    tx = serializers.FloatField(required=False, default=0)
    ty = serializers.FloatField(required=False, default=0)

    def validate(self, attrs):
        crop_keys = ("frame_w", "frame_h", "scale")
        given = [k for k in crop_keys if attrs.get(k) is not None]
        if given and len(given) != len(crop_keys):
            raise serializers.ValidationError("Crop needs frame_w, frame_h and scale together.")
        attrs["has_crop"] = bool(given)
        return attrs


class VisibilitySerializer(serializers.Serializer):
    visibility = serializers.ChoiceField(choices=GalleryItem.VISIBILITY_CHOICES)


class PhotoCommentSerializer(serializers.ModelSerializer):
    author_name = serializers.SerializerMethodField()

    class Meta:
        model = PhotoComment
        fields = ["id", "photo", "user", "author_name", "text", "created_at"]
        read_only_fields = ["id", "photo", "user", "author_name", "created_at"]

    def get_author_name(self, obj):
        return display_name(obj.user)

    def validate_text(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Comment cannot be empty.")
        return value
