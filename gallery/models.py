# gallery/models.py
#
# Purpose:
# - Community photo feed: uploads, likes and comments.
#
# Design:
# - New customer uploads start as "pending" and only show in the public feed
#   once a moderator makes them "public". Owners can hide a photo ("private").
# - like_count / comment_count are denormalized counters kept in sync with
#   F() updates in gallery.views so the feed can sort by popularity.
#
from django.conf import settings
from django.db import models


class GalleryItem(models.Model):
    VISIBILITY_PRIVATE = "private"
    VISIBILITY_PENDING = "pending"
    VISIBILITY_PUBLIC = "public"
    VISIBILITY_CHOICES = [
        (VISIBILITY_PRIVATE, "Private"),
        (VISIBILITY_PENDING, "Pending review"),
        (VISIBILITY_PUBLIC, "Public"),
    ]
    ASPECT_CHOICES = [
        ("square", "Square 1:1"),
        ("portrait", "Portrait 4:5"),
        ("landscape", "Landscape 16:9"),
        ("original", "Original"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="gallery_items")
    image = models.ImageField(upload_to="gallery/feed/")
    thumbnail = models.ImageField(upload_to="gallery/thumbs/", blank=True)
    caption = models.CharField(max_length=500, blank=True)
    visibility = models.CharField(max_length=10, choices=VISIBILITY_CHOICES, default=VISIBILITY_PENDING)
    aspect = models.CharField(max_length=10, choices=ASPECT_CHOICES, default="original")
    width = models.PositiveIntegerField(default=0)
    height = models.PositiveIntegerField(default=0)
    like_count = models.PositiveIntegerField(default=0)
    comment_count = models.PositiveIntegerField(default=0)
    is_official = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["visibility", "created_at"])]

    def __str__(self):
        return f"Photo #{self.pk} by {self.user} ({self.visibility})"


class PhotoLike(models.Model):
    photo = models.ForeignKey(GalleryItem, on_delete=models.CASCADE, related_name="likes")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="photo_likes")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["photo", "user"], name="uniq_like_per_photo_user"),
        ]


class PhotoComment(models.Model):
    photo = models.ForeignKey(GalleryItem, on_delete=models.CASCADE, related_name="comments")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="photo_comments")
    text = models.TextField(max_length=1000)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"Comment #{self.pk} on photo #{self.photo_id}"
