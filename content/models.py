# content/models.py
#
# Purpose:
# - Venue announcements (home page news) and game guides.
#
from django.db import models


class Announcement(models.Model):
    title = models.CharField(max_length=200)
    excerpt = models.CharField(max_length=300, blank=True)
    content = models.TextField()
    pinned = models.BooleanField(default=False)
    published = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-pinned", "-created_at"]

    def __str__(self):
        return self.title


class Guide(models.Model):
    INTENSITY_CHOICES = [
        ("low", "Low"),
        ("medium", "Medium"),
        ("high", "High"),
    ]

    title = models.CharField(max_length=200)
    game_name = models.CharField(max_length=200)
    category = models.CharField(max_length=100, blank=True)
    overview = models.TextField(blank=True)
    setup_instructions = models.TextField(blank=True)
    how_to_play = models.TextField(blank=True)
    tips_and_scoring = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    intensity_level = models.CharField(max_length=10, choices=INTENSITY_CHOICES, blank=True)
    age_rating = models.CharField(max_length=20, blank=True)
    tags = models.JSONField(default=list, blank=True)
    is_published = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["game_name", "title"]

    def __str__(self):
        return f"{self.game_name}: {self.title}"
