from django.contrib import admin

from .models import Announcement, Guide


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ("title", "pinned", "published", "created_at")
    list_filter = ("pinned", "published")
    search_fields = ("title", "content")


@admin.register(Guide)
class GuideAdmin(admin.ModelAdmin):
    list_display = ("title", "game_name", "category", "intensity_level", "is_published")
    list_filter = ("category", "intensity_level", "is_published")
    search_fields = ("title", "game_name")
