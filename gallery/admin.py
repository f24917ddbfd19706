from django.contrib import admin

from .models import GalleryItem, PhotoComment, PhotoLike


@admin.register(GalleryItem)
class GalleryItemAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "visibility", "is_official", "like_count", "comment_count", "created_at")
    list_filter = ("visibility", "is_official")
    search_fields = ("caption", "user__username")
    actions = ["make_public"]

    @admin.action(description="Publish selected photos")
    def make_public(self, request, queryset):
        queryset.update(visibility=GalleryItem.VISIBILITY_PUBLIC)


admin.site.register(PhotoLike)
admin.site.register(PhotoComment)
