from django.contrib import admin
from .models import (
    BookingPackage, PartyGalleryImage, PartyGalleryItem, PartyPricingContent,
    PartyRequest, Room, RoomBooking,
)

@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "type", "capacity", "hourly_rate", "is_active")
    list_filter = ("type", "is_active")
    search_fields = ("name",)
    list_editable = ("hourly_rate", "is_active")

@admin.register(RoomBooking)
class RoomBookingAdmin(admin.ModelAdmin):
    list_display = ("id", "room", "user", "start_time", "duration_hours", "status", "payment_status")
    list_filter = ("status", "payment_status", "room")
    search_fields = ("user__username", "room__name", "contact_email")
    date_hierarchy = "booking_date"

@admin.register(PartyRequest)
class PartyRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "party_type", "preferred_date", "guest_count", "status")
    list_filter = ("party_type", "status")
    search_fields = ("name", "contact_email", "contact_phone")

@admin.register(BookingPackage)
class BookingPackageAdmin(admin.ModelAdmin):
    list_display = ("package_name", "option_label", "group_key", "price", "sort_order", "is_active")
    list_filter = ("group_key", "is_active")
    list_editable = ("price", "sort_order", "is_active")

class PartyGalleryImageInline(admin.TabularInline):
    model = PartyGalleryImage
    extra = 0

@admin.register(PartyGalleryItem)
class PartyGalleryItemAdmin(admin.ModelAdmin):
    list_display = ("id", "category", "caption", "created_at")
    list_filter = ("category",)
    inlines = [PartyGalleryImageInline]

@admin.register(PartyPricingContent)
class PartyPricingContentAdmin(admin.ModelAdmin):
    list_display = ("key", "title", "updated_at")
