from django.contrib import admin

from .models import Event, EventRegistration


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "event_date", "start_time", "price", "current_participants", "max_participants", "is_active")
    list_filter = ("type", "is_active")
    search_fields = ("title", "instructor", "location")


@admin.register(EventRegistration)
class EventRegistrationAdmin(admin.ModelAdmin):
    list_display = ("participant_name", "event", "party_size", "status", "payment_status", "created_at")
    list_filter = ("status", "payment_status")
    search_fields = ("participant_name", "participant_email", "contact_phone")
