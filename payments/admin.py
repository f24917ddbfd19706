from django.contrib import admin

from .models import SavedCard, WebhookEvent


@admin.register(SavedCard)
class SavedCardAdmin(admin.ModelAdmin):
    list_display = ("user", "card_brand", "card_last4", "card_exp_month", "card_exp_year", "created_at")
    search_fields = ("user__username", "stripe_customer_id")


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    list_display = ("event_id", "event_type", "reference_type", "reference_id", "processing_result", "processed_at")
    list_filter = ("processing_result", "event_type")
    readonly_fields = [f.name for f in WebhookEvent._meta.fields]
