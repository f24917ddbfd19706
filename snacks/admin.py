from django.contrib import admin

from .models import Snack, Cart, CartItem, Order, OrderItem


@admin.register(Snack)
class SnackAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "available")
    list_filter = ("category", "available")
    search_fields = ("name",)


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "status", "total", "updated_at")
    list_filter = ("status",)
    inlines = [CartItemInline]


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("menu_item_id", "name", "unit_price", "qty", "line_total")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("label", "user", "status", "payment_status", "fulfillment", "total", "created_at")
    list_filter = ("status", "payment_status", "fulfillment")
    search_fields = ("order_number", "user__username", "room_location")
    inlines = [OrderItemInline]
