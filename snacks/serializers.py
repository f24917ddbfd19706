from rest_framework import serializers

from booking.services.price_display import format_price
from .models import Snack, Cart, CartItem, Order, OrderItem


class SnackSerializer(serializers.ModelSerializer):
    price_formatted = serializers.SerializerMethodField()

    class Meta:
        model = Snack
        fields = ["id", "name", "category", "description", "price", "price_formatted", "available", "image"]

    def get_price_formatted(self, obj):
        return format_price(obj.price)

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value


class CartItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = CartItem
        fields = ["id", "menu_item_id", "name", "unit_price", "qty", "line_total", "image_url"]
        read_only_fields = fields


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Cart
        fields = ["id", "status", "items", "item_count", "subtotal", "tax", "fees", "tip", "total", "updated_at"]
        read_only_fields = fields

    def get_item_count(self, obj):
        return sum(line.qty for line in obj.items.all())


class AddToCartSerializer(serializers.Serializer):
    menu_item_id = serializers.CharField(max_length=64)
    qty = serializers.IntegerField(min_value=1, max_value=99, default=1)


class UpdateQuantitySerializer(serializers.Serializer):
    qty = serializers.IntegerField(max_value=99)


class CheckoutSerializer(serializers.Serializer):
    fulfillment = serializers.ChoiceField(choices=Order.FULFILLMENT_CHOICES, default="pickup")
    room_location = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    room_details = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    inside_pixoul_confirmed = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["menu_item_id", "name", "unit_price", "qty", "line_total"]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    label = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id", "order_number", "label", "user", "items",
            "subtotal", "tax", "fees", "tip", "total",
            "status", "payment_status", "payment_method",
            "fulfillment", "room_location", "room_details", "inside_pixoul_confirmed",
            "notes", "created_at", "updated_at",
        ]
        read_only_fields = fields


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
