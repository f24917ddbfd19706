from rest_framework import serializers

from .models import SavedCard
from .services.payables import KINDS


class CheckoutRequestSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[(k, k) for k in KINDS])
    id = serializers.IntegerField(min_value=1)


class VerifyPaymentSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=255)


class SavedCardSerializer(serializers.ModelSerializer):
    class Meta:
        model = SavedCard
        fields = ["id", "card_brand", "card_last4", "card_exp_month", "card_exp_year", "created_at"]
        read_only_fields = fields
