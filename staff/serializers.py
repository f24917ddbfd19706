from django.contrib.auth.models import User
from rest_framework import serializers
from .models import StaffRole

class StaffRoleSerializer(serializers.ModelSerializer):
    user = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    username = serializers.CharField(source="user.username", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = StaffRole
        fields = ["id", "user", "username", "email", "role", "created_at"]
        read_only_fields = ["created_at"]


class StaffUserCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    name = serializers.CharField(max_length=150)
    password = serializers.CharField(min_length=8, write_only=True)
    role = serializers.ChoiceField(choices=StaffRole.ROLE_CHOICES)

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already used.")
        return value
