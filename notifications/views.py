# notifications/views.py
#
# Purpose:
# - In-app notification inbox: personal notifications plus the team inbox of
#   every staff role the user holds.
#
from django.db.models import Q
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from staff.roles import get_roles
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "kind", "title", "body", "link_path", "recipient_role", "is_read", "created_at"]
        read_only_fields = fields


def inbox_for(user):
    scope = Q(recipient_user=user)
    roles = get_roles(user)
    if roles:
        scope |= Q(recipient_role__in=roles)
    return Notification.objects.filter(scope)


class NotificationListView(APIView):
    """
    GET /api/notifications/?unread=1
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = inbox_for(request.user)
        if request.query_params.get("unread") == "1":
            qs = qs.filter(is_read=False)
        return Response(NotificationSerializer(qs[:100], many=True).data)


class UnreadCountView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({"count": inbox_for(request.user).filter(is_read=False).count()})


class MarkReadView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        updated = inbox_for(request.user).filter(pk=pk).update(is_read=True)
        if not updated:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response({"detail": "Marked as read."})


class MarkAllReadView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        updated = inbox_for(request.user).filter(is_read=False).update(is_read=True)
        return Response({"updated": updated})
