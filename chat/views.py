# chat/views.py
#
# Purpose:
# - Customer <-> staff chat threads.
#
# Endpoints:
# - GET  /api/chat/conversations/                     own threads (+ threads the user handles as staff)
# - POST /api/chat/conversations/                     open a thread (optionally with a first message)
# - GET  /api/chat/conversations/{id}/messages/?after=ID   messages newer than ID (polling)
# - POST /api/chat/conversations/{id}/messages/       send a message
# - POST /api/chat/conversations/{id}/read/           mark the other side's messages read
# - POST /api/chat/conversations/{id}/close/          staff closes the thread
# - POST /api/chat/conversations/{id}/reopen/         staff reopens the thread
# - GET  /api/chat/conversations/unread-count/
#
from django.db.models import Count, Q
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import Conversation
from .serializers import ConversationSerializer, ConversationCreateSerializer, MessageSerializer
from . import services


class ConversationViewSet(viewsets.ModelViewSet):
    serializer_class = ConversationSerializer
    http_method_names = ["get", "post", "head", "options"]

    def get_queryset(self):
        user = self.request.user
        if not user.is_authenticated:
            return Conversation.objects.none()

        scope = Q(user=user)
        handled = services.staff_types_for(user)
        if handled and self.request.query_params.get("mine") != "1":
            scope |= Q(conversation_type__in=handled)

        qs = Conversation.objects.filter(scope).select_related("user")
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)

        # Unread from the point of view of whoever is asking
        unread_for_customer = Count("messages", filter=Q(messages__is_read=False, messages__is_staff=True))
        unread_for_staff = Count("messages", filter=Q(messages__is_read=False, messages__is_staff=False))
        if handled:
            qs = qs.annotate(unread=unread_for_staff)
        else:
            qs = qs.annotate(unread=unread_for_customer)
        return qs.order_by("-last_message_at", "-created_at")

    def create(self, request, *args, **kwargs):
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        conversation = services.open_conversation(
            user=request.user,
            conversation_type=data["conversation_type"],
            reference_id=data.get("reference_id", ""),
            title=data.get("title", ""),
        )
        if data.get("message"):
            try:
                services.post_message(conversation, request.user, data["message"])
            except ValueError as e:
                return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(ConversationSerializer(conversation).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get", "post"])
    def messages(self, request, pk=None):
        conversation = self.get_object()

        if request.method == "POST":
            try:
                msg = services.post_message(conversation, request.user, request.data.get("message"))
            except ValueError as e:
                return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
            return Response(MessageSerializer(msg).data, status=status.HTTP_201_CREATED)

        qs = conversation.messages.select_related("sender").order_by("id")
        after = request.query_params.get("after")
        if after:
            try:
                qs = qs.filter(id__gt=int(after))
            except ValueError:
                return Response({"detail": "'after' must be a message id."}, status=status.HTTP_400_BAD_REQUEST)
        return Response(MessageSerializer(qs, many=True).data)

    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        conversation = self.get_object()
        updated = services.mark_read(conversation, request.user)
        return Response({"marked_read": updated})

    def _staff_status_change(self, request, new_status):
        conversation = self.get_object()
        if conversation.conversation_type not in services.staff_types_for(request.user):
            return Response({"detail": "Only staff can change a conversation's status."}, status=status.HTTP_403_FORBIDDEN)
        services.set_status(conversation, new_status)
        return Response(ConversationSerializer(conversation).data)

    @action(detail=True, methods=["post"])
    def close(self, request, pk=None):
        return self._staff_status_change(request, "closed")

    @action(detail=True, methods=["post"])
    def reopen(self, request, pk=None):
        return self._staff_status_change(request, "active")

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        return Response({"unread": services.unread_count(request.user)})
