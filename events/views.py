# events/views.py
#
# Purpose:
# - Public events listing, customer registration/cancellation.
# - Events staff manage events and see registrations.
#
import logging

from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from staff.models import StaffRole
from staff.permissions import HasStaffRole, StaffRoleOrReadOnly
from staff.roles import has_role
from .models import Event, EventRegistration
from .serializers import EventSerializer, EventRegistrationSerializer, RegistrationCreateSerializer
from .services import EventFullError, RegistrationError, cancel_registration, register

logger = logging.getLogger(__name__)


class EventViewSet(viewsets.ModelViewSet):
    """
    - GET  /api/events/                          upcoming active events (?type=, ?past=1)
    - POST /api/events/{id}/register/            register (409 when full or already registered)
    - POST /api/events/{id}/cancel-registration/
    - GET  /api/events/{id}/registrations/       events staff only
    - GET  /api/events/my-registrations/
    """
    serializer_class = EventSerializer
    permission_classes = [StaffRoleOrReadOnly]
    staff_role = StaffRole.EVENTS_PROGRAMS

    def get_queryset(self):
        qs = Event.objects.all()
        params = self.request.query_params
        if not has_role(self.request.user, StaffRole.EVENTS_PROGRAMS):
            qs = qs.filter(is_active=True)
        if self.action == "list" and params.get("past") != "1":
            qs = qs.filter(event_date__gte=timezone.localdate())
        event_type = params.get("type")
        if event_type:
            qs = qs.filter(type=event_type)
        return qs

    def get_serializer_context(self):
        ctx = super().get_serializer_context()
        user = self.request.user
        if user.is_authenticated:
            ctx["registered_ids"] = set(
                EventRegistration.objects
                .filter(user=user, status="confirmed")
                .values_list("event_id", flat=True)
            )
        return ctx

    def destroy(self, request, *args, **kwargs):
        event = self.get_object()
        if event.registrations.exists():
            event.is_active = False
            event.save(update_fields=["is_active", "updated_at"])
            return Response({"detail": "Event has registrations; it was deactivated instead."})
        event.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def register(self, request, pk=None):
        event = self.get_object()
        payload = RegistrationCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            registration, requires_payment = register(event, request.user, **payload.validated_data)
        except EventFullError as e:
            return Response(
                {"detail": str(e), "code": "event_full", "spots_left": e.spots_left},
                status=status.HTTP_409_CONFLICT,
            )
        except RegistrationError as e:
            return Response({"detail": str(e)}, status=status.HTTP_409_CONFLICT)

        data = EventRegistrationSerializer(registration).data
        data["requires_payment"] = requires_payment
        return Response(data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="cancel-registration", permission_classes=[IsAuthenticated])
    def cancel_registration(self, request, pk=None):
        event = self.get_object()
        try:
            registration = cancel_registration(event, request.user)
        except RegistrationError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        logger.info("User %s cancelled registration %s", request.user.pk, registration.pk)
        return Response(EventRegistrationSerializer(registration).data)

    @action(detail=True, methods=["get"], permission_classes=[HasStaffRole])
    def registrations(self, request, pk=None):
        event = self.get_object()
        qs = event.registrations.select_related("event").order_by("created_at")
        return Response(EventRegistrationSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path="my-registrations", permission_classes=[IsAuthenticated])
    def my_registrations(self, request):
        qs = (
            EventRegistration.objects
            .filter(user=request.user)
            .select_related("event")
            .order_by("-event__event_date")
        )
        return Response(EventRegistrationSerializer(qs, many=True).data)
