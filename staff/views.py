# staff/views.py
#
# Purpose:
# - Staff role administration (superuser only) and the "who am I as staff"
#   capability endpoint used by every staff panel.
#
import logging

from django.contrib.auth.models import User
from django.db import transaction
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import StaffRole
from .permissions import IsSuperuser
from .roles import capabilities, grant_role
from .serializers import StaffRoleSerializer, StaffUserCreateSerializer

logger = logging.getLogger(__name__)


class StaffRoleViewSet(viewsets.ModelViewSet):
    """
    GET    /api/staff/roles/                 list role grants
    POST   /api/staff/roles/                 grant {user, role}
    DELETE /api/staff/roles/{id}/            revoke
    POST   /api/staff/roles/create-user/     create a staff account with a role
    """
    queryset = StaffRole.objects.select_related("user").order_by("user_id", "role")
    serializer_class = StaffRoleSerializer
    permission_classes = [IsSuperuser]
    http_method_names = ["get", "post", "delete", "head", "options"]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        role = serializer.validated_data["role"]
        obj = grant_role(user, role)
        logger.info("Granted staff role %s to user %s", role, user.pk)
        return Response(self.get_serializer(obj).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="create-user")
    def create_user(self, request):
        """
        Create a staff login and attach one role in a single step.
        The username is the local part of the email address.
        """
        serializer = StaffUserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        username = data["email"].split("@", 1)[0]
        if User.objects.filter(username=username).exists():
            return Response({"detail": "Username already taken."}, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            user = User.objects.create_user(
                username=username,
                email=data["email"],
                password=data["password"],
                first_name=data["name"],
            )
            role_obj = grant_role(user, data["role"])

        logger.info("Created staff user %s with role %s", user.pk, data["role"])
        return Response(StaffRoleSerializer(role_obj).data, status=status.HTTP_201_CREATED)


class StaffCapabilitiesView(APIView):
    """
    GET /api/staff/me

    Returns the signed-in user's staff roles and panel capability flags.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        data = capabilities(request.user)
        data["email"] = request.user.email
        return Response(data)
