import random

from django.contrib.auth.models import User
from django.contrib.auth import authenticate, login, logout
from django.db import transaction
from django.views.decorators.csrf import csrf_exempt
from django.utils.decorators import method_decorator
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from staff.roles import capabilities
from .models import Profile
from .serializers import AVATAR_COLORS, ProfileSerializer, PublicProfileSerializer


def _me_payload(user):
    profile = Profile.objects.filter(user=user).first()
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "profile": ProfileSerializer(profile).data if profile else None,
        "staff": capabilities(user),
    }


@method_decorator(csrf_exempt, name="dispatch")
class SignupView(APIView):
    """
    POST /api/auth/signup
    {
      "username": "jane",
      "password": "Password123!",
      "name": "janeplays",
      "email": "jane@example.com"
    }
    Creates Django User + Profile.
    Logs the new user in (session).
    """
    permission_classes = [AllowAny]

    def post(self, request):
        data = request.data
        username = (data.get("username") or "").strip()
        password = data.get("password")
        name = (data.get("name") or "").strip()
        email = (data.get("email") or "").strip().lower()

        if not all([username, password, name, email]):
            return Response({"detail": "All fields are required."}, status=status.HTTP_400_BAD_REQUEST)

        if User.objects.filter(username=username).exists():
            return Response({"detail": "Username already taken."}, status=status.HTTP_400_BAD_REQUEST)

        if User.objects.filter(email__iexact=email).exists():
            return Response({"detail": "Email already used."}, status=status.HTTP_400_BAD_REQUEST)

        if Profile.objects.filter(name__iexact=name).exists():
            return Response({"detail": "That username is already taken."}, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            user = User.objects.create_user(username=username, password=password, email=email)
            Profile.objects.create(user=user, name=name, avatar_color=random.choice(AVATAR_COLORS))

        user = authenticate(request, username=username, password=password)
        if user:
            login(request, user)

        return Response({"detail": "Signup successful."}, status=status.HTTP_201_CREATED)


@method_decorator(csrf_exempt, name="dispatch")
class LoginView(APIView):
    """
    POST /api/auth/login
    { "username": "jane", "password": "Password123!" }
    Logs in the user (session).
    """
    permission_classes = [AllowAny]

    def post(self, request):
        data = request.data
        username = data.get("username")
        password = data.get("password")

        user = authenticate(request, username=username, password=password)
        if not user:
            return Response({"detail": "Invalid credentials."}, status=status.HTTP_400_BAD_REQUEST)

        login(request, user)
        return Response(_me_payload(user), status=status.HTTP_200_OK)


class LogoutView(APIView):
    """
    POST /api/auth/logout
    Logs out the current user (customer or staff).
    """
    permission_classes = [AllowAny]

    def post(self, request):
        logout(request)
        return Response({"detail": "Logged out."}, status=status.HTTP_200_OK)


class MeView(APIView):
    """
    GET   /api/auth/me   current user, profile and staff capabilities
    PATCH /api/auth/me   update the profile (name, full_name, avatar_color, phone)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(_me_payload(request.user))

    def patch(self, request):
        profile = Profile.objects.filter(user=request.user).first()
        if profile is None:
            # Users created outside signup (admin, staff tooling) pick a handle on first edit.
            serializer = ProfileSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            serializer.save(user=request.user)
        else:
            serializer = ProfileSerializer(profile, data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            serializer.save()
        return Response(_me_payload(request.user))


class ProfileSearchView(generics.ListAPIView):
    """
    GET /api/auth/profiles/?q=jan
    Prefix search on public handles (max 20 results).
    """
    serializer_class = PublicProfileSerializer

    def get_queryset(self):
        q = (self.request.query_params.get("q") or "").strip()
        qs = Profile.objects.select_related("user").order_by("name")
        if q:
            qs = qs.filter(name__istartswith=q)
        return qs[:20]
