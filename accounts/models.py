# accounts/models.py
#
# Purpose:
# - Public profile attached to every signed-in user (handle, display name,
#   avatar colour, contact phone).
#
# Notes for developers:
# - `name` is the public handle shown in the gallery and chat. It is unique
#   case-insensitively; clean() enforces it so admin and API both respect it.
#
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Profile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    name = models.CharField(max_length=50, unique=True)
    full_name = models.CharField(max_length=200, blank=True)
    avatar_color = models.CharField(max_length=20, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def clean(self):
        name = (self.name or "").strip()
        if not name:
            return
        qs = Profile.objects.filter(name__iexact=name)
        if self.pk:
            qs = qs.exclude(pk=self.pk)
        if qs.exists():
            raise ValidationError("That username is already taken.")


def display_name(user) -> str:
    """Profile handle if the user has one, else the auth username."""
    profile = getattr(user, "profile", None)
    if profile is not None:
        return profile.name
    return user.get_username()
