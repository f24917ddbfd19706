# staff/models.py
from django.conf import settings
from django.db import models


class StaffRole(models.Model):
    """
    Access-control tag granting a signed-in user one staff panel.
    A user may hold several roles; superusers implicitly hold all of them.
    """
    SUPPORT = "support"
    BOOKING = "booking"
    GALLERY_MODERATOR = "gallery_moderator"
    EVENTS_PROGRAMS = "events_programs"
    ANNOUNCEMENTS = "announcements"
    SNACKS = "snacks"
    GALLERY = "gallery"
    GUIDES = "guides"

    ROLE_CHOICES = [
        (SUPPORT, "Support"),
        (BOOKING, "Bookings & rooms"),
        (GALLERY_MODERATOR, "Gallery moderator"),
        (EVENTS_PROGRAMS, "Events & programs"),
        (ANNOUNCEMENTS, "Announcements"),
        (SNACKS, "Snacks & orders"),
        (GALLERY, "Gallery"),
        (GUIDES, "Guides"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="staff_roles",
    )
    role = models.CharField(max_length=32, choices=ROLE_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["user_id", "role"]
        constraints = [
            models.UniqueConstraint(fields=["user", "role"], name="uniq_staff_role_per_user"),
        ]

    def __str__(self):
        return f"{self.user.username}: {self.role}"
