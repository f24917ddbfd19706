# content/views.py
#
# Purpose:
# - Announcements: public reads published ones (pinned first); the
#   "announcements" staff role manages them.
# - Guides: public reads published guides (?category=, ?tag=, ?q=); the
#   "guides" staff role manages them.
#
from django.db.models import Q
from rest_framework import viewsets

from staff.models import StaffRole
from staff.permissions import StaffRoleOrReadOnly
from staff.roles import has_role
from .models import Announcement, Guide
from .serializers import AnnouncementSerializer, GuideSerializer


class AnnouncementViewSet(viewsets.ModelViewSet):
    serializer_class = AnnouncementSerializer
    permission_classes = [StaffRoleOrReadOnly]
    staff_role = StaffRole.ANNOUNCEMENTS

    def get_queryset(self):
        qs = Announcement.objects.all()
        if not has_role(self.request.user, StaffRole.ANNOUNCEMENTS):
            qs = qs.filter(published=True)
        return qs.order_by("-pinned", "-created_at", "-id")


class GuideViewSet(viewsets.ModelViewSet):
    serializer_class = GuideSerializer
    permission_classes = [StaffRoleOrReadOnly]
    staff_role = StaffRole.GUIDES

    def get_queryset(self):
        qs = Guide.objects.all()
        if not has_role(self.request.user, StaffRole.GUIDES):
            qs = qs.filter(is_published=True)

        params = self.request.query_params
        if params.get("category"):
            qs = qs.filter(category__iexact=params["category"])
        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(title__icontains=q) | Q(game_name__icontains=q) | Q(overview__icontains=q))
        tag = (params.get("tag") or "").strip().lower()
        if tag:
            # JSON list membership; done in Python so it works on SQLite too
            ids = [g.id for g in qs.only("id", "tags") if tag in (g.tags or [])]
            qs = qs.filter(id__in=ids)
        return qs
