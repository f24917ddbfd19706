from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import AnnouncementViewSet, GuideViewSet

router = DefaultRouter()
router.register(r"announcements", AnnouncementViewSet, basename="announcement")
router.register(r"guides", GuideViewSet, basename="guide")

urlpatterns = [path("", include(router.urls))]
