from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import StaffRoleViewSet, StaffCapabilitiesView

router = DefaultRouter()
router.register(r"roles", StaffRoleViewSet, basename="staff-role")

urlpatterns = [
    path("me", StaffCapabilitiesView.as_view(), name="staff-me"),
    path("", include(router.urls)),
]
