# booking/urls.py
#
# Purpose:
# - Expose the booking REST API via DRF router (mounted at /api/).
#
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    RoomViewSet,
    BookingViewSet,
    PartyRequestViewSet,
    BusinessHoursView,
    PackagesView,
)
from .views_calendar import BookingsCalendarView
from .views_party import BookingPackageViewSet, PartyGalleryViewSet, PartyPricingView

# --------------------------
# DRF Router registrations
# --------------------------
router = DefaultRouter()
router.register(r"rooms", RoomViewSet, basename="room")
router.register(r"bookings", BookingViewSet, basename="booking")
router.register(r"party-requests", PartyRequestViewSet, basename="party-request")
router.register(r"booking-packages", BookingPackageViewSet, basename="booking-package")
router.register(r"party-gallery", PartyGalleryViewSet, basename="party-gallery")

# --------------------------
# URL patterns
# --------------------------
urlpatterns = [
    path("business-hours/", BusinessHoursView.as_view(), name="business-hours"),
    path("packages/", PackagesView.as_view(), name="packages"),
    path("bookings-calendar/", BookingsCalendarView.as_view(), name="bookings-calendar"),
    path("party-pricing/", PartyPricingView.as_view(), name="party-pricing"),
    path("", include(router.urls)),
]
