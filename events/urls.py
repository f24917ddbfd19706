from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import EventViewSet

router = SimpleRouter()
router.register(r"", EventViewSet, basename="event")

urlpatterns = [
    path("", include(router.urls)),
]
