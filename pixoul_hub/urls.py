# pixoul_hub/urls.py
#
# Purpose:
# - Project URL router.
# - Every JSON API lives under /api/<area>/ so each app owns its URL space.
#
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static


urlpatterns = [
    # Django admin
    path("admin/", admin.site.urls),

    # =====
    # API's
    # =====
    path("api/", include("booking.urls")),
    path("api/auth/", include("accounts.urls")),
    path("api/staff/", include("staff.urls")),
    path("api/events/", include("events.urls")),
    path("api/gallery/", include("gallery.urls")),
    path("api/snacks/", include("snacks.urls")),
    path("api/payments/", include("payments.urls")),
    path("api/chat/", include("chat.urls")),
    path("api/notifications/", include("notifications.urls")),
    path("api/content/", include("content.urls")),
    path("api/reports/", include("reports.urls")),
]

# Uploaded media in DEBUG (dev only). In production, serve via web server / CDN.
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
