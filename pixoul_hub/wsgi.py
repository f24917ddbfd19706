"""
WSGI config for pixoul_hub.

Exposes the WSGI callable as a module-level variable named ``application``.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pixoul_hub.settings")

application = get_wsgi_application()
