"""
ASGI config for the campuscare project.

HTTP only; the API has no websocket routes.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "campuscare.settings")

application = get_asgi_application()
