"""
ASGI config for the ship reporting project.

The API is plain request/response, so this only wraps the Django HTTP
application for ASGI servers such as uvicorn.
"""
import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "shipreport.settings")

from django.core.asgi import get_asgi_application  # noqa: E402

application = get_asgi_application()
