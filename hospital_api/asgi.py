"""
ASGI entry point: Django over HTTP, notification push over websockets.

``DJANGO_SETTINGS_MODULE`` must be set and Django set up before anything
that touches models is imported.
"""
import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hospital_api.settings")

import django  # noqa: E402
django.setup()  # noqa: E402

from channels.auth import AuthMiddlewareStack  # noqa: E402
from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from django.core.asgi import get_asgi_application  # noqa: E402
from django.urls import path  # noqa: E402

from clinical.realtime.auth import TokenAuthMiddleware  # noqa: E402
from clinical.realtime.consumers import NotificationsConsumer  # noqa: E402

websocket_urlpatterns = [
    path("ws/notifications/", NotificationsConsumer.as_asgi()),
]

application = ProtocolTypeRouter({
    "http": get_asgi_application(),
    # session user first, then ?token=<key> overrides it
    "websocket": AuthMiddlewareStack(TokenAuthMiddleware(URLRouter(websocket_urlpatterns))),
})
