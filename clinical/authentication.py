"""
Token authentication for the API.

Kept apart from the views so DRF can import it while loading settings
without pulling in view modules.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Token <key>``; also accepts ``Bearer`` for legacy token keys."""

    keyword = 'Token'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if len(header) == 2 and header[0].lower() == b'bearer' and len(header[1]) == 40:
            return self.authenticate_credentials(header[1].decode())
        return super().authenticate(request)
