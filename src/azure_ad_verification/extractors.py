"""Access token extraction from Flask requests.

Security Considerations:
- Bearer tokens should only be sent over HTTPS
- Never extract tokens from URL query parameters (visible in logs/history)
"""

from __future__ import annotations

from flask import request

from .errors import MissingToken


class BearerExtractor:
    """Extracts the access token from an ``Authorization: Bearer`` header.

    The scheme is matched case-insensitively; anything other than exactly a
    scheme and a non-empty token raises MissingToken.
    """

    def extract(self) -> str:
        auth_header = request.headers.get("Authorization", "").strip()

        if not auth_header:
            raise MissingToken("Missing Authorization header")

        parts = auth_header.split(" ", 1)
        if len(parts) != 2:
            raise MissingToken("Invalid Authorization header format (expected 'Bearer <token>')")

        scheme, token = parts
        if scheme.lower() != "bearer":
            raise MissingToken("Invalid authorization scheme (expected 'Bearer')")

        token = token.strip()
        if not token:
            raise MissingToken("Bearer token is empty")

        return token
