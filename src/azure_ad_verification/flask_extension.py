"""Flask extension protecting routes with access token validation.

Security Model:
1. Extract the bearer token from the request
2. Run it through the TokenValidator
3. Store the verdict in ``flask.g.access_token`` and the claims in
   ``flask.g.jwt`` for the route to use
4. Convert rejections to HTTP responses (401 for token problems, 503 when
   the identity provider cannot be reached)
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any, Final

from flask import Flask, abort, g

from .errors import MissingToken, OperationalError
from .extractors import BearerExtractor

if TYPE_CHECKING:
    from collections.abc import Callable

    from .protocols import Extractor, TokenValidator, ViewFunc

logger = logging.getLogger(__name__)

_EXT_KEY: Final[str] = "azure_ad_verification"
"""Flask extensions registry key for AuthExtension."""


class AuthExtension:
    """
    Flask decorator glue for access token validation.

    Pattern:
        auth = AuthExtension(validator)
        auth.init_app(app)

    Usage:
        @app.get("/orders")
        @auth.require()
        def orders(): ...

    Error mapping:
        - ``MissingToken``      -> HTTP 401 ("Missing token")
        - invalid token         -> HTTP 401 (the validation message)
        - ``OperationalError``  -> HTTP 503 ("Identity provider unavailable")
    """

    def __init__(
        self,
        validator: TokenValidator | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        self._validator: TokenValidator | None = validator
        self._extractor: Extractor = extractor or BearerExtractor()

    def init_app(
        self,
        app: Flask,
        *,
        validator: TokenValidator | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        """Register the extension on ``app``, optionally replacing collaborators."""
        if validator is not None:
            self._validator = validator
        if extractor is not None:
            self._extractor = extractor

        app.extensions[_EXT_KEY] = self

    def require(self) -> Callable[[ViewFunc], ViewFunc]:
        """Decorator rejecting requests without a valid access token.

        Side Effects:
            - Writes the ValidationResult to ``flask.g.access_token`` and the
              decoded claims to ``flask.g.jwt`` before calling the view.
            - May terminate request handling early via ``flask.abort``.
        """

        def decorator(view: ViewFunc) -> ViewFunc:
            @wraps(view)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                if self._validator is None:
                    raise RuntimeError("AuthExtension has no validator; pass one to init_app()")

                try:
                    token = self._extractor.extract()
                    result = self._validator.validate(token)
                except MissingToken:
                    abort(401, description="Missing token")
                except OperationalError as e:
                    logger.error("Token validation aborted: %s", e)
                    abort(503, description="Identity provider unavailable")

                if not result.is_valid:
                    abort(401, description=result.validation_message or "Invalid token")

                g.access_token = result
                g.jwt = result.decoded_token.payload if result.decoded_token else {}
                return view(*args, **kwargs)

            return wrapper

        return decorator
