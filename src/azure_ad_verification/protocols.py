"""Protocol definitions for the token validation package.

This module defines structural interfaces using Protocol (PEP 544) for:
- Signing key caching
- Signing key resolution
- Token validation
- Token extraction

Any class that implements the required methods satisfies the protocol, which
keeps tests free to substitute isolated fakes.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

if TYPE_CHECKING:
    from .models import SigningKey, ValidationResult

# ============================================================================
# Type Aliases
# ============================================================================

Claims: TypeAlias = Mapping[str, Any]
"""Represents a decoded token payload as an immutable mapping."""

ViewFunc: TypeAlias = Callable[..., Any]
"""Type alias for Flask view functions (callable that takes any args and returns any)."""


# ============================================================================
# Core Protocols
# ============================================================================


class KeyCache(Protocol):
    """Protocol for the signing key cache.

    Maps a key identifier to its SigningKey. Entries never expire and are
    never evicted; writing an existing kid replaces it (last writer wins).
    Implementations must be safe to share between threads.
    """

    def get(self, kid: str) -> SigningKey | None:
        """Return the cached key for ``kid`` or None. Never fetches."""
        ...

    def set(self, kid: str, key: SigningKey) -> None:
        """Store ``key`` under ``kid``."""
        ...


class KeyProvider(Protocol):
    """Protocol for resolving signing keys.

    Implementers must return the key identified by ``kid``, consulting a
    cache first and the identity provider on a miss.
    """

    def resolve_key(self, kid: str | None, application_id: str | None) -> SigningKey | None:
        """Resolve a signing key.

        Args:
            kid: Key ID from the token header. None short-circuits to None.
            application_id: Calling application, forwarded to the key
                endpoint as ``appid``.

        Returns:
            The SigningKey, or None if the provider does not know ``kid``.

        Raises:
            KeyFetchError: If the key set could not be fetched.
        """
        ...


class TokenValidator(Protocol):
    """Protocol for access token validators used by the Flask extension."""

    def validate(self, access_token: str) -> ValidationResult:
        """Validate a token.

        Returns a ValidationResult for every token problem and raises
        OperationalError only for failures reaching the identity provider.
        """
        ...


class Extractor(Protocol):
    """Protocol for extracting the raw access token from a Flask request."""

    def extract(self) -> str:
        """Return the raw token string.

        Raises:
            MissingToken: Token not found or improperly formatted.
        """
        ...
