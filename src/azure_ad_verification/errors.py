"""Errors raised by the token validation pipeline.

Two disjoint classes of failure exist:

- Validation failures (malformed token, unknown key, bad signature, claim
  mismatch) are expected and never raised. They are reported through
  ``ValidationResult.is_valid`` and ``ValidationResult.validation_message``.
- Operational failures (identity provider unreachable, unexpected
  cryptographic errors) are raised as ``OperationalError`` subclasses and are
  the caller's responsibility to catch and treat as a service-level fault.

All errors inherit from AuthError to allow catch-all error handling.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base exception for all errors raised by this package."""


class ConfigurationError(AuthError, ValueError):
    """Raised when ValidationOptions are missing a required value.

    This is a construction-time failure: it is raised before any network
    activity takes place and never during ``validate``.
    """


class MissingToken(AuthError):  # noqa: N818
    """Raised when no bearer token is found in the current request.

    Only the Flask integration raises this; ``TokenValidator.validate`` always
    receives a token string.
    """


class OperationalError(AuthError):
    """Base class for failures that abort a ``validate`` call.

    The message is normalized: it holds the transport response body and status
    when one exists, the underlying error message otherwise.
    """


class MetadataFetchError(OperationalError):
    """Raised when the discovery document cannot be fetched or is unusable."""


class KeyFetchError(OperationalError):
    """Raised when the signing key set cannot be fetched or is unusable."""


class VerifierError(OperationalError):
    """Raised for verification failures that are not token problems.

    Typical causes are signing key material that cannot be parsed or a
    certificate the cryptography backend rejects.
    """
