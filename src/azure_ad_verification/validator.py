"""Access token validation pipeline.

``TokenValidator.validate`` runs one pass through these stages:

1. Ensure the discovery document is loaded (once per validator)
2. Decode the token without verifying it
3. Resolve the signing key named by the ``kid`` header
4. Verify the signature, audience and issuer
5. Apply the claims policy (tenant, application, scopes)

Any stage may reject the token, which ends the pass with a ValidationResult
whose ``is_valid`` is False. Failures reaching the identity provider, and
verification errors that are not token problems, are raised instead.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING, Any

import httpx

from .cache_stores import shared_key_cache
from .key_providers import KeyResolver
from .metadata import MetadataResolver
from .models import DecodedToken, ValidationResult
from .policy import ClaimsPolicy
from .verifier import SignatureVerifier, decode_token

if TYPE_CHECKING:
    from .config import ValidationOptions
    from .models import ProviderMetadata
    from .outcome import Outcome
    from .protocols import KeyCache

logger = logging.getLogger(__name__)


class TokenValidator:
    """Validates Azure AD access tokens for a resource server.

    Thread Safety:
        ``validate`` may be called from several threads at once. The
        discovery document memo and the key cache tolerate racing first
        fetches; the only cost is a redundant request.

    Example:
        ```python
        options = ValidationOptions(
            tenant_id=TENANT_ID,
            audience="api://my-api",
            metadata_document_uri=metadata_document_uri_for(TENANT_ID),
        )

        with TokenValidator(options) as validator:
            result = validator.validate(raw_token)
            if not result.is_valid:
                reject(result.validation_message)
        ```

    Args:
        options: Validation configuration.
        key_cache: Signing key cache. Defaults to the process-wide cache
            shared by all validators.
        http_client: Client for requests to the identity provider. If
            omitted, one is created with ``options.http_timeout`` and closed
            by ``close()``.
    """

    def __init__(
        self,
        options: ValidationOptions,
        *,
        key_cache: KeyCache | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.options = options
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=options.http_timeout)

        self._metadata = MetadataResolver(options.metadata_document_uri, self._client)
        self._keys = KeyResolver(
            jwks_uri=lambda: self._metadata.ensure_metadata().jwks_uri,
            cache=key_cache if key_cache is not None else shared_key_cache(),
            client=self._client,
        )
        self._verifier = SignatureVerifier(options)
        self._policy = ClaimsPolicy.from_options(options)

    @property
    def metadata(self) -> ProviderMetadata | None:
        """The resolved discovery document, or None before the first call."""
        return self._metadata.metadata

    def validate(self, access_token: str) -> ValidationResult:
        """Validate ``access_token`` and return the verdict.

        Returns:
            ValidationResult. ``decoded_token`` is set whenever the token
            could be decoded, even if a later stage rejected it.

        Raises:
            MetadataFetchError: The discovery document could not be fetched.
            KeyFetchError: The signing key set could not be fetched.
            VerifierError: Signature verification failed for a reason other
                than the token or its key.
        """
        self._metadata.ensure_metadata()

        decoded_outcome = decode_token(access_token)
        if not decoded_outcome.ok or decoded_outcome.value is None:
            return self._rejected(access_token, None, decoded_outcome)
        decoded = decoded_outcome.value

        key = self._keys.resolve_key(decoded.key_id, decoded.payload.application_id)

        verified = self._verifier.verify(access_token, decoded, key)
        verified.raise_for_failure()
        if not verified.ok:
            return self._rejected(access_token, decoded, verified)

        verdict = self._policy.evaluate(decoded.payload)
        if not verdict.is_valid:
            logger.warning("Access token rejected: %s", verdict.validation_message)
            return ValidationResult(
                access_token=access_token,
                decoded_token=decoded,
                is_valid=False,
                validation_message=verdict.validation_message,
            )

        logger.debug("Access token accepted for application %s", decoded.payload.application_id)
        return ValidationResult(access_token=access_token, decoded_token=decoded, is_valid=True)

    @staticmethod
    def _rejected(
        access_token: str,
        decoded: DecodedToken | None,
        outcome: Outcome[Any],
    ) -> ValidationResult:
        logger.warning("Access token rejected: %s", outcome.message)
        return ValidationResult(
            access_token=access_token,
            decoded_token=decoded,
            is_valid=False,
            validation_message=outcome.message,
        )

    def close(self) -> None:
        """Close the HTTP client if this validator created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> TokenValidator:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
