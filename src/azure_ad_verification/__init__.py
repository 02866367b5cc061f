"""
Azure AD access token validation for resource servers.

High-level flow (per token)
---------------------------
1. `TokenValidator.validate(token)` runs.
2. `MetadataResolver` loads the discovery document once per validator and
   exposes the `jwks_uri`.
3. The token is decoded (not yet trusted) to read `alg`, `kid` and the
   calling application (`azp` / `appid`).
4. `KeyResolver` returns the signing key for `kid` from the shared
   `InMemoryKeyCache`, fetching and caching the provider's key set on a miss.
5. `SignatureVerifier` checks the signature with the token's declared
   algorithm only, plus audience and issuer.
6. `ClaimsPolicy` checks tenant, application allow-list and required scopes
   in that order.
7. A `ValidationResult` is returned; `is_valid` is False with a message for
   any token problem.

Failures reaching the identity provider raise `MetadataFetchError` or
`KeyFetchError`; they are not token problems and never appear in a result.

Example usage
-------------

.. code-block:: python

    from azure_ad_verification import (
        AuthExtension,
        TokenValidator,
        ValidationOptions,
        metadata_document_uri_for,
    )

    options = ValidationOptions(
        tenant_id=TENANT_ID,
        audience="api://28748804-910c-52c8-a22b-54c8a6148f16",
        metadata_document_uri=metadata_document_uri_for(TENANT_ID),
        required_scopes=("Api.Connect",),
    )
    validator = TokenValidator(options)

    result = validator.validate(raw_token)
    if not result.is_valid:
        print(result.validation_message)

    # Or protect Flask routes
    auth = AuthExtension(validator)

    @app.route("/protected")
    @auth.require()
    def protected_route():
        return {"tenant": g.jwt["tid"]}
"""

# Cache stores
from .cache_stores import InMemoryKeyCache, shared_key_cache

# Configuration
from .config import ValidationOptions, metadata_document_uri_for

# Errors
from .errors import (
    AuthError,
    ConfigurationError,
    KeyFetchError,
    MetadataFetchError,
    MissingToken,
    OperationalError,
    VerifierError,
)

# Extractors
from .extractors import BearerExtractor

# Flask extension
from .flask_extension import AuthExtension

# Key providers
from .key_providers import KeyResolver

# Metadata
from .metadata import MetadataResolver

# Models
from .models import DecodedToken, ProviderMetadata, SigningKey, TokenClaims, ValidationResult

# Outcomes
from .outcome import Outcome, OutcomeKind

# Claims policy
from .policy import ClaimsPolicy, RuleResult, ValidationRule, evaluate_claims, validate_rules

# Protocols
from .protocols import Claims, Extractor, KeyCache, KeyProvider, ViewFunc

# Validator
from .validator import TokenValidator

# Verifier
from .verifier import SignatureVerifier, decode_token

__all__ = [
    # Errors
    "AuthError",
    "ConfigurationError",
    "KeyFetchError",
    "MetadataFetchError",
    "MissingToken",
    "OperationalError",
    "VerifierError",
    # Configuration
    "ValidationOptions",
    "metadata_document_uri_for",
    # Protocols
    "Claims",
    "Extractor",
    "KeyCache",
    "KeyProvider",
    "ViewFunc",
    # Models
    "DecodedToken",
    "ProviderMetadata",
    "SigningKey",
    "TokenClaims",
    "ValidationResult",
    # Outcomes
    "Outcome",
    "OutcomeKind",
    # Cache stores
    "InMemoryKeyCache",
    "shared_key_cache",
    # Metadata
    "MetadataResolver",
    # Key providers
    "KeyResolver",
    # Verifier
    "SignatureVerifier",
    "decode_token",
    # Claims policy
    "ClaimsPolicy",
    "RuleResult",
    "ValidationRule",
    "evaluate_claims",
    "validate_rules",
    # Validator
    "TokenValidator",
    # Extractors
    "BearerExtractor",
    # Flask extension
    "AuthExtension",
]
