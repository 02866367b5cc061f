"""Token decoding and signature verification using PyJWT.

This module provides:
- ``decode_token``: unverified decoding of a compact token into header,
  payload and signature
- ``SignatureVerifier``: cryptographic verification of a token against a
  resolved SigningKey, with audience and issuer checks

PyJWT exceptions never leave this module. Token problems come back as a
rejected Outcome carrying a human-readable message; anything else is wrapped
in VerifierError and returned as a failed Outcome. Key material that
cannot serve the declared algorithm is a token problem too.
"""

from __future__ import annotations

import logging
import textwrap
from typing import TYPE_CHECKING, Any, Final

import jwt
from cryptography import x509
from jwt.api_jwt import decode_complete

from .errors import VerifierError
from .models import DecodedToken, TokenClaims
from .outcome import Outcome

if TYPE_CHECKING:
    from .config import ValidationOptions
    from .models import SigningKey
    from .protocols import Claims

logger = logging.getLogger(__name__)

DECODE_FAILED: Final[str] = "The access token could not be decoded"
INVALID_KEY: Final[str] = "Invalid key"
INVALID_ALGORITHM: Final[str] = "invalid algorithm"

_RSA_FAMILY: Final[str] = "RS"
_SUPPORTED_ALGORITHMS: Final[frozenset[str]] = frozenset(
    {"RS256", "RS384", "RS512", "HS256", "HS384", "HS512"}
)
_PEM_HEADER: Final[str] = "-----BEGIN CERTIFICATE-----"
_PEM_FOOTER: Final[str] = "-----END CERTIFICATE-----"


def decode_token(access_token: str) -> Outcome[DecodedToken]:
    """Split and decode a compact token without verifying it.

    The result must not be trusted until SignatureVerifier accepts it.
    """
    if not isinstance(access_token, str):
        return Outcome.reject(DECODE_FAILED)

    try:
        decoded = decode_complete(access_token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        logger.debug("Token could not be decoded: %s", e)
        return Outcome.reject(DECODE_FAILED)

    payload = decoded.get("payload")
    if not isinstance(payload, dict):
        return Outcome.reject(DECODE_FAILED)

    return Outcome.proceed(
        DecodedToken(
            header=decoded["header"],
            payload=TokenClaims(payload),
            signature=access_token.rsplit(".", 1)[-1],
        )
    )


def pem_certificate(value: str) -> str:
    """Wrap a base64 DER certificate from an ``x5c`` chain in PEM delimiters."""
    body = "\n".join(textwrap.wrap(value.strip(), 64))
    return f"{_PEM_HEADER}\n{body}\n{_PEM_FOOTER}"


class SignatureVerifier:
    """Verifies token signatures against resolved signing keys.

    Key material selection:
        - ``RS*`` algorithms: the first ``x5c`` value is a certificate. It is
          wrapped in PEM delimiters and its public key is used.
        - ``HS*`` algorithms: the first ``x5c`` value is used as-is as the
          shared secret.

    Any other declared algorithm (``none``, ``PS*``, ``ES*``, ``EdDSA``) is
    rejected before the key is touched. Key material that cannot serve the
    declared algorithm rejects the token as "Invalid key".

    Only the algorithm the token declares is accepted, never a broader list,
    so a token cannot talk the verifier into a different algorithm than the
    key was resolved for.

    Attributes:
        _audience: Expected ``aud`` claim.
        _issuers: Acceptable ``iss`` values; None disables the issuer check.
    """

    def __init__(self, options: ValidationOptions) -> None:
        self._audience = options.audience
        self._issuers = list(options.valid_issuers) if options.valid_issuers is not None else None

    def verify(
        self,
        access_token: str,
        decoded: DecodedToken,
        key: SigningKey | None,
    ) -> Outcome[Claims]:
        """Verify the token signature and the audience/issuer/time claims.

        Args:
            access_token: Raw compact token.
            decoded: The token as returned by ``decode_token``.
            key: The resolved signing key, or None if none could be resolved.

        Returns:
            ``proceed(claims)`` on success, ``reject(message)`` for token
            problems, ``fail(VerifierError)`` for anything else.
        """
        if key is None or key.material is None:
            return Outcome.reject(INVALID_KEY)

        algorithm = decoded.algorithm
        if algorithm is None or algorithm not in _SUPPORTED_ALGORITHMS:
            return Outcome.reject(INVALID_ALGORITHM)

        try:
            material = self._key_material(algorithm, key.material)
        except ValueError as e:
            logger.debug("Key %s is not usable for %s: %s", key.kid, algorithm, e)
            return Outcome.reject(INVALID_KEY)

        try:
            claims = jwt.decode(
                access_token,
                material,
                algorithms=[algorithm],
                audience=self._audience,
                issuer=self._issuers,
            )
        except jwt.InvalidTokenError as e:
            message = self.describe(e)
            logger.debug("Signature verification rejected token: %s", message)
            return Outcome.reject(message)
        except jwt.InvalidKeyError as e:
            logger.debug("Key %s rejected for %s: %s", key.kid, algorithm, e)
            return Outcome.reject(INVALID_KEY)
        except Exception as e:
            logger.warning("Signature verification failed unexpectedly: %s", e)
            error = VerifierError(str(e) or type(e).__name__)
            error.__cause__ = e
            return Outcome.fail(error)

        return Outcome.proceed(claims)

    @staticmethod
    def _key_material(algorithm: str, material: str) -> Any:
        if algorithm.startswith(_RSA_FAMILY):
            certificate = x509.load_pem_x509_certificate(pem_certificate(material).encode("ascii"))
            return certificate.public_key()
        return material

    def describe(self, error: jwt.InvalidTokenError) -> str:
        """Translate a PyJWT validation error into a validation message."""
        if isinstance(error, jwt.MissingRequiredClaimError):
            if error.claim == "aud":
                return self._audience_message()
            if error.claim == "iss":
                return self._issuer_message()
            return str(error)
        if isinstance(error, jwt.InvalidAudienceError):
            return self._audience_message()
        if isinstance(error, jwt.InvalidIssuerError):
            return self._issuer_message()
        if isinstance(error, jwt.ExpiredSignatureError):
            return "jwt expired"
        if isinstance(error, jwt.ImmatureSignatureError):
            return "jwt not active"
        if isinstance(error, jwt.InvalidSignatureError):
            return "invalid signature"
        if isinstance(error, jwt.InvalidAlgorithmError):
            return INVALID_ALGORITHM
        return str(error)

    def _audience_message(self) -> str:
        return f"jwt audience invalid. expected: {self._audience}"

    def _issuer_message(self) -> str:
        return f"jwt issuer invalid. expected: {','.join(self._issuers or ())}"
