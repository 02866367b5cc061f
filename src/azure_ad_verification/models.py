"""Value types shared by the validation pipeline.

Everything here is immutable once built. Token contents are represented as
read-only mappings so that claims the pipeline does not inspect are carried
through untouched.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, cast


@dataclass(frozen=True, slots=True)
class ProviderMetadata:
    """Resolved OpenID Connect discovery document.

    Attributes:
        jwks_uri: URL of the provider's signing key endpoint.
        document: The full discovery document as returned by the provider.
    """

    jwks_uri: str
    document: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, document: Mapping[str, Any]) -> ProviderMetadata:
        """Build metadata from a parsed discovery document.

        Raises:
            ValueError: If the document has no usable ``jwks_uri``.
        """
        jwks_uri = document.get("jwks_uri")
        if not jwks_uri or not isinstance(jwks_uri, str):
            raise ValueError("discovery document does not contain a jwks_uri")
        return cls(jwks_uri=jwks_uri, document=MappingProxyType(dict(document)))


@dataclass(frozen=True, slots=True)
class SigningKey:
    """One entry of the provider's key set.

    Attributes:
        kid: Key identifier, referenced by the ``kid`` token header.
        use: Usage tag, normally ``"sig"``.
        x5t: Certificate thumbprint.
        x5c: Certificate chain (base64 DER) or, for symmetric keys, the
            shared secret. Only the first value is used for verification.
    """

    kid: str
    use: str | None = None
    x5t: str | None = None
    x5c: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SigningKey:
        kid = data.get("kid")
        if not kid or not isinstance(kid, str):
            raise ValueError("signing key entry has no kid")

        raw_chain = data.get("x5c") or ()
        if isinstance(raw_chain, str):
            raw_chain = (raw_chain,)
        chain = tuple(item for item in cast(Sequence[object], raw_chain) if isinstance(item, str))

        return cls(kid=kid, use=data.get("use"), x5t=data.get("x5t"), x5c=chain)

    @property
    def material(self) -> str | None:
        """First certificate or secret value, or None if the chain is empty."""
        return self.x5c[0] if self.x5c else None


class TokenClaims(Mapping[str, Any]):
    """Read-only view over a token payload.

    Behaves like the underlying mapping and adds typed accessors for the
    claims the policy engine inspects. Unrecognized claims are kept as-is.

    Example:
        >>> claims = TokenClaims({"tid": "t1", "azp": "app", "scp": "a b"})
        >>> claims.tenant_id, claims.application_id, sorted(claims.scopes)
        ('t1', 'app', ['a', 'b'])
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data: Mapping[str, Any] = MappingProxyType(dict(data))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"TokenClaims({dict(self._data)!r})"

    def _string(self, name: str) -> str | None:
        value = self._data.get(name)
        return value if isinstance(value, str) and value else None

    @property
    def tenant_id(self) -> str | None:
        return self._string("tid")

    @property
    def application_id(self) -> str | None:
        """Authorized party (``azp``, v2.0) falling back to ``appid`` (v1.0)."""
        return self._string("azp") or self._string("appid")

    @property
    def scope(self) -> str:
        return self._string("scp") or ""

    @property
    def scopes(self) -> frozenset[str]:
        return frozenset(self.scope.split())


@dataclass(frozen=True, slots=True)
class DecodedToken:
    """Header, payload and signature of a token, decoded but not verified.

    Attributes:
        header: JOSE header (``alg``, ``kid``, ``typ`` ...).
        payload: Token claims.
        signature: The base64url signature segment as found in the token.
    """

    header: Mapping[str, Any]
    payload: TokenClaims
    signature: str

    @property
    def algorithm(self) -> str | None:
        alg = self.header.get("alg")
        return alg if isinstance(alg, str) and alg else None

    @property
    def key_id(self) -> str | None:
        kid = self.header.get("kid")
        return kid if isinstance(kid, str) and kid else None


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Verdict returned by ``TokenValidator.validate``.

    Attributes:
        access_token: The token string that was validated.
        decoded_token: The decoded token whenever decoding succeeded, even if
            a later stage rejected it. None if the token could not be decoded.
        is_valid: True only if every stage passed.
        validation_message: Reason for rejection; None when valid.
    """

    access_token: str
    decoded_token: DecodedToken | None
    is_valid: bool
    validation_message: str | None = None
