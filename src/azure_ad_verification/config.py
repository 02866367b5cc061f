"""Validation options and the loaders that build them.

``ValidationOptions`` is the whole configuration of a ``TokenValidator``.
It is frozen; a validator never observes configuration changes after it has
been constructed.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final

from .errors import ConfigurationError

_AZURE_AD_AUTHORITY: Final[str] = "https://login.microsoftonline.com"

_OPTION_NAMES: Final[dict[str, str]] = {
    "tenantId": "tenant_id",
    "audience": "audience",
    "metadataDocumentUri": "metadata_document_uri",
    "allowedApplicationIds": "allowed_application_ids",
    "requiredScopes": "required_scopes",
    "validIssuers": "valid_issuers",
    "httpTimeout": "http_timeout",
}
"""External (camelCase) option names mapped to dataclass field names."""


def metadata_document_uri_for(tenant_id: str, version: str = "v2.0") -> str:
    """Return the Azure AD discovery document URI for a tenant.

    Args:
        tenant_id: Directory (tenant) id or a verified domain name.
        version: ``"v2.0"`` for the v2.0 endpoint; anything else selects the
            v1.0 endpoint.
    """
    if version == "v2.0":
        return f"{_AZURE_AD_AUTHORITY}/{tenant_id}/v2.0/.well-known/openid-configuration"
    return f"{_AZURE_AD_AUTHORITY}/{tenant_id}/.well-known/openid-configuration"


def _as_tuple(value: Any) -> tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, Iterable):
        return tuple(str(item) for item in value)
    raise ConfigurationError(f"expected a list of strings, got {type(value).__name__}")


def _as_timeout(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"http_timeout must be a number, got {value!r}") from e
    if timeout <= 0:
        raise ConfigurationError(f"http_timeout must be positive, got {timeout}")
    return timeout


@dataclass(frozen=True, slots=True)
class ValidationOptions:
    """Configuration for access token validation.

    Attributes:
        tenant_id: Expected ``tid`` claim. Required.
        audience: Expected ``aud`` claim, usually ``api://<app id>`` or the
            application id itself. Required.
        metadata_document_uri: OpenID Connect discovery document URI.
            Required. See ``metadata_document_uri_for``.
        allowed_application_ids: Caller application ids (``azp``/``appid``)
            that may call the API. None or empty allows any caller.
        required_scopes: Scopes that must all appear in the ``scp`` claim.
            None or empty requires none.
        valid_issuers: Acceptable ``iss`` values. None disables the issuer
            check.
        http_timeout: Timeout in seconds for calls to the identity provider.
            None (the default) waits indefinitely.

    Raises:
        ConfigurationError: If a required value is missing or empty.

    Example:
        ```python
        options = ValidationOptions(
            tenant_id="75400737-17ad-5426-9e6b-df83ab52c0a1",
            audience="api://28748804-910c-52c8-a22b-54c8a6148f16",
            metadata_document_uri=metadata_document_uri_for(
                "75400737-17ad-5426-9e6b-df83ab52c0a1"
            ),
            required_scopes=("Api.Connect",),
        )
        ```
    """

    tenant_id: str
    audience: str
    metadata_document_uri: str
    allowed_application_ids: tuple[str, ...] | None = None
    required_scopes: tuple[str, ...] | None = None
    valid_issuers: tuple[str, ...] | None = None
    http_timeout: float | None = None

    def __post_init__(self) -> None:
        if not self.tenant_id:
            raise ConfigurationError('"tenantId" value was not provided')
        if not self.audience:
            raise ConfigurationError('"audience" value was not provided')
        if not self.metadata_document_uri:
            raise ConfigurationError('"metadataDocumentUri" value was not provided')

        # Lists handed in by callers are frozen so the options stay immutable.
        for name in ("allowed_application_ids", "required_scopes", "valid_issuers"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))
        object.__setattr__(self, "http_timeout", _as_timeout(self.http_timeout))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> ValidationOptions:
        """Build options from a plain mapping.

        Accepts the external camelCase option names (``tenantId``,
        ``metadataDocumentUri`` ...) as well as the snake_case field names.
        Unrecognized keys are ignored.
        """
        fields = set(_OPTION_NAMES.values())
        kwargs: dict[str, Any] = {}
        for key, value in mapping.items():
            name = _OPTION_NAMES.get(key, key)
            if name in fields:
                kwargs[name] = value

        return cls(
            tenant_id=kwargs.pop("tenant_id", ""),
            audience=kwargs.pop("audience", ""),
            metadata_document_uri=kwargs.pop("metadata_document_uri", ""),
            **kwargs,
        )

    @classmethod
    def from_env(
        cls,
        prefix: str = "AZURE_AD_",
        environ: Mapping[str, str] | None = None,
    ) -> ValidationOptions:
        """Build options from environment variables.

        Reads ``<prefix>TENANT_ID``, ``<prefix>AUDIENCE``,
        ``<prefix>METADATA_DOCUMENT_URI``, ``<prefix>ALLOWED_APPLICATION_IDS``,
        ``<prefix>REQUIRED_SCOPES``, ``<prefix>VALID_ISSUERS`` and
        ``<prefix>HTTP_TIMEOUT``. List values are comma-separated. When the
        discovery URI is not set it is derived from the tenant id.
        """
        env = os.environ if environ is None else environ

        def read(name: str) -> str | None:
            value = env.get(prefix + name)
            return value if value else None

        tenant_id = read("TENANT_ID") or ""
        metadata_uri = read("METADATA_DOCUMENT_URI")
        if metadata_uri is None and tenant_id:
            metadata_uri = metadata_document_uri_for(tenant_id)

        return cls(
            tenant_id=tenant_id,
            audience=read("AUDIENCE") or "",
            metadata_document_uri=metadata_uri or "",
            allowed_application_ids=read("ALLOWED_APPLICATION_IDS"),  # type: ignore[arg-type]
            required_scopes=read("REQUIRED_SCOPES"),  # type: ignore[arg-type]
            valid_issuers=read("VALID_ISSUERS"),  # type: ignore[arg-type]
            http_timeout=read("HTTP_TIMEOUT"),  # type: ignore[arg-type]
        )
