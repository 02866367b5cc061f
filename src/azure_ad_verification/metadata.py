"""Identity provider metadata resolution.

The discovery document is fetched once per resolver and then kept for the
resolver's lifetime. It is not refreshed, not even after a failed key fetch;
a validator that must pick up a new ``jwks_uri`` has to be recreated.
"""

from __future__ import annotations

import logging

import httpx

from .errors import MetadataFetchError
from .models import ProviderMetadata
from .transport import fetch_json

logger = logging.getLogger(__name__)


class MetadataResolver:
    """Lazily fetches and memoizes an OpenID Connect discovery document.

    Concurrent first calls may each fetch the document; the last one to
    finish wins. Both results describe the same provider, so this is
    harmless.

    Attributes:
        _uri: Discovery document URI.
        _client: HTTP client used for the fetch.
        _metadata: The resolved document, None until the first fetch succeeds.
    """

    def __init__(self, metadata_document_uri: str, client: httpx.Client) -> None:
        self._uri = metadata_document_uri
        self._client = client
        self._metadata: ProviderMetadata | None = None

    @property
    def metadata(self) -> ProviderMetadata | None:
        return self._metadata

    def ensure_metadata(self) -> ProviderMetadata:
        """Return the discovery document, fetching it on first use.

        Raises:
            MetadataFetchError: If the document cannot be fetched or carries
                no ``jwks_uri``. Nothing is memoized in that case.
        """
        if self._metadata is not None:
            return self._metadata

        document = fetch_json(self._client, self._uri, error_cls=MetadataFetchError)
        if not isinstance(document, dict):
            raise MetadataFetchError("discovery document is not a JSON object")

        try:
            metadata = ProviderMetadata.from_dict(document)
        except ValueError as e:
            raise MetadataFetchError(str(e)) from e

        logger.debug("Resolved discovery document, jwks_uri=%s", metadata.jwks_uri)
        self._metadata = metadata
        return metadata
