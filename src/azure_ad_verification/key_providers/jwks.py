"""
Signing key resolution from the identity provider's key endpoint.

Resolves the signing key named by a token's ``kid`` header, consulting the
shared key cache before going to the network.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Final, cast

import httpx

from ..errors import KeyFetchError
from ..models import SigningKey
from ..protocols import KeyCache, KeyProvider
from ..transport import fetch_json

logger = logging.getLogger(__name__)

_KEY_FETCH_ERROR: Final[str] = "Error connecting to discovery keys endpoint"


class KeyResolver(KeyProvider):
    """
    Resolves signing keys by kid with a cache in front of the key endpoint.

    Resolution Strategy
    -------------------
    For each requested `kid`:

    1) Missing kid
        - If the token carries no `kid` → return None, no network call.

    2) Cache lookup (fast path)
        - If the key is cached → return it, no network call.

    3) Batch fetch
        - GET `{jwks_uri}?appid={application_id}`.
        - Every key in the response is cached under its own kid, not only
          the one requested, so sibling keys from the same set resolve
          without another round trip.
        - The requested kid is then read back from the cache; it may still
          be missing if the provider does not publish it.

    4) Failure
        - Transport errors raise KeyFetchError. There is no retry.

    Notes
    -----
    - The cache grows with every key set the provider publishes and is never
      pruned. Provider key sets are small and rotate rarely; a provider that
      returned very large or hostile key sets would warrant a bounded cache.
    - `jwks_uri` is passed as a callable so the resolver can be built before
      the discovery document has been fetched.

    Parameters
    ----------
    jwks_uri : Callable[[], str]
        Returns the key endpoint URL (normally from ProviderMetadata).

    cache : KeyCache
        Shared cache the fetched key set is written into.

    client : httpx.Client
        HTTP client used for the key set request.
    """

    def __init__(
        self,
        jwks_uri: Callable[[], str],
        cache: KeyCache,
        client: httpx.Client,
    ) -> None:
        self._jwks_uri = jwks_uri
        self._cache = cache
        self._client = client

    def resolve_key(self, kid: str | None, application_id: str | None) -> SigningKey | None:
        if not kid:
            return None

        cached = self._cache.get(kid)
        if cached is not None:
            logger.debug("Signing key %s served from cache", kid)
            return cached

        logger.debug("Signing key %s not cached, fetching key set", kid)
        for key in self.fetch_keys(application_id):
            self._cache.set(key.kid, key)

        return self._cache.get(kid)

    def fetch_keys(self, application_id: str | None) -> list[SigningKey]:
        """Fetch and parse the provider's current key set.

        Entries without a kid are skipped.

        Raises:
            KeyFetchError: If the request fails or the response has no
                ``keys`` list.
        """
        params = {"appid": application_id} if application_id else None
        document = fetch_json(
            self._client,
            self._jwks_uri(),
            error_cls=KeyFetchError,
            params=params,
            default_message=_KEY_FETCH_ERROR,
        )

        raw_keys = document.get("keys") if isinstance(document, dict) else None
        if not isinstance(raw_keys, list):
            raise KeyFetchError("key set response does not contain a keys list")

        keys: list[SigningKey] = []
        for entry in cast(Sequence[Any], raw_keys):
            if not isinstance(entry, Mapping):
                continue
            try:
                keys.append(SigningKey.from_dict(cast(Mapping[str, Any], entry)))
            except ValueError:
                logger.debug("Skipping key set entry without a kid")

        logger.info("Fetched %d signing keys", len(keys))
        return keys
