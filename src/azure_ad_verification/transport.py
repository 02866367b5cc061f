"""HTTP helpers for talking to the identity provider.

Both the discovery document and the key set are plain JSON documents fetched
with a GET request. Failures are normalized into a single message so callers
see the same shape regardless of where the transport broke.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from .errors import OperationalError

logger = logging.getLogger(__name__)


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def format_transport_error(error: BaseException, default_message: str | None = None) -> str:
    """Return a normalized message for a failed request.

    Preference order:
    1. The response body and status, serialized as ``{"data": ..., "status": ...}``
    2. The underlying error message
    3. ``default_message``
    """
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        return json.dumps({"data": _response_body(response), "status": response.status_code})

    message = str(error)
    if message:
        return message

    return default_message or type(error).__name__


def fetch_json(
    client: httpx.Client,
    url: str,
    *,
    error_cls: type[OperationalError],
    params: Mapping[str, str] | None = None,
    default_message: str | None = None,
) -> Any:
    """GET ``url`` and return the decoded JSON body.

    Args:
        client: HTTP client used for the request.
        url: Absolute URL to fetch.
        error_cls: Operational error type raised on failure.
        params: Optional query parameters.
        default_message: Message used when the failure carries none.

    Raises:
        error_cls: On transport errors, non-2xx responses or a body that is
            not JSON. The original exception is chained.
    """
    logger.info("Fetching %s", url)
    try:
        response = client.get(url, params=params)
        response.raise_for_status()
        return response.json()
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        message = format_transport_error(e, default_message)
        logger.warning("Request to %s failed: %s", url, message)
        raise error_cls(message) from e
