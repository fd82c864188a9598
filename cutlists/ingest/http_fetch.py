from __future__ import annotations

import logging
from http.client import HTTPException
from typing import Iterator
from urllib import request
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode

DEFAULT_BASE_URL = "http://www.cutlist.at/"
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_USER_AGENT = "cutlists/0.1"
DEFAULT_CHUNK_SIZE = 8192

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when a remote document cannot be retrieved or read."""


def build_url(base_url: str, endpoint: str, **params: str) -> str:
    """Join the server base URL, an endpoint script and a percent-encoded query."""

    url = f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return url


def fetch_bytes(
    url: str,
    *,
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> bytes:
    """Read a whole remote document into memory."""

    return b"".join(iter_remote_chunks(url, timeout_seconds=timeout_seconds, user_agent=user_agent))


def iter_remote_chunks(
    url: str,
    *,
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[bytes]:
    """Yield the body of ``url`` chunk by chunk.

    Transport problems, including ones that surface mid-body, are raised as
    :class:`FetchError`.
    """

    logger.debug("GET %s", url)

    try:
        req = request.Request(url, method="GET", headers={"User-Agent": user_agent})
        with request.urlopen(req, timeout=timeout_seconds) as response:
            while True:
                chunk = response.read(chunk_size)
                if not chunk:
                    return
                yield chunk
    except HTTPError as exc:
        raise FetchError(f"Request to {url} failed with HTTP status {exc.code}.") from exc
    except (URLError, HTTPException, TimeoutError, OSError, ValueError) as exc:
        raise FetchError(f"Request to {url} failed: {exc}") from exc
