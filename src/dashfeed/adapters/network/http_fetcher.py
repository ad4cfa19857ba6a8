"""HTTP adapter for client-side source fetches."""

from __future__ import annotations

import httpx

from dashfeed.core.exceptions import SourceFetchError


class HttpPayloadFetcher:
    """Fetches source payloads over HTTP, bypassing intermediary caches.

    Implements PayloadFetcherPort. Any transport error or non-2xx response
    becomes a SourceFetchError so the caller can fall back uniformly.
    """

    def __init__(self, client: httpx.Client | None = None) -> None:
        self._client = client or httpx.Client(follow_redirects=True)

    def fetch(self, url: str, timeout: float) -> str:
        """GET url and return the body text.

        Args:
            url: Source endpoint.
            timeout: Seconds allowed for connect, read, write and pool waits.

        Raises:
            SourceFetchError: On transport failure or non-success status.
        """
        try:
            response = self._client.get(
                url,
                headers={"Cache-Control": "no-store"},
                timeout=httpx.Timeout(timeout),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise SourceFetchError(f"Failed to fetch CSV from {url}: {e}", url=url) from e

        if not response.is_success:
            raise SourceFetchError(
                f"Failed to fetch CSV ({response.status_code})",
                url=url,
                status_code=response.status_code,
            )
        return response.text

    def close(self) -> None:
        """Close the underlying client."""
        self._client.close()
