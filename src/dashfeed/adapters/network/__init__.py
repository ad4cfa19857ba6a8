"""Client-side network adapters."""

from dashfeed.adapters.network.http_fetcher import HttpPayloadFetcher


__all__ = ["HttpPayloadFetcher"]
