"""Client-side payload storage adapters."""

from dashfeed.adapters.cache.payload_store import FilePayloadStore


__all__ = ["FilePayloadStore"]
