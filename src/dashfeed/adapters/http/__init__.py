"""Zoho Analytics HTTP adapters (token refresh and view export)."""

from dashfeed.adapters.http.export_driver import ExportProtocolDriver
from dashfeed.adapters.http.token_manager import TokenLifecycleManager


__all__ = ["ExportProtocolDriver", "TokenLifecycleManager"]
