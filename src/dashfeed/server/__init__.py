"""HTTP server exposing exported datasets."""

from dashfeed.server.app import create_app


__all__ = ["create_app"]
