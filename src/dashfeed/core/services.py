"""Core domain services for dashfeed."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dashfeed.core.dataset_cache import ProcessDatasetCache
from dashfeed.core.exceptions import DatasetNotFoundError


if TYPE_CHECKING:
    from collections.abc import Sequence

    import httpx

    from dashfeed.config import Settings
    from dashfeed.core.models import DatasetView
    from dashfeed.core.ports import ExporterPort


logger = logging.getLogger(__name__)


class DatasetService:
    """Serves exported view payloads through the process cache.

    Owns the ProcessDatasetCache for its process: every request handled by
    the same service shares cached payloads and, through the exporter, the
    cached access token.
    """

    def __init__(
        self,
        views: Sequence[DatasetView],
        exporter: ExporterPort,
        settings: Settings,
        cache: ProcessDatasetCache[str] | None = None,
    ) -> None:
        self._views = {view.key: view for view in views}
        self._exporter = exporter
        self._settings = settings
        self._cache: ProcessDatasetCache[str] = cache or ProcessDatasetCache(
            ttl=settings.cache_ttl
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        views: Sequence[DatasetView] | None = None,
        client: httpx.Client | None = None,
    ) -> DatasetService:
        """Create a service wired to the live Zoho export API.

        Args:
            settings: Credentials, scope, cache TTL and poll budget.
            views: Datasets to serve. Defaults to the dashboard's views.
            client: Shared HTTP client for token and export calls.

        Returns:
            DatasetService with a token manager, export driver and cache.
        """
        from dashfeed.adapters.http import ExportProtocolDriver, TokenLifecycleManager
        from dashfeed.sources import DEFAULT_VIEWS

        tokens = TokenLifecycleManager(settings, client)
        exporter = ExportProtocolDriver.from_settings(settings, tokens, client)
        return cls(
            views=DEFAULT_VIEWS if views is None else views,
            exporter=exporter,
            settings=settings,
        )

    @property
    def views(self) -> list[DatasetView]:
        """List all registered views."""
        return list(self._views.values())

    @property
    def cache(self) -> ProcessDatasetCache[str]:
        """The process-wide dataset cache."""
        return self._cache

    def get_view(self, key: str) -> DatasetView:
        """Look up a view by dataset key.

        Raises:
            DatasetNotFoundError: If no view has that key.
        """
        try:
            return self._views[key]
        except KeyError:
            raise DatasetNotFoundError(key, available=list(self._views.keys())) from None

    def get_dataset_csv(self, key: str) -> str:
        """Return the CSV payload for a dataset, exporting it on a cache miss.

        The view id is resolved only on a miss, so a cached dataset keeps
        being served even if its variable is later removed.

        Raises:
            DatasetNotFoundError: If the key is not registered.
            ConfigurationError: If the view id or credentials are missing.
            AuthError: If no access token can be obtained.
            ExportError: If the export fails.
        """
        view = self.get_view(key)

        def load() -> str:
            view_id = self._settings.require(view.view_env)
            logger.info("Exporting %s (view %s)", view.label, view_id)
            return self._exporter.export_dataset(view_id)

        return self._cache.get_dataset(view.key, load)
