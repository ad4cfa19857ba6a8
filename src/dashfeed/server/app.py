"""FastAPI application exposing one CSV endpoint per dataset."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from dashfeed.core.exceptions import DashfeedError


if TYPE_CHECKING:
    from dashfeed.config import Settings
    from dashfeed.core.models import DatasetView
    from dashfeed.core.services import DatasetService


logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
CACHE_CONTROL = "s-maxage=300, stale-while-revalidate=60"

# Registered so that non-GET requests reach the handler and get our 405.
_ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _dataset_endpoint(
    service: DatasetService, view: DatasetView
) -> Callable[[Request], Response]:
    def endpoint(request: Request) -> Response:
        if request.method != "GET":
            return JSONResponse(
                {"error": "Method Not Allowed"},
                status_code=405,
                headers={"Allow": "GET"},
            )

        try:
            csv_text = service.get_dataset_csv(view.key)
        except DashfeedError as e:
            logger.error("Failed to fetch %s data: %s", view.label, e)
            return JSONResponse(
                {"error": "Failed to fetch Zoho data", "details": str(e)},
                status_code=500,
            )
        except Exception as e:
            logger.exception("Unexpected error fetching %s data", view.label)
            return JSONResponse(
                {"error": "Failed to fetch Zoho data", "details": str(e)},
                status_code=500,
            )

        return Response(
            content=csv_text,
            media_type=CSV_MEDIA_TYPE,
            headers={"Cache-Control": CACHE_CONTROL},
        )

    endpoint.__name__ = f"get_{view.key}"
    return endpoint


def create_app(
    service: DatasetService | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the API app.

    Args:
        service: Dataset service to serve from. Built from settings if omitted.
        settings: Used only when service is omitted; defaults to the environment.

    Returns:
        FastAPI app with ``/api/<route>`` per view and ``/api/health``.
    """
    if service is None:
        from dashfeed.config import Settings
        from dashfeed.core.services import DatasetService

        service = DatasetService.from_settings(settings or Settings.from_env())

    app = FastAPI(title="dashfeed", docs_url=None, redoc_url=None)
    app.state.service = service

    for view in service.views:
        app.add_api_route(
            f"/api/{view.route}",
            _dataset_endpoint(service, view),
            methods=_ROUTE_METHODS,
            include_in_schema=False,
        )

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "datasets": [view.key for view in service.views]}

    return app
