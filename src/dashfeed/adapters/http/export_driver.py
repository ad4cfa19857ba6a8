"""Zoho Analytics view export over the synchronous and asynchronous APIs."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from dashfeed.config import DEFAULT_MAX_POLL_ATTEMPTS, DEFAULT_POLL_INTERVAL_MS
from dashfeed.core.exceptions import ExportError, ExportTimeoutError
from dashfeed.core.job_status import (
    is_sync_export_disallowed,
    parse_job_id,
    parse_job_status,
)
from dashfeed.core.models import JobState


if TYPE_CHECKING:
    from dashfeed.config import Settings
    from dashfeed.core.models import ExportJob
    from dashfeed.core.ports import TokenProvider


logger = logging.getLogger(__name__)

EXPORT_CONFIG = {"responseFormat": "csv"}


class ExportProtocolDriver:
    """Exports a view as CSV, switching to the job API when required.

    The synchronous ``/data`` endpoint is tried first. Zoho rejects it for
    some views (large or in certain workspaces) with a specific 400; only
    that rejection switches to the start/poll/download job protocol. Any
    other failure is final. Callers never see which protocol served them.

    Args:
        settings: Supplies org id, workspace and the analytics host.
        tokens: Credential source; asked again before every request.
        client: HTTP client. A default one is created if omitted.
        poll_interval: Seconds slept between job status checks.
        max_poll_attempts: Status checks before giving up.
        sleep: Sleep function, replaceable in tests.
    """

    def __init__(
        self,
        settings: Settings,
        tokens: TokenProvider,
        client: httpx.Client | None = None,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_MS / 1000,
        max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
        self._settings = settings
        self._tokens = tokens
        self._client = client or httpx.Client(timeout=60.0)
        self._poll_interval = poll_interval
        self._max_poll_attempts = max_poll_attempts
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        tokens: TokenProvider,
        client: httpx.Client | None = None,
    ) -> ExportProtocolDriver:
        """Create a driver using the poll budget from settings."""
        return cls(
            settings,
            tokens,
            client,
            poll_interval=settings.poll_interval,
            max_poll_attempts=settings.max_poll_attempts,
        )

    def export_dataset(self, resource_id: str) -> str:
        """Export a view and return the CSV text verbatim.

        Raises:
            ConfigurationError: If org id or workspace is missing.
            AuthError: If a token cannot be obtained.
            ExportError: On any terminal export failure.
        """
        org_id = self._settings.require("ZOHO_ORG_ID")
        base_url = self._view_url(resource_id)

        response = self._request(
            "GET",
            f"{base_url}/data",
            resource_id,
            org_id,
            params={"CONFIG": json.dumps(EXPORT_CONFIG)},
        )
        if response.is_success:
            return response.text

        if is_sync_export_disallowed(response.status_code, response.text):
            logger.info(
                "Synchronous export not allowed for view %s, using export job",
                resource_id,
            )
            return self._export_async(resource_id, base_url, org_id)

        raise ExportError(
            f"Zoho export failed ({response.status_code}): {response.text}",
            resource_id=resource_id,
            status_code=response.status_code,
            body=response.text,
        )

    def _view_url(self, resource_id: str) -> str:
        workspace = self._settings.require("ZOHO_WORKSPACE")
        return (
            f"https://{self._settings.analytics_domain}/restapi/v2/workspaces/"
            f"{quote(workspace, safe='')}/views/{quote(resource_id, safe='')}"
        )

    def _request(
        self,
        method: str,
        url: str,
        resource_id: str,
        org_id: str,
        *,
        job_id: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one authenticated request with a freshly checked token."""
        credential = self._tokens.get_token()
        headers = {
            "Authorization": f"Zoho-oauthtoken {credential.value}",
            "ZANALYTICS-ORGID": org_id,
        }
        try:
            return self._client.request(method, url, headers=headers, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ExportError(
                f"Zoho request to {url} failed: {e}",
                resource_id=resource_id,
                job_id=job_id,
            ) from e

    def _export_async(self, resource_id: str, base_url: str, org_id: str) -> str:
        job_id = self._start_job(resource_id, base_url, org_id)
        job = self._wait_for_job(resource_id, base_url, org_id, job_id)

        if job.state is JobState.FAILED:
            raise ExportError(
                f"Zoho export job {job_id} ended with status '{job.raw_status}'",
                resource_id=resource_id,
                job_id=job_id,
            )
        if not job.result_location:
            raise ExportError(
                f"Zoho export job {job_id} completed without a download URL",
                resource_id=resource_id,
                job_id=job_id,
            )

        location = job.result_location
        if location.startswith("/"):
            location = f"https://{self._settings.analytics_domain}{location}"
        response = self._request("GET", location, resource_id, org_id, job_id=job_id)
        if not response.is_success:
            raise ExportError(
                f"Zoho export download failed ({response.status_code}): {response.text}",
                resource_id=resource_id,
                status_code=response.status_code,
                body=response.text,
                job_id=job_id,
            )
        logger.info("Downloaded export job %s for view %s", job_id, resource_id)
        return response.text

    def _start_job(self, resource_id: str, base_url: str, org_id: str) -> str:
        response = self._request(
            "POST",
            f"{base_url}/export",
            resource_id,
            org_id,
            data={"CONFIG": json.dumps(EXPORT_CONFIG)},
        )
        if not response.is_success:
            raise ExportError(
                f"Zoho export job start failed ({response.status_code}): {response.text}",
                resource_id=resource_id,
                status_code=response.status_code,
                body=response.text,
            )

        job_id = parse_job_id(_json_or_none(response))
        if job_id is None:
            raise ExportError(
                f"Zoho export job start returned no job id: {response.text}",
                resource_id=resource_id,
                status_code=response.status_code,
                body=response.text,
            )
        logger.info("Started export job %s for view %s", job_id, resource_id)
        return job_id

    def _wait_for_job(
        self, resource_id: str, base_url: str, org_id: str, job_id: str
    ) -> ExportJob:
        """Poll until the job is terminal or the attempt budget is spent."""
        status_url = f"{base_url}/export/{quote(job_id, safe='')}"

        for attempt in range(1, self._max_poll_attempts + 1):
            response = self._request(
                "GET", status_url, resource_id, org_id, job_id=job_id
            )
            if not response.is_success:
                raise ExportError(
                    f"Zoho export status check failed ({response.status_code}): "
                    f"{response.text}",
                    resource_id=resource_id,
                    status_code=response.status_code,
                    body=response.text,
                    job_id=job_id,
                )

            payload = _json_or_none(response)
            if payload is None:
                raise ExportError(
                    f"Zoho export status response is not JSON: {response.text}",
                    resource_id=resource_id,
                    status_code=response.status_code,
                    body=response.text,
                    job_id=job_id,
                )

            job, recognized = parse_job_status(payload, job_id)
            if not recognized:
                logger.warning(
                    "Unrecognized status %r for export job %s, still polling",
                    job.raw_status,
                    job_id,
                )
            if job.is_terminal:
                return job

            logger.debug(
                "Export job %s is %s (check %d/%d)",
                job_id,
                job.raw_status,
                attempt,
                self._max_poll_attempts,
            )
            if attempt < self._max_poll_attempts:
                self._sleep(self._poll_interval)

        raise ExportTimeoutError(resource_id, job_id, self._max_poll_attempts)


def _json_or_none(response: httpx.Response) -> Any | None:
    try:
        return response.json()
    except ValueError:
        return None
