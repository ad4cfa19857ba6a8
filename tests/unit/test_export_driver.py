"""Unit tests for ExportProtocolDriver."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from urllib.parse import parse_qs

import httpx
import pytest

from dashfeed.core.models import Credential


VIEW_URL = "https://analyticsapi.zoho.com/restapi/v2/workspaces/ws-1/views/view-billing"
DOWNLOAD_URL = "https://analyticsapi.zoho.com/restapi/v2/bulk/workspaces/ws-1/exportjobs/J1/data"
CSV = "Employee,Amount\nAlice,100\n"


def _sync_rejected() -> httpx.Response:
    return httpx.Response(
        400,
        json={"status": "failure", "data": {"errorCode": "SYNC_EXPORT_NOT_ALLOWED"}},
    )


class StaticTokens:
    """Token provider that counts how often it is asked."""

    def __init__(self) -> None:
        self.calls = 0

    def get_token(self) -> Credential:
        self.calls += 1
        return Credential(value=f"tok-{self.calls}", expires_at=float("inf"))


def _bare(url: httpx.URL) -> str:
    return f"{url.scheme}://{url.host}{url.path}"


def _status(value: str, **extra: str) -> httpx.Response:
    return httpx.Response(200, json={"data": {"jobStatus": value, "status": value, **extra}})


class ZohoStub:
    """Routes export requests and records them."""

    def __init__(
        self, statuses: list[httpx.Response], data: httpx.Response | None = None
    ) -> None:
        self.data = data if data is not None else _sync_rejected()
        self.start = httpx.Response(200, json={"data": {"jobId": "J1"}})
        self._statuses: Iterator[httpx.Response] = iter(statuses)
        self.download = httpx.Response(200, text=CSV)
        self.requests: list[httpx.Request] = []

    def paths(self) -> list[str]:
        return [f"{r.method} {_bare(r.url)}" for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = _bare(request.url)
        if url == f"{VIEW_URL}/data":
            return self.data
        if url == f"{VIEW_URL}/export" and request.method == "POST":
            return self.start
        if url == f"{VIEW_URL}/export/J1":
            return next(self._statuses)
        if url == DOWNLOAD_URL:
            return self.download
        return httpx.Response(404, text=f"unexpected {request.method} {url}")


@pytest.fixture
def make_driver(settings, mock_client) -> Callable[..., tuple]:
    """Build a driver over a stub; returns (driver, stub, tokens, sleeps)."""

    def build(stub: ZohoStub, **kwargs: object) -> tuple:
        from dashfeed.adapters.http import ExportProtocolDriver

        tokens = StaticTokens()
        sleeps: list[float] = []
        options: dict = {"poll_interval": 3.0, "max_poll_attempts": 5, "sleep": sleeps.append}
        options.update(kwargs)
        driver = ExportProtocolDriver(settings, tokens, mock_client(stub), **options)
        return driver, stub, tokens, sleeps

    return build


@pytest.mark.http
@pytest.mark.tra("Http.ExportProtocol")
@pytest.mark.tier(1)
class TestSyncExport:
    """Tests for the synchronous export path."""

    def test_sync_success_returns_body_verbatim(self, make_driver) -> None:
        """A 2xx sync response is returned untouched, with one request."""
        driver, stub, _, sleeps = make_driver(ZohoStub([], data=httpx.Response(200, text=CSV)))

        assert driver.export_dataset("view-billing") == CSV
        assert stub.paths() == [f"GET {VIEW_URL}/data"]
        assert sleeps == []

    def test_sync_request_shape(self, make_driver) -> None:
        """The sync call carries the CSV CONFIG and auth headers."""
        driver, stub, _, _ = make_driver(ZohoStub([], data=httpx.Response(200, text=CSV)))

        driver.export_dataset("view-billing")

        request = stub.requests[0]
        assert json.loads(request.url.params["CONFIG"]) == {"responseFormat": "csv"}
        assert request.headers["Authorization"] == "Zoho-oauthtoken tok-1"
        assert request.headers["ZANALYTICS-ORGID"] == "org-1"

    def test_other_error_does_not_switch(self, make_driver) -> None:
        """A 500 is final; no export job is started."""
        from dashfeed.core.exceptions import ExportError

        driver, stub, _, _ = make_driver(
            ZohoStub([], data=httpx.Response(500, text="internal error"))
        )

        with pytest.raises(ExportError) as exc_info:
            driver.export_dataset("view-billing")

        assert exc_info.value.status_code == 500
        assert exc_info.value.body == "internal error"
        assert exc_info.value.resource_id == "view-billing"
        assert len(stub.requests) == 1

    def test_unrelated_400_does_not_switch(self, make_driver) -> None:
        """A 400 without the sync-export signature is final."""
        from dashfeed.core.exceptions import ExportError

        driver, stub, _, _ = make_driver(
            ZohoStub([], data=httpx.Response(400, json={"data": {"errorCode": "7103"}}))
        )

        with pytest.raises(ExportError):
            driver.export_dataset("view-billing")

        assert len(stub.requests) == 1

    def test_missing_org_id_fails_before_io(self, mock_client) -> None:
        """ConfigurationError is raised before any request."""
        from dashfeed.adapters.http import ExportProtocolDriver
        from dashfeed.config import Settings
        from dashfeed.core.exceptions import ConfigurationError

        stub = ZohoStub([])
        driver = ExportProtocolDriver(
            Settings(workspace="ws-1"), StaticTokens(), mock_client(stub)
        )

        with pytest.raises(ConfigurationError, match="ZOHO_ORG_ID"):
            driver.export_dataset("view-billing")

        assert stub.requests == []

    def test_rejects_zero_attempts(self, settings) -> None:
        """max_poll_attempts must be at least one."""
        from dashfeed.adapters.http import ExportProtocolDriver

        with pytest.raises(ValueError, match="at least 1"):
            ExportProtocolDriver(settings, StaticTokens(), max_poll_attempts=0)


@pytest.mark.http
@pytest.mark.tra("Http.ExportProtocol")
@pytest.mark.tier(1)
class TestAsyncExport:
    """Tests for the start/poll/download job path."""

    def test_running_twice_then_completed(self, make_driver) -> None:
        """RUNNING, RUNNING, COMPLETED makes three status checks then downloads."""
        stub = ZohoStub(
            [
                _status("RUNNING"),
                _status("RUNNING"),
                _status("COMPLETED", downloadUrl=DOWNLOAD_URL),
            ]
        )
        driver, stub, _, sleeps = make_driver(stub)

        assert driver.export_dataset("view-billing") == CSV
        assert stub.paths() == [
            f"GET {VIEW_URL}/data",
            f"POST {VIEW_URL}/export",
            f"GET {VIEW_URL}/export/J1",
            f"GET {VIEW_URL}/export/J1",
            f"GET {VIEW_URL}/export/J1",
            f"GET {DOWNLOAD_URL}",
        ]
        assert sleeps == [3.0, 3.0]

    def test_job_start_posts_csv_config(self, make_driver) -> None:
        """The job is started with the same CSV CONFIG as a form field."""
        driver, stub, _, _ = make_driver(
            ZohoStub([_status("COMPLETED", downloadUrl=DOWNLOAD_URL)])
        )

        driver.export_dataset("view-billing")

        start = stub.requests[1]
        form = parse_qs(start.content.decode())
        assert json.loads(form["CONFIG"][0]) == {"responseFormat": "csv"}

    def test_token_requested_for_every_call(self, make_driver) -> None:
        """Each request asks the token provider again."""
        driver, stub, tokens, _ = make_driver(
            ZohoStub([_status("COMPLETED", downloadUrl=DOWNLOAD_URL)])
        )

        driver.export_dataset("view-billing")

        assert tokens.calls == len(stub.requests) == 4
        assert stub.requests[-1].headers["Authorization"] == "Zoho-oauthtoken tok-4"

    def test_never_completes_raises_timeout(self, make_driver) -> None:
        """Exactly max_poll_attempts checks, no download, then a timeout."""
        from dashfeed.core.exceptions import ExportTimeoutError

        driver, stub, _, sleeps = make_driver(
            ZohoStub([_status("RUNNING") for _ in range(3)]), max_poll_attempts=3
        )

        with pytest.raises(ExportTimeoutError) as exc_info:
            driver.export_dataset("view-billing")

        assert exc_info.value.attempts == 3
        assert exc_info.value.job_id == "J1"
        assert "did not complete before timeout" in str(exc_info.value)
        status_checks = [p for p in stub.paths() if p.endswith("/export/J1")]
        assert len(status_checks) == 3
        assert f"GET {DOWNLOAD_URL}" not in stub.paths()
        assert sleeps == [3.0, 3.0]

    def test_unrecognized_status_keeps_polling(self, make_driver, caplog) -> None:
        """An unknown status is logged and polling continues."""
        driver, _, _, _ = make_driver(
            ZohoStub([_status("MYSTERY"), _status("COMPLETED", downloadUrl=DOWNLOAD_URL)])
        )

        with caplog.at_level("WARNING"):
            assert driver.export_dataset("view-billing") == CSV

        assert "MYSTERY" in caplog.text

    def test_failed_job_raises(self, make_driver) -> None:
        """A failed job stops polling and reports the raw status."""
        from dashfeed.core.exceptions import ExportError, ExportTimeoutError

        driver, stub, _, _ = make_driver(ZohoStub([_status("FAILED"), _status("RUNNING")]))

        with pytest.raises(ExportError, match="FAILED") as exc_info:
            driver.export_dataset("view-billing")

        assert not isinstance(exc_info.value, ExportTimeoutError)
        assert exc_info.value.job_id == "J1"
        assert len([p for p in stub.paths() if p.endswith("/export/J1")]) == 1

    def test_missing_job_id_raises(self, make_driver) -> None:
        """A start response without a job id fails the export."""
        from dashfeed.core.exceptions import ExportError

        stub = ZohoStub([])
        stub.start = httpx.Response(200, json={"status": "success", "data": {}})
        driver, _, _, _ = make_driver(stub)

        with pytest.raises(ExportError, match="no job id"):
            driver.export_dataset("view-billing")

    def test_status_check_http_failure_raises(self, make_driver) -> None:
        """A non-2xx status check is terminal."""
        from dashfeed.core.exceptions import ExportError

        driver, _, _, _ = make_driver(ZohoStub([httpx.Response(503, text="busy")]))

        with pytest.raises(ExportError) as exc_info:
            driver.export_dataset("view-billing")

        assert exc_info.value.status_code == 503

    def test_completed_without_location_raises(self, make_driver) -> None:
        """Success without any download URL is an error."""
        from dashfeed.core.exceptions import ExportError

        driver, _, _, _ = make_driver(ZohoStub([_status("COMPLETED")]))

        with pytest.raises(ExportError, match="without a download URL"):
            driver.export_dataset("view-billing")

    def test_relative_download_url_uses_analytics_host(self, make_driver) -> None:
        """A path-only download URL is resolved against the analytics host."""
        relative = DOWNLOAD_URL.removeprefix("https://analyticsapi.zoho.com")
        driver, stub, _, _ = make_driver(
            ZohoStub([_status("COMPLETED", downloadUrl=relative)])
        )

        assert driver.export_dataset("view-billing") == CSV
        assert stub.paths()[-1] == f"GET {DOWNLOAD_URL}"

    def test_download_failure_raises(self, make_driver) -> None:
        """A failing download is an ExportError carrying the job id."""
        from dashfeed.core.exceptions import ExportError

        stub = ZohoStub([_status("COMPLETED", downloadUrl=DOWNLOAD_URL)])
        stub.download = httpx.Response(404, text="gone")
        driver, _, _, _ = make_driver(stub)

        with pytest.raises(ExportError) as exc_info:
            driver.export_dataset("view-billing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.job_id == "J1"

    def test_malformed_download_url_raises_export_error(self, make_driver) -> None:
        """A download URL httpx cannot parse is an ExportError, not InvalidURL."""
        from dashfeed.core.exceptions import ExportError

        driver, _, _, _ = make_driver(
            ZohoStub([_status("COMPLETED", downloadUrl="https://host:notaport/x")])
        )

        with pytest.raises(ExportError, match="notaport") as exc_info:
            driver.export_dataset("view-billing")

        assert exc_info.value.job_id == "J1"
