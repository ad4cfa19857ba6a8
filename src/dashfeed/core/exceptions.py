"""Domain exceptions for dashfeed.

All library errors inherit from DashfeedError, allowing callers to catch
any library exception with a single except clause. Each exception provides
a recovery_hint property with guidance on resolving the error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path


class DashfeedError(Exception):
    """Base class for all dashfeed exceptions.

    Catch this to handle any error from the library.
    """

    @property
    def recovery_hint(self) -> str | None:
        """Optional guidance on how to resolve this error."""
        return None


class ConfigurationError(DashfeedError):
    """Raised for configuration problems (missing required settings).

    Attributes:
        setting: Name of the environment variable at fault, if known.
    """

    def __init__(self, message: str, setting: str | None = None) -> None:
        self.setting = setting
        super().__init__(message)

    @property
    def recovery_hint(self) -> str | None:
        """Point at the environment variable to set."""
        if self.setting:
            return f"Set the {self.setting} environment variable (or add it to .env)"
        return None


class AuthError(DashfeedError):
    """Raised when the identity endpoint rejects a refresh or answers garbage.

    Attributes:
        status_code: HTTP status of the token response, if one was received.
        body: Raw token response body, kept verbatim for diagnosis.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest checking the OAuth client and refresh token."""
        return "Check ZOHO_CLIENT_ID, ZOHO_CLIENT_SECRET and ZOHO_REFRESH_TOKEN"


class ExportError(DashfeedError):
    """Raised for any terminal failure of a dataset export.

    Attributes:
        resource_id: The view being exported.
        status_code: HTTP status of the failing response, if any.
        body: Raw failing response body, if any.
        job_id: Asynchronous export job identifier, once one was issued.
    """

    def __init__(
        self,
        message: str,
        resource_id: str,
        status_code: int | None = None,
        body: str | None = None,
        job_id: str | None = None,
    ) -> None:
        self.resource_id = resource_id
        self.status_code = status_code
        self.body = body
        self.job_id = job_id
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest verifying the view id and workspace."""
        return f"Verify view '{self.resource_id}' exists in ZOHO_WORKSPACE"


class ExportTimeoutError(ExportError):
    """Raised when an asynchronous export job never reaches a terminal state.

    Attributes:
        attempts: Number of status polls made before giving up.
    """

    def __init__(self, resource_id: str, job_id: str, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(
            f"Zoho export job {job_id} for view {resource_id} did not complete "
            f"before timeout ({attempts} status checks)",
            resource_id=resource_id,
            job_id=job_id,
        )

    @property
    def recovery_hint(self) -> str:
        """Suggest raising the poll budget."""
        return "Raise ZOHO_EXPORT_MAX_ATTEMPTS or ZOHO_EXPORT_POLL_INTERVAL_MS"


class DatasetNotFoundError(DashfeedError):
    """Raised when a requested dataset isn't registered.

    Attributes:
        name: The dataset key that was not found.
        available: List of registered dataset keys.
    """

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available if available is not None else []
        super().__init__(f"Dataset '{name}' not found")

    @property
    def recovery_hint(self) -> str:
        """Suggest available datasets."""
        if self.available:
            return f"Available datasets: {', '.join(self.available)}"
        return "Run 'dashfeed list' for available names"


class SourceFetchError(DashfeedError):
    """Raised when a client-side network fetch of a source fails.

    Attributes:
        url: The endpoint that was requested.
        status_code: HTTP status, if a response was received.
    """

    def __init__(
        self,
        message: str,
        url: str,
        status_code: int | None = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class StoreCorruptError(DashfeedError):
    """Raised when a persisted payload or its metadata is unreadable.

    Attributes:
        key: The storage key of the corrupt entry.
        path: The path to the corrupt file.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        key: str,
        path: Path,
        cause: Exception | None = None,
    ) -> None:
        self.key = key
        self.path = path
        self.cause = cause
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Suggest deleting the corrupt entry."""
        return f"Delete stored files for '{self.key}' and re-fetch"
