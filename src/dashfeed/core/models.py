"""Core domain models for dashfeed.

These models are pure Python dataclasses with no I/O dependencies.
Timestamps named ``expires_at`` are readings of an injected monotonic
clock (seconds), not wall-clock datetimes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Generic, TypeVar


T = TypeVar("T")

OFFLINE_NOTICE = "Offline Mode -- Notify Admin"

DatasetRecord = Mapping[str, str]
"""One CSV data row: header name -> raw cell text, in header order."""


@dataclass(frozen=True, slots=True)
class Credential:
    """A bearer token for the analytics service.

    Attributes:
        value: Opaque access token.
        expires_at: Clock reading after which the token must not be handed out.
    """

    value: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        """Return True while the credential may still be used."""
        return now < self.expires_at


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A cached value with an absolute expiry."""

    value: T
    expires_at: float

    def is_live(self, now: float) -> bool:
        """Return True if the entry has not yet expired."""
        return now < self.expires_at


class JobState(StrEnum):
    """Lifecycle of an asynchronous export job."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ExportJob:
    """Normalized view of one asynchronous export status response.

    Attributes:
        id: Job identifier issued by the export-start call.
        state: Normalized job state.
        result_location: Download URL, present once the job succeeded.
        raw_status: Status value exactly as the service reported it.
    """

    id: str
    state: JobState
    result_location: str | None = None
    raw_status: str | None = None

    @property
    def is_terminal(self) -> bool:
        """Whether polling must stop."""
        return self.state in (JobState.SUCCEEDED, JobState.FAILED)


class FallbackReason(StrEnum):
    """Why a client-tier source was not served from the network."""

    NETWORK_FAILURE = "Network failure"
    MISSING_ENDPOINT = "Missing endpoint configuration"
    OFFLINE = "Client offline"


class DataTier(StrEnum):
    """The tier that ended up serving a source."""

    NETWORK = "network"
    PERSISTED = "persisted"
    SNAPSHOT = "snapshot"


@dataclass(frozen=True, slots=True)
class FallbackDisclosure:
    """Notice that a source was served from a degraded tier.

    Attributes:
        source_label: Human-readable source name shown to the user.
        reason: Why the network tier was skipped or failed.
        notice: Banner text for the UI.
    """

    source_label: str
    reason: FallbackReason
    notice: str = OFFLINE_NOTICE


@dataclass(frozen=True, slots=True)
class DatasetView:
    """A server-tier dataset backed by one Zoho Analytics view.

    Attributes:
        key: Cache key and logical dataset name.
        label: Human-readable name, used in logs.
        view_env: Environment variable holding the Zoho view id.
        route: URL path segment of the caller-facing endpoint.
    """

    key: str
    label: str
    view_env: str
    route: str

    def __post_init__(self) -> None:
        """Validate view fields after initialization."""
        if not self.key:
            raise ValueError("DatasetView key cannot be empty")
        if not self.view_env:
            raise ValueError("DatasetView view_env cannot be empty")


@dataclass(frozen=True, slots=True)
class DataSource:
    """A client-tier data source.

    Attributes:
        key: Name of the source in the fetch result.
        label: Human-readable name used in disclosures.
        storage_key: Stable key of the persisted copy.
        snapshot: File name of the bundled fallback snapshot.
        endpoint: Network URL, or None when not configured.
    """

    key: str
    label: str
    storage_key: str
    snapshot: str
    endpoint: str | None = None

    def with_endpoint(self, endpoint: str | None) -> DataSource:
        """Return a copy pointing at a different endpoint."""
        return DataSource(
            key=self.key,
            label=self.label,
            storage_key=self.storage_key,
            snapshot=self.snapshot,
            endpoint=endpoint,
        )


@dataclass(frozen=True, slots=True)
class StoredPayload:
    """A persisted client-side copy of a source payload."""

    payload: str
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class SourceResult:
    """Outcome of resolving one client-tier source."""

    key: str
    payload: str
    tier: DataTier | None
    disclosure: FallbackDisclosure | None = None


@dataclass(frozen=True, slots=True)
class FetchAllResult:
    """Aggregated outcome of one client-tier batch.

    Attributes:
        datasets: Payload per source key.
        disclosures: Every non-null disclosure, in source order.
        tiers: Tier that served each source (absent when nothing could).
        unavailable: Keys for which no tier, not even the snapshot, had data.
    """

    datasets: dict[str, str] = field(default_factory=dict)
    disclosures: list[FallbackDisclosure] = field(default_factory=list)
    tiers: dict[str, DataTier] = field(default_factory=dict)
    unavailable: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """True when any source was served from a degraded tier."""
        return bool(self.disclosures)

    @property
    def offline_notice(self) -> str | None:
        """Banner text to show, or None when everything came from the network."""
        return OFFLINE_NOTICE if self.disclosures else None
