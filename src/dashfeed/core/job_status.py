"""Tolerant readers for Zoho Analytics export responses.

The export API is inconsistent about where and how it spells fields
(``jobId`` vs ``job_id``, ``downloadUrl`` vs ``fileUrl``...). Everything in
this module decodes a loose JSON mapping by trying an ordered list of
candidate dotted keys, first present wins, and hands the driver a
normalized result.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from dashfeed.core.models import ExportJob, JobState


JOB_ID_KEYS = ("data.jobId", "data.job_id", "jobId", "job_id")

STATUS_KEYS = (
    "data.jobStatus",
    "data.status",
    "data.state",
    "jobStatus",
    "status",
    "state",
    "data.jobCode",
)

_DOWNLOAD_FIELDS = (
    "downloadUrl",
    "download_url",
    "fileUrl",
    "file_url",
    "downloadLink",
    "result.downloadUrl",
)
DOWNLOAD_URL_KEYS = tuple(f"data.{name}" for name in _DOWNLOAD_FIELDS) + _DOWNLOAD_FIELDS

ERROR_CODE_KEYS = ("data.errorCode", "errorCode", "error.code", "code")

ERROR_MESSAGE_KEYS = (
    "data.errorMessage",
    "errorMessage",
    "error.message",
    "message",
    "summary",
)

SYNC_EXPORT_STATUS = 400

SYNC_EXPORT_ERROR_CODES = frozenset({"SYNC_EXPORT_NOT_ALLOWED"})

SYNC_EXPORT_MESSAGES = (
    "sync_export_not_allowed",
    "synchronous export is not allowed",
    "sync export is not allowed",
    "use asynchronous export",
    "use bulk export",
)

RUNNING_STATUSES = frozenset(
    {
        "pending",
        "queued",
        "not_started",
        "job not initiated",
        "running",
        "in_progress",
        "in progress",
        "processing",
        "job in progress",
        "1001",
        "1002",
    }
)

SUCCEEDED_STATUSES = frozenset(
    {
        "completed",
        "complete",
        "success",
        "succeeded",
        "done",
        "job completed",
        "1004",
    }
)

FAILED_STATUSES = frozenset(
    {
        "failed",
        "failure",
        "error",
        "cancelled",
        "canceled",
        "aborted",
        "job failed",
        "1003",
    }
)


def probe(payload: Any, keys: Sequence[str]) -> Any | None:
    """Return the first non-empty value found under any dotted key.

    Args:
        payload: Decoded JSON (non-mappings yield None).
        keys: Candidate paths such as ``"data.jobId"``, tried in order.

    Returns:
        The first value that is present and not None/"", else None.
    """
    for key in keys:
        node: Any = payload
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                node = None
                break
            node = node[part]
        if node is not None and node != "":
            return node
    return None


def parse_job_id(payload: Any) -> str | None:
    """Extract the job identifier from an export-start response."""
    value = probe(payload, JOB_ID_KEYS)
    return str(value) if value is not None else None


def classify_status(raw: str | None) -> JobState | None:
    """Map a raw status to a JobState, or None when unrecognized."""
    if raw is None:
        return None
    normalized = raw.strip().lower()
    if normalized in SUCCEEDED_STATUSES:
        return JobState.SUCCEEDED
    if normalized in FAILED_STATUSES:
        return JobState.FAILED
    if normalized in RUNNING_STATUSES:
        return JobState.RUNNING
    return None


def parse_job_status(payload: Any, job_id: str) -> tuple[ExportJob, bool]:
    """Normalize a status response.

    Unrecognized or absent statuses are reported as RUNNING so the caller
    keeps polling until its attempt budget runs out.

    Returns:
        Tuple of (job, recognized) where ``recognized`` is False when the
        RUNNING state was assumed rather than reported.
    """
    value = probe(payload, STATUS_KEYS)
    raw = str(value) if value is not None else None
    state = classify_status(raw)
    recognized = state is not None
    if state is None:
        state = JobState.RUNNING

    location = None
    if state is JobState.SUCCEEDED:
        found = probe(payload, DOWNLOAD_URL_KEYS)
        location = str(found) if found is not None else None

    return ExportJob(
        id=job_id,
        state=state,
        result_location=location,
        raw_status=raw,
    ), recognized


def is_sync_export_disallowed(status_code: int, body: str) -> bool:
    """Check a failed sync-export response for the switch-to-async signature.

    The signature is a 400 paired with either a known machine error code or
    a known phrase in a message field. A body that is not JSON is searched
    as plain text.
    """
    if status_code != SYNC_EXPORT_STATUS:
        return False

    try:
        payload = json.loads(body)
    except ValueError:
        payload = None

    if isinstance(payload, Mapping):
        code = probe(payload, ERROR_CODE_KEYS)
        if code is not None and str(code).strip().upper() in SYNC_EXPORT_ERROR_CODES:
            return True
        messages = [
            str(value)
            for value in (probe(payload, (key,)) for key in ERROR_MESSAGE_KEYS)
            if value is not None
        ]
    else:
        messages = [body]

    for message in messages:
        lowered = message.lower()
        if any(phrase in lowered for phrase in SYNC_EXPORT_MESSAGES):
            return True
    return False
