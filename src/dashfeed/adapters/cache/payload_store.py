"""File-based payload store implementing PayloadStorePort."""

from __future__ import annotations

import contextlib
import json
import os
from datetime import UTC, datetime
from pathlib import Path

from dashfeed.core.exceptions import StoreCorruptError
from dashfeed.core.models import StoredPayload


class FilePayloadStore:
    """Durable client-side copies of the last good payload per source.

    Each key holds a payload file and a ``.meta.json`` sidecar recording when
    it was updated. Payloads are written to a temporary file and renamed so a
    reader never sees a half-written copy.

    Attributes:
        store_dir: Directory where payloads are stored.
    """

    def __init__(self, store_dir: Path) -> None:
        """Initialize the store with a directory path.

        Args:
            store_dir: Directory where payloads will be stored.
        """
        self.store_dir = store_dir

    def _file_path(self, key: str) -> Path:
        return self.store_dir / key

    def _meta_path(self, key: str) -> Path:
        return self.store_dir / f"{key}.meta.json"

    def get(self, key: str) -> StoredPayload | None:
        """Get the stored payload, or None if not stored.

        Args:
            key: Stable per-source storage key.

        Raises:
            StoreCorruptError: If the metadata sidecar exists but is unreadable.
        """
        file_path = self._file_path(key)
        meta_path = self._meta_path(key)

        if not file_path.exists() or not meta_path.exists():
            return None

        try:
            with meta_path.open(encoding="utf-8") as f:
                data = json.load(f)
            updated_at = datetime.fromisoformat(data["updated_at"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise StoreCorruptError(
                f"Stored metadata corrupt for '{key}'",
                key=key,
                path=meta_path,
                cause=e,
            ) from e

        try:
            payload = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StoreCorruptError(
                f"Stored payload corrupt for '{key}'",
                key=key,
                path=file_path,
                cause=e,
            ) from e

        return StoredPayload(payload=payload, updated_at=updated_at)

    def put(self, key: str, payload: str, updated_at: datetime | None = None) -> None:
        """Store a payload with its update timestamp.

        Args:
            key: Stable per-source storage key.
            payload: Payload text.
            updated_at: When the payload was fetched. Defaults to now (UTC).
        """
        if updated_at is None:
            updated_at = datetime.now(UTC)

        file_path = self._file_path(key)
        meta_path = self._meta_path(key)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = file_path.with_name(f".{file_path.name}.tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, file_path)

        data = {"key": key, "updated_at": updated_at.isoformat()}
        with meta_path.open("w", encoding="utf-8") as f:
            json.dump(data, f)

    def invalidate(self, key: str) -> None:
        """Remove a stored payload.

        Args:
            key: Storage key to invalidate.
        """
        self._file_path(key).unlink(missing_ok=True)
        self._meta_path(key).unlink(missing_ok=True)

    def list_all_keys(self) -> list[str]:
        """List all keys with a metadata sidecar."""
        if not self.store_dir.exists():
            return []
        suffix = ".meta.json"
        return sorted(
            path.name[: -len(suffix)]
            for path in self.store_dir.glob(f"*{suffix}")
            if path.is_file()
        )

    def statistics(self) -> dict[str, int]:
        """Get store statistics.

        Returns:
            Dictionary with 'total_size' (bytes) and 'file_count' (number of files).
        """
        total_size = 0
        file_count = 0

        if not self.store_dir.exists():
            return {"total_size": 0, "file_count": 0}

        for file_path in self.store_dir.iterdir():
            if file_path.is_file():
                with contextlib.suppress(OSError):
                    total_size += file_path.stat().st_size
                    file_count += 1

        return {"total_size": total_size, "file_count": file_count}
