"""Persist the latest run snapshot as JSON for external front ends."""

from __future__ import annotations

import json
import logging
import tempfile
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.results import FinalSummary, RunSnapshot

LOGGER = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except (json.JSONDecodeError, OSError):
        # File may be in the middle of being replaced; treat as empty.
        return {}


def _write_json(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    # One temp file per write, so concurrent writers never rename each other's file.
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp", delete=False
    ) as fh:
        json.dump(data, fh, indent=2)
        temp_path = Path(fh.name)
    try:
        temp_path.replace(path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


class StatusFileWriter:
    """
    Snapshot listener that rewrites a status file atomically.

    Writes are throttled to at most one every ``min_interval`` seconds; the
    final summary is always written and is kept by later snapshot writes.
    Writes from different threads are serialised.
    """

    def __init__(self, status_path: Path, *, min_interval: float = 0.25) -> None:
        self.status_path = Path(status_path)
        self.min_interval = min_interval
        self._lock = threading.Lock()
        self._last_write_ts: Optional[float] = None
        self._summary: Optional[Dict[str, Any]] = None

    def __call__(self, snapshot: RunSnapshot) -> None:
        self.write_snapshot(snapshot)

    def write_snapshot(self, snapshot: RunSnapshot, *, force: bool = False) -> bool:
        with self._lock:
            now = time.monotonic()
            last = self._last_write_ts
            if not force and last is not None and now - last < self.min_interval:
                return False
            payload: Dict[str, Any] = {"updated_at": _utc_now_iso(), "snapshot": snapshot.to_dict()}
            if self._summary is not None:
                payload["summary"] = self._summary
            if not self._write(payload):
                return False
            self._last_write_ts = now
            return True

    def write_summary(self, summary: FinalSummary) -> bool:
        with self._lock:
            self._summary = summary.to_dict()
            payload = _read_json(self.status_path)
            payload["updated_at"] = _utc_now_iso()
            payload["summary"] = self._summary
            return self._write(payload)

    def read(self) -> Dict[str, Any]:
        return _read_json(self.status_path)

    def latest_snapshot(self) -> Optional[RunSnapshot]:
        data = self.read().get("snapshot")
        if not data:
            return None
        return RunSnapshot.model_validate(data)

    def _write(self, payload: Dict[str, Any]) -> bool:
        try:
            _write_json(self.status_path, payload)
        except OSError as exc:
            LOGGER.warning("Unable to write status file %s: %s", self.status_path, exc)
            return False
        return True


__all__ = ["StatusFileWriter"]
