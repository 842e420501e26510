"""Single-writer aggregation of batch results into the run counters."""

from __future__ import annotations

import logging
import threading

from ..models.sampling import RunCounters, SampleBatchResult

LOGGER = logging.getLogger(__name__)


class Aggregator:
    """
    Own the authoritative run counters.

    Any number of producers may call :meth:`merge` concurrently. Merging is a
    plain addition, so results may arrive in any order. Merges are accepted
    only while the aggregator is open; results that arrive after a run was
    closed are rejected rather than counted.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters = RunCounters()
        self._accepting = False
        self._rejected_batches = 0

    # ------------------------------------------------------------------ gating
    def open(self) -> None:
        with self._lock:
            self._accepting = True

    def close(self) -> None:
        with self._lock:
            self._accepting = False

    @property
    def accepting(self) -> bool:
        with self._lock:
            return self._accepting

    @property
    def rejected_batches(self) -> int:
        with self._lock:
            return self._rejected_batches

    # ------------------------------------------------------------------ writes
    def merge(self, result: SampleBatchResult) -> bool:
        """Add a batch result to the totals. Returns False when the result was rejected."""
        with self._lock:
            if not self._accepting:
                self._rejected_batches += 1
                LOGGER.debug("Rejected late batch result (%s points)", result.total_count)
                return False
            self._counters.total_points += result.total_count
            self._counters.inside_points += result.inside_count
            self._counters.points_since_last_interval_check += result.total_count
            return True

    def mark_started(self, now: float) -> bool:
        """Record the run start time unless one is already set."""
        with self._lock:
            if self._counters.start_timestamp is not None:
                return False
            self._counters.start_timestamp = now
            return True

    def take_interval_points(self) -> int:
        """Return and clear the points merged since the previous call."""
        with self._lock:
            points = self._counters.points_since_last_interval_check
            self._counters.points_since_last_interval_check = 0
            return points

    def reset(self) -> None:
        with self._lock:
            self._counters = RunCounters()
            self._rejected_batches = 0

    # ------------------------------------------------------------------ reads
    def snapshot(self) -> RunCounters:
        with self._lock:
            return self._counters.copy()


__all__ = ["Aggregator"]
