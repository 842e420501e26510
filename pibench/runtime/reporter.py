"""Fixed-cadence reporting of run statistics."""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

import pandas as pd

from .. import config as settings
from ..core.aggregator import Aggregator
from ..core.statistics import compute_throughput, derive_stats
from ..models.results import RunSnapshot

if TYPE_CHECKING:
    from .controller import RunController

LOGGER = logging.getLogger(__name__)

HISTORY_COLUMNS = [
    "elapsed_seconds",
    "total_points",
    "inside_points",
    "pi_estimate",
    "absolute_error",
    "accuracy_percent",
    "throughput",
]


class Reporter:
    """
    Snapshot the aggregator on a fixed cadence.

    Every ``status_interval`` seconds the reporter publishes a
    :class:`RunSnapshot` to listeners and asks the controller whether a timed
    run has finished. Throughput is sampled every ``throughput_interval``
    seconds from the points merged since the previous sample, divided by the
    time that actually elapsed, so a delayed tick does not skew the figure.
    """

    def __init__(
        self,
        controller: "RunController",
        aggregator: Aggregator,
        *,
        clock: Callable[[], float] = time.monotonic,
        status_interval: float = settings.STATUS_INTERVAL,
        throughput_interval: float = settings.THROUGHPUT_INTERVAL,
    ) -> None:
        self._controller = controller
        self._aggregator = aggregator
        self._clock = clock
        self.status_interval = status_interval
        self.throughput_interval = throughput_interval

        self._lock = threading.Lock()
        self._listeners: List[Callable[[RunSnapshot], None]] = []
        self._history: List[Dict[str, Optional[float]]] = []
        self._throughput = 0.0
        self._last_throughput_check: Optional[float] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------ listeners
    def add_listener(self, listener: Callable[[RunSnapshot], None]) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[RunSnapshot], None]) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # ------------------------------------------------------------------ state
    @property
    def throughput(self) -> float:
        with self._lock:
            return self._throughput

    def begin_interval(self, now: float, *, fresh: bool) -> None:
        """Restart throughput tracking at ``now``; a fresh run also clears history."""
        self._aggregator.take_interval_points()
        with self._lock:
            self._last_throughput_check = now
            if fresh:
                self._throughput = 0.0
                self._history = []

    def clear(self) -> None:
        with self._lock:
            self._throughput = 0.0
            self._last_throughput_check = None
            self._history = []

    def history_frame(self) -> pd.DataFrame:
        with self._lock:
            rows = list(self._history)
        return pd.DataFrame(rows, columns=HISTORY_COLUMNS)

    # ------------------------------------------------------------------ ticking
    def tick(self, now: Optional[float] = None) -> RunSnapshot:
        """Run one reporting step and return the published snapshot."""
        now = self._clock() if now is None else now
        self._sample_throughput(now)

        snapshot = self._controller.get_snapshot(now=now)
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as exc:  # pragma: no cover - listeners are best effort
                LOGGER.warning("Snapshot listener %r failed: %s", listener, exc)

        self._controller.check_auto_finish(now)
        return snapshot

    def _sample_throughput(self, now: float) -> None:
        with self._lock:
            last = self._last_throughput_check
            if last is None:
                self._last_throughput_check = now
                return
            elapsed = now - last
            if elapsed < self.throughput_interval:
                return
            points = self._aggregator.take_interval_points()
            self._throughput = compute_throughput(points, elapsed)
            self._last_throughput_check = now
        self._record_history(now)

    def _record_history(self, now: float) -> None:
        counters = self._aggregator.snapshot()
        stats = derive_stats(counters.inside_points, counters.total_points)
        elapsed = 0.0 if counters.start_timestamp is None else now - counters.start_timestamp
        with self._lock:
            self._history.append(
                {
                    "elapsed_seconds": elapsed,
                    "total_points": counters.total_points,
                    "inside_points": counters.inside_points,
                    "pi_estimate": stats.pi_estimate,
                    "absolute_error": stats.absolute_error,
                    "accuracy_percent": stats.accuracy_percent,
                    "throughput": self._throughput,
                }
            )

    # ------------------------------------------------------------------ thread
    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive() and not self._stop.is_set():
            return
        # A fresh event per thread, so a thread told to stop never resumes.
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop,), name="pibench-reporter", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop ticking. Safe to call from a listener or the auto-finish path."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.status_interval):
            try:
                self.tick()
            except Exception:
                LOGGER.exception("Reporting tick failed")


__all__ = ["HISTORY_COLUMNS", "Reporter"]
