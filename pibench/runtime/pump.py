"""Background delivery of posted batch results into the aggregator."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Optional

from ..core.aggregator import Aggregator
from ..models.sampling import SampleBatchResult

LOGGER = logging.getLogger(__name__)


class ResultPump:
    """Drain a result queue into an :class:`Aggregator` on a dedicated thread."""

    def __init__(self, results: Any, aggregator: Aggregator, *, poll_interval: float = 0.05) -> None:
        self._results = results
        self._aggregator = aggregator
        self._poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.delivered = 0

    # ------------------------------------------------------------------ control
    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="pibench-result-pump", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def drain(self) -> int:
        """Deliver everything currently queued from the calling thread."""
        delivered = 0
        while True:
            try:
                message = self._results.get_nowait()
            except queue.Empty:
                return delivered
            if self._deliver(message):
                delivered += 1

    # ------------------------------------------------------------------ internals
    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                message = self._results.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            self._deliver(message)

    def _deliver(self, message: Any) -> bool:
        try:
            source, inside, total = message
            result = SampleBatchResult(inside_count=int(inside), total_count=int(total))
        except (TypeError, ValueError) as exc:
            LOGGER.warning("Discarding malformed batch result %r: %s", message, exc)
            return False
        merged = self._aggregator.merge(result)
        if merged:
            self.delivered += 1
        else:
            LOGGER.debug("Result from %s arrived after the run closed", source)
        return merged


__all__ = ["ResultPump"]
