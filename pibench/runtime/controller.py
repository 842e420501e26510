"""Run lifecycle: start, stop, reset, live batch updates and timed auto-finish."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, List, Mapping, Optional, Union

import pandas as pd

from .. import config as settings
from ..core.aggregator import Aggregator
from ..core.sampler import sample
from ..core.statistics import derive_stats, summarise_run
from ..core.validator import validate_batch_size
from ..models.results import FinalSummary, RunSnapshot, RunState
from ..models.run_config import RunConfig
from ..models.sampling import RunCounters
from .foreground import ForegroundSampler
from .pump import ResultPump
from .reporter import Reporter
from .worker import Sampler, WorkerHandle, create_result_queue, spawn_worker

LOGGER = logging.getLogger(__name__)


class RunController:
    """
    Orchestrate worker units, the aggregator and the reporter.

    States move ``STOPPED -> RUNNING -> STOPPED | FINISHED``. Lifecycle calls
    are serialised by one lock; the reporter's auto-finish check only ever
    tries that lock, so a tick never blocks a concurrent stop.
    """

    def __init__(
        self,
        *,
        aggregator: Optional[Aggregator] = None,
        sampler: Sampler = sample,
        clock: Callable[[], float] = time.monotonic,
        status_interval: float = settings.STATUS_INTERVAL,
        throughput_interval: float = settings.THROUGHPUT_INTERVAL,
        frame_interval: float = settings.FOREGROUND_FRAME_INTERVAL,
        stop_timeout: float = settings.WORKER_STOP_TIMEOUT,
    ) -> None:
        self.aggregator = aggregator or Aggregator()
        self.reporter = Reporter(
            self,
            self.aggregator,
            clock=clock,
            status_interval=status_interval,
            throughput_interval=throughput_interval,
        )
        self._sampler = sampler
        self._clock = clock
        self._frame_interval = frame_interval
        self._stop_timeout = stop_timeout

        self._lifecycle = threading.RLock()
        self._idle = threading.Event()
        self._idle.set()
        self._state = RunState.STOPPED
        self._config: Optional[RunConfig] = None
        self._batch_size = settings.DEFAULT_BATCH_SIZE
        self._workers: List[WorkerHandle] = []
        self._results: Any = None
        self._pump: Optional[ResultPump] = None
        self._foreground: Optional[ForegroundSampler] = None
        # Display-only sink for foreground samples that do not count.
        self._preview = Aggregator()
        self._stopped_at: Optional[float] = None
        self._final_summary: Optional[FinalSummary] = None
        self._finish_listeners: List[Callable[[FinalSummary], None]] = []

    # ------------------------------------------------------------------ properties
    @property
    def state(self) -> RunState:
        return self._state

    @property
    def config(self) -> Optional[RunConfig]:
        return self._config

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def final_summary(self) -> Optional[FinalSummary]:
        return self._final_summary

    @property
    def workers(self) -> List[WorkerHandle]:
        return list(self._workers)

    @property
    def active_worker_count(self) -> int:
        return sum(1 for handle in list(self._workers) if handle.is_alive())

    # ------------------------------------------------------------------ listeners
    def add_listener(self, listener: Callable[[RunSnapshot], None]) -> None:
        """Receive every snapshot published by the reporter."""
        self.reporter.add_listener(listener)

    def add_finish_listener(self, listener: Callable[[FinalSummary], None]) -> None:
        """Receive the final summary when a timed run finishes."""
        self._finish_listeners.append(listener)

    # ------------------------------------------------------------------ lifecycle
    def start(self, config: Union[RunConfig, Mapping[str, Any], None] = None, **overrides: Any) -> bool:
        """
        Start or resume a run.

        Without ``config`` the previous run's settings are reused, including a
        batch size changed through :meth:`update_batch_size`; keyword
        overrides apply on top. Invalid configuration raises
        ConfigurationError before any state changes. Returns False when a run
        is already in progress.
        """
        if config is None:
            config = self._config if self._config is not None else {"batch_size": self._batch_size}
        run_config = RunConfig.coerce(config, **overrides)
        with self._lifecycle:
            if self._state is RunState.RUNNING:
                LOGGER.debug("start() ignored: run already in progress")
                return False
            if self._state is RunState.FINISHED:
                self._clear_counters()

            now = self._clock()
            fresh = self.aggregator.snapshot().is_fresh
            if fresh:
                self.aggregator.mark_started(now)
            self.reporter.begin_interval(now, fresh=fresh)

            self._config = run_config
            self._batch_size = run_config.batch_size
            self._stopped_at = None
            self._final_summary = None

            self._results = create_result_queue(run_config.backend)
            self.aggregator.open()
            self._pump = ResultPump(self._results, self.aggregator)
            self._pump.start()

            self._workers = []
            for worker_id in range(run_config.worker_count):
                handle = spawn_worker(worker_id, run_config.backend, self._results, sampler=self._sampler)
                handle.start(run_config.batch_size)
                self._workers.append(handle)

            if run_config.foreground_batch_size > 0:
                self._foreground = ForegroundSampler(
                    run_config.foreground_batch_size,
                    self._foreground_sink(run_config.count_foreground),
                    frame_interval=self._frame_interval,
                    sampler=self._sampler,
                )
                self._foreground.start()

            self._state = RunState.RUNNING
            self._idle.clear()
            self.reporter.start()
            LOGGER.info(
                "%s run: %d %s worker(s), batch size %d, duration %s",
                "Started" if fresh else "Resumed",
                run_config.worker_count,
                run_config.backend.value,
                run_config.batch_size,
                f"{run_config.duration_seconds}s" if run_config.duration_seconds else "unbounded",
            )
            return True

    def stop(self) -> bool:
        """Halt all workers and freeze the counters. Returns False when not running."""
        with self._lifecycle:
            if self._state is not RunState.RUNNING:
                return False
            self._halt()
            self._state = RunState.STOPPED
            self._idle.set()
            LOGGER.info("Run stopped at %d points", self.aggregator.snapshot().total_points)
            return True

    def reset(self) -> None:
        """Stop any run and clear every counter and the start time."""
        with self._lifecycle:
            if self._state is RunState.RUNNING:
                self._halt()
            self._clear_counters()
            self._state = RunState.STOPPED
            self._idle.set()
            LOGGER.info("Run reset")

    def update_batch_size(self, batch_size: int) -> None:
        """Change the batch size used by each worker's next batch."""
        batch_size = validate_batch_size(batch_size)
        with self._lifecycle:
            self._batch_size = batch_size
            if self._config is not None:
                self._config = self._config.model_copy(update={"batch_size": batch_size})
            if self._state is not RunState.RUNNING:
                return
            for handle in self._workers:
                if handle.is_alive():
                    handle.update_batch(batch_size)
            LOGGER.debug("Batch size updated to %d", batch_size)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the run is no longer running. Returns False on timeout."""
        return self._idle.wait(timeout)

    def check_auto_finish(self, now: Optional[float] = None) -> bool:
        """Finish a timed run whose duration has elapsed. Returns True when it finished."""
        if not self._lifecycle.acquire(blocking=False):
            # A lifecycle call is in progress; the next tick re-evaluates.
            return False
        try:
            config = self._config
            if self._state is not RunState.RUNNING or config is None or config.duration_seconds <= 0:
                return False
            now = self._clock() if now is None else now
            start = self.aggregator.snapshot().start_timestamp
            if start is None:
                return False
            elapsed = now - start
            if elapsed * 1000.0 < config.duration_seconds * 1000:
                return False

            used_workers = len(self._workers) if self._workers else config.worker_count
            self._halt()
            summary = summarise_run(
                self.aggregator.snapshot(), elapsed_seconds=elapsed, worker_count=used_workers
            )
            self._final_summary = summary
            self._stopped_at = now
            self._state = RunState.FINISHED
        finally:
            self._lifecycle.release()

        LOGGER.info(
            "Run finished after %.2fs: %d points, pi=%s, %.0f points/s",
            summary.elapsed_seconds,
            summary.total_points,
            "n/a" if summary.pi_estimate is None else f"{summary.pi_estimate:.8f}",
            summary.throughput,
        )
        for listener in list(self._finish_listeners):
            try:
                listener(summary)
            except Exception as exc:  # pragma: no cover - listeners are best effort
                LOGGER.warning("Finish listener %r failed: %s", listener, exc)
        # Waiters wake only after the listeners have seen the summary.
        with self._lifecycle:
            if self._state is not RunState.RUNNING:
                self._idle.set()
        return True

    # ------------------------------------------------------------------ reads
    def get_snapshot(self, now: Optional[float] = None) -> RunSnapshot:
        """Presentation read API: counters plus derived statistics."""
        counters = self.aggregator.snapshot()
        stats = derive_stats(counters.inside_points, counters.total_points)
        elapsed = self._elapsed_seconds(counters, self._clock() if now is None else now)
        return RunSnapshot(
            state=self._state,
            total_points=counters.total_points,
            inside_points=counters.inside_points,
            pi_estimate=stats.pi_estimate,
            error_value=stats.absolute_error,
            accuracy_percent=stats.accuracy_percent,
            elapsed_ms=elapsed * 1000.0,
            throughput=self.reporter.throughput,
            active_worker_count=self.active_worker_count,
            foreground_points=self._preview.snapshot().total_points,
        )

    def history_frame(self) -> pd.DataFrame:
        """Throughput samples recorded by the reporter, as a DataFrame."""
        return self.reporter.history_frame()

    # ------------------------------------------------------------------ context manager
    def __enter__(self) -> "RunController":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # ------------------------------------------------------------------ internals
    def _elapsed_seconds(self, counters: RunCounters, now: float) -> float:
        if counters.start_timestamp is None:
            return 0.0
        if self._state is RunState.FINISHED and self._final_summary is not None:
            return self._final_summary.elapsed_seconds
        end = now if self._state is RunState.RUNNING or self._stopped_at is None else self._stopped_at
        return max(end - counters.start_timestamp, 0.0)

    def _foreground_sink(self, counted: bool) -> Callable[[Any], object]:
        results = self._results
        if counted:
            return lambda result: results.put(("foreground", result.inside_count, result.total_count))
        self._preview.open()
        return self._preview.merge

    def _halt(self) -> None:
        """Tear down every producer, deliver in-flight results, then close the aggregator."""
        self.reporter.stop()
        if self._foreground is not None:
            self._foreground.stop()
            self._foreground = None

        for handle in self._workers:
            handle.stop()
        deadline = time.monotonic() + self._stop_timeout
        for handle in self._workers:
            if handle.join(max(deadline - time.monotonic(), 0.0)):
                if handle.exitcode:
                    LOGGER.warning("Worker %s exited with code %s", handle.worker_id, handle.exitcode)
                continue
            LOGGER.warning("Worker %s did not stop within %.1fs", handle.worker_id, self._stop_timeout)
            handle.terminate()

        if self._pump is not None:
            self._pump.stop()
            self._pump.drain()
            self._pump = None
        self.aggregator.close()
        self._preview.close()
        self._workers = []
        self._results = None
        self._stopped_at = self._clock()

    def _clear_counters(self) -> None:
        self.aggregator.reset()
        self._preview.reset()
        self.reporter.clear()
        self._final_summary = None
        self._stopped_at = None


__all__ = ["RunController"]
