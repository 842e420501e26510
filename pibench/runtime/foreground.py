"""Foreground sampling path that runs a small batch every display frame."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import numpy as np

from .. import config as settings
from ..core.sampler import sample
from ..models.sampling import SampleBatchResult

LOGGER = logging.getLogger(__name__)


class ForegroundSampler:
    """
    Sample ``batch_size`` points per frame and hand each result to ``sink``.

    The sink is either the run's result queue (samples count toward the
    official totals) or a display-only aggregator.
    """

    def __init__(
        self,
        batch_size: int,
        sink: Callable[[SampleBatchResult], object],
        *,
        frame_interval: float = settings.FOREGROUND_FRAME_INTERVAL,
        sampler: Callable[[int, np.random.Generator], SampleBatchResult] = sample,
    ) -> None:
        self.batch_size = batch_size
        self._sink = sink
        self._frame_interval = frame_interval
        self._sampler = sampler
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.frames = 0

    def start(self) -> None:
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="pibench-foreground", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _run(self) -> None:
        rng = np.random.default_rng()
        while not self._stop.wait(self._frame_interval):
            try:
                self._sink(self._sampler(self.batch_size, rng))
            except Exception:
                LOGGER.exception("Foreground sampling failed; disabling the foreground path")
                return
            self.frames += 1


__all__ = ["ForegroundSampler"]
