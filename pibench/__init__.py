"""Parallel Monte Carlo estimation of pi.

Worker units sample batches concurrently, an aggregator merges their counts,
and a reporter derives live statistics on a fixed cadence::

    from pibench import RunController

    with RunController() as controller:
        controller.start(batch_size=10_000, worker_count=4, duration_seconds=5)
        controller.wait()
        print(controller.final_summary)
"""

from .core.aggregator import Aggregator
from .core.sampler import sample
from .core.validator import ConfigurationError
from .models.results import DerivedStats, FinalSummary, RunSnapshot, RunState
from .models.run_config import RunConfig, WorkerBackend
from .models.sampling import RunCounters, SampleBatchResult
from .runtime.controller import RunController

__version__ = "0.1.0"

__all__ = [
    "Aggregator",
    "ConfigurationError",
    "DerivedStats",
    "FinalSummary",
    "RunConfig",
    "RunController",
    "RunCounters",
    "RunSnapshot",
    "RunState",
    "SampleBatchResult",
    "WorkerBackend",
    "sample",
]
