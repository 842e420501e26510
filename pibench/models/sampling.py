"""Data models exchanged between samplers, workers and the aggregator."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class SampleBatchResult:
    """
    Aggregate outcome of one sampling batch.

    Workers only ever ship these two counts; individual points never leave
    the sampler.
    """

    inside_count: int
    total_count: int

    def __post_init__(self) -> None:
        if self.total_count < 0:
            raise ValueError(f"total_count must be non-negative, got {self.total_count}")
        if not 0 <= self.inside_count <= self.total_count:
            raise ValueError(
                f"inside_count must lie in [0, {self.total_count}], got {self.inside_count}"
            )


@dataclass
class RunCounters:
    """Running totals for a benchmark run, owned by the aggregator."""

    total_points: int = 0
    inside_points: int = 0
    start_timestamp: Optional[float] = None
    points_since_last_interval_check: int = 0

    @property
    def is_fresh(self) -> bool:
        return self.total_points == 0 and self.start_timestamp is None

    def copy(self) -> "RunCounters":
        return replace(self)


__all__ = ["SampleBatchResult", "RunCounters"]
