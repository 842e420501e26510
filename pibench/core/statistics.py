"""Derived statistics for the running pi estimate."""

from __future__ import annotations

import math
from typing import Optional

from ..models.results import DerivedStats, FinalSummary
from ..models.sampling import RunCounters


def estimate_pi(inside_points: int, total_points: int) -> Optional[float]:
    """Return 4 x inside / total, or None before any point was sampled."""
    if total_points <= 0:
        return None
    return 4.0 * inside_points / total_points


def derive_stats(inside_points: int, total_points: int) -> DerivedStats:
    pi_estimate = estimate_pi(inside_points, total_points)
    if pi_estimate is None:
        return DerivedStats()
    difference = pi_estimate - math.pi
    absolute_error = abs(difference)
    accuracy = max(0.0, 100.0 - (absolute_error / math.pi) * 100.0)
    return DerivedStats(
        pi_estimate=pi_estimate,
        difference=difference,
        absolute_error=absolute_error,
        accuracy_percent=accuracy,
    )


def compute_throughput(points: int, elapsed_seconds: float) -> float:
    """Points per second over an actual (not nominal) elapsed span."""
    if elapsed_seconds <= 0:
        return 0.0
    return points / elapsed_seconds


def summarise_run(counters: RunCounters, *, elapsed_seconds: float, worker_count: int) -> FinalSummary:
    """Build the end-of-run summary shown when a timed run finishes."""
    stats = derive_stats(counters.inside_points, counters.total_points)
    return FinalSummary(
        total_points=counters.total_points,
        inside_points=counters.inside_points,
        pi_estimate=stats.pi_estimate,
        absolute_error=stats.absolute_error,
        accuracy_percent=stats.accuracy_percent,
        elapsed_seconds=max(elapsed_seconds, 0.0),
        throughput=compute_throughput(counters.total_points, elapsed_seconds),
        worker_count=worker_count,
    )


__all__ = ["estimate_pi", "derive_stats", "compute_throughput", "summarise_run"]
