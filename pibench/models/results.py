"""Result data models for live reporting and final summaries."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class RunState(str, Enum):
    """Lifecycle states of the run controller."""

    STOPPED = "stopped"
    RUNNING = "running"
    FINISHED = "finished"


class DerivedStats(BaseModel):
    """Statistics recomputed from the counters on every reporting tick."""

    pi_estimate: Optional[float] = Field(None, description="4 x inside / total; None before any sample")
    difference: Optional[float] = Field(None, description="Signed pi_estimate - pi")
    absolute_error: Optional[float] = Field(None, ge=0.0, description="|pi_estimate - pi|")
    accuracy_percent: Optional[float] = Field(
        None, ge=0.0, le=100.0, description="100 minus the relative error in percent, floored at 0"
    )


class RunSnapshot(BaseModel):
    """Read-only view of a run consumed by presentation layers."""

    state: RunState = Field(default=RunState.STOPPED)
    total_points: int = Field(0, ge=0)
    inside_points: int = Field(0, ge=0)
    pi_estimate: Optional[float] = None
    error_value: Optional[float] = None
    accuracy_percent: Optional[float] = None
    elapsed_ms: float = Field(0.0, ge=0.0)
    throughput: float = Field(0.0, ge=0.0, description="Points per second over the last interval")
    active_worker_count: int = Field(0, ge=0)
    foreground_points: int = Field(
        0, ge=0, description="Display-only foreground samples not counted in the totals"
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class FinalSummary(BaseModel):
    """Statistics captured when a timed run finishes."""

    total_points: int = Field(..., ge=0)
    inside_points: int = Field(..., ge=0)
    pi_estimate: Optional[float] = None
    absolute_error: Optional[float] = None
    accuracy_percent: Optional[float] = None
    elapsed_seconds: float = Field(..., ge=0.0)
    throughput: float = Field(..., ge=0.0, description="total_points / elapsed_seconds")
    worker_count: int = Field(..., ge=0, description="Worker units used by the run")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


__all__ = ["RunState", "DerivedStats", "RunSnapshot", "FinalSummary"]
