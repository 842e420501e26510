"""Run configuration model."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .. import config as settings
from ..core.validator import ConfigurationError


class WorkerBackend(str, Enum):
    """Execution context used for worker units."""

    THREAD = "thread"
    PROCESS = "process"


class RunConfig(BaseModel):
    """Settings supplied when a run is started."""

    # Defaults come from the environment and are validated like supplied values.
    model_config = ConfigDict(frozen=True, validate_default=True)

    batch_size: int = Field(
        default_factory=lambda: settings.DEFAULT_BATCH_SIZE,
        gt=0,
        strict=True,
        description="Points drawn per worker batch; may be changed while running.",
    )
    worker_count: int = Field(
        default_factory=lambda: settings.DEFAULT_WORKER_COUNT,
        ge=0,
        strict=True,
        description="Worker units spawned at start. Fixed for the life of the run.",
    )
    duration_seconds: int = Field(
        default_factory=lambda: settings.DEFAULT_DURATION_SECONDS,
        ge=0,
        strict=True,
        description="Run length before auto-finish; 0 runs until stopped.",
    )
    backend: WorkerBackend = Field(
        default_factory=lambda: settings.DEFAULT_BACKEND,
        description="Worker execution context: 'thread' or 'process'.",
    )
    foreground_batch_size: int = Field(
        default=0,
        ge=0,
        strict=True,
        description="Points sampled per foreground frame; 0 disables the foreground path.",
    )
    count_foreground: bool = Field(
        default=True,
        description="Whether foreground samples count toward the official totals.",
    )

    @field_validator("backend", mode="before")
    @classmethod
    def _normalise_backend(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @classmethod
    def coerce(cls, value: Union["RunConfig", Mapping[str, Any], None] = None, **overrides: Any) -> "RunConfig":
        """Validate ``value`` (and keyword overrides) into a RunConfig or raise ConfigurationError."""
        if isinstance(value, RunConfig):
            payload = value.model_dump()
        else:
            payload = dict(value or {})
        payload.update(overrides)
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'config'}: {error['msg']}"
                for error in exc.errors()
            )
            raise ConfigurationError(f"Invalid run configuration: {problems}") from exc


__all__ = ["RunConfig", "WorkerBackend"]
