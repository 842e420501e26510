"""Environment-driven defaults for benchmark runs."""

from __future__ import annotations

import os
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def detected_parallelism() -> int:
    """Number of logical cores, or 4 when the platform cannot report it."""
    return os.cpu_count() or 4


PROJECT_ROOT = Path(__file__).resolve().parents[1]
OUTPUT_ROOT = Path(os.environ.get("PIBENCH_OUTPUT_ROOT", PROJECT_ROOT / "output"))

DEFAULT_BATCH_SIZE = _env_int("PIBENCH_BATCH_SIZE", 10_000)
DEFAULT_WORKER_COUNT = _env_int("PIBENCH_WORKERS", detected_parallelism())
DEFAULT_DURATION_SECONDS = _env_int("PIBENCH_DURATION", 0)
DEFAULT_BACKEND = os.environ.get("PIBENCH_BACKEND", "process").strip().lower() or "process"

# Reporting cadence (seconds).
STATUS_INTERVAL = 0.1
THROUGHPUT_INTERVAL = 1.0

# Foreground sampling: points per frame and frame period.
FOREGROUND_BATCH_SIZE = 5000
FOREGROUND_FRAME_INTERVAL = 1.0 / 60.0

# Maximum time stop() waits for an in-flight batch before terminating a worker.
WORKER_STOP_TIMEOUT = 5.0


__all__ = [
    "OUTPUT_ROOT",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_WORKER_COUNT",
    "DEFAULT_DURATION_SECONDS",
    "DEFAULT_BACKEND",
    "STATUS_INTERVAL",
    "THROUGHPUT_INTERVAL",
    "FOREGROUND_BATCH_SIZE",
    "FOREGROUND_FRAME_INTERVAL",
    "WORKER_STOP_TIMEOUT",
    "detected_parallelism",
]
