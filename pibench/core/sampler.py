"""Monte Carlo sampling of points in the square [-1, 1] x [-1, 1]."""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..models.sampling import SampleBatchResult

# Upper bound on points materialised at once; larger batches are drawn in chunks.
CHUNK_SIZE = 1 << 20


def count_inside(num_samples: int, rng: np.random.Generator) -> int:
    """Draw ``num_samples`` points and count those in the closed unit disk."""
    x = rng.uniform(-1.0, 1.0, num_samples)
    y = rng.uniform(-1.0, 1.0, num_samples)
    return int(np.count_nonzero(x * x + y * y <= 1.0))


def sample(batch_size: int, rng: Optional[np.random.Generator] = None) -> SampleBatchResult:
    """
    Run one sampling batch.

    Parameters
    ----------
    batch_size:
        Number of points to draw. Zero yields an empty result.
    rng:
        Generator to draw from. A freshly seeded one is used when omitted.
    """
    if batch_size < 0:
        raise ValueError(f"batch_size must be non-negative, got {batch_size}")
    if batch_size == 0:
        return SampleBatchResult(inside_count=0, total_count=0)
    rng = rng if rng is not None else np.random.default_rng()

    inside = 0
    remaining = int(batch_size)
    while remaining > 0:
        chunk = min(remaining, CHUNK_SIZE)
        inside += count_inside(chunk, rng)
        remaining -= chunk
    return SampleBatchResult(inside_count=inside, total_count=int(batch_size))


__all__ = ["CHUNK_SIZE", "count_inside", "sample"]
