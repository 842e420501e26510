import unittest

import numpy as np

from pibench.core.sampler import CHUNK_SIZE, sample
from pibench.models.sampling import SampleBatchResult


class _BoundaryRng:
    """Generator stand-in that only produces points on the unit circle."""

    def __init__(self) -> None:
        self.calls = 0

    def uniform(self, low, high, size):
        self.calls += 1
        # x draws are 1.0, y draws are 0.0: every point lies exactly on the boundary.
        return np.ones(size) if self.calls % 2 == 1 else np.zeros(size)


class SamplerTests(unittest.TestCase):
    def test_zero_batch_returns_empty_result(self) -> None:
        self.assertEqual(sample(0), SampleBatchResult(inside_count=0, total_count=0))

    def test_counts_stay_within_bounds(self) -> None:
        rng = np.random.default_rng(7)
        for size in (1, 2, 17, 1000, 25_000):
            result = sample(size, rng)
            self.assertEqual(result.total_count, size)
            self.assertGreaterEqual(result.inside_count, 0)
            self.assertLessEqual(result.inside_count, result.total_count)

    def test_batches_larger_than_chunk_are_fully_counted(self) -> None:
        result = sample(CHUNK_SIZE + 5, np.random.default_rng(1))
        self.assertEqual(result.total_count, CHUNK_SIZE + 5)
        self.assertLessEqual(result.inside_count, result.total_count)

    def test_boundary_points_count_as_inside(self) -> None:
        result = sample(50, _BoundaryRng())
        self.assertEqual(result.inside_count, 50)

    def test_estimate_converges_towards_pi(self) -> None:
        result = sample(400_000, np.random.default_rng(2024))
        estimate = 4.0 * result.inside_count / result.total_count
        self.assertAlmostEqual(estimate, np.pi, delta=0.02)

    def test_negative_batch_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            sample(-1)


class SampleBatchResultTests(unittest.TestCase):
    def test_inside_cannot_exceed_total(self) -> None:
        with self.assertRaises(ValueError):
            SampleBatchResult(inside_count=11, total_count=10)

    def test_negative_counts_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            SampleBatchResult(inside_count=-1, total_count=10)
        with self.assertRaises(ValueError):
            SampleBatchResult(inside_count=0, total_count=-1)

    def test_results_are_immutable(self) -> None:
        result = SampleBatchResult(inside_count=1, total_count=2)
        with self.assertRaises(Exception):
            result.total_count = 5  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
