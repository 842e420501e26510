import random
import threading
import unittest

from pibench.core.aggregator import Aggregator
from pibench.models.sampling import SampleBatchResult


class AggregatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.aggregator = Aggregator()
        self.aggregator.open()

    def test_merge_adds_totals_and_interval_points(self) -> None:
        self.aggregator.merge(SampleBatchResult(inside_count=785, total_count=1000))
        self.aggregator.merge(SampleBatchResult(inside_count=3, total_count=4))
        counters = self.aggregator.snapshot()
        self.assertEqual(counters.total_points, 1004)
        self.assertEqual(counters.inside_points, 788)
        self.assertEqual(counters.points_since_last_interval_check, 1004)

    def test_concurrent_merges_in_any_order_sum_exactly(self) -> None:
        rng = random.Random(42)
        batches = []
        for _ in range(2000):
            total = rng.randint(0, 5000)
            batches.append(SampleBatchResult(inside_count=rng.randint(0, total), total_count=total))
        expected_total = sum(batch.total_count for batch in batches)
        expected_inside = sum(batch.inside_count for batch in batches)

        shuffled = list(batches)
        rng.shuffle(shuffled)
        chunks = [shuffled[index::8] for index in range(8)]
        barrier = threading.Barrier(len(chunks))

        def producer(chunk):
            barrier.wait()
            for batch in chunk:
                self.aggregator.merge(batch)

        threads = [threading.Thread(target=producer, args=(chunk,)) for chunk in chunks]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        counters = self.aggregator.snapshot()
        self.assertEqual(counters.total_points, expected_total)
        self.assertEqual(counters.inside_points, expected_inside)

    def test_closed_aggregator_rejects_late_results(self) -> None:
        self.aggregator.merge(SampleBatchResult(inside_count=1, total_count=1))
        self.aggregator.close()
        accepted = self.aggregator.merge(SampleBatchResult(inside_count=5, total_count=10))
        self.assertFalse(accepted)
        self.assertEqual(self.aggregator.snapshot().total_points, 1)
        self.assertEqual(self.aggregator.rejected_batches, 1)

    def test_take_interval_points_clears_interval_only(self) -> None:
        self.aggregator.merge(SampleBatchResult(inside_count=2, total_count=3))
        self.assertEqual(self.aggregator.take_interval_points(), 3)
        self.assertEqual(self.aggregator.take_interval_points(), 0)
        self.assertEqual(self.aggregator.snapshot().total_points, 3)

    def test_start_timestamp_is_recorded_once(self) -> None:
        self.assertTrue(self.aggregator.mark_started(10.0))
        self.assertFalse(self.aggregator.mark_started(20.0))
        self.assertEqual(self.aggregator.snapshot().start_timestamp, 10.0)

    def test_reset_clears_everything(self) -> None:
        self.aggregator.mark_started(1.0)
        self.aggregator.merge(SampleBatchResult(inside_count=2, total_count=3))
        self.aggregator.reset()
        counters = self.aggregator.snapshot()
        self.assertEqual(counters.total_points, 0)
        self.assertEqual(counters.inside_points, 0)
        self.assertIsNone(counters.start_timestamp)
        self.assertTrue(counters.is_fresh)

    def test_snapshot_is_a_copy(self) -> None:
        counters = self.aggregator.snapshot()
        counters.total_points = 99
        self.assertEqual(self.aggregator.snapshot().total_points, 0)


if __name__ == "__main__":
    unittest.main()
