import unittest

from pibench.utils.formatting import format_batch_size, format_count, format_elapsed, format_optional


class FormattingTests(unittest.TestCase):
    def test_elapsed(self) -> None:
        self.assertEqual(format_elapsed(0), "00:00:00")
        self.assertEqual(format_elapsed(3_723_999), "01:02:03")
        self.assertEqual(format_elapsed(-5), "00:00:00")

    def test_count_groups_thousands(self) -> None:
        self.assertEqual(format_count(1234567), "1.234.567")
        self.assertEqual(format_count(999.9), "999")

    def test_batch_size_labels(self) -> None:
        self.assertEqual(format_batch_size(500), "500")
        self.assertEqual(format_batch_size(10_000), "10k")
        self.assertEqual(format_batch_size(1_500_000), "1.5M")

    def test_optional(self) -> None:
        self.assertEqual(format_optional(None, ".2f"), "n/a")
        self.assertEqual(format_optional(3.14159, ".2f"), "3.14")


if __name__ == "__main__":
    unittest.main()
