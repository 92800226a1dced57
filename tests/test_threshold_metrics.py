import unittest

import numpy as np
import pandas as pd

from threshold_metrics import (
    g_index,
    g_index_from_table,
    h_index,
    h_index_from_table,
    resolve_index_function,
)


class ThresholdIndexTests(unittest.TestCase):
    def test_empty_inputs_give_zero(self):
        self.assertEqual(h_index([]), 0)
        self.assertEqual(g_index([]), 0)
        self.assertEqual(h_index(np.array([])), 0)

    def test_h_index_of_fibonacci_citations(self):
        # Sorted: 8, 5, 3, 2, ... -> 3rd value 3 >= 3, 4th value 2 < 4
        self.assertEqual(h_index([0, 1, 1, 2, 3, 5, 8]), 3)

    def test_g_index_counts_cumulative_citations(self):
        self.assertEqual(g_index([100, 50, 30, 20, 10, 5, 5, 5]), 8)
        # 11 + 5 + 3 + 3 = 22 >= 16, adding 1 gives 23 < 25
        self.assertEqual(g_index([0, 1, 1, 3, 3, 5, 11]), 4)

    def test_g_index_is_not_padded_beyond_value_count(self):
        self.assertEqual(g_index([1000]), 1)

    def test_input_order_does_not_matter(self):
        values = [3, 0, 8, 1, 5, 2, 1]
        self.assertEqual(h_index(values), h_index(sorted(values)))
        self.assertEqual(g_index(values), g_index(sorted(values, reverse=True)))

    def test_fractional_weights_and_nan(self):
        self.assertEqual(h_index([0.5, 0.9]), 0)
        self.assertEqual(h_index([2.5, 2.0, float("nan")]), 2)
        self.assertEqual(g_index(pd.Series([1.5, 1.5, np.nan])), 1)

    def test_bounds_and_monotonicity(self):
        rng = np.random.default_rng(seed=0)
        for _ in range(50):
            values = list(rng.integers(0, 30, size=rng.integers(0, 15)))
            h, g = h_index(values), g_index(values)
            self.assertLessEqual(h, len(values))
            self.assertLessEqual(g, sum(values) if values else 0)
            self.assertLessEqual(h, g)

            extended = values + [int(rng.integers(0, 30))]
            self.assertGreaterEqual(h_index(extended), h)
            self.assertGreaterEqual(g_index(extended), g)

    def test_resolve_index_function(self):
        self.assertIs(resolve_index_function("h"), h_index)
        self.assertIs(resolve_index_function("g"), g_index)
        with self.assertRaises(ValueError):
            resolve_index_function("x")


class TableIndexTests(unittest.TestCase):
    def setUp(self):
        self.df = pd.DataFrame({
            "id": ["a", "b", None, "d", "e"],
            "cit": [10, "7", 50, "n/a", 3],
        })

    def test_rows_with_missing_id_or_citation_are_dropped(self):
        # Remaining citations: 10, 7, 3
        self.assertEqual(h_index_from_table(self.df, "cit", id="id"), 3)
        self.assertEqual(g_index_from_table(self.df, "cit", id="id"), 3)

    def test_without_id_only_citation_must_be_present(self):
        # Remaining citations: 50, 10, 7, 3
        self.assertEqual(h_index_from_table(self.df, "cit"), 3)
        self.assertEqual(g_index_from_table(self.df, "cit"), 4)

    def test_unknown_column_raises(self):
        with self.assertRaises(KeyError):
            h_index_from_table(self.df, "citations")


if __name__ == "__main__":
    unittest.main()
