import io
import unittest
from contextlib import redirect_stdout

import numpy as np
import pandas as pd

from edge_processing import aggregate_profile, normalize_edges
from variant_weighting import (
    ZERO_STATISTIC_FLOOR,
    apply_field_statistic,
    apply_variant,
    field_normalized_weights,
    field_statistic_issues,
    field_statistics,
    fractional_weights,
    inverse_variance_weights,
    validate_variant,
)


def category_edges(**extra):
    df = pd.DataFrame({
        "citations": [0, 1, 1, 2, 3, 5, 8],
        "id": ["abc123", "bcd234", "def345", "efg456", "fgh567", "ghi678", "hij789"],
        "categories": ["a; d; e", "b", "c", "d; g", "e", "f", "g"],
        **extra,
    })
    return normalize_edges(df, "categories", "id", "citations", keep=list(extra))


class FractionalTests(unittest.TestCase):
    def test_unit_contributors_change_nothing(self):
        edges = category_edges(cc=[1] * 7)
        weighted = fractional_weights(edges, "cc")
        pd.testing.assert_series_equal(aggregate_profile(weighted), aggregate_profile(edges))

    def test_divides_by_contributor_count(self):
        edges = category_edges(cc=[1, 2, 1, 1, 1, 1, 2])
        profile = aggregate_profile(fractional_weights(edges, "cc"))
        self.assertAlmostEqual(profile["b"], 0.5)
        self.assertAlmostEqual(profile["g"], 2 + 4)

    def test_lookup_by_document_id(self):
        edges = category_edges()
        counts = {"abc123": 1, "bcd234": 2, "def345": 1, "efg456": 1,
                  "fgh567": 1, "ghi678": 1, "hij789": 4}
        profile = aggregate_profile(fractional_weights(edges, counts))
        self.assertAlmostEqual(profile["g"], 2 + 2)

    def test_missing_count_is_fatal(self):
        edges = category_edges(cc=[1, 2, None, 1, 1, 1, 2])
        with self.assertRaises(ValueError) as ctx:
            fractional_weights(edges, "cc")
        self.assertIn("def345", str(ctx.exception))

        with self.assertRaises(ValueError):
            fractional_weights(category_edges(), {"abc123": 1})
        with self.assertRaises(ValueError):
            fractional_weights(category_edges(), None)

    def test_non_positive_count_is_fatal(self):
        with self.assertRaises(ValueError):
            fractional_weights(category_edges(cc=[1, 0, 1, 1, 1, 1, 1]), "cc")

    def test_input_edges_not_mutated(self):
        edges = category_edges(cc=[2] * 7)
        before = edges.copy()
        fractional_weights(edges, "cc")
        pd.testing.assert_frame_equal(edges, before)


class FieldStatisticTests(unittest.TestCase):
    def test_means_computed_per_tag(self):
        stats = field_statistics(category_edges(), "mean")
        self.assertEqual(stats["a"], 0.0)
        self.assertEqual(stats["e"], 1.5)
        self.assertEqual(stats["g"], 5.0)

    def test_sample_variance_is_undefined_for_singletons(self):
        stats = field_statistics(category_edges(), "var")
        self.assertTrue(np.isnan(stats["a"]))
        self.assertEqual(stats["d"], 2.0)
        self.assertEqual(stats["g"], 18.0)

    def test_external_table_forms(self):
        edges = category_edges()
        as_frame = pd.DataFrame({"cat": ["a", "b", "zzz"], "var_cit": [2.0, 0.0, 1.0]})
        stats = field_statistics(edges, "var", external=as_frame)
        self.assertEqual(stats["a"], 2.0)
        self.assertTrue(np.isnan(stats["g"]))
        self.assertNotIn("zzz", stats.index)

        from_dict = field_statistics(edges, "mean", external={"a": 1, "g": 4})
        from_series = field_statistics(edges, "mean", external=pd.Series({"a": 1, "g": 4}))
        pd.testing.assert_series_equal(from_dict, from_series, check_names=False)

    def test_issues_are_listed_sorted(self):
        stats = pd.Series({"b": 0.0, "a": np.nan, "c": 2.0, "d": 0.0})
        self.assertEqual(field_statistic_issues(stats), (["a"], ["b", "d"]))

    def test_unknown_statistic_raises(self):
        with self.assertRaises(ValueError):
            field_statistics(category_edges(), "median")


class FieldNormalizationTests(unittest.TestCase):
    def test_zero_mean_is_clamped_with_diagnostic(self):
        out = io.StringIO()
        with redirect_stdout(out):
            weighted = field_normalized_weights(category_edges())
        profile = aggregate_profile(weighted)

        self.assertIn("a", out.getvalue())
        self.assertIn(str(ZERO_STATISTIC_FLOOR), out.getvalue())
        self.assertEqual(profile["a"], 0.0)
        self.assertAlmostEqual(profile["d"], 2.0)
        self.assertAlmostEqual(profile["e"], 2.0)
        self.assertTrue(np.isfinite(profile.values).all())

    def test_missing_external_mean_excludes_tag(self):
        out = io.StringIO()
        with redirect_stdout(out):
            weighted = field_normalized_weights(category_edges(), mfc={"g": 2.0, "f": 5.0})
        self.assertEqual(sorted(weighted["tag"].unique()), ["f", "g"])
        self.assertIn("Excluding 5", out.getvalue())
        self.assertAlmostEqual(aggregate_profile(weighted)["g"], 5.0)

    def test_verbose_false_is_silent_and_result_unchanged(self):
        out = io.StringIO()
        with redirect_stdout(out):
            quiet = field_normalized_weights(category_edges(), verbose=False)
        self.assertEqual(out.getvalue(), "")
        with redirect_stdout(io.StringIO()):
            loud = field_normalized_weights(category_edges())
        pd.testing.assert_frame_equal(quiet, loud)


class InverseVarianceTests(unittest.TestCase):
    def test_singleton_categories_are_excluded(self):
        out = io.StringIO()
        with redirect_stdout(out):
            weighted = inverse_variance_weights(category_edges())
        self.assertEqual(sorted(weighted["tag"].unique()), ["d", "e", "g"])
        self.assertIn("a; b; c; f", out.getvalue())

        profile = aggregate_profile(weighted)
        self.assertAlmostEqual(profile["d"], 1.0)
        self.assertAlmostEqual(profile["e"], 3 / 4.5)
        self.assertAlmostEqual(profile["g"], 10 / 18)

    def test_zero_variance_is_clamped(self):
        edges = pd.DataFrame({
            "id": ["p1", "p2", "p3", "p4"],
            "tag": ["x", "x", "y", "y"],
            "cit": [2.0, 2.0, 1.0, 3.0],
            "weight": [2.0, 2.0, 1.0, 3.0],
        })
        out = io.StringIO()
        with redirect_stdout(out):
            profile = aggregate_profile(inverse_variance_weights(edges))
        self.assertIn("zero variance(s): x", out.getvalue())
        self.assertAlmostEqual(profile["x"], 4 / ZERO_STATISTIC_FLOOR)
        self.assertAlmostEqual(profile["y"], 4 / 2)

    def test_apply_field_statistic_directly(self):
        edges = category_edges()
        stats = pd.Series({"a": 1.0, "b": 1.0, "c": 1.0, "d": 1.0, "e": 1.0, "f": 1.0, "g": 1.0})
        weighted = apply_field_statistic(edges, stats, verbose=False)
        pd.testing.assert_series_equal(aggregate_profile(weighted), aggregate_profile(edges))


class ApplyVariantTests(unittest.TestCase):
    def test_full_returns_a_copy(self):
        edges = category_edges()
        weighted = apply_variant(edges, "full")
        self.assertIsNot(weighted, edges)
        pd.testing.assert_frame_equal(weighted, edges)

    def test_unknown_variant_rejected(self):
        with self.assertRaises(ValueError):
            apply_variant(category_edges(), "harmonic")
        with self.assertRaises(ValueError):
            validate_variant("ivw", ("full", "fractional", "field"))


if __name__ == "__main__":
    unittest.main()
