"""Tests for type-7 quantiles."""

import math
import sys

sys.path.insert(0, ".")

import numpy as np
import pytest

from src.simulation.quantile import quantile, quantile_sorted, quantiles


class TestQuantile:
    def test_median_interpolates(self):
        assert quantile([1, 2, 3, 4], 0.5) == pytest.approx(2.5)

    def test_endpoints_are_min_and_max(self):
        values = [7.0, -3.0, 12.5, 0.0, 4.2]
        assert quantile(values, 0.0) == -3.0
        assert quantile(values, 1.0) == 12.5

    def test_order_invariant(self):
        rng = np.random.default_rng(3)
        values = rng.normal(size=101)
        shuffled = rng.permutation(values)
        for p in (0.05, 0.25, 0.5, 0.9):
            assert quantile(values, p) == quantile(shuffled, p)

    def test_monotonic_in_p(self):
        values = np.random.default_rng(11).exponential(size=257)
        qs = [quantile(values, p) for p in np.linspace(0, 1, 21)]
        assert all(a <= b for a, b in zip(qs, qs[1:]))

    def test_single_value(self):
        assert quantile([5.0], 0.3) == 5.0

    def test_empty_is_nan(self):
        assert math.isnan(quantile([], 0.5))

    @pytest.mark.parametrize("p", [-0.01, 1.01, float("nan")])
    def test_bad_p_raises(self, p):
        with pytest.raises(ValueError, match="p must be in"):
            quantile([1, 2, 3], p)

    def test_matches_numpy_linear(self):
        values = np.random.default_rng(5).uniform(size=50)
        assert quantile(values, 0.37) == pytest.approx(np.quantile(values, 0.37))


class TestQuantileSorted:
    def test_column_wise_on_matrix(self):
        matrix = np.array([[1.0, 10.0], [2.0, 20.0], [3.0, 30.0]])
        result = quantile_sorted(matrix, 0.5)
        assert list(result) == [2.0, 20.0]

    def test_empty_matrix_is_nan_per_column(self):
        result = quantile_sorted(np.empty((0, 3)), 0.5)
        assert result.shape == (3,)
        assert np.isnan(result).all()

    def test_quantiles_dict(self):
        result = quantiles([4, 1, 3, 2], {"low": 0.0, "mid": 0.5, "high": 1.0})
        assert result == {"low": 1.0, "mid": 2.5, "high": 4.0}
