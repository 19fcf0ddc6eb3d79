"""Type-7 (linear interpolation) quantiles."""

import math
from collections.abc import Sequence

import numpy as np


def quantile_sorted(sorted_values: np.ndarray, p: float) -> float | np.ndarray:
    """Quantile of data already sorted ascending along axis 0.

    For a 1-D input returns a float; for a 2-D input (paths x steps) returns
    one quantile per column. Empty input yields NaN.
    """
    if not 0.0 <= p <= 1.0 or math.isnan(p):
        raise ValueError(f"p must be in [0, 1] (got {p})")

    arr = np.asarray(sorted_values, dtype=float)
    n = arr.shape[0] if arr.ndim else 0
    if n == 0:
        if arr.ndim > 1:
            return np.full(arr.shape[1:], np.nan)
        return float("nan")

    idx = p * (n - 1)
    lo = int(math.floor(idx))
    hi = min(lo + 1, n - 1)
    w = idx - lo
    result = arr[lo] + (arr[hi] - arr[lo]) * w
    if arr.ndim == 1:
        return float(result)
    return result


def quantile(values: Sequence[float] | np.ndarray, p: float) -> float:
    """Quantile of an unsorted 1-D sequence; NaN for empty input."""
    arr = np.sort(np.asarray(values, dtype=float).ravel())
    return quantile_sorted(arr, p)


def quantiles(values: Sequence[float] | np.ndarray, ps: dict[str, float]) -> dict[str, float]:
    """Several quantiles of one population, sorting only once."""
    arr = np.sort(np.asarray(values, dtype=float).ravel())
    return {key: quantile_sorted(arr, p) for key, p in ps.items()}
