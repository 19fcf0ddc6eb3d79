"""Tests for the distribution summarizer and percentile bands."""

import sys

sys.path.insert(0, ".")

import numpy as np
import pytest

from src.simulation.monte_carlo import run_paths
from src.simulation.params import PathResult, SimulationParameters
from src.simulation.random_source import NumpyRandomSource
from src.simulation.summary import build_bands, summarize


def _params(**overrides) -> SimulationParameters:
    base = dict(risk_per_trade=0.01, win_probability=0.5, payout_multiple=1.0, num_trade_events=2, num_paths=4)
    base.update(overrides)
    return SimulationParameters(**base)


def _results() -> list[PathResult]:
    return [
        PathResult(0.0, 1.0, 2, died_at_step=2, equity_trace=np.array([10000.0, 4000.0, 0.0])),
        PathResult(2000.0, 0.8, 1, died_at_step=1, equity_trace=np.array([10000.0, 2000.0, 2000.0])),
        PathResult(10000.0, 0.0, 0, equity_trace=np.array([10000.0, 10000.0, 10000.0])),
        PathResult(12000.0, 0.1, 1, equity_trace=np.array([10000.0, 13000.0, 12000.0])),
    ]


class TestSummarize:
    def test_terminal_percentiles(self):
        summary = summarize(_results(), _params())
        assert summary.num_paths == 4
        assert summary.p10_final_equity == pytest.approx(600.0)
        assert summary.median_final_equity == pytest.approx(6000.0)
        assert summary.p90_final_equity == pytest.approx(11400.0)

    def test_ruin_counts(self):
        summary = summarize(_results(), _params())
        assert summary.zero_ruin_count == 1
        assert summary.practical_ruin_count == 2
        assert summary.zero_ruin_probability == pytest.approx(0.25)
        assert summary.practical_ruin_probability == pytest.approx(0.5)
        assert summary.zero_ruin_count <= summary.practical_ruin_count

    def test_drawdown_and_time_to_death(self):
        summary = summarize(_results(), _params())
        assert summary.drawdown_50_probability == pytest.approx(0.5)
        assert summary.median_steps_to_death == pytest.approx(1.5)
        assert summary.median_losing_streak == pytest.approx(1.0)

    def test_no_deaths_has_no_time_to_death(self):
        survivors = [PathResult(11000.0, 0.05, 2), PathResult(9000.0, 0.1, 3)]
        summary = summarize(survivors, _params(num_paths=2), with_bands=False)
        assert summary.median_steps_to_death is None
        assert summary.bands is None

    def test_degenerate_values_clamped(self):
        results = [PathResult(float("nan"), float("inf"), 0), PathResult(10000.0, 0.0, 0)]
        summary = summarize(results, _params(num_paths=2), with_bands=False)
        assert summary.degenerate_count == 2
        assert summary.zero_ruin_count == 1
        assert np.isfinite(summary.median_final_equity)

    def test_empty_population_raises(self):
        with pytest.raises(ValueError, match="empty"):
            summarize([], _params())

    def test_to_dict_optionally_drops_bands(self):
        summary = summarize(_results(), _params())
        assert "bands" in summary.to_dict()
        assert "bands" not in summary.to_dict(include_bands=False)


class TestBands:
    def test_shape_and_ordering(self):
        bands, degenerate = build_bands(_results(), 2)
        assert degenerate == 0
        assert bands.num_steps == 3
        for i in range(3):
            assert bands.p05[i] <= bands.p25[i] <= bands.p50[i] <= bands.p75[i] <= bands.p95[i]
        assert bands.p50[0] == 10000.0

    def test_dead_paths_stay_in_band(self):
        bands, _ = build_bands(_results(), 2)
        assert bands.p05[-1] < 2000.0

    def test_terminal_width(self):
        bands, _ = build_bands(_results(), 2)
        assert bands.terminal_width() == pytest.approx(bands.p95[-1] - bands.p05[-1])

    def test_no_traces(self):
        bands, degenerate = build_bands([PathResult(1.0, 0.0, 0)], 2)
        assert bands is None
        assert degenerate == 0

    def test_bands_frame(self):
        summary = summarize(_results(), _params())
        df = summary.bands_frame()
        assert list(df.columns) == ["step", "p05", "p25", "p50", "p75", "p95"]
        assert len(df) == 3
        assert df["step"].tolist() == [0, 1, 2]

    def test_bands_from_simulated_population(self):
        params = _params(num_trade_events=50, num_paths=200, payout_multiple=1.2)
        summary = summarize(run_paths(params, NumpyRandomSource(8)), params)
        assert summary.bands.num_steps == 51
        assert all(v == params.start_equity for v in summary.bands.p50[:1])
        assert summary.bands.p95[-1] > summary.bands.p05[-1]
