"""Tests for the path simulator and Monte Carlo runner."""

import sys
from unittest.mock import patch

sys.path.insert(0, ".")

import numpy as np
import pytest

from src.simulation.monte_carlo import MonteCarloRunner, run_paths
from src.simulation.params import SimulationParameters, SizingMode
from src.simulation.path import simulate_path
from src.simulation.random_source import NumpyRandomSource


def _params(**overrides) -> SimulationParameters:
    base = dict(risk_per_trade=0.01, win_probability=0.5, payout_multiple=1.2, num_trade_events=60, num_paths=40)
    base.update(overrides)
    return SimulationParameters(**base)


class TestRandomSource:
    def test_seeded_streams_repeat(self):
        a = NumpyRandomSource(7).uniform(5)
        b = NumpyRandomSource(7).uniform(5)
        assert np.array_equal(a, b)

    def test_clone_replays_draws(self):
        source = NumpyRandomSource(7)
        clone = source.clone()
        assert np.array_equal(source.uniform(10), clone.uniform(10))

    def test_spawned_children_differ(self):
        first, second = NumpyRandomSource(7).spawn(2)
        assert not np.array_equal(first.uniform(10), second.uniform(10))

    def test_draws_in_unit_interval(self):
        draws = NumpyRandomSource(1).uniform(1000)
        assert ((draws >= 0) & (draws < 1)).all()


class TestSimulatePath:
    def test_always_losing_dies_at_death_line(self):
        # 10000 * 0.9^k <= 3000 first holds at k = 12
        params = _params(risk_per_trade=0.1, win_probability=0.0, num_trade_events=50)
        result = simulate_path(params, NumpyRandomSource(1))
        assert result.died
        assert result.died_at_step == 12
        assert result.final_equity == pytest.approx(10000 * 0.9 ** 12)
        assert result.longest_losing_streak == 12
        assert result.max_drawdown == pytest.approx(1 - 0.9 ** 12)

    def test_always_winning_never_draws_down(self):
        params = _params(win_probability=1.0, num_trade_events=20)
        result = simulate_path(params, NumpyRandomSource(1))
        assert not result.died
        assert result.max_drawdown == 0.0
        assert result.longest_losing_streak == 0
        assert result.final_equity == pytest.approx(10000 * 1.012 ** 20)

    def test_trace_frozen_after_death(self):
        params = _params(risk_per_trade=0.1, win_probability=0.0, num_trade_events=50)
        result = simulate_path(params, NumpyRandomSource(1), keep_trace=True)
        trace = result.equity_trace
        assert len(trace) == 51
        assert trace[0] == 10000
        assert (trace[12:] == result.final_equity).all()
        assert (np.diff(trace[:13]) < 0).all()

    def test_no_trace_by_default(self):
        assert simulate_path(_params(), NumpyRandomSource(1)).equity_trace is None

    def test_fixed_dollar_risk_is_constant(self):
        params = _params(
            risk_per_trade=0.1,
            win_probability=0.0,
            num_trade_events=50,
            sizing_mode=SizingMode.FIXED_DOLLARS,
        )
        result = simulate_path(params, NumpyRandomSource(1), keep_trace=True)
        assert result.died_at_step == 7
        assert result.final_equity == pytest.approx(3000)
        assert np.allclose(np.diff(result.equity_trace[:8]), -1000)

    def test_fixed_dollar_equity_floors_at_zero(self):
        params = _params(
            risk_per_trade=0.6,
            win_probability=0.0,
            death_drawdown_fraction=0.0,
            sizing_mode=SizingMode.FIXED_DOLLARS,
        )
        result = simulate_path(params, NumpyRandomSource(1))
        assert result.final_equity == 0.0
        assert result.died_at_step == 2
        assert result.max_drawdown == 1.0

    def test_same_source_same_path(self):
        params = _params()
        a = simulate_path(params, NumpyRandomSource(99))
        b = simulate_path(params, NumpyRandomSource(99))
        assert a == b


class TestMonteCarloRunner:
    def test_returns_one_result_per_path(self):
        results = run_paths(_params(num_paths=25), NumpyRandomSource(3))
        assert len(results) == 25

    def test_seeded_runs_are_identical(self):
        params = _params()
        a = [r.final_equity for r in run_paths(params, NumpyRandomSource(3))]
        b = [r.final_equity for r in run_paths(params, NumpyRandomSource(3))]
        assert a == b

    def test_different_seeds_differ(self):
        params = _params()
        a = [r.final_equity for r in run_paths(params, NumpyRandomSource(3))]
        b = [r.final_equity for r in run_paths(params, NumpyRandomSource(4))]
        assert a != b

    def test_band_sample_limits_traces(self):
        results = MonteCarloRunner(_params(num_paths=30), NumpyRandomSource(3), band_sample_size=10).run()
        assert sum(r.equity_trace is not None for r in results) == 10
        assert all(r.equity_trace is not None for r in results[:10])

    def test_zero_win_probability_population(self):
        params = _params(risk_per_trade=0.05, win_probability=0.0, num_trade_events=100)
        results = run_paths(params, NumpyRandomSource(3))
        assert all(r.final_equity <= params.start_equity for r in results)
        assert all(r.died for r in results)
        assert all(r.final_equity <= params.death_line for r in results)

    def test_parallel_matches_sequential(self):
        params = _params(num_paths=24, num_trade_events=30)
        sequential = run_paths(params, NumpyRandomSource(5), max_workers=1)
        with patch("src.simulation.monte_carlo.SIMULATION_PARALLEL_MIN_PATHS", 10):
            parallel = run_paths(params, NumpyRandomSource(5), max_workers=2)
        assert [r.final_equity for r in parallel] == [r.final_equity for r in sequential]
        assert [r.died_at_step for r in parallel] == [r.died_at_step for r in sequential]
