"""Tests for ScheduleManager."""

import sys

sys.path.insert(0, ".")

import pytest

from src.api.state import ScheduleManager
from src.simulation.params import SimulationParameters

QUIET = {"min_interval": 60, "max_interval": 60, "run_immediately": False}


def _params(**overrides) -> SimulationParameters:
    base = dict(risk_per_trade=0.01, win_probability=0.5, payout_multiple=1.2, num_trade_events=20, num_paths=20)
    base.update(overrides)
    return SimulationParameters(**base)


@pytest.fixture
def mgr():
    manager = ScheduleManager(max_active=3)
    yield manager
    manager.stop_all()


class TestScheduleManager:
    def test_initial_state(self, mgr):
        assert mgr.active_count == 0
        assert mgr.list_schedules() == []
        assert mgr.get("missing") is None
        assert mgr.describe("missing") is None

    def test_create(self, mgr):
        sid = mgr.create(_params(), seed=1, **QUIET)
        inst = mgr.get(sid)
        assert inst is not None
        assert inst.schedule_id == sid
        assert inst.scheduler.is_running
        assert mgr.active_count == 1

    def test_ids_are_unique(self, mgr):
        ids = {mgr.create(_params(), **QUIET) for _ in range(3)}
        assert len(ids) == 3

    def test_capacity(self, mgr):
        for _ in range(3):
            mgr.create(_params(), **QUIET)
        with pytest.raises(RuntimeError, match="Too many active schedules"):
            mgr.create(_params(), **QUIET)

    def test_update(self, mgr):
        sid = mgr.create(_params(), **QUIET)
        assert mgr.update(sid, _params(risk_per_trade=0.02)) is True
        assert mgr.get(sid).scheduler.parameters.risk_per_trade == 0.02

    def test_update_unknown_raises(self, mgr):
        with pytest.raises(KeyError):
            mgr.update("missing", _params())

    def test_cancel(self, mgr):
        sid = mgr.create(_params(), **QUIET)
        scheduler = mgr.get(sid).scheduler
        assert mgr.cancel(sid) is True
        assert not scheduler.is_running
        assert mgr.get(sid) is None
        assert mgr.cancel(sid) is False

    def test_stop_all(self, mgr):
        schedulers = [mgr.get(mgr.create(_params(), **QUIET)).scheduler for _ in range(2)]
        mgr.stop_all()
        assert mgr.active_count == 0
        assert not any(s.is_running for s in schedulers)

    def test_describe(self, mgr):
        sid = mgr.create(_params(), **QUIET)
        info = mgr.describe(sid, include_latest=True)
        assert info["schedule_id"] == sid
        assert info["parameters"]["num_paths"] == 20
        assert info["latest"] is None
        assert "parameters" not in mgr.describe(sid)
        assert [s["schedule_id"] for s in mgr.list_schedules()] == [sid]
