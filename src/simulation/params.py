"""Simulation inputs and per-path outputs."""

import math
from dataclasses import dataclass, field, replace
from enum import Enum

import numpy as np

from config.settings import (
    DEATH_DRAWDOWN_FRACTION,
    DEFAULT_NUM_PATHS,
    INITIAL_CAPITAL,
    MAX_NUM_PATHS,
    MAX_TRADE_EVENTS,
    MIN_NUM_PATHS,
)
from src.simulation.horizon import VolatilityLevel, compute_horizon

DEFAULT_PAYOUT_MULTIPLE = 0.909  # -110 American odds


class InvalidParametersError(ValueError):
    """Raised before any simulation starts when inputs are out of range."""


class SizingMode(Enum):
    PERCENT = "percent"  # risk a fraction of *current* equity (compounding)
    FIXED_DOLLARS = "fixed_dollars"  # risk a constant amount every trade


@dataclass(frozen=True)
class SimulationParameters:
    risk_per_trade: float
    win_probability: float
    payout_multiple: float
    num_trade_events: int
    num_paths: int = DEFAULT_NUM_PATHS
    death_drawdown_fraction: float = DEATH_DRAWDOWN_FRACTION
    start_equity: float = INITIAL_CAPITAL
    sizing_mode: SizingMode = SizingMode.PERCENT

    @property
    def death_line(self) -> float:
        return self.death_drawdown_fraction * self.start_equity

    @property
    def risk_amount(self) -> float:
        """Dollar risk per trade in fixed-dollar mode (starting risk otherwise)."""
        return self.risk_per_trade * self.start_equity

    def validate(self) -> "SimulationParameters":
        """Raise InvalidParametersError on bad input; return self for chaining."""
        errors = []
        if not _finite(self.risk_per_trade) or self.risk_per_trade <= 0:
            errors.append(f"risk_per_trade must be > 0 (got {self.risk_per_trade})")
        elif self.risk_per_trade > 1:
            errors.append(f"risk_per_trade must be <= 1 (got {self.risk_per_trade})")
        if not _finite(self.win_probability) or not 0 < self.win_probability < 1:
            errors.append(f"win_probability must be in (0, 1) (got {self.win_probability})")
        if not _finite(self.payout_multiple) or self.payout_multiple <= 0:
            errors.append(f"payout_multiple must be > 0 (got {self.payout_multiple})")
        if not _finite(self.start_equity) or self.start_equity <= 0:
            errors.append(f"start_equity must be > 0 (got {self.start_equity})")
        if not _finite(self.death_drawdown_fraction) or not 0 <= self.death_drawdown_fraction < 1:
            errors.append(
                f"death_drawdown_fraction must be in [0, 1) (got {self.death_drawdown_fraction})"
            )
        if not isinstance(self.num_trade_events, (int, np.integer)) or not (
            1 <= self.num_trade_events <= MAX_TRADE_EVENTS
        ):
            errors.append(f"num_trade_events must be an int in [1, {MAX_TRADE_EVENTS}]")
        if not isinstance(self.num_paths, (int, np.integer)) or not (
            MIN_NUM_PATHS <= self.num_paths <= MAX_NUM_PATHS
        ):
            errors.append(f"num_paths must be an int in [{MIN_NUM_PATHS}, {MAX_NUM_PATHS}]")
        if not isinstance(self.sizing_mode, SizingMode):
            errors.append(f"unknown sizing_mode: {self.sizing_mode!r}")
        if errors:
            raise InvalidParametersError("; ".join(errors))
        return self

    def with_win_probability(self, win_probability: float) -> "SimulationParameters":
        return replace(self, win_probability=win_probability)

    def with_risk(self, risk_per_trade: float) -> "SimulationParameters":
        return replace(self, risk_per_trade=risk_per_trade)

    def to_dict(self) -> dict:
        return {
            "risk_per_trade": self.risk_per_trade,
            "win_probability": self.win_probability,
            "payout_multiple": self.payout_multiple,
            "num_trade_events": int(self.num_trade_events),
            "num_paths": int(self.num_paths),
            "death_drawdown_fraction": self.death_drawdown_fraction,
            "start_equity": self.start_equity,
            "sizing_mode": self.sizing_mode.value,
        }


@dataclass
class PathResult:
    final_equity: float
    max_drawdown: float
    longest_losing_streak: int
    died_at_step: int | None = None
    # Only kept for paths sampled into the percentile bands
    equity_trace: np.ndarray | None = field(default=None, repr=False)

    @property
    def died(self) -> bool:
        return self.died_at_step is not None


def payout_from_american_odds(odds: float) -> float:
    """Profit per unit risked for American odds (-110 -> 0.909, +150 -> 1.5)."""
    if not _finite(odds) or odds == 0:
        return DEFAULT_PAYOUT_MULTIPLE
    if odds < 0:
        return 100 / abs(odds)
    return odds / 100


def build_parameters(
    account_size: float,
    win_rate_pct: float,
    volatility_level: VolatilityLevel | str = VolatilityLevel.MED,
    risk_pct: float | None = None,
    fixed_risk_dollars: float | None = None,
    sizing_mode: SizingMode | str = SizingMode.PERCENT,
    avg_r: float | None = None,
    american_odds: float | None = None,
    death_drawdown_pct: float | None = None,
    num_trade_events: int | None = None,
    num_paths: int | None = None,
) -> SimulationParameters:
    """Translate application-level inputs (percent units, dollars) into validated parameters.

    The horizon is derived from volatility and risk unless explicitly overridden.
    """
    mode = SizingMode(sizing_mode)

    if not _finite(account_size) or account_size <= 0:
        raise InvalidParametersError(f"account_size must be > 0 (got {account_size})")

    if mode is SizingMode.FIXED_DOLLARS:
        if fixed_risk_dollars is None:
            raise InvalidParametersError("fixed_risk_dollars is required in fixed_dollars mode")
        risk_per_trade = fixed_risk_dollars / account_size
    else:
        if risk_pct is None:
            raise InvalidParametersError("risk_pct is required in percent mode")
        risk_per_trade = risk_pct / 100

    if avg_r is not None:
        payout = avg_r
    elif american_odds is not None:
        payout = payout_from_american_odds(american_odds)
    else:
        raise InvalidParametersError("one of avg_r or american_odds is required")

    if death_drawdown_pct is None:
        death_fraction = DEATH_DRAWDOWN_FRACTION
    else:
        # "70% drawdown" means the death line sits at 30% of the start
        death_fraction = 1 - death_drawdown_pct / 100

    if num_trade_events is None:
        if not _finite(risk_per_trade) or risk_per_trade <= 0:
            raise InvalidParametersError(f"risk_per_trade must be > 0 (got {risk_per_trade})")
        num_trade_events = compute_horizon(volatility_level, risk_per_trade)

    params = SimulationParameters(
        risk_per_trade=risk_per_trade,
        win_probability=win_rate_pct / 100,
        payout_multiple=payout,
        num_trade_events=num_trade_events,
        num_paths=DEFAULT_NUM_PATHS if num_paths is None else num_paths,
        death_drawdown_fraction=death_fraction,
        start_equity=float(account_size),
        sizing_mode=mode,
    )
    return params.validate()


def _finite(x) -> bool:
    try:
        return math.isfinite(x)
    except TypeError:
        return False
