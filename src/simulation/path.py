"""Single equity path under a position-sizing policy."""

import numpy as np

from src.simulation.params import PathResult, SimulationParameters, SizingMode
from src.simulation.random_source import RandomSource


def simulate_path(
    params: SimulationParameters,
    source: RandomSource,
    keep_trace: bool = False,
) -> PathResult:
    """Simulate ``params.num_trade_events`` trades for one account.

    Win when u < win_probability: equity += risk * payout_multiple, else
    equity -= risk. Risk is a fraction of current equity (compounding) or a
    fixed dollar amount. The path stops at the first step where equity falls
    to the death line; a dead path does not recover. The trace (when kept)
    has num_trade_events + 1 points and stays frozen after death.
    """
    n = int(params.num_trade_events)
    start = float(params.start_equity)
    death_line = params.death_line
    p_win = params.win_probability
    payout = params.payout_multiple
    fixed = params.sizing_mode is SizingMode.FIXED_DOLLARS
    fixed_risk = params.risk_amount
    risk_fraction = params.risk_per_trade

    draws = source.uniform(n)

    trace = np.full(n + 1, start) if keep_trace else None

    equity = start
    peak = start
    max_dd = 0.0
    streak = 0
    longest_streak = 0
    died_at = None

    for i in range(n):
        risk = fixed_risk if fixed else equity * risk_fraction
        if risk > 0:
            if draws[i] < p_win:
                equity += risk * payout
                streak = 0
            else:
                equity -= risk
                streak += 1
                if streak > longest_streak:
                    longest_streak = streak
            if equity < 0:
                equity = 0.0

        if equity > peak:
            peak = equity
        dd = (peak - equity) / peak if peak > 0 else 1.0
        if dd > max_dd:
            max_dd = dd

        if trace is not None:
            trace[i + 1] = equity

        if equity <= death_line:
            died_at = i + 1
            if trace is not None:
                trace[i + 2:] = equity
            break

    return PathResult(
        final_equity=equity,
        max_drawdown=min(max(max_dd, 0.0), 1.0),
        longest_losing_streak=longest_streak,
        died_at_step=died_at,
        equity_trace=trace,
    )
