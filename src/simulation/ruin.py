"""Ruin probabilities and Kelly-based sizing references.

Kelly and the disciplined fraction are closed-form approximations shown as a
reference point next to the simulated ruin figures, never as a guarantee.
"""

import math
from dataclasses import dataclass

from config.settings import DISCIPLINED_KELLY_MULTIPLIER, DISCIPLINED_RISK_CAP
from src.simulation.params import SimulationParameters
from src.simulation.summary import DistributionSummary


@dataclass(frozen=True)
class RuinEstimate:
    zero_ruin_probability: float
    practical_ruin_probability: float
    kelly_fraction: float
    disciplined_risk_fraction: float
    classic_risk_of_ruin: float
    expectancy_r: float

    def to_dict(self) -> dict:
        return {
            "zero_ruin_probability": self.zero_ruin_probability,
            "practical_ruin_probability": self.practical_ruin_probability,
            "kelly_fraction": self.kelly_fraction,
            "disciplined_risk_fraction": self.disciplined_risk_fraction,
            "classic_risk_of_ruin": self.classic_risk_of_ruin,
            "expectancy_r": self.expectancy_r,
        }


def _clamp(x: float, lo: float, hi: float) -> float:
    if not math.isfinite(x):
        return lo
    return min(hi, max(lo, x))


def kelly_fraction(win_probability: float, payout_multiple: float) -> float:
    """Kelly criterion: f* = (b*p - q) / b, clamped to [0, 1]."""
    if payout_multiple <= 0:
        return 0.0
    p = win_probability
    q = 1 - p
    b = payout_multiple
    return _clamp((b * p - q) / b, 0.0, 1.0)


def disciplined_risk_fraction(win_probability: float, payout_multiple: float) -> float:
    """Half-Kelly with a hard DISCIPLINED_RISK_CAP ceiling, whatever Kelly says."""
    half = DISCIPLINED_KELLY_MULTIPLIER * kelly_fraction(win_probability, payout_multiple)
    return _clamp(half, 0.0, DISCIPLINED_RISK_CAP)


def classic_risk_of_ruin(win_probability: float, risk_per_trade: float) -> float:
    """Textbook even-money approximation (q/p)^(capital units)."""
    p = _clamp(win_probability, 0.0, 1.0)
    f = _clamp(risk_per_trade, 0.0, 1.0)
    if f <= 0:
        return 0.0
    if p <= 0.5:
        return 1.0
    q = 1 - p
    return _clamp((q / p) ** (1 / f), 0.0, 1.0)


def expectancy_r(win_probability: float, payout_multiple: float) -> float:
    """Expected profit per trade in units of risk."""
    return win_probability * payout_multiple - (1 - win_probability)


def estimate_ruin(summary: DistributionSummary, params: SimulationParameters) -> RuinEstimate:
    return RuinEstimate(
        zero_ruin_probability=summary.zero_ruin_probability,
        practical_ruin_probability=summary.practical_ruin_probability,
        kelly_fraction=kelly_fraction(params.win_probability, params.payout_multiple),
        disciplined_risk_fraction=disciplined_risk_fraction(params.win_probability, params.payout_multiple),
        classic_risk_of_ruin=classic_risk_of_ruin(params.win_probability, params.risk_per_trade),
        expectancy_r=expectancy_r(params.win_probability, params.payout_multiple),
    )
