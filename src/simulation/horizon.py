"""Simulation horizon (number of trade events) from volatility regime and sizing."""

import math
from enum import Enum

from config.settings import (
    HORIZON_BASE_TRADES,
    HORIZON_EXPONENT,
    HORIZON_MAX_ADJUSTMENT,
    HORIZON_MIN_ADJUSTMENT,
    HORIZON_REFERENCE_RISK,
)

_MIN_RISK = 1e-6


class VolatilityLevel(Enum):
    LOW = "LOW"
    MED = "MED"
    HIGH = "HIGH"
    EXTREME = "EXTREME"

    @classmethod
    def parse(cls, value: "VolatilityLevel | str") -> "VolatilityLevel":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unsupported volatility level: {value}") from None


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def horizon_bounds(volatility: VolatilityLevel | str) -> tuple[int, int]:
    base = HORIZON_BASE_TRADES[VolatilityLevel.parse(volatility).value]
    return (
        round_half_up(base * HORIZON_MIN_ADJUSTMENT),
        round_half_up(base * HORIZON_MAX_ADJUSTMENT),
    )


def compute_horizon(volatility: VolatilityLevel | str, risk_per_trade: float) -> int:
    """Trades to simulate. Higher volatility and higher risk both shorten the window.

    Calibration heuristic: risk above HORIZON_REFERENCE_RISK compresses the base
    horizon (down to 0.55x), risk below it extends it (up to 1.5x).
    """
    base = HORIZON_BASE_TRADES[VolatilityLevel.parse(volatility).value]
    risk = max(_MIN_RISK, risk_per_trade)
    adjustment = (HORIZON_REFERENCE_RISK / risk) ** HORIZON_EXPONENT
    clamped = min(HORIZON_MAX_ADJUSTMENT, max(HORIZON_MIN_ADJUSTMENT, adjustment))
    return round_half_up(base * clamped)
