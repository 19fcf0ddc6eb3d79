"""Plain-language survivability read-outs derived from a run."""

import math
from dataclasses import dataclass

from config.settings import SURVIVAL_NORMAL_STREAK, SURVIVAL_OVERSIZE_RISK


@dataclass(frozen=True)
class SurvivalScore:
    score: int
    label: str  # Strong | Watch | Fragile
    tone: str  # accent | neutral | warn
    message: str

    def to_dict(self) -> dict:
        return {"score": self.score, "label": self.label, "tone": self.tone, "message": self.message}


_MESSAGES = {
    "Strong": "Structurally survivable if your edge assumptions are real.",
    "Watch": "Survivability is sensitive to variance. Sizing is the first lever.",
    "Fragile": "Structurally fragile under variance. Reduce risk% and re-run.",
}


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def _unit(x: float | None) -> float:
    if x is None or not math.isfinite(x):
        return 0.0
    return _clamp(x, 0.0, 1.0)


def survival_score(
    ruin_probability: float | None = None,
    drawdown_pct: float | None = None,
    consecutive_losses: float | None = None,
    ev_r: float | None = None,
    risk_pct: float | None = None,
) -> SurvivalScore:
    """Start at 100 and subtract penalties.

    Ruin probability and drawdown depth dominate; streaks beyond a "normal"
    length, negative expectancy, and risk above 2% per trade are secondary.
    """
    ruin = _unit(ruin_probability)
    dd = _unit(drawdown_pct)
    streak = 0
    if consecutive_losses is not None and math.isfinite(consecutive_losses):
        streak = max(0, round(consecutive_losses))
    risk = _unit(risk_pct)

    score = 100.0
    score -= _clamp(ruin * 120, 0, 60)
    score -= _clamp(dd * 80, 0, 40)
    score -= _clamp(max(0, streak - SURVIVAL_NORMAL_STREAK) * 2, 0, 20)
    if ev_r is not None and math.isfinite(ev_r) and ev_r < 0:
        score -= _clamp(abs(ev_r) / 0.1 * 18, 0, 25)
    if risk > SURVIVAL_OVERSIZE_RISK:
        score -= _clamp((risk - SURVIVAL_OVERSIZE_RISK) / 0.01 * 8, 0, 25)

    final = int(_clamp(math.floor(score + 0.5), 0, 100))
    if final >= 80:
        label, tone = "Strong", "accent"
    elif final >= 60:
        label, tone = "Watch", "neutral"
    else:
        label, tone = "Fragile", "warn"
    return SurvivalScore(score=final, label=label, tone=tone, message=_MESSAGES[label])


def survivability_state(dd50_probability: float, band_width: float | None) -> str:
    """State label from the odds of a 50% drawdown and the terminal cone width.

    ``band_width`` is P95 - P05 at the horizon as a multiple of start equity.
    """
    width = 0.7 if band_width is None or not math.isfinite(band_width) else band_width
    if dd50_probability >= 0.55 or width >= 1.0:
        return "Stress"
    if dd50_probability >= 0.40 or width >= 0.85:
        return "Accelerated"
    if dd50_probability >= 0.20 or width >= 0.60:
        return "Recovery-dependent"
    return "Stable"
