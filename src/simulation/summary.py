"""Reduce a population of paths to terminal percentiles and time-indexed bands."""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from config.settings import BAND_PERCENTILES
from src.simulation.params import PathResult, SimulationParameters
from src.simulation.quantile import quantile, quantile_sorted, quantiles
from src.utils.logger import get_logger

log = get_logger(__name__)

DD50_THRESHOLD = 0.5


@dataclass(frozen=True)
class PercentileBands:
    p05: tuple[float, ...]
    p25: tuple[float, ...]
    p50: tuple[float, ...]
    p75: tuple[float, ...]
    p95: tuple[float, ...]

    @property
    def num_steps(self) -> int:
        return len(self.p50)

    def terminal_width(self) -> float | None:
        """P95 - P05 at the last step."""
        if self.num_steps < 2:
            return None
        return self.p95[-1] - self.p05[-1]

    def to_dict(self) -> dict[str, list[float]]:
        return {key: list(getattr(self, key)) for key in BAND_PERCENTILES}


@dataclass(frozen=True)
class DistributionSummary:
    num_paths: int
    p10_final_equity: float
    median_final_equity: float
    p90_final_equity: float
    median_max_drawdown: float
    p90_max_drawdown: float
    median_losing_streak: float
    p90_losing_streak: float
    zero_ruin_count: int
    practical_ruin_count: int
    zero_ruin_probability: float
    practical_ruin_probability: float
    drawdown_50_probability: float
    median_steps_to_death: float | None
    degenerate_count: int
    bands: PercentileBands | None

    def bands_frame(self) -> pd.DataFrame:
        """Bands as a DataFrame indexed by step (empty when bands were not built)."""
        if self.bands is None:
            return pd.DataFrame(columns=["step", *BAND_PERCENTILES])
        df = pd.DataFrame(self.bands.to_dict())
        df.insert(0, "step", range(len(df)))
        return df

    def to_dict(self, include_bands: bool = True) -> dict:
        payload = {
            "num_paths": self.num_paths,
            "p10_final_equity": self.p10_final_equity,
            "median_final_equity": self.median_final_equity,
            "p90_final_equity": self.p90_final_equity,
            "median_max_drawdown": self.median_max_drawdown,
            "p90_max_drawdown": self.p90_max_drawdown,
            "median_losing_streak": self.median_losing_streak,
            "p90_losing_streak": self.p90_losing_streak,
            "zero_ruin_count": self.zero_ruin_count,
            "practical_ruin_count": self.practical_ruin_count,
            "zero_ruin_probability": self.zero_ruin_probability,
            "practical_ruin_probability": self.practical_ruin_probability,
            "drawdown_50_probability": self.drawdown_50_probability,
            "median_steps_to_death": self.median_steps_to_death,
            "degenerate_count": self.degenerate_count,
        }
        if include_bands:
            payload["bands"] = self.bands.to_dict() if self.bands is not None else None
        return payload


def _sanitize(values: np.ndarray) -> tuple[np.ndarray, int]:
    """Replace NaN/inf with 0 and report how many were replaced."""
    bad = ~np.isfinite(values)
    n_bad = int(bad.sum())
    if n_bad:
        values = np.where(bad, 0.0, values)
    return values, n_bad


def build_bands(results: list[PathResult], num_trade_events: int) -> tuple[PercentileBands | None, int]:
    """Cross-sectional P05..P95 per step from the paths that kept a trace.

    Dead paths contribute their equity frozen at death, so the band keeps
    showing where failed outcomes ended up.
    """
    traces = [r.equity_trace for r in results if r.equity_trace is not None]
    if not traces:
        return None, 0

    width = num_trade_events + 1
    matrix = np.vstack([t[:width] for t in traces])
    matrix, n_bad = _sanitize(matrix)
    matrix.sort(axis=0)

    columns = {
        key: tuple(float(v) for v in quantile_sorted(matrix, p))
        for key, p in BAND_PERCENTILES.items()
    }
    return PercentileBands(**columns), n_bad


def summarize(
    results: list[PathResult],
    params: SimulationParameters,
    with_bands: bool = True,
) -> DistributionSummary:
    """Terminal distribution, ruin counts and (optionally) per-step bands."""
    n = len(results)
    if n == 0:
        raise ValueError("Cannot summarize an empty path population")

    finals, bad_finals = _sanitize(np.array([r.final_equity for r in results], dtype=float))
    dds, bad_dds = _sanitize(np.array([r.max_drawdown for r in results], dtype=float))
    streaks = np.array([r.longest_losing_streak for r in results], dtype=float)
    death_steps = [r.died_at_step for r in results if r.died_at_step is not None]

    final_q = quantiles(finals, {"p10": 0.10, "median": 0.50, "p90": 0.90})
    dd_q = quantiles(dds, {"median": 0.50, "p90": 0.90})
    streak_q = quantiles(streaks, {"median": 0.50, "p90": 0.90})

    zero_ruin = int((finals <= 0).sum())
    practical_ruin = int((finals <= params.death_line).sum())
    dd50 = int((dds >= DD50_THRESHOLD).sum())

    bands = None
    bad_bands = 0
    if with_bands:
        bands, bad_bands = build_bands(results, int(params.num_trade_events))

    degenerate = bad_finals + bad_dds + bad_bands
    if degenerate:
        log.warning("degenerate_values_clamped", count=degenerate, paths=n)

    return DistributionSummary(
        num_paths=n,
        p10_final_equity=final_q["p10"],
        median_final_equity=final_q["median"],
        p90_final_equity=final_q["p90"],
        median_max_drawdown=dd_q["median"],
        p90_max_drawdown=dd_q["p90"],
        median_losing_streak=streak_q["median"],
        p90_losing_streak=streak_q["p90"],
        zero_ruin_count=zero_ruin,
        practical_ruin_count=practical_ruin,
        zero_ruin_probability=zero_ruin / n,
        practical_ruin_probability=practical_ruin / n,
        drawdown_50_probability=dd50 / n,
        median_steps_to_death=quantile(death_steps, 0.5) if death_steps else None,
        degenerate_count=degenerate,
        bands=bands,
    )
