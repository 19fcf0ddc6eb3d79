"""Scenario variants: base run, overstated-edge stress run, disciplined sizing run."""

from dataclasses import dataclass

from config.settings import BAND_SAMPLE_SIZE, SIMULATION_MAX_WORKERS, STRESS_WIN_DELTA, STRESS_WIN_FLOOR
from src.simulation.monte_carlo import MonteCarloRunner
from src.simulation.params import SimulationParameters
from src.simulation.random_source import RandomSource
from src.simulation.ruin import RuinEstimate, disciplined_risk_fraction, estimate_ruin
from src.simulation.summary import DistributionSummary, summarize


@dataclass(frozen=True)
class VariantResult:
    parameters: SimulationParameters
    distribution: DistributionSummary
    ruin: RuinEstimate

    def to_dict(self, include_bands: bool = True) -> dict:
        return {
            "parameters": self.parameters.to_dict(),
            "distribution": self.distribution.to_dict(include_bands=include_bands),
            "ruin": self.ruin.to_dict(),
        }


@dataclass(frozen=True)
class StressSensitivity:
    """Signed deltas, stressed minus base."""

    win_probability_delta: float
    practical_ruin_delta: float
    zero_ruin_delta: float
    median_final_equity_delta: float
    p90_max_drawdown_delta: float

    def to_dict(self) -> dict:
        return {
            "win_probability_delta": self.win_probability_delta,
            "practical_ruin_delta": self.practical_ruin_delta,
            "zero_ruin_delta": self.zero_ruin_delta,
            "median_final_equity_delta": self.median_final_equity_delta,
            "p90_max_drawdown_delta": self.p90_max_drawdown_delta,
        }


@dataclass(frozen=True)
class DisciplinedComparison:
    """Same assumptions re-run at the capped half-Kelly risk fraction."""

    risk_per_trade: float
    practical_ruin_probability: float
    median_final_equity: float
    practical_ruin_delta: float  # disciplined minus base

    def to_dict(self) -> dict:
        return {
            "risk_per_trade": self.risk_per_trade,
            "practical_ruin_probability": self.practical_ruin_probability,
            "median_final_equity": self.median_final_equity,
            "practical_ruin_delta": self.practical_ruin_delta,
        }


def run_variant(
    params: SimulationParameters,
    random_source: RandomSource,
    with_bands: bool = True,
    band_sample_size: int = BAND_SAMPLE_SIZE,
    max_workers: int = SIMULATION_MAX_WORKERS,
) -> VariantResult:
    """Runner -> summarizer -> ruin estimator for one parameter set."""
    results = MonteCarloRunner(
        params,
        random_source,
        band_sample_size=band_sample_size if with_bands else 0,
        max_workers=max_workers,
    ).run()
    distribution = summarize(results, params, with_bands=with_bands)
    return VariantResult(parameters=params, distribution=distribution, ruin=estimate_ruin(distribution, params))


def stressed_win_probability(
    win_probability: float,
    delta: float = STRESS_WIN_DELTA,
    floor: float = STRESS_WIN_FLOOR,
) -> float:
    return max(win_probability - delta, floor)


class StressTester:
    """Re-runs the pipeline with the win probability cut by a fixed delta.

    Pass a clone of the base run's random source to reuse its draws (common
    random numbers), so the sensitivity reflects only the edge change.
    """

    def __init__(
        self,
        params: SimulationParameters,
        random_source: RandomSource,
        delta: float = STRESS_WIN_DELTA,
        floor: float = STRESS_WIN_FLOOR,
        with_bands: bool = True,
        max_workers: int = SIMULATION_MAX_WORKERS,
    ) -> None:
        self.params = params
        self.random_source = random_source
        self.delta = delta
        self.floor = floor
        self.with_bands = with_bands
        self.max_workers = max_workers

    @property
    def stressed_params(self) -> SimulationParameters:
        return self.params.with_win_probability(
            stressed_win_probability(self.params.win_probability, self.delta, self.floor)
        )

    def run(self) -> VariantResult:
        return run_variant(
            self.stressed_params,
            self.random_source,
            with_bands=self.with_bands,
            max_workers=self.max_workers,
        )

    @staticmethod
    def sensitivity(base: VariantResult, stressed: VariantResult) -> StressSensitivity:
        return StressSensitivity(
            win_probability_delta=stressed.parameters.win_probability - base.parameters.win_probability,
            practical_ruin_delta=stressed.ruin.practical_ruin_probability - base.ruin.practical_ruin_probability,
            zero_ruin_delta=stressed.ruin.zero_ruin_probability - base.ruin.zero_ruin_probability,
            median_final_equity_delta=(
                stressed.distribution.median_final_equity - base.distribution.median_final_equity
            ),
            p90_max_drawdown_delta=stressed.distribution.p90_max_drawdown - base.distribution.p90_max_drawdown,
        )


def compare_disciplined(
    base: VariantResult,
    random_source: RandomSource,
    max_workers: int = SIMULATION_MAX_WORKERS,
) -> DisciplinedComparison | None:
    """None when Kelly finds no edge (disciplined fraction of 0)."""
    params = base.parameters
    risk = disciplined_risk_fraction(params.win_probability, params.payout_multiple)
    if risk <= 0:
        return None

    variant = run_variant(params.with_risk(risk), random_source, with_bands=False, max_workers=max_workers)
    practical = variant.ruin.practical_ruin_probability
    return DisciplinedComparison(
        risk_per_trade=risk,
        practical_ruin_probability=practical,
        median_final_equity=variant.distribution.median_final_equity,
        practical_ruin_delta=practical - base.ruin.practical_ruin_probability,
    )
