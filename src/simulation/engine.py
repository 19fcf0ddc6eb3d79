"""One-shot survivability pipeline: base run, stress run, sizing references."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from config.settings import SIMULATION_MAX_WORKERS
from src.simulation.params import SimulationParameters
from src.simulation.random_source import NumpyRandomSource, RandomSource
from src.simulation.score import SurvivalScore, survivability_state, survival_score
from src.simulation.stress import (
    DisciplinedComparison,
    StressSensitivity,
    StressTester,
    VariantResult,
    compare_disciplined,
    run_variant,
)
from src.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class RunSummary:
    parameters: SimulationParameters
    base: VariantResult
    stressed: VariantResult
    sensitivity: StressSensitivity
    disciplined: DisciplinedComparison | None
    survival: SurvivalScore
    state: str
    num_paths: int
    num_trade_events: int
    # Timestamps are metadata: two seeded runs compare equal regardless of when they ran
    started_at: datetime = field(compare=False)
    completed_at: datetime = field(compare=False)

    @property
    def elapsed_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self, include_bands: bool = True) -> dict:
        return {
            "parameters": self.parameters.to_dict(),
            "base": self.base.to_dict(include_bands=include_bands),
            "stressed": self.stressed.to_dict(include_bands=include_bands),
            "sensitivity": self.sensitivity.to_dict(),
            "disciplined": self.disciplined.to_dict() if self.disciplined is not None else None,
            "survival": self.survival.to_dict(),
            "state": self.state,
            "num_paths": self.num_paths,
            "num_trade_events": self.num_trade_events,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
        }


def simulate(
    params: SimulationParameters,
    random_source: RandomSource | None = None,
    with_bands: bool = True,
    include_disciplined: bool = True,
    max_workers: int = SIMULATION_MAX_WORKERS,
) -> RunSummary:
    """Validate, then run the base, stressed and disciplined variants.

    All variants replay the same per-path draws (common random numbers), so
    differences between them come from the parameters alone. Raises
    InvalidParametersError before any work when the inputs are out of range.
    """
    params.validate()
    source = random_source if random_source is not None else NumpyRandomSource()
    run_source = source.spawn(1)[0]
    started_at = datetime.now(timezone.utc)

    base = run_variant(params, run_source.clone(), with_bands=with_bands, max_workers=max_workers)

    tester = StressTester(params, run_source.clone(), with_bands=with_bands, max_workers=max_workers)
    stressed = tester.run()
    sensitivity = StressTester.sensitivity(base, stressed)

    disciplined = None
    if include_disciplined:
        disciplined = compare_disciplined(base, run_source.clone(), max_workers=max_workers)

    dist = base.distribution
    band_width = None
    if dist.bands is not None and dist.bands.terminal_width() is not None:
        band_width = dist.bands.terminal_width() / params.start_equity

    survival = survival_score(
        ruin_probability=base.ruin.practical_ruin_probability,
        drawdown_pct=dist.p90_max_drawdown,
        consecutive_losses=dist.p90_losing_streak,
        ev_r=base.ruin.expectancy_r,
        risk_pct=params.risk_per_trade,
    )

    summary = RunSummary(
        parameters=params,
        base=base,
        stressed=stressed,
        sensitivity=sensitivity,
        disciplined=disciplined,
        survival=survival,
        state=survivability_state(dist.drawdown_50_probability, band_width),
        num_paths=int(params.num_paths),
        num_trade_events=int(params.num_trade_events),
        started_at=started_at,
        completed_at=datetime.now(timezone.utc),
    )
    log.info(
        "simulation_complete",
        paths=summary.num_paths,
        trades=summary.num_trade_events,
        practical_ruin=round(base.ruin.practical_ruin_probability, 4),
        stressed_practical_ruin=round(stressed.ruin.practical_ruin_probability, 4),
        elapsed=round(summary.elapsed_seconds, 3),
    )
    return summary
