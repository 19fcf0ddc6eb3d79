"""Pydantic request/response models for the API."""

from pydantic import BaseModel, Field

from src.simulation.horizon import VolatilityLevel
from src.simulation.params import SimulationParameters, SizingMode, build_parameters


class SimulationRequest(BaseModel):
    account_size: float = 10000.0
    sizing_mode: SizingMode = SizingMode.PERCENT
    risk_pct: float | None = 1.0
    fixed_risk_dollars: float | None = None
    win_rate_pct: float = 50.0
    avg_r: float | None = None
    american_odds: float | None = -110
    volatility_level: VolatilityLevel = VolatilityLevel.MED
    death_drawdown_pct: float | None = None
    num_trade_events: int | None = None
    num_paths: int | None = None
    seed: int | None = Field(default=None, ge=0)

    def to_parameters(self) -> SimulationParameters:
        """Raises InvalidParametersError for out-of-range values."""
        return build_parameters(
            account_size=self.account_size,
            win_rate_pct=self.win_rate_pct,
            volatility_level=self.volatility_level,
            risk_pct=self.risk_pct,
            fixed_risk_dollars=self.fixed_risk_dollars,
            sizing_mode=self.sizing_mode,
            avg_r=self.avg_r,
            american_odds=self.american_odds,
            death_drawdown_pct=self.death_drawdown_pct,
            num_trade_events=self.num_trade_events,
            num_paths=self.num_paths,
        )


class ScheduleRequest(SimulationRequest):
    min_interval: float | None = Field(default=None, ge=0)
    max_interval: float | None = Field(default=None, ge=0)
    run_immediately: bool = True


class ScheduleStateResponse(BaseModel):
    schedule_id: str
    generation: int
    status: str
    next_run_eta_seconds: float | None = None
    last_error: str | None = None
    runs_completed: int = 0
    runs_discarded: int = 0
    runs_errored: int = 0


class ScheduleDetailResponse(ScheduleStateResponse):
    parameters: dict
    latest: dict | None = None


class HealthResponse(BaseModel):
    status: str
    active_schedules: int = 0
