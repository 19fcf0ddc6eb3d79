"""ScheduleManager — owns the background recompute schedules served by the API."""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from config.settings import MAX_ACTIVE_SCHEDULES
from src.simulation.engine import RunSummary
from src.simulation.params import SimulationParameters
from src.simulation.publisher import Update
from src.simulation.random_source import NumpyRandomSource
from src.simulation.scheduler import RecomputeScheduler
from src.utils.logger import get_logger

log = get_logger(__name__)


@dataclass
class ScheduleInstance:
    schedule_id: str
    scheduler: RecomputeScheduler
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ScheduleManager:
    """Thread-safe registry of RecomputeScheduler instances keyed by id."""

    def __init__(self, max_active: int = MAX_ACTIVE_SCHEDULES) -> None:
        self._lock = threading.Lock()
        self._schedules: dict[str, ScheduleInstance] = {}
        self.max_active = max_active

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._schedules)

    def create(
        self,
        params: SimulationParameters,
        seed: int | None = None,
        **options,
    ) -> str:
        """Start a schedule. Returns its id. RuntimeError when at capacity."""
        schedule_id = uuid.uuid4().hex[:12]
        with self._lock:
            if len(self._schedules) >= self.max_active:
                raise RuntimeError(f"Too many active schedules (max {self.max_active})")
            scheduler = RecomputeScheduler(
                params,
                on_update=self._make_handler(schedule_id),
                random_source=NumpyRandomSource(seed),
                **options,
            )
            self._schedules[schedule_id] = ScheduleInstance(schedule_id=schedule_id, scheduler=scheduler)
        scheduler.start()
        log.info("schedule_created", schedule_id=schedule_id, paths=params.num_paths)
        return schedule_id

    def _make_handler(self, schedule_id: str):
        def _on_update(update: Update) -> None:
            if isinstance(update, RunSummary):
                log.debug("schedule_updated", schedule_id=schedule_id)
                return
            log.warning("schedule_run_failed", schedule_id=schedule_id, error=str(update))

        return _on_update

    def get(self, schedule_id: str) -> ScheduleInstance | None:
        with self._lock:
            return self._schedules.get(schedule_id)

    def update(self, schedule_id: str, params: SimulationParameters) -> bool:
        """Restart the schedule with new parameters. KeyError if unknown."""
        with self._lock:
            inst = self._schedules.get(schedule_id)
        if inst is None:
            raise KeyError(schedule_id)
        return inst.scheduler.update_parameters(params)

    def cancel(self, schedule_id: str) -> bool:
        with self._lock:
            inst = self._schedules.pop(schedule_id, None)
        if inst is None:
            return False
        inst.scheduler.cancel()
        log.info("schedule_cancelled", schedule_id=schedule_id)
        return True

    def stop_all(self) -> None:
        with self._lock:
            instances = list(self._schedules.values())
            self._schedules.clear()
        for inst in instances:
            inst.scheduler.cancel()
            log.info("schedule_cancelled", schedule_id=inst.schedule_id)

    def describe(self, schedule_id: str, include_latest: bool = False) -> dict[str, Any] | None:
        inst = self.get(schedule_id)
        if inst is None:
            return None
        info = {"schedule_id": schedule_id, **inst.scheduler.state.to_dict()}
        if include_latest:
            latest = inst.scheduler.latest
            info["parameters"] = inst.scheduler.parameters.to_dict()
            info["latest"] = latest.to_dict(include_bands=False) if latest is not None else None
        return info

    def list_schedules(self) -> list[dict[str, Any]]:
        with self._lock:
            ids = list(self._schedules)
        result = []
        for schedule_id in ids:
            info = self.describe(schedule_id)
            if info is not None:
                result.append(info)
        return result
