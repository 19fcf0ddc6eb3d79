"""Simulation endpoints: one-shot runs and background recompute schedules."""

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import get_schedule_manager
from src.api.schemas import ScheduleDetailResponse, ScheduleRequest, ScheduleStateResponse, SimulationRequest
from src.api.state import ScheduleManager
from src.simulation.engine import simulate
from src.simulation.params import InvalidParametersError, SimulationParameters
from src.simulation.random_source import NumpyRandomSource
from src.utils.logger import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/api/simulation", tags=["simulation"])


def _to_parameters(req: SimulationRequest) -> SimulationParameters:
    try:
        return req.to_parameters()
    except InvalidParametersError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _schedule_options(req: ScheduleRequest) -> dict:
    options = {"run_immediately": req.run_immediately}
    if req.min_interval is not None:
        options["min_interval"] = req.min_interval
    if req.max_interval is not None:
        options["max_interval"] = req.max_interval
    return options


@router.post("/run")
def run_simulation(req: SimulationRequest, include_bands: bool = True):
    params = _to_parameters(req)
    summary = simulate(params, NumpyRandomSource(req.seed))
    return summary.to_dict(include_bands=include_bands)


@router.post("/schedules", response_model=ScheduleStateResponse, status_code=201)
def create_schedule(req: ScheduleRequest, mgr: ScheduleManager = Depends(get_schedule_manager)):
    params = _to_parameters(req)
    try:
        schedule_id = mgr.create(params, seed=req.seed, **_schedule_options(req))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=429, detail=str(e))
    return mgr.describe(schedule_id)


@router.get("/schedules", response_model=list[ScheduleStateResponse])
def list_schedules(mgr: ScheduleManager = Depends(get_schedule_manager)):
    return mgr.list_schedules()


@router.get("/schedules/{schedule_id}", response_model=ScheduleDetailResponse)
def get_schedule(schedule_id: str, mgr: ScheduleManager = Depends(get_schedule_manager)):
    info = mgr.describe(schedule_id, include_latest=True)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Schedule '{schedule_id}' not found")
    return info


@router.put("/schedules/{schedule_id}", response_model=ScheduleStateResponse)
def update_schedule(
    schedule_id: str,
    req: SimulationRequest,
    mgr: ScheduleManager = Depends(get_schedule_manager),
):
    params = _to_parameters(req)
    try:
        restarted = mgr.update(schedule_id, params)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Schedule '{schedule_id}' not found")
    log.info("schedule_update_requested", schedule_id=schedule_id, restarted=restarted)
    return mgr.describe(schedule_id)


@router.delete("/schedules/{schedule_id}")
def delete_schedule(schedule_id: str, mgr: ScheduleManager = Depends(get_schedule_manager)):
    if not mgr.cancel(schedule_id):
        raise HTTPException(status_code=404, detail=f"Schedule '{schedule_id}' not found")
    return {"status": "cancelled", "schedule_id": schedule_id}
