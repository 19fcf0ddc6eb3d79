"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import CORS_ORIGINS
from src.api.deps import get_schedule_manager
from src.api.routes import simulation
from src.api.schemas import HealthResponse
from src.api.state import ScheduleManager
from src.utils.logger import get_logger

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Background schedules must not outlive the server
    get_schedule_manager().stop_all()
    log.info("api_shutdown")


app = FastAPI(title="Survivability Engine API", version="0.1.0", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(simulation.router)


@app.get("/health", response_model=HealthResponse)
def health(mgr: ScheduleManager = Depends(get_schedule_manager)):
    return HealthResponse(status="ok", active_schedules=mgr.active_count)
