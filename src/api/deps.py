"""Dependency injection for FastAPI routes."""

from src.api.state import ScheduleManager

_schedule_manager = ScheduleManager()


def get_schedule_manager() -> ScheduleManager:
    return _schedule_manager
