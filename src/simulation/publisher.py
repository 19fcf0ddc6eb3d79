"""Thread-safe holder of the current RunSummary with update subscribers."""

import threading
from typing import Callable, Union

from src.simulation.engine import RunSummary
from src.utils.logger import get_logger

log = get_logger(__name__)

Update = Union[RunSummary, Exception]
UpdateHandler = Callable[[Update], None]


class SummaryPublisher:
    """Single writer (the scheduler), many readers.

    ``latest`` is only ever replaced, never mutated, so readers holding an
    older summary are unaffected by later runs. Errors are delivered to
    subscribers but never replace the latest good summary.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: list[UpdateHandler] = []
        self._latest: RunSummary | None = None
        self._published = 0

    @property
    def latest(self) -> RunSummary | None:
        with self._lock:
            return self._latest

    @property
    def published_count(self) -> int:
        with self._lock:
            return self._published

    def subscribe(self, handler: UpdateHandler) -> None:
        with self._lock:
            self._handlers.append(handler)

    def unsubscribe(self, handler: UpdateHandler) -> None:
        with self._lock:
            try:
                self._handlers.remove(handler)
            except ValueError:
                pass

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()

    def publish(self, update: Update) -> None:
        with self._lock:
            if isinstance(update, RunSummary):
                self._latest = update
                self._published += 1
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(update)
            except Exception:
                log.exception("update_handler_error", update_type=type(update).__name__)
