"""RecomputeScheduler — periodic, cancellable background re-runs of the pipeline.

State machine::

    IDLE -> SCHEDULED -> RUNNING -> COMPLETED | ERRORED -> SCHEDULED -> ...
                 \\          \\
                  +----------+--> CANCELED (parameter change or cancel())

Every run is stamped with a generation number. A finished run is published
only if its generation is still the current one; parameter changes and
cancel() bump the generation, so a superseded run that already started
finishes in the background and is dropped, and one still queued is cancelled.

Consumer callbacks run under ``_deliver_lock`` only, never under the state
lock, so ``state``/``parameters`` readers are not blocked by a slow consumer.
update_parameters() and cancel() take ``_deliver_lock`` first, which keeps a
superseded result from being delivered after either returns.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import numpy as np

from config.settings import RECOMPUTE_JOIN_TIMEOUT, RECOMPUTE_MAX_SECONDS, RECOMPUTE_MIN_SECONDS
from src.simulation.engine import RunSummary, simulate
from src.simulation.params import SimulationParameters
from src.simulation.publisher import SummaryPublisher, UpdateHandler
from src.simulation.random_source import NumpyRandomSource, RandomSource
from src.utils.logger import get_logger

log = get_logger(__name__)

_GENERIC_ERROR = "Simulation run failed"
_POLL_SECONDS = 0.5


class ScheduleStatus(Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    COMPLETED = "completed"
    ERRORED = "errored"
    CANCELED = "canceled"


class RecomputeError(RuntimeError):
    """Delivered to subscribers when a background run fails."""

    def __init__(self, message: str = _GENERIC_ERROR, generation: int = 0) -> None:
        super().__init__(message)
        self.generation = generation


@dataclass(frozen=True)
class ScheduleState:
    generation: int
    status: ScheduleStatus
    next_run_eta_seconds: float | None
    last_error: str | None
    runs_completed: int
    runs_discarded: int
    runs_errored: int

    def to_dict(self) -> dict:
        return {
            "generation": self.generation,
            "status": self.status.value,
            "next_run_eta_seconds": (
                round(self.next_run_eta_seconds, 1) if self.next_run_eta_seconds is not None else None
            ),
            "last_error": self.last_error,
            "runs_completed": self.runs_completed,
            "runs_discarded": self.runs_discarded,
            "runs_errored": self.runs_errored,
        }


class RecomputeScheduler:
    """Owns the background loop for one consumer. The returned handle of schedule_recompute()."""

    def __init__(
        self,
        params: SimulationParameters,
        on_update: UpdateHandler | None = None,
        min_interval: float = RECOMPUTE_MIN_SECONDS,
        max_interval: float = RECOMPUTE_MAX_SECONDS,
        run_immediately: bool = True,
        random_source: RandomSource | None = None,
        pipeline: Callable[[SimulationParameters], RunSummary] | None = None,
        jitter_rng: np.random.Generator | None = None,
        publisher: SummaryPublisher | None = None,
    ) -> None:
        params.validate()
        if min_interval < 0 or max_interval < min_interval:
            raise ValueError(f"Invalid recompute window: [{min_interval}, {max_interval}]")

        self.min_interval = min_interval
        self.max_interval = max_interval
        self.run_immediately = run_immediately

        self._params = params
        self._source = random_source if random_source is not None else NumpyRandomSource()
        self._pipeline = pipeline or self._simulate
        self._jitter = jitter_rng if jitter_rng is not None else np.random.default_rng()
        self._publisher = publisher or SummaryPublisher()
        self._on_update = on_update
        if on_update is not None:
            self._publisher.subscribe(on_update)

        self._lock = threading.RLock()
        self._deliver_lock = threading.RLock()
        self._wake = threading.Event()
        self._thread: threading.Thread | None = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="recompute-worker")

        self._stopped = False
        self._restart = False
        self._generation = 0
        self._status = ScheduleStatus.IDLE
        self._next_run_at: float | None = None
        self._last_error: str | None = None
        self._runs_completed = 0
        self._runs_discarded = 0
        self._runs_errored = 0

    # ------------------------------------------------------------------ status
    @property
    def parameters(self) -> SimulationParameters:
        with self._lock:
            return self._params

    @property
    def latest(self) -> RunSummary | None:
        return self._publisher.latest

    @property
    def publisher(self) -> SummaryPublisher:
        return self._publisher

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive() and not self._stopped

    @property
    def state(self) -> ScheduleState:
        with self._lock:
            eta = None
            if self._next_run_at is not None:
                eta = max(0.0, self._next_run_at - time.monotonic())
            return ScheduleState(
                generation=self._generation,
                status=self._status,
                next_run_eta_seconds=eta,
                last_error=self._last_error,
                runs_completed=self._runs_completed,
                runs_discarded=self._runs_discarded,
                runs_errored=self._runs_errored,
            )

    # ------------------------------------------------------------------ control
    def start(self) -> "RecomputeScheduler":
        with self._lock:
            if self._stopped:
                raise RuntimeError("Scheduler has been cancelled")
            if self._thread is not None:
                raise RuntimeError("Scheduler already started")
            self._thread = threading.Thread(target=self._loop, daemon=True, name="recompute-scheduler")
            self._thread.start()
        log.info(
            "recompute_started",
            paths=self._params.num_paths,
            trades=self._params.num_trade_events,
            window=(self.min_interval, self.max_interval),
        )
        return self

    def update_parameters(self, params: SimulationParameters) -> bool:
        """Supersede the current wait/run and start a fresh cycle. False if unchanged."""
        params.validate()
        with self._deliver_lock, self._lock:
            if self._stopped:
                raise RuntimeError("Scheduler has been cancelled")
            if params == self._params:
                return False
            self._params = params
            self._generation += 1
            self._restart = True
            self._status = ScheduleStatus.CANCELED
            self._next_run_at = None
            generation = self._generation
        self._wake.set()
        log.info("recompute_restarted", generation=generation)
        return True

    def cancel(self) -> None:
        """Tear down the loop. No callbacks are delivered after this returns."""
        with self._deliver_lock, self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._generation += 1
            self._status = ScheduleStatus.CANCELED
            self._next_run_at = None
            thread = self._thread
        if self._on_update is not None:
            self._publisher.unsubscribe(self._on_update)
        self._wake.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=RECOMPUTE_JOIN_TIMEOUT)
        self._executor.shutdown(wait=False, cancel_futures=True)
        log.info("recompute_cancelled")

    # ------------------------------------------------------------------ loop
    def _simulate(self, params: SimulationParameters) -> RunSummary:
        return simulate(params, self._source)

    def _next_delay(self) -> float:
        if self.max_interval <= self.min_interval:
            return self.min_interval
        return float(self._jitter.uniform(self.min_interval, self.max_interval))

    def _interrupted(self) -> bool:
        with self._lock:
            return self._stopped or self._restart

    def _wait(self, delay: float) -> bool:
        """Sleep for ``delay`` seconds. True if woken by a restart or cancel."""
        deadline = time.monotonic() + delay
        while True:
            if self._interrupted():
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            self._wake.wait(remaining)
            self._wake.clear()

    def _await(self, future: Future) -> bool:
        """Block until the run finishes. True if superseded or cancelled first."""
        while True:
            if self._interrupted():
                return True
            if future.done():
                return False
            self._wake.wait(_POLL_SECONDS)
            self._wake.clear()

    def _loop(self) -> None:
        immediate = self.run_immediately
        while True:
            delay = 0.0 if immediate else self._next_delay()
            immediate = False
            with self._lock:
                if self._stopped:
                    break
                self._restart = False
                self._status = ScheduleStatus.SCHEDULED
                self._next_run_at = time.monotonic() + delay

            if self._wait(delay):
                immediate = True
                continue

            with self._lock:
                if self._stopped:
                    break
                if self._restart:
                    immediate = True
                    continue
                self._generation += 1
                generation = self._generation
                params = self._params
                self._status = ScheduleStatus.RUNNING
                self._next_run_at = None

            log.debug("recompute_running", generation=generation)
            try:
                future = self._executor.submit(self._pipeline, params)
            except RuntimeError:
                # Executor shut down by cancel()
                break
            future.add_done_callback(lambda _f: self._wake.set())

            if self._await(future):
                # Drops the run if it is still queued behind an older one
                future.cancel()
                with self._lock:
                    self._runs_discarded += 1
                log.debug("recompute_superseded", generation=generation)
                immediate = True
                continue

            self._finish(generation, future)

        with self._lock:
            self._status = ScheduleStatus.CANCELED
            self._next_run_at = None

    def _finish(self, generation: int, future: Future) -> None:
        exc = None if future.cancelled() else future.exception()
        with self._deliver_lock:
            with self._lock:
                if self._stopped or future.cancelled() or generation != self._generation:
                    self._runs_discarded += 1
                    log.debug("stale_run_discarded", generation=generation, current=self._generation)
                    return

                if exc is not None:
                    self._status = ScheduleStatus.ERRORED
                    self._last_error = _GENERIC_ERROR
                    self._runs_errored += 1
                    update = RecomputeError(_GENERIC_ERROR, generation=generation)
                else:
                    self._status = ScheduleStatus.COMPLETED
                    self._last_error = None
                    self._runs_completed += 1
                    update = future.result()

            if exc is not None:
                log.error("recompute_failed", generation=generation, exc_info=exc)
            self._publisher.publish(update)
            if exc is None:
                log.info("recompute_published", generation=generation)


def schedule_recompute(
    params: SimulationParameters,
    on_update: UpdateHandler,
    **options,
) -> RecomputeScheduler:
    """Start the periodic loop. Call ``cancel()`` on the handle to stop it."""
    return RecomputeScheduler(params, on_update, **options).start()
