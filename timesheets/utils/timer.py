"""
Stopwatch feeding the log-time form.

Two views of one counter: ``hours`` (decimal, 2 places) for the numeric
field and ``display`` (``HH:MM:SS``) for the clock face. Both derive from
``elapsed_seconds`` only.
"""
import logging
from typing import Optional, Protocol, Callable
from timesheets.utils.rounding import round_hours

logger = logging.getLogger(__name__)


def hours_for(seconds: int) -> float:
    """Elapsed seconds as decimal hours rounded to 2 places."""
    return round_hours(seconds / 3600)


def format_seconds(seconds: int) -> str:
    hh = seconds // 3600
    mm = (seconds % 3600) // 60
    ss = seconds % 60
    return f"{hh:02d}:{mm:02d}:{ss:02d}"


class TickSource(Protocol):
    def schedule_ticks(self, job_id: str, callback: Callable[[], None]) -> None: ...

    def cancel_ticks(self, job_id: str) -> None: ...


class Timer:
    def __init__(self, timer_id: str, tick_source: Optional[TickSource] = None):
        self.timer_id = timer_id
        self.tick_source = tick_source
        self.elapsed_seconds = 0
        self.running = False

    @property
    def job_id(self) -> str:
        return f"timer:{self.timer_id}"

    @property
    def hours(self) -> float:
        return hours_for(self.elapsed_seconds)

    @property
    def display(self) -> str:
        return format_seconds(self.elapsed_seconds)

    def start(self):
        """Reset the counter to zero and (re)start ticking."""
        # Any previous tick job is replaced, never duplicated
        self._cancel_ticks()
        self.elapsed_seconds = 0
        self.running = True
        if self.tick_source is not None:
            self.tick_source.schedule_ticks(self.job_id, self.tick)
        logger.debug(f"Timer {self.timer_id} started")

    def stop(self):
        """Stop ticking. Counter and hours keep their value until next start."""
        self.running = False
        self._cancel_ticks()
        logger.debug(f"Timer {self.timer_id} stopped at {self.display}")

    def reset(self):
        self.stop()
        self.elapsed_seconds = 0

    def tick(self):
        if not self.running:
            return
        self.elapsed_seconds += 1

    def _cancel_ticks(self):
        if self.tick_source is not None:
            self.tick_source.cancel_ticks(self.job_id)

    def __repr__(self):
        return f"<Timer(id={self.timer_id}, running={self.running}, elapsed={self.display})>"
