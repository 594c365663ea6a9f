from typing import Dict, Optional
from timesheets.utils.timer import Timer, TickSource


class TimerRegistry:
    """One transient timer per signed-in user. Nothing is persisted."""

    def __init__(self, tick_source: Optional[TickSource] = None):
        self.tick_source = tick_source
        self._timers: Dict[str, Timer] = {}

    def get(self, user_id: str) -> Timer:
        timer = self._timers.get(user_id)
        if timer is None:
            timer = Timer(user_id, self.tick_source)
            self._timers[user_id] = timer
        return timer

    def stop_all(self):
        for timer in self._timers.values():
            timer.stop()
