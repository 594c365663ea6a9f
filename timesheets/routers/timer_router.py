from fastapi import APIRouter, Depends
from timesheets.context import AppContext
from timesheets.models.schemas import Identity, TimerState
from timesheets.routers.deps import get_context, get_current_user
from timesheets.utils.timer import Timer

router = APIRouter(prefix="/timer", tags=["timer"])


def _state(timer: Timer) -> TimerState:
    return TimerState(
        running=timer.running,
        elapsed_seconds=timer.elapsed_seconds,
        hours=timer.hours,
        display=timer.display
    )


@router.get("", response_model=TimerState)
async def get_timer(user: Identity = Depends(get_current_user), context: AppContext = Depends(get_context)):
    return _state(context.timers.get(user.id))


@router.post("/start", response_model=TimerState)
async def start_timer(user: Identity = Depends(get_current_user), context: AppContext = Depends(get_context)):
    timer = context.timers.get(user.id)
    timer.start()
    return _state(timer)


@router.post("/stop", response_model=TimerState)
async def stop_timer(user: Identity = Depends(get_current_user), context: AppContext = Depends(get_context)):
    timer = context.timers.get(user.id)
    timer.stop()
    return _state(timer)
