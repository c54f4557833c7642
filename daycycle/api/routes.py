from __future__ import annotations

from fastapi import APIRouter, Request

from daycycle.errors import EmptySchedule
from daycycle.models.status import PlanPoint, PlanView, ScheduleStatus
from daycycle.services.scheduler import Scheduler

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/api/status", response_model=ScheduleStatus)
async def status(request: Request) -> ScheduleStatus:
    scheduler: Scheduler = request.app.state.scheduler
    return scheduler.status()


@router.get("/api/plan", response_model=PlanView)
async def plan(request: Request) -> PlanView:
    scheduler: Scheduler = request.app.state.scheduler
    settings = request.app.state.settings
    now = settings.now()

    try:
        current = scheduler.plan(now)
    except EmptySchedule:
        # nothing resolvable today
        return PlanView(now=now, points=[])

    points = [
        PlanPoint(
            label=item.entry.name,
            at=str(item.entry.spec),
            second_of_day=item.offset + current.now_second,
            offset_seconds=item.offset,
        )
        for item in current.offsets
    ]
    return PlanView(
        now=now,
        points=points,
        active=current.active.entry.name,
        next_delay_seconds=current.delay,
    )


@router.post("/api/restart", response_model=ScheduleStatus)
async def restart(request: Request) -> ScheduleStatus:
    scheduler: Scheduler = request.app.state.scheduler
    scheduler.start()
    return scheduler.status()
