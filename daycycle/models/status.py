from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class ScheduleStatus(BaseModel):
    state: Literal["idle", "armed"]
    active: str | None = None
    activated_at: datetime | None = None
    next_fire_at: datetime | None = None
    next_delay_seconds: int | None = None
    last_error: str | None = None


class PlanPoint(BaseModel):
    label: str
    at: str
    second_of_day: int
    offset_seconds: int


class PlanView(BaseModel):
    now: datetime
    points: list[PlanPoint]
    active: str | None = None
    next_delay_seconds: int | None = None
