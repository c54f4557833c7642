from __future__ import annotations

import json
from datetime import datetime, tzinfo
from typing import Any, Literal, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import tz as dateutil_tz
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from daycycle.actions import Action, CommandAction, LogAction
from daycycle.models.timespec import ScheduleEntry, parse_time_spec


class LogActionConfig(BaseModel):
    kind: Literal["log"] = "log"
    message: str
    level: str = "INFO"


class CommandActionConfig(BaseModel):
    kind: Literal["command"] = "command"
    command: str
    timeout: float | None = None


ActionConfig = Union[LogActionConfig, CommandActionConfig]


class ScheduleItem(BaseModel):
    at: str
    action: ActionConfig = Field(discriminator="kind")
    label: str = ""

    @field_validator("at")
    @classmethod
    def check_at(cls, value: str) -> str:
        # raises MalformedFixedTime (a ValueError) on bad clock times
        parse_time_spec(value)
        return value.strip()

    def to_entry(self) -> ScheduleEntry:
        callback: Action
        if isinstance(self.action, CommandActionConfig):
            callback = CommandAction(self.action.command, timeout=self.action.timeout)
        else:
            callback = LogAction(self.action.message, level=self.action.level)
        return ScheduleEntry(
            spec=parse_time_spec(self.at), callback=callback, label=self.label
        )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DAYCYCLE_",
        case_sensitive=False,
        env_ignore_empty=True,
    )

    schedule_json: str = Field(
        default='[{"at":"07:00","label":"day",'
        '"action":{"kind":"log","message":"Switching to day"}},'
        '{"at":"19:00","label":"night",'
        '"action":{"kind":"log","message":"Switching to night"}}]'
    )

    # location for sunrise/sunset entries; without it they are skipped
    latitude: float | None = None
    longitude: float | None = None
    location_name: str = "daycycle"
    timezone: str = ""

    safety_margin_seconds: int = Field(default=1, ge=0)
    retry_delay_seconds: int = Field(default=600, gt=0)

    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8080

    def schedule(self) -> list[ScheduleItem]:
        data: Any = json.loads(self.schedule_json)
        return [ScheduleItem.model_validate(item) for item in data]

    def table(self) -> list[ScheduleEntry]:
        return [item.to_entry() for item in self.schedule()]

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        value = value.strip()
        if value:
            try:
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ValueError(f"unknown timezone: {value!r}") from exc
        return value

    def tz(self) -> tzinfo:
        if self.timezone:
            return ZoneInfo(self.timezone)
        # system zone; the UTC offset is looked up per datetime, so DST applies
        return dateutil_tz.tzlocal()

    def now(self) -> datetime:
        return datetime.now(self.tz())
