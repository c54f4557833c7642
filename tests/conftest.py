from __future__ import annotations

import os
import time
from datetime import date, datetime, timezone
from typing import Callable

import pytest

from daycycle.models.timespec import ScheduleEntry, parse_time_spec
from daycycle.services.solar import SolarDay


class FakeHandle:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False


class FakeTimer:
    def __init__(self) -> None:
        self.handles: list[FakeHandle] = []

    def arm(self, delay_seconds: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(delay_seconds, callback)
        self.handles.append(handle)
        return handle

    def cancel(self, handle: FakeHandle) -> None:
        handle.cancelled = True

    @property
    def pending(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled]

    def fire(self) -> None:
        (handle,) = self.pending
        handle.callback()


class FakeSolar:
    def __init__(self, sunrise: float | None = 6.5, sunset: float | None = 20.0) -> None:
        self.day = SolarDay(sunrise=sunrise, sunset=sunset)
        self.calls: list[date] = []

    def today(self, day: date) -> SolarDay:
        self.calls.append(day)
        return self.day


class FakeClock:
    def __init__(self, hour: int = 0, minute: int = 0, second: int = 0) -> None:
        self.now = at(hour, minute, second)

    def set(self, hour: int, minute: int = 0, second: int = 0) -> None:
        self.now = at(hour, minute, second)

    def __call__(self) -> datetime:
        return self.now


class Recorder:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def callback(self, name: str) -> Callable[[], None]:
        def _call() -> None:
            self.calls.append(name)

        return _call


def at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2024, 3, 10, hour, minute, second, tzinfo=timezone.utc)


def entry(spec: str, callback: Callable[[], object], label: str = "") -> ScheduleEntry:
    return ScheduleEntry(spec=parse_time_spec(spec), callback=callback, label=label)


@pytest.fixture
def berlin_local_time():
    """Run with a Central European system zone (CET/CEST, DST in March and October)."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "CET-1CEST,M3.5.0,M10.5.0/3"
    time.tzset()
    yield
    if previous is None:
        del os.environ["TZ"]
    else:
        os.environ["TZ"] = previous
    time.tzset()


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def solar() -> FakeSolar:
    return FakeSolar()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
