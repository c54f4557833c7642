from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from daycycle.errors import MalformedFixedTime

Callback = Callable[[], object]


@dataclass(frozen=True)
class Fixed:
    hour: int
    minute: int
    second: int = 0

    def __str__(self) -> str:
        if self.second:
            return f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class SolarSunrise:
    def __str__(self) -> str:
        return "sunrise"


@dataclass(frozen=True)
class SolarSunset:
    def __str__(self) -> str:
        return "sunset"


TimeSpec = Union[Fixed, SolarSunrise, SolarSunset]

_SOLAR_MARKERS: dict[str, TimeSpec] = {
    "sunrise": SolarSunrise(),
    "sunset": SolarSunset(),
}


@dataclass(frozen=True)
class ScheduleEntry:
    spec: TimeSpec
    callback: Callback
    label: str = ""

    @property
    def name(self) -> str:
        return self.label or str(self.spec)


def parse_time_spec(value: str) -> TimeSpec:
    """Parse "HH:MM", "HH:MM:SS", "sunrise" or "sunset" (":sunrise" works too)."""
    text = (value or "").strip()
    marker = _SOLAR_MARKERS.get(text.lower().lstrip(":"))
    if marker is not None:
        return marker

    parts = text.split(":")
    if len(parts) not in (2, 3):
        raise MalformedFixedTime(f"expected HH:MM or HH:MM:SS, got {value!r}")
    try:
        fields = [int(p) for p in parts]
    except ValueError as exc:
        raise MalformedFixedTime(f"non-numeric time field in {value!r}") from exc

    hour, minute = fields[0], fields[1]
    second = fields[2] if len(fields) == 3 else 0
    if not (0 <= hour < 24 and 0 <= minute < 60 and 0 <= second < 60):
        raise MalformedFixedTime(f"time out of range: {value!r}")
    return Fixed(hour, minute, second)
