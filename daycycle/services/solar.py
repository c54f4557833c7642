from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Protocol

from astral import LocationInfo
from astral.sun import sunrise, sunset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolarDay:
    """Today's solar events as hours since local midnight, in [0, 24).

    ``None`` means the event does not happen on that date at that location.
    """

    sunrise: float | None
    sunset: float | None


class SolarProvider(Protocol):
    def today(self, day: date) -> SolarDay:
        ...


class AstralSolar:
    def __init__(
        self,
        latitude: float,
        longitude: float,
        tz: tzinfo,
        name: str = "daycycle",
    ) -> None:
        self._tz = tz
        self._location = LocationInfo(
            name=name,
            region="",
            timezone=str(tz),
            latitude=latitude,
            longitude=longitude,
        )

    def today(self, day: date) -> SolarDay:
        observer = self._location.observer
        return SolarDay(
            sunrise=_safe_hours(sunrise, observer, day, self._tz),
            sunset=_safe_hours(sunset, observer, day, self._tz),
        )


def _safe_hours(event, observer, day: date, tz: tzinfo) -> float | None:
    # astral raises ValueError when the sun never crosses the horizon
    try:
        when: datetime = event(observer, date=day, tzinfo=tz)
    except ValueError as exc:
        logger.info("No %s on %s: %s", event.__name__, day, exc)
        return None
    return _fractional_hours(when)


def _fractional_hours(when: datetime) -> float:
    return (
        when.hour
        + when.minute / 60
        + when.second / 3600
        + when.microsecond / 3_600_000_000
    )
