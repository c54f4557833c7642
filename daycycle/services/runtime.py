from __future__ import annotations

import logging

from daycycle.services.scheduler import Hook, Scheduler
from daycycle.services.solar import AstralSolar, SolarProvider
from daycycle.services.timer import LoopTimer, Timer
from daycycle.settings import Settings

logger = logging.getLogger(__name__)


def build_solar(settings: Settings) -> SolarProvider | None:
    latitude, longitude = settings.latitude, settings.longitude
    if latitude is None or longitude is None:
        logger.info("No location configured; sunrise/sunset entries will be skipped")
        return None
    return AstralSolar(
        latitude=latitude,
        longitude=longitude,
        tz=settings.tz(),
        name=settings.location_name,
    )


def build_scheduler(
    settings: Settings,
    timer: Timer | None = None,
    before_activate: tuple[Hook, ...] = (),
    after_activate: tuple[Hook, ...] = (),
) -> Scheduler:
    return Scheduler(
        table=settings.table(),
        timer=timer or LoopTimer(),
        solar=build_solar(settings),
        clock=settings.now,
        safety_margin=settings.safety_margin_seconds,
        retry_delay=settings.retry_delay_seconds,
        before_activate=before_activate,
        after_activate=after_activate,
    )
