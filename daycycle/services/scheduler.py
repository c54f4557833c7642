from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Sequence

from dateutil import tz as dateutil_tz

from daycycle.errors import EmptySchedule, UnresolvableTimeSpec
from daycycle.models.status import ScheduleStatus
from daycycle.models.timespec import (
    Fixed,
    ScheduleEntry,
    SolarSunrise,
    SolarSunset,
    TimeSpec,
)
from daycycle.services.solar import SolarDay, SolarProvider
from daycycle.services.timer import Timer

logger = logging.getLogger(__name__)

DAY_SECONDS = 86400

Hook = Callable[[ScheduleEntry], object]


@dataclass(frozen=True)
class OffsetEntry:
    offset: int
    entry: ScheduleEntry
    index: int


@dataclass(frozen=True)
class Plan:
    now: datetime
    now_second: int
    offsets: list[OffsetEntry]
    active: OffsetEntry
    delay: int


def second_of_day(moment: datetime) -> int:
    return moment.hour * 3600 + moment.minute * 60 + moment.second


def resolve(spec: TimeSpec, solar_today: SolarDay | None) -> int:
    if isinstance(spec, Fixed):
        return spec.hour * 3600 + spec.minute * 60 + spec.second

    if isinstance(spec, SolarSunrise):
        hours = solar_today.sunrise if solar_today is not None else None
    elif isinstance(spec, SolarSunset):
        hours = solar_today.sunset if solar_today is not None else None
    else:
        raise TypeError(f"unsupported time spec: {spec!r}")

    if hours is None:
        raise UnresolvableTimeSpec(f"no {spec} available today")
    # floor keeps the event from landing a second early
    return math.floor(hours / 24 * DAY_SECONDS)


def build_offsets(
    table: Sequence[ScheduleEntry], now_second: int, solar_today: SolarDay | None
) -> list[OffsetEntry]:
    """Resolve every entry against today and shift it by ``now_second``.

    Entries that cannot be resolved today are left out. The result is sorted
    ascending by offset; equal offsets keep their table order.
    """
    offsets: list[OffsetEntry] = []
    for index, entry in enumerate(table):
        try:
            point = resolve(entry.spec, solar_today)
        except UnresolvableTimeSpec as exc:
            logger.warning("Skipping %s for this cycle: %s", entry.name, exc)
            continue
        offsets.append(OffsetEntry(offset=point - now_second, entry=entry, index=index))

    offsets.sort(key=lambda item: item.offset)
    return offsets


def select_active(offsets: Sequence[OffsetEntry]) -> OffsetEntry | None:
    """Pick the most recently passed point.

    When every point is still ahead today, the latest one is the active one:
    it last fired yesterday. On ties the earliest table entry wins.
    """
    if not offsets:
        return None

    passed = [item for item in offsets if item.offset <= 0]
    candidates = passed or offsets
    return max(candidates, key=lambda item: (item.offset, -item.index))


def next_delay(offsets: Sequence[OffsetEntry], margin: int = 1) -> int:
    if not offsets:
        raise EmptySchedule("no schedule entries to wait for")

    upcoming = [item.offset for item in offsets if item.offset > 0]
    if upcoming:
        delay = min(upcoming)
    else:
        # everything passed today: wait for tomorrow's earliest point
        delay = min(item.offset for item in offsets) + DAY_SECONDS
    return delay + margin


def elapsed_seconds(now: datetime, wall_delay: int) -> int:
    """Real seconds from ``now`` until the wall clock has moved ``wall_delay`` seconds.

    Differs from ``wall_delay`` only when a UTC offset change (DST) falls in
    between; naive datetimes are taken as wall time.
    """
    if now.tzinfo is None:
        return wall_delay
    target = now.replace(tzinfo=None) + timedelta(seconds=wall_delay)
    target = target.replace(tzinfo=now.tzinfo)
    elapsed = target.astimezone(timezone.utc) - now.astimezone(timezone.utc)
    return max(1, int(elapsed.total_seconds()))


def _after(now: datetime, seconds: int) -> datetime:
    if now.tzinfo is None:
        return now + timedelta(seconds=seconds)
    moment = now.astimezone(timezone.utc) + timedelta(seconds=seconds)
    return moment.astimezone(now.tzinfo)


def _local_now() -> datetime:
    return datetime.now(dateutil_tz.tzlocal())


class Scheduler:
    """Runs the callback that is due now and re-arms a single timer for the next one.

    The scheduler is ``idle`` until :meth:`start` and ``armed`` afterwards: every
    cycle ends by cancelling the pending timer and arming exactly one new one,
    whatever the callback did.
    """

    def __init__(
        self,
        table: Sequence[ScheduleEntry],
        timer: Timer,
        solar: SolarProvider | None = None,
        clock: Callable[[], datetime] | None = None,
        safety_margin: int = 1,
        retry_delay: int = 600,
        before_activate: Iterable[Hook] = (),
        after_activate: Iterable[Hook] = (),
    ) -> None:
        self._table = table
        self._timer = timer
        self._solar = solar
        self._clock = clock or _local_now
        self._safety_margin = safety_margin
        self._retry_delay = retry_delay
        self._before_activate = list(before_activate)
        self._after_activate = list(after_activate)

        self._handle: Any = None
        self._active: ScheduleEntry | None = None
        self._activated_at: datetime | None = None
        self._next_fire_at: datetime | None = None
        self._next_delay: int | None = None
        self._last_error: str | None = None

    @property
    def state(self) -> str:
        return "armed" if self._handle is not None else "idle"

    def replace_table(self, table: Sequence[ScheduleEntry]) -> None:
        self._table = table

    def start(self) -> None:
        logger.info("Starting scheduler with %d entries", len(self._table))
        self._cycle()

    def stop(self) -> None:
        if self._handle is not None:
            self._timer.cancel(self._handle)
            self._handle = None
            logger.info("Scheduler stopped")

    def tick(self) -> None:
        self._cycle()

    def plan(self, now: datetime | None = None) -> Plan:
        now = now or self._clock()
        table = tuple(self._table)
        solar_today = self._solar_today(table, now)

        now_second = second_of_day(now)
        offsets = build_offsets(table, now_second, solar_today)
        active = select_active(offsets)
        if active is None:
            raise EmptySchedule("no usable schedule entries this cycle")

        return Plan(
            now=now,
            now_second=now_second,
            offsets=offsets,
            active=active,
            delay=next_delay(offsets, self._safety_margin),
        )

    def status(self) -> ScheduleStatus:
        return ScheduleStatus(
            state=self.state,
            active=self._active.name if self._active is not None else None,
            activated_at=self._activated_at,
            next_fire_at=self._next_fire_at,
            next_delay_seconds=self._next_delay,
            last_error=self._last_error,
        )

    def _cycle(self) -> None:
        now = self._clock()
        try:
            plan = self.plan(now)
        except EmptySchedule as exc:
            logger.warning("%s; retrying in %ds", exc, self._retry_delay)
            self._active = None
            self._activated_at = None
            self._arm(self._retry_delay, now)
            return

        self._activate(plan.active.entry, now)
        self._arm(elapsed_seconds(now, plan.delay), now)

    def _solar_today(
        self, table: Sequence[ScheduleEntry], now: datetime
    ) -> SolarDay | None:
        if self._solar is None:
            return None
        if not any(isinstance(e.spec, (SolarSunrise, SolarSunset)) for e in table):
            return None
        try:
            return self._solar.today(now.date())
        except Exception:
            logger.exception("Solar data unavailable for %s", now.date())
            return None

    def _activate(self, entry: ScheduleEntry, now: datetime) -> None:
        logger.info("Activating %s", entry.name)
        self._run_hooks(self._before_activate, entry)
        try:
            entry.callback()
        except Exception as exc:
            logger.exception("Callback for %s failed", entry.name)
            self._last_error = f"{entry.name}: {exc}"
        else:
            self._last_error = None
        self._run_hooks(self._after_activate, entry)

        self._active = entry
        self._activated_at = now

    def _run_hooks(self, hooks: list[Hook], entry: ScheduleEntry) -> None:
        for hook in hooks:
            try:
                hook(entry)
            except Exception:
                logger.exception("Activation hook %r failed for %s", hook, entry.name)

    def _arm(self, delay: int, now: datetime) -> None:
        if self._handle is not None:
            self._timer.cancel(self._handle)
        self._handle = self._timer.arm(delay, self.tick)

        self._next_delay = delay
        self._next_fire_at = _after(now, delay)
        logger.info(
            "Next activation in %ds at %s",
            delay,
            self._next_fire_at.isoformat(timespec="seconds"),
        )
