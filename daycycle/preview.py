from __future__ import annotations

import argparse
from datetime import date, datetime

from daycycle.errors import EmptySchedule
from daycycle.models.timespec import Fixed, parse_time_spec
from daycycle.services.runtime import build_scheduler
from daycycle.settings import Settings


def _moment(settings: Settings, at: str, on: str) -> datetime:
    now = settings.now()
    if on:
        day = date.fromisoformat(on)
        now = now.replace(year=day.year, month=day.month, day=day.day)
    if at:
        spec = parse_time_spec(at)
        if not isinstance(spec, Fixed):
            raise SystemExit("--at takes a clock time, not a solar marker")
        now = now.replace(
            hour=spec.hour, minute=spec.minute, second=spec.second, microsecond=0
        )
    return now


def _format_offset(offset: int) -> str:
    sign = "-" if offset < 0 else "+"
    hours, rest = divmod(abs(offset), 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="daycycle-preview",
        description=(
            "Show how the configured schedule resolves for a moment of the day: "
            "every point with its offset, the active entry and the next delay."
        ),
    )
    parser.add_argument("--at", default="", help="clock time HH:MM[:SS] (default: now)")
    parser.add_argument("--date", default="", help="date YYYY-MM-DD (default: today)")
    args = parser.parse_args(argv)

    try:
        settings = Settings()
        scheduler = build_scheduler(settings)
        moment = _moment(settings, args.at, args.date)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration or arguments: {exc}") from exc

    print(f"Now: {moment.isoformat(timespec='seconds')}")
    try:
        plan = scheduler.plan(moment)
    except EmptySchedule as exc:
        raise SystemExit(f"Nothing to schedule: {exc}") from exc

    for item in plan.offsets:
        marker = "*" if item is plan.active else " "
        print(f"{marker} {_format_offset(item.offset)}  {item.entry.spec!s:>8}  {item.entry.name}")
    print(f"Active: {plan.active.entry.name}")
    print(f"Next activation in {plan.delay}s")


if __name__ == "__main__":
    main()
