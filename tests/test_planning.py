import logging

import pytest

from conftest import entry
from daycycle.errors import EmptySchedule, UnresolvableTimeSpec
from daycycle.models.timespec import Fixed, SolarSunrise, SolarSunset
from daycycle.services.scheduler import (
    DAY_SECONDS,
    build_offsets,
    next_delay,
    resolve,
    select_active,
)
from daycycle.services.solar import SolarDay

H = 3600


def noop():
    pass


def other():
    pass


def test_resolve_fixed():
    assert resolve(Fixed(8, 30, 15), None) == 8 * H + 30 * 60 + 15


def test_resolve_solar_floors_fraction():
    today = SolarDay(sunrise=6.5, sunset=19.99999)
    assert resolve(SolarSunrise(), today) == 6 * H + 30 * 60
    # 19.99999h is 71999.964s: floor, never round up
    assert resolve(SolarSunset(), today) == 71999


def test_resolve_solar_without_data():
    with pytest.raises(UnresolvableTimeSpec):
        resolve(SolarSunrise(), None)
    with pytest.raises(UnresolvableTimeSpec):
        resolve(SolarSunset(), SolarDay(sunrise=5.0, sunset=None))


def test_resolve_then_shift_round_trips():
    now = 13 * H + 7
    point = resolve(Fixed(21, 15), None)
    assert (point - now) + now == point


def test_build_offsets_sorted_with_signed_offsets():
    table = [entry("20:00", noop, "b"), entry("08:00", noop, "a"), entry("12:00", noop, "c")]
    offsets = build_offsets(table, 10 * H, None)

    assert [o.entry.label for o in offsets] == ["a", "c", "b"]
    assert [o.offset for o in offsets] == [-2 * H, 2 * H, 10 * H]
    assert [o.index for o in offsets] == [1, 2, 0]


def test_build_offsets_keeps_table_order_on_ties():
    table = [entry("09:00", noop, "first"), entry("09:00", other, "second")]
    offsets = build_offsets(table, 0, None)
    assert [o.entry.label for o in offsets] == ["first", "second"]


def test_build_offsets_drops_unresolvable_entries(caplog):
    table = [entry("sunrise", noop, "dawn"), entry("08:00", noop, "a")]
    with caplog.at_level(logging.WARNING):
        offsets = build_offsets(table, 0, None)

    assert [o.entry.label for o in offsets] == ["a"]
    assert "dawn" in caplog.text


def test_offsets_stay_within_a_day():
    table = [entry("00:00", noop), entry("23:59:59", noop)]
    for now in (0, 1, DAY_SECONDS - 1):
        for item in build_offsets(table, now, None):
            assert -DAY_SECONDS <= item.offset < DAY_SECONDS


def test_select_active_most_recent_past():
    table = [entry("08:00", noop, "A"), entry("20:00", noop, "B")]
    active = select_active(build_offsets(table, 10 * H, None))
    assert active.entry.label == "A"


def test_select_active_wraps_to_yesterday():
    table = [entry("08:00", noop, "A"), entry("20:00", noop, "B")]
    active = select_active(build_offsets(table, 7 * H, None))
    assert active.entry.label == "B"


def test_select_active_point_exactly_now():
    table = [entry("08:00", noop, "A"), entry("20:00", noop, "B")]
    active = select_active(build_offsets(table, 20 * H, None))
    assert active.entry.label == "B"
    assert active.offset == 0


def test_select_active_collision_is_stable():
    table = [entry("09:00", noop, "first"), entry("09:00", other, "second")]
    picks = {select_active(build_offsets(table, 10 * H, None)).entry.label for _ in range(5)}
    assert picks == {"first"}
    # same when the colliding points are still ahead today
    picks = {select_active(build_offsets(table, 8 * H, None)).entry.label for _ in range(5)}
    assert picks == {"first"}


def test_select_active_empty():
    assert select_active([]) is None


@pytest.mark.parametrize("now", [0, 7 * H, 8 * H, 12 * H, 20 * H, DAY_SECONDS - 1])
def test_select_active_always_returns_a_table_entry(now):
    table = [entry("08:00", noop, "A"), entry("20:00", noop, "B"), entry("sunset", noop, "S")]
    offsets = build_offsets(table, now, SolarDay(sunrise=6.0, sunset=18.25))
    assert select_active(offsets).entry in table


def test_next_delay_soonest_upcoming_plus_margin():
    table = [entry("08:00", noop), entry("20:00", noop)]
    assert next_delay(build_offsets(table, 10 * H, None)) == 10 * H + 1
    assert next_delay(build_offsets(table, 7 * H, None)) == H + 1


def test_next_delay_rolls_to_tomorrow():
    table = [entry("08:00", noop), entry("20:00", noop)]
    assert next_delay(build_offsets(table, 21 * H, None)) == 11 * H + 1


def test_next_delay_skips_point_at_now():
    table = [entry("08:00", noop), entry("20:00", noop)]
    assert next_delay(build_offsets(table, 8 * H, None)) == 12 * H + 1


def test_next_delay_single_entry_waits_a_day():
    table = [entry("08:00", noop)]
    assert next_delay(build_offsets(table, 8 * H, None)) == DAY_SECONDS + 1


def test_next_delay_custom_margin():
    table = [entry("08:00", noop)]
    assert next_delay(build_offsets(table, 7 * H, None), margin=0) == H


@pytest.mark.parametrize("now", [0, 8 * H - 1, 8 * H, 8 * H + 1, DAY_SECONDS - 1])
def test_next_delay_is_positive(now):
    table = [entry("00:00", noop), entry("08:00", noop)]
    assert next_delay(build_offsets(table, now, None)) > 0


def test_next_delay_empty():
    with pytest.raises(EmptySchedule):
        next_delay([])


def test_single_sunrise_entry_wraps():
    table = [entry("sunrise", noop, "A")]
    offsets = build_offsets(table, 5 * H, SolarDay(sunrise=6.5, sunset=20.0))
    assert select_active(offsets).entry.label == "A"
    assert next_delay(offsets) == 5400 + 1
