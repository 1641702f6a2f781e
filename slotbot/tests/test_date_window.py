from __future__ import annotations

import datetime as dt

import pytest

from slotbot.date_window import is_weekend, query_window

MONDAY = dt.date(2026, 10, 19)


def test_window_starts_today_and_covers_horizon() -> None:
    window = query_window(8, today=MONDAY)
    assert window[0] == MONDAY
    assert window[-1] == dt.date(2026, 10, 26)
    assert len(window) == 8


def test_skip_weekends_omits_saturday_and_sunday_without_replacing_them() -> None:
    window = query_window(8, skip_weekends=True, today=MONDAY)
    assert dt.date(2026, 10, 24) not in window
    assert dt.date(2026, 10, 25) not in window
    assert len(window) == 6
    assert window[-1] == dt.date(2026, 10, 26)


def test_non_positive_horizon_gives_empty_window() -> None:
    assert query_window(0, today=MONDAY) == []
    assert query_window(-3, today=MONDAY) == []


@pytest.mark.parametrize("horizon", [1, 2, 5, 7, 8, 14, 31])
@pytest.mark.parametrize("offset", range(7))
@pytest.mark.parametrize("skip_weekends", [False, True])
def test_window_properties(horizon: int, offset: int, skip_weekends: bool) -> None:
    today = MONDAY + dt.timedelta(days=offset)
    window = query_window(horizon, skip_weekends=skip_weekends, today=today)

    assert len(window) <= horizon
    assert all(a < b for a, b in zip(window, window[1:]))
    if skip_weekends:
        assert not any(is_weekend(d) for d in window)
    else:
        assert len(window) == horizon
