from datetime import datetime, timezone

import pytest

from utils.time_utils import (
    duration_minutes, parse_timestamp, round_half_up, short_date, subtract_one_month, window_start,
)


@pytest.mark.parametrize("value,expected", [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (0, 0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_naive_timestamps_are_treated_as_utc():
    assert parse_timestamp("2024-03-04T10:00:00") == datetime(2024, 3, 4, 10, tzinfo=timezone.utc)
    assert parse_timestamp("2024-03-04T12:00:00+02:00") == datetime(2024, 3, 4, 10, tzinfo=timezone.utc)
    assert parse_timestamp("not a date") is None


def test_duration_requires_valid_timestamps():
    assert duration_minutes("2024-03-04T10:00:00Z", "2024-03-04T10:45:00Z") == 45
    with pytest.raises(ValueError):
        duration_minutes(None, "2024-03-04T10:45:00Z")


def test_monthly_window_clamps_to_month_end():
    assert subtract_one_month(datetime(2024, 3, 31, tzinfo=timezone.utc)).date().isoformat() == "2024-02-29"
    assert subtract_one_month(datetime(2024, 1, 15, tzinfo=timezone.utc)).date().isoformat() == "2023-12-15"


def test_window_start():
    now = datetime(2024, 5, 20, 12, tzinfo=timezone.utc)
    assert window_start("weekly", now) == datetime(2024, 5, 13, 12, tzinfo=timezone.utc)
    assert window_start("monthly", now) == datetime(2024, 4, 20, 12, tzinfo=timezone.utc)


def test_short_date_has_no_padding():
    assert short_date(datetime(2024, 3, 4)) == "3/4/2024"
