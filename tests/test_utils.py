from datetime import datetime, timedelta, timezone

from ghdash.utils import time_elapsed


BASE = datetime(2023, 5, 1, 12, 0, 0)


def test_same_instant_is_just_now():
    assert time_elapsed(BASE, BASE) == "just now"


def test_sub_second_difference_is_just_now():
    assert time_elapsed(BASE, BASE + timedelta(milliseconds=500)) == "just now"


def test_hours_in_the_past():
    assert time_elapsed(BASE - timedelta(hours=3), BASE) == "3h ago"


def test_hours_in_the_future():
    assert time_elapsed(BASE + timedelta(hours=2), BASE) == "2h after"


def test_largest_unit_wins_for_long_spans():
    assert time_elapsed(BASE - timedelta(days=400), BASE) == "1y ago"


def test_seconds_with_aware_datetimes():
    then = datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert time_elapsed(then, then + timedelta(seconds=45)) == "45s ago"


def test_default_now_is_used_when_omitted():
    result = time_elapsed(datetime.now() - timedelta(days=800))
    assert result.endswith(" ago")
    assert result[0].isdigit()


def test_minutes_prefix_matches_input():
    result = time_elapsed(BASE - timedelta(minutes=5), BASE)
    assert result.startswith("5m")
    assert result.endswith(" ago")