from datetime import datetime, timedelta, timezone

import pytest

from engine.durations import parse_duration, window


def test_parse_duration_units():
    assert parse_duration("") == timedelta(0)
    assert parse_duration("90s") == timedelta(seconds=90)
    assert parse_duration("5m") == timedelta(minutes=5)
    assert parse_duration("1h") == timedelta(hours=1)
    assert parse_duration("2d") == timedelta(days=2)
    assert parse_duration("1w") == timedelta(days=7)


@pytest.mark.parametrize("text", ["1", "h", "1 hour", "-1h"])
def test_parse_duration_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_window_is_relative_to_reference():
    ref = datetime(2026, 1, 1, 12, tzinfo=timezone.utc)
    begin, end = window(ref, "1h", "10m")
    assert begin == ref - timedelta(hours=1)
    assert end == ref - timedelta(minutes=10)
    with pytest.raises(ValueError):
        window(ref, "10m", "1h")
