from __future__ import annotations

from datetime import date, datetime, timezone

from src.gym_backend.gym_backend.common.datetime_utils import minutes_between, parse_iso_datetime


def test_parse_plain_date_and_naive_datetime():
    assert parse_iso_datetime("2025-03-10") == datetime(2025, 3, 10)
    assert parse_iso_datetime("2025-03-10T09:30:00") == datetime(2025, 3, 10, 9, 30)
    assert parse_iso_datetime(date(2025, 3, 10)) == datetime(2025, 3, 10)
    assert parse_iso_datetime("") is None


def test_parse_offset_datetime_converts_to_local_time():
    expected = datetime(2025, 3, 10, 2, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)

    assert parse_iso_datetime("2025-03-10T02:00:00Z") == expected
    assert parse_iso_datetime("2025-03-10T09:00:00+07:00") == expected


def test_minutes_between_rounds_half_up():
    start = datetime(2025, 3, 10, 9, 0, 0)
    assert minutes_between(start, datetime(2025, 3, 10, 9, 45, 30)) == 46
    assert minutes_between(start, datetime(2025, 3, 10, 9, 45, 29)) == 45
