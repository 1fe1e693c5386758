from datetime import date, datetime, timezone

import pytest

from dealgame.domain.dates import parse_challenge_date, today_in_timezone


def test_today_rolls_over_at_local_midnight():
    # 03:30 UTC is still the previous evening in New York
    now = datetime(2025, 3, 15, 3, 30, tzinfo=timezone.utc)
    assert today_in_timezone("America/New_York", now=now) == date(2025, 3, 14)
    assert today_in_timezone("UTC", now=now) == date(2025, 3, 15)


def test_parse_challenge_date():
    assert parse_challenge_date("2025-03-14") == date(2025, 3, 14)
    assert parse_challenge_date("2025-03-14T00:00:00Z") == date(2025, 3, 14)
    with pytest.raises(ValueError):
        parse_challenge_date("14/03/2025")
