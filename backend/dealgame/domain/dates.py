# dealgame/domain/dates.py
from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def today_in_timezone(tz_name: str, *, now: datetime | None = None) -> date:
    """
    Calendar date in an IANA timezone (daily challenges roll over at local midnight).
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name)).date()


def parse_challenge_date(raw: str) -> date:
    """
    Accepts YYYY-MM-DD, or a timestamp whose date part is YYYY-MM-DD.
    """
    return date.fromisoformat(raw.strip().split("T")[0])
