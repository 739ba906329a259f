"""
Cohort calendar helpers.

A challenge cohort runs on its own timezone: "today", the start and the end
of a challenge are calendar days in that timezone, not in UTC. Unknown
timezone names fall back to UTC with a warning instead of failing the
request.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Tuple

import pytz

from fitchallenge.models.records import Challenge
from fitchallenge.services.logger import logger


def cohort_timezone(timezone_name: Optional[str]):
    try:
        return pytz.timezone(timezone_name or "UTC")
    except pytz.exceptions.UnknownTimeZoneError:
        logger.warning(
            f"Invalid timezone {timezone_name}, falling back to UTC",
            {"timezone": timezone_name},
        )
        return pytz.utc


def is_valid_timezone(timezone_name: str) -> bool:
    try:
        pytz.timezone(timezone_name)
        return True
    except pytz.exceptions.UnknownTimeZoneError:
        return False


def cohort_today(timezone_name: Optional[str], now: Optional[datetime] = None) -> date:
    """Current calendar day in the cohort timezone. `now` must be timezone-aware."""
    tz = cohort_timezone(timezone_name)
    current = now.astimezone(tz) if now else datetime.now(tz)
    return current.date()


def days_since_start(
    start_date: date, timezone_name: Optional[str], now: Optional[datetime] = None
) -> int:
    return (cohort_today(timezone_name, now) - start_date).days


def days_remaining(
    end_date: date, timezone_name: Optional[str], now: Optional[datetime] = None
) -> int:
    return max(0, (end_date - cohort_today(timezone_name, now)).days)


def is_challenge_active(
    start_date: date,
    end_date: date,
    timezone_name: Optional[str],
    now: Optional[datetime] = None,
) -> bool:
    today = cohort_today(timezone_name, now)
    return start_date <= today <= end_date


def challenge_end_date(
    start_date: date, end_date: Optional[date], duration_days: Optional[int]
) -> date:
    """Explicit end date, else start + duration - 1, else a 30-day challenge."""
    if end_date is not None:
        return end_date
    return start_date + timedelta(days=(duration_days or 30) - 1)


def challenge_window(
    challenge: Challenge, now: Optional[datetime] = None
) -> Tuple[date, date]:
    """
    First and last calendar day of a challenge.

    A challenge without a start date starts today in its own timezone.
    """
    start_date = challenge.start_date or cohort_today(challenge.timezone, now)
    end_date = challenge_end_date(
        start_date, challenge.end_date, challenge.duration_days
    )
    return start_date, end_date
