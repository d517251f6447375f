"""
Retention arithmetic and UTC clock helpers.
"""
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def add_years(value: datetime, years: int) -> datetime:
    """Shift ``value`` by whole calendar years, keeping the time of day.

    February 29 rolls forward to March 1 when the target year is not a leap
    year, so a retention period never ends early.
    """
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, month=3, day=1)


def compute_expiry(created_at: datetime, retention_years: int) -> datetime:
    return add_years(as_utc(created_at), retention_years)


def is_expired(expires_at: datetime, now: datetime | None = None) -> bool:
    now = as_utc(now) if now is not None else utcnow()
    return as_utc(expires_at) < now
