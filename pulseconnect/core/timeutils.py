"""Naive-UTC datetime helpers.

Business dates (donation dates, last-donation dates) are stored as naive UTC
so that SQLite and PostgreSQL compare them the same way.
"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
