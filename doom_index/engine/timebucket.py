"""Minute buckets — the unit of one generation opportunity."""

from __future__ import annotations

from datetime import datetime, timezone


def get_minute_bucket(ts: datetime | None = None) -> str:
    """Return ``YYYY-MM-DDTHH:MM`` (UTC), stable for every instant within the minute.

    Naive datetimes are taken to be UTC.
    """
    if ts is None:
        ts = datetime.now(timezone.utc)
    elif ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    else:
        ts = ts.astimezone(timezone.utc)
    return ts.replace(second=0, microsecond=0).strftime("%Y-%m-%dT%H:%M")


def minute_bucket_to_iso(minute_bucket: str) -> str:
    return f"{minute_bucket}:00Z"


def bucket_from_timestamp(timestamp: str | None) -> str | None:
    """Recover the minute bucket from a stored ``YYYY-MM-DDTHH:MM:00Z`` timestamp."""
    if not timestamp or len(timestamp) < 16:
        return None
    return timestamp[:16]
