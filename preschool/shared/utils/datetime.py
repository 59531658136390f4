"""UTC datetime helpers.

Every timestamp the provisioning pipelines persist or compare (reviewed_at,
expires_at, used_at) is timezone-aware UTC. SQLite returns naive values for
timezone-aware columns, so repositories pass reads through ensure_utc.
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize a datetime read from storage to aware UTC.

    Naive values are assumed to already be UTC; aware values are converted.
    None passes through.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def is_past(moment: datetime, now: datetime | None = None) -> bool:
    """Return True when moment is at or before now (both compared in UTC)."""
    reference = now if now is not None else utc_now()
    return moment.replace(tzinfo=moment.tzinfo or UTC) <= reference.replace(
        tzinfo=reference.tzinfo or UTC
    )


def expires_after(ttl: timedelta, now: datetime | None = None) -> datetime:
    """Return the expiry instant ttl from now."""
    return (now if now is not None else utc_now()) + ttl
