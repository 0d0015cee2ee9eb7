"""UTC clock helpers shared by models and time-windowed queries."""

from datetime import UTC, datetime, timedelta


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def hours_before(now: datetime, hours: int) -> datetime:
    """Start of the trailing window of ``hours`` that ends at ``now``."""
    return now - timedelta(hours=hours)
