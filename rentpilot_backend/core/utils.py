"""Common utilities for the RentPilot backend."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def is_blank(value: str | None) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not value.strip()


def display_name(
    first_name: str | None, last_name: str | None, email: str | None = None
) -> str:
    """Human readable name for a profile, falling back to the email address."""
    parts = [p for p in (first_name, last_name) if p]
    if parts:
        return " ".join(parts)
    return email or "Unknown"


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from the database."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
