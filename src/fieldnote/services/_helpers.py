"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta


def now_utc() -> datetime:
    return datetime.now(UTC)


def inactivity_cutoff(inactive_days: int, *, now: datetime | None = None) -> datetime:
    """The instant before which a last login counts as inactive.

    Examples:
        >>> inactivity_cutoff(90, now=datetime(2024, 4, 1, tzinfo=UTC)).date()
        datetime.date(2024, 1, 2)
    """
    return (now or now_utc()) - timedelta(days=inactive_days)


def split_name(name: str) -> tuple[str, str]:
    """Split a provider display name into (first_name, last_name).

    A single-token name is used for both parts.

    Examples:
        >>> split_name("Ada Lovelace")
        ('Ada', 'Lovelace')
        >>> split_name("Grace Brewster Hopper")
        ('Grace', 'Brewster Hopper')
        >>> split_name("Plato")
        ('Plato', 'Plato')
    """
    parts = name.strip().split(None, 1)
    if len(parts) == 2:
        return parts[0], parts[1]
    return parts[0], parts[0]
