"""Clock helpers.

Stored datetimes are always UTC-aware.  Ids and library snapshot stamps use
integer epoch milliseconds derived from the same clock.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def epoch_ms(moment: datetime | None = None) -> int:
    """Milliseconds since the Unix epoch for *moment* (default: now)."""
    return int((moment or utc_now()).timestamp() * 1000)
