"""
Human-readable application numbers: HBF-{year}-{day of year}-{seconds since UTC midnight}.

Two submissions inside the same second produce the same base number, so callers
check for a collision and fall back to a suffixed variant.
"""
from __future__ import annotations

import secrets
from datetime import datetime, timezone

PREFIX = "HBF"


def generate_application_number(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    now = now.astimezone(timezone.utc)
    day_of_year = now.timetuple().tm_yday
    seconds = now.hour * 3600 + now.minute * 60 + now.second
    return f"{PREFIX}-{now.year}-{day_of_year:03d}-{seconds:05d}"


def with_collision_suffix(number: str) -> str:
    return f"{number}-{secrets.token_hex(2).upper()}"
