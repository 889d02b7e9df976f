"""Small helpers shared across the dashboard."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

APPROX_DAYS_IN_YEAR = 365
APPROX_DAYS_IN_MONTH = 28
DAYS_IN_WEEK = 7


def time_elapsed(then: datetime, now: Optional[datetime] = None) -> str:
    """Describe the time between ``then`` and ``now`` by its largest unit.

    Returns strings such as ``"3h ago"``, ``"2d after"`` or ``"just now"``.
    """
    if now is None:
        now = datetime.now(tz=then.tzinfo) if then.tzinfo else datetime.now()

    seconds = (now - then).total_seconds()
    hours = seconds / 3600
    day = math.floor(hours / 24)

    units = (
        (math.floor(day / APPROX_DAYS_IN_YEAR), "y"),
        (math.floor(day / APPROX_DAYS_IN_MONTH), "mo"),
        (math.floor(day / DAYS_IN_WEEK), "w"),
        (day, "d"),
        (math.floor(abs(hours)), "h"),
        (math.floor(abs(seconds / 60)), "m"),
        (math.floor(abs(seconds)), "s"),
    )
    parts = [f"{amount}{suffix}" for amount, suffix in units if amount > 0]
    if not parts:
        return "just now"

    suffix = " ago" if now > then else " after"
    return parts[0] + suffix