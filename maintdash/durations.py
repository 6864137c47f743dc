from __future__ import annotations

import logging
import re
from datetime import datetime, tzinfo
from typing import Any, Optional

from .models import StoppageEvent
from .timestamps import local_now, to_instant

logger = logging.getLogger(__name__)

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")


def clock_minutes(text: Optional[str]) -> Optional[int]:
    """'HH:mm' -> minutes since midnight; None for anything else."""
    if not isinstance(text, str):
        return None
    m = _CLOCK_RE.match(text)
    if not m:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def elapsed_minutes(start: Any, end: Any, now: datetime, tz: Optional[tzinfo] = None) -> Optional[int]:
    """Whole minutes from start to end (or to now while still open); None without a start."""
    started = to_instant(start, tz)
    if started is None:
        return None
    finished = to_instant(end, tz) or local_now(now, tz)
    return max(0, int(round((finished - started).total_seconds() / 60.0)))


def stoppage_minutes(stoppage: StoppageEvent, now: datetime, tz: Optional[tzinfo] = None) -> float:
    """
    Downtime of one stoppage, first applicable rule wins:

    1. explicit ``duration_minutes`` when > 0
    2. ``finished_at - created_at`` (open stoppages measured up to ``now``)
    3. ``|end_time - start_time|`` of the HH:mm texts (same-day only, no midnight wrap)
    4. 0
    """
    explicit = stoppage.duration_minutes
    if explicit is not None and explicit > 0:
        return float(explicit)

    elapsed = elapsed_minutes(stoppage.created_at, stoppage.finished_at, now, tz)
    if elapsed is not None:
        return float(elapsed)

    start = clock_minutes(stoppage.start_time)
    end = clock_minutes(stoppage.end_time)
    if start is not None and end is not None:
        return float(abs(end - start))

    logger.debug("Stoppage %s has no usable duration", stoppage.id)
    return 0.0
