"""
Timestamp normalisation.

Records arrive with timestamps in several shapes, depending on which part of the
app wrote them:

- wrapped: document-store timestamp objects exposing a zero-argument conversion
  (``to_datetime()`` / ``ToDatetime()`` / ``toDate()``), or their serialised form
  ``{"seconds": ..., "nanoseconds": ...}``
- native:  ``datetime`` (``pandas.Timestamp`` included) or a bare ``date``
- text:    ISO 8601 strings (date, optional time and offset)
- missing: ``None`` / ``""``

Everything is turned into a naive wall-clock ``datetime`` in the dashboard
timezone, or ``None``. Nothing here raises.
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Literal, Mapping, Optional

import pandas as pd

logger = logging.getLogger(__name__)

TimestampKind = Literal["wrapped", "native", "text", "missing", "unknown"]

_CONVERTERS = ("to_datetime", "ToDatetime", "toDate")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}([T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?)?(Z|[+-]\d{2}:?\d{2})?$")


def _converter(value: Any):
    for name in _CONVERTERS:
        try:
            fn = getattr(value, name, None)
        except Exception:  # foreign wrapper with a failing attribute
            continue
        if callable(fn):
            return fn
    return None


def timestamp_kind(value: Any) -> TimestampKind:
    if value is None or value is pd.NaT:
        return "missing"
    if isinstance(value, str):
        return "text" if value.strip() else "missing"
    # datetime before the converter check: pandas.Timestamp has to_datetime-like methods
    if isinstance(value, (datetime, date)):
        return "native"
    if isinstance(value, Mapping):
        return "wrapped" if ("seconds" in value or "_seconds" in value) else "unknown"
    if _converter(value) is not None:
        return "wrapped"
    return "unknown"


def _localize(dt: datetime, tz: Optional[tzinfo]) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(tz or timezone.utc).replace(tzinfo=None)


def _from_mapping(value: Mapping) -> datetime:
    seconds = value.get("seconds", value.get("_seconds"))
    nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
    return _EPOCH + timedelta(seconds=float(seconds), microseconds=float(nanos) / 1000.0)


def _from_native(value: Any) -> datetime:
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, datetime.min.time())


def _from_text(value: str) -> Optional[datetime]:
    text = value.strip()
    # ISO dates only; keywords like "now"/"today" would read the wall clock
    if not _ISO_RE.match(text):
        return None
    ts = pd.to_datetime(text, format="ISO8601", errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _from_wrapped(value: Any) -> Optional[datetime]:
    if isinstance(value, Mapping):
        return _from_mapping(value)
    try:
        raw = _converter(value)()
    except Exception as e:  # document-store objects raise their own error types
        logger.debug("Timestamp wrapper %s failed to convert: %s", type(value).__name__, e)
        return None
    if raw is None or raw is pd.NaT or not isinstance(raw, (datetime, date)):
        return None
    return _from_native(raw)


def to_instant(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Normalise any timestamp-like value; ``None`` when it can't be interpreted."""
    try:
        kind = timestamp_kind(value)
        if kind == "missing":
            return None
        if kind == "native":
            dt = _from_native(value)
        elif kind == "text":
            dt = _from_text(value)
        elif kind == "wrapped":
            dt = _from_wrapped(value)
        else:
            logger.debug("Unrecognised timestamp shape: %s", type(value).__name__)
            return None
        if dt is None:
            return None
        return _localize(dt, tz)
    except (AttributeError, TypeError, ValueError, OverflowError, OSError) as e:
        logger.debug("Timestamp conversion failed for %r: %s", value, e)
        return None


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def local_now(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> datetime:
    """`now` as a naive wall-clock instant in tz; the current time when not given."""
    if now is None:
        now = datetime.now(tz or timezone.utc)
    return _localize(now, tz)
