"""UTC timestamp helpers.

Every date the API accepts or emits uses one canonical form,
``YYYY-MM-DDTHH:MM:SS.mmmZ``. Incoming values are only accepted when they
survive a parse/format round trip unchanged, so ``2024-02-30T00:00:00.000Z``
or ``2024-01-01T00:00:00Z`` are rejected.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
_ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_iso(value: str) -> Optional[datetime]:
    """Return an aware UTC datetime, or None when ``value`` is not canonical."""
    if not isinstance(value, str) or not _ISO_RE.match(value):
        return None
    try:
        dt = datetime.strptime(value, _ISO_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None
    if to_iso(dt) != value:
        return None
    return dt


def is_valid_iso(value: str) -> bool:
    return parse_iso(value) is not None


def now_iso() -> str:
    return to_iso(utcnow())


def next_iso_after(previous: Optional[str]) -> str:
    """Current time, pushed 1ms past ``previous`` if the clock has not moved on."""
    now = utcnow()
    now = now.replace(microsecond=now.microsecond // 1000 * 1000)
    prev = parse_iso(previous) if previous else None
    if prev is not None and now <= prev:
        now = prev + timedelta(milliseconds=1)
    return to_iso(now)
