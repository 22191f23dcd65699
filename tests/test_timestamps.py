from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from task_api.core import timestamps  # noqa: E402


def test_to_iso_uses_millisecond_utc_form():
    dt = datetime(2024, 12, 31, 23, 59, 59, 999_999, tzinfo=timezone.utc)
    assert timestamps.to_iso(dt) == "2024-12-31T23:59:59.999Z"


@pytest.mark.parametrize(
    "value",
    [
        "2024-12-31T23:59:59.999Z",
        "2024-02-29T00:00:00.000Z",
        "1999-01-01T12:30:00.500Z",
    ],
)
def test_parse_iso_accepts_canonical_values(value):
    parsed = timestamps.parse_iso(value)

    assert parsed is not None
    assert parsed.tzinfo is not None
    assert timestamps.to_iso(parsed) == value


@pytest.mark.parametrize(
    "value",
    [
        "invalid-date",
        "",
        "2024-12-31",
        "2024-12-31T23:59:59Z",
        "2024-12-31T23:59:59.999",
        "2024-12-31T23:59:59.999+00:00",
        "2023-02-29T00:00:00.000Z",
        "2024-13-01T00:00:00.000Z",
        "2024-01-01T24:00:00.000Z",
    ],
)
def test_parse_iso_rejects_non_canonical_values(value):
    assert timestamps.parse_iso(value) is None
    assert timestamps.is_valid_iso(value) is False


def test_next_iso_after_moves_past_a_timestamp_in_the_future():
    future = "2999-01-01T00:00:00.000Z"
    assert timestamps.next_iso_after(future) == "2999-01-01T00:00:00.001Z"


def test_next_iso_after_uses_clock_when_it_has_advanced():
    past = "2000-01-01T00:00:00.000Z"
    stamp = timestamps.next_iso_after(past)

    assert stamp > past
    assert timestamps.is_valid_iso(stamp)
