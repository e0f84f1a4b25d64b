"""
Relative duration parsing for query windows (e.g. "1h", "30m", "2d").

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d|w|n|y)\s*$")

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
    "w": 7 * 86400.0,
    "n": 30 * 86400.0,
    "y": 365 * 86400.0,
}


def parse_duration(text: str) -> timedelta:
    """Parse a relative duration; the empty string means zero."""
    raw = str(text or "").strip()
    if not raw:
        return timedelta(0)
    m = _DURATION_RE.match(raw)
    if m is None:
        raise ValueError(f"invalid duration {text!r}")
    return timedelta(seconds=float(m.group(1)) * _UNIT_SECONDS[m.group(2)])


def window(reference: datetime, start: str, end: str = "") -> tuple[datetime, datetime]:
    """Resolve ``start``/``end`` durations back from ``reference``."""
    begin = reference - parse_duration(start)
    finish = reference - parse_duration(end)
    if finish < begin:
        raise ValueError(f"window end {end!r} precedes start {start!r}")
    return begin, finish
