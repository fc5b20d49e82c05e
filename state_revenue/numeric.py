"""Lenient numeric parsing for government finance extracts."""

from __future__ import annotations

import math
import re
from typing import Any

_STRIP_RE = re.compile(r"[$,]")
_PAREN_NEGATIVE_RE = re.compile(r"\((.*)\)")


def parse_numeric(value: Any) -> float:
    """
    Coerce a raw cell to a finite float.

    '$1,234' -> 1234.0, '(500)' -> -500.0 (accounting negative).
    Underscore digit grouping ('1_000') is not a number here.
    Blank, garbage, NaN and infinite input all degrade to 0.0; this
    function never raises.
    """
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    if value is None:
        return 0.0

    text = _STRIP_RE.sub("", str(value))
    text = _PAREN_NEGATIVE_RE.sub(r"-\1", text, count=1).strip()
    if not text or "_" in text:
        return 0.0
    try:
        parsed = float(text)
    except ValueError:
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def parse_year(value: Any, default: int) -> int:
    """Resolve a year cell; blank or absent cells fall back to ``default``."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    return int(parse_numeric(value))
