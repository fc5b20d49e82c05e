"""
Recognized jurisdictions.

The 50 states only. DC, territories and national/regional aggregate rows
("United States", "Puerto Rico", ...) are not on the roster and are
excluded wherever they appear in source data.
"""

from __future__ import annotations

from typing import Any

STATE_NAMES: frozenset[str] = frozenset(
    {
        "Alabama", "Alaska", "Arizona", "Arkansas", "California",
        "Colorado", "Connecticut", "Delaware", "Florida", "Georgia",
        "Hawaii", "Idaho", "Illinois", "Indiana", "Iowa",
        "Kansas", "Kentucky", "Louisiana", "Maine", "Maryland",
        "Massachusetts", "Michigan", "Minnesota", "Mississippi", "Missouri",
        "Montana", "Nebraska", "Nevada", "New Hampshire", "New Jersey",
        "New Mexico", "New York", "North Carolina", "North Dakota", "Ohio",
        "Oklahoma", "Oregon", "Pennsylvania", "Rhode Island", "South Carolina",
        "South Dakota", "Tennessee", "Texas", "Utah", "Vermont",
        "Virginia", "Washington", "West Virginia", "Wisconsin", "Wyoming",
    }
)


def normalize_state(value: Any) -> str:
    """Trim a raw state cell; None becomes an empty string."""
    if value is None:
        return ""
    return str(value).strip()


def is_recognized(state: str) -> bool:
    return state in STATE_NAMES


def all_states() -> list[str]:
    """Return the roster sorted alphabetically."""
    return sorted(STATE_NAMES)
