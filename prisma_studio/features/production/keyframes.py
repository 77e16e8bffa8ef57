"""Keyframe budget per (duration, density) pair."""

import re
from typing import Dict, List

DEFAULT_KEYFRAME_COUNT = 8

KEYFRAME_TABLE: Dict[str, Dict[str, int]] = {
    "30_seconds": {"concise": 4, "standard": 5, "detailed": 6},
    "1_minute": {"concise": 6, "standard": 8, "detailed": 10},
    "3_minutes": {"concise": 10, "standard": 14, "detailed": 18},
    "5_minutes": {"concise": 14, "standard": 20, "detailed": 26},
    "8_minutes": {"concise": 18, "standard": 26, "detailed": 34},
    "10_minutes": {"concise": 20, "standard": 30, "detailed": 40},
}

DURATION_OPTIONS: List[str] = [
    "30 Seconds",
    "1 Minute",
    "3 Minutes",
    "5 Minutes",
    "8 Minutes",
    "10 Minutes",
]

DENSITY_OPTIONS: List[str] = ["Concise", "Standard", "Detailed"]


def _normalize_label(label: str) -> str:
    return re.sub(r"\s+", "_", (label or "").strip().lower())


def required_keyframe_count(duration_label: str, density_label: str) -> int:
    """
    Number of scenes a package must contain.

    Unknown durations or densities fall back to DEFAULT_KEYFRAME_COUNT so an
    unexpected label never blocks generation.
    """
    row = KEYFRAME_TABLE.get(_normalize_label(duration_label))
    if not row:
        return DEFAULT_KEYFRAME_COUNT
    return row.get(_normalize_label(density_label), DEFAULT_KEYFRAME_COUNT)
