"""
array_helpers.py — Per-year form input conversion

User-typed per-year values arrive as strings. These helpers never raise:
anything that does not parse to a finite number becomes 0.
"""

import math
import re
from typing import Dict, List, Optional, Sequence

# Leading numeric prefix, so "12%" reads as 12 and "1.5abc" as 1.5
_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _parse_number(raw: Optional[str]) -> float:
    match = _NUMBER_PREFIX.match((raw or "").strip())
    if not match:
        return 0.0
    value = float(match.group(0))
    return value if math.isfinite(value) else 0.0


def build_array_from_list(years: int, values: Sequence[Optional[str]]) -> List[float]:
    """
    Build a numeric array of exactly `years` entries from string inputs.

    Example:
        build_array_from_list(5, ["1", "2"]) → [1.0, 2.0, 0.0, 0.0, 0.0]
    """
    return [
        _parse_number(values[i] if i < len(values) else "")
        for i in range(max(0, years))
    ]


def build_individual_percents_map(years: int, values: Sequence[Optional[str]]) -> Dict[int, float]:
    """Same parsing as build_array_from_list, keyed by period index."""
    return dict(enumerate(build_array_from_list(years, values)))


def resize_string_array(current: Sequence[str], new_length: int) -> List[str]:
    """Truncate or pad with "" so the list has exactly `new_length` entries."""
    return [current[i] if i < len(current) else "" for i in range(max(0, new_length))]
