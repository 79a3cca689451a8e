"""Validation and coercion helpers for untrusted record fields."""

import math
import operator
import re
from collections.abc import Callable
from typing import Any

# Characters stripped from numeric strings before parsing ("1,250.5", "35%", "$ 12")
_NUMERIC_NOISE = re.compile(r"[,%$\s]")


def coerce_number(value: Any) -> float | None:
    """
    Convert a loosely-typed numeric value to float.

    Accepts ints, floats and numeric strings with thousands separators,
    percent signs or currency symbols. Booleans, NaN, inf and anything
    unparseable become None.

    Args:
        value: Raw value from an extraction payload (may be None)

    Returns:
        Finite float, or None if the value is absent or unusable
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        cleaned = _NUMERIC_NOISE.sub("", value)
        if not cleaned or cleaned.lower() in {"n/a", "na", "none", "null", "-"}:
            return None
        value = cleaned
    try:
        result = float(value)
    except (ValueError, TypeError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def coerce_bool(value: Any) -> bool:
    """Interpret booleans, numbers and yes/no strings. Anything else is False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "y", "1"}
    return False


def normalize_ticker(value: Any) -> str | None:
    """Uppercase and strip a ticker. Blank or non-string input returns None."""
    if value is None:
        return None
    ticker = str(value).upper().strip()
    return ticker or None


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def check_rule(
    value: float | None,
    threshold: float,
    comparator: Callable[[float, float], bool] = operator.gt,
) -> bool | None:
    """
    Check a rule with nullable boolean semantics.

    If value is None, returns None (not False).

    Args:
        value: The value to check (may be None)
        threshold: The threshold to compare against
        comparator: Comparison function (default: operator.gt)

    Returns:
        True/False if value is not None, None otherwise
    """
    if value is None:
        return None
    return comparator(value, threshold)
