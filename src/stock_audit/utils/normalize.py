"""Canonical JSON helpers for deterministic audit output.

The scoring engine is pure, so two runs over identical input must produce
identical output. These helpers give that a checkable form:

1. NaN/inf are replaced with null, -0.0 with 0.0
2. Keys are sorted at every level with minimal separators
3. A short SHA-256 digest identifies a result set
"""

from __future__ import annotations

import hashlib
import json
import math
from typing import Any


def canonical_dumps(obj: Any) -> str:
    """Produce canonical JSON string with sorted keys and minimal separators.

    Uses allow_nan=False to fail fast if NaN/inf values slip through
    sanitization.
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def _is_nan_or_inf(x: Any) -> bool:
    try:
        return math.isnan(x) or math.isinf(x)
    except (TypeError, ValueError):
        return False


def _is_negative_zero(x: Any) -> bool:
    try:
        return x == 0.0 and math.copysign(1.0, x) < 0
    except (TypeError, ValueError):
        return False


def sanitize_nan_inf(obj: Any) -> Any:
    """Recursively replace NaN, inf, -inf with None and -0.0 with 0.0."""
    if isinstance(obj, dict):
        return {k: sanitize_nan_inf(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [sanitize_nan_inf(item) for item in obj]
    elif isinstance(obj, bool):
        return obj
    elif _is_nan_or_inf(obj):
        return None
    elif _is_negative_zero(obj):
        return 0.0
    return obj


def results_digest(rows: list[dict[str, Any]]) -> str:
    """
    Hash an ordered list of result dicts.

    Order is significant: the same results in a different order produce a
    different digest.

    Returns:
        First 16 hex chars of the SHA-256 of the canonical JSON
    """
    canonical_json = canonical_dumps(sanitize_nan_inf(rows))
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()[:16]
