"""Stock audit tools."""

from stock_audit.tools.audit import (
    audit_document,
    list_scoring_profiles,
    parse_narrative_payload,
    score_stocks,
)
from stock_audit.tools.runway import empire_runway

__all__ = [
    "audit_document",
    "empire_runway",
    "list_scoring_profiles",
    "parse_narrative_payload",
    "score_stocks",
]
