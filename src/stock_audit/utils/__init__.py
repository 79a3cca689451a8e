"""Utility modules."""

from stock_audit.utils.normalize import canonical_dumps, results_digest, sanitize_nan_inf
from stock_audit.utils.payload import parse_json_array, strip_code_fences
from stock_audit.utils.provenance import build_error_response, build_meta, build_provenance
from stock_audit.utils.sanitize import sanitize_text, sanitize_text_list
from stock_audit.utils.table import frame_to_csv, frame_to_rows, results_to_frame
from stock_audit.utils.validators import (
    check_rule,
    clamp,
    coerce_bool,
    coerce_number,
    normalize_ticker,
)

__all__ = [
    "canonical_dumps",
    "results_digest",
    "sanitize_nan_inf",
    "parse_json_array",
    "strip_code_fences",
    "build_error_response",
    "build_meta",
    "build_provenance",
    "sanitize_text",
    "sanitize_text_list",
    "frame_to_csv",
    "frame_to_rows",
    "results_to_frame",
    "check_rule",
    "clamp",
    "coerce_bool",
    "coerce_number",
    "normalize_ticker",
]
