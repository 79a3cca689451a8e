"""Response metadata and error envelopes."""

from datetime import datetime
from typing import Any

from stock_audit import SCHEMA_VERSION, SERVER_VERSION


def build_meta(tool: str, duration_ms: float | None = None) -> dict[str, Any]:
    """
    Build standard metadata block for responses.

    Args:
        tool: Name of the tool producing this response
        duration_ms: Execution time in milliseconds (optional)

    Returns:
        Metadata dict with version info
    """
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "tool": tool,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_provenance(
    source: str,
    as_of: datetime | str | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Build provenance block for one input source.

    Args:
        source: Where the data came from (e.g., "caller", "extraction_model")
        as_of: Timestamp the data was produced
        **kwargs: Additional provenance fields (model name, record counts)

    Returns:
        Provenance dict for this source
    """
    prov: dict[str, Any] = {"source": source}

    if as_of is not None:
        if isinstance(as_of, datetime):
            prov["as_of"] = as_of.isoformat()
        else:
            prov["as_of"] = as_of

    prov.update(kwargs)

    if "warnings" not in prov:
        prov["warnings"] = []

    return prov


def build_error_response(
    error_type: str,
    message: str,
    tool: str = "error",
    retry_after_seconds: int | None = None,
) -> dict[str, Any]:
    """
    Build standardized error response.

    Args:
        error_type: invalid_input, no_data_found, rate_limited or collaborator_error
        message: Human-readable error message
        tool: Name of the tool that failed
        retry_after_seconds: Seconds to wait before retry (for rate limiting)

    Returns:
        Error response dict
    """
    response: dict[str, Any] = {
        "error": True,
        "error_type": error_type,
        "message": message,
        "meta": build_meta(tool),
    }

    if retry_after_seconds is not None:
        response["retry_after_seconds"] = retry_after_seconds

    return response
