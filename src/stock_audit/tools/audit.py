"""Audit tools: pure scoring and the full extraction -> narrative -> scoring pipeline."""

import logging
import os
from datetime import datetime
from time import perf_counter
from typing import Any

from stock_audit.collaborators.client import (
    CollaboratorError,
    CollaboratorRateLimitedError,
    LLMClient,
)
from stock_audit.collaborators.extraction import extract_records, extraction_model
from stock_audit.collaborators.narrative import (
    generate_narratives,
    narrative_model,
    parse_narratives,
)
from stock_audit.engine.audit import run_scoring, summarize_results
from stock_audit.engine.profile import PROFILES, ScoringProfile, get_profile
from stock_audit.engine.records import (
    AnalysisResult,
    InvalidRecordError,
    NarrativeEntry,
    NoRecordsFoundError,
    RawSecurityRecord,
)
from stock_audit.session import AuditSession, audit_session
from stock_audit.utils.normalize import sanitize_nan_inf
from stock_audit.utils.provenance import build_error_response, build_meta, build_provenance
from stock_audit.utils.table import frame_to_rows, results_to_frame

logger = logging.getLogger(__name__)

PREVIEW_ROWS = 5


def _resolve_profile(name: str | None) -> ScoringProfile:
    return get_profile(name or os.environ.get("AUDIT_PROFILE"))


def _scoring_response(
    tool: str,
    results: list[AnalysisResult],
    profile: ScoringProfile,
    data_provenance: dict[str, Any],
    start_time: float,
    include_preview: bool = False,
) -> dict[str, Any]:
    rows = [r.to_dict() for r in results]
    preview = None
    if include_preview:
        frame = results_to_frame(rows)
        preview = sanitize_nan_inf(frame_to_rows(frame.head(PREVIEW_ROWS)))

    duration_ms = (perf_counter() - start_time) * 1000
    response: dict[str, Any] = {
        "meta": build_meta(tool, duration_ms),
        "data_provenance": data_provenance,
        "profile": {"name": profile.name, "version": profile.version},
        "summary": summarize_results(results),
        "results": rows,
    }
    if preview is not None:
        response["preview"] = preview
    return response


async def score_stocks(
    records: list[dict[str, Any]],
    narratives: list[dict[str, Any]] | None = None,
    profile: str | None = None,
    include_preview: bool = True,
) -> dict[str, Any]:
    """
    Score caller-supplied records with the deterministic engine.

    Args:
        records: Raw record dicts (ticker required, other fields optional)
        narratives: Narrative dicts, ticker- or index-aligned (optional)
        profile: Scoring profile name (default: AUDIT_PROFILE or "titan")
        include_preview: Include the top 5 rows as a flat table (default: True)

    Returns:
        Dict with meta, summary, preview (optional) and results sorted by
        score descending
    """
    start_time = perf_counter()

    if not records:
        return build_error_response(
            error_type="no_data_found",
            message="records list cannot be empty",
            tool="score_stocks",
        )

    try:
        scoring_profile = _resolve_profile(profile)
        parsed = [RawSecurityRecord.from_dict(r) for r in records]
        # Non-objects keep their slot as default entries so positions stay aligned
        entries = [NarrativeEntry.from_dict(n) for n in (narratives or [])]
        results = run_scoring(parsed, entries, scoring_profile)
    except (InvalidRecordError, ValueError) as e:
        return build_error_response(
            error_type="invalid_input",
            message=str(e),
            tool="score_stocks",
        )

    as_of = datetime.utcnow().isoformat() + "Z"
    return _scoring_response(
        "score_stocks",
        results,
        scoring_profile,
        {
            "records": build_provenance(source="caller", as_of=as_of, count=len(parsed)),
            "narratives": build_provenance(
                source="caller", as_of=as_of, count=len(entries)
            ),
        },
        start_time,
        include_preview=include_preview,
    )


async def audit_document(
    content: str,
    mime_type: str = "text/plain",
    is_text: bool = True,
    profile: str | None = None,
    client: LLMClient | None = None,
    session: AuditSession = audit_session,
) -> dict[str, Any]:
    """
    Run the full pipeline on pasted text or an uploaded document.

    Extraction and narrative calls run sequentially; scoring runs once over
    the whole batch. Results are committed to the session only if no newer
    run started meanwhile. Any failure leaves earlier results untouched.

    Args:
        content: Plain text, or base64 / data URL when is_text is False
        mime_type: MIME type of the upload
        is_text: Whether content is plain text
        profile: Scoring profile name
        client: LLM client (default built from environment)
        session: Session receiving the committed results

    Returns:
        Scoring response plus run token and commit status, or an error response
    """
    start_time = perf_counter()

    # Rejected before a run token is taken so a bad call cannot supersede a live run
    try:
        scoring_profile = _resolve_profile(profile)
    except ValueError as e:
        return build_error_response("invalid_input", str(e), tool="audit_document")

    token = session.begin()
    client = client or LLMClient()

    try:
        records = await extract_records(content, mime_type, is_text, client=client)
        narratives = await generate_narratives(records, client=client)
        results = run_scoring(records, narratives, scoring_profile)
    except NoRecordsFoundError as e:
        session.fail(token, str(e))
        return build_error_response("no_data_found", str(e), tool="audit_document")
    except CollaboratorRateLimitedError as e:
        session.fail(token, str(e))
        return build_error_response(
            "rate_limited",
            str(e),
            tool="audit_document",
            retry_after_seconds=e.retry_after_seconds,
        )
    except CollaboratorError as e:
        session.fail(token, str(e))
        return build_error_response("collaborator_error", str(e), tool="audit_document")
    except (InvalidRecordError, ValueError) as e:
        session.fail(token, str(e))
        return build_error_response("invalid_input", str(e), tool="audit_document")

    committed = session.commit(token, results, scoring_profile.name)
    logger.info(f"Audit run {token}: scored {len(results)} securities (committed={committed})")

    as_of = datetime.utcnow().isoformat() + "Z"
    response = _scoring_response(
        "audit_document",
        results,
        scoring_profile,
        {
            "records": build_provenance(
                source="extraction_model",
                as_of=as_of,
                model=extraction_model(),
                mime_type=mime_type,
                count=len(records),
            ),
            "narratives": build_provenance(
                source="narrative_model",
                as_of=as_of,
                model=narrative_model(),
                count=len(narratives),
            ),
        },
        start_time,
    )
    response["run"] = {"token": token, "committed": committed}
    return response


def parse_narrative_payload(payload: str) -> dict[str, Any]:
    """
    Validate a raw narrative model response with the defensive parser.

    Args:
        payload: Raw model text (may include code fences or be truncated)

    Returns:
        Dict with the normalized entries as the engine will see them
    """
    entries = parse_narratives(payload)
    return {
        "meta": build_meta("parse_narrative_payload"),
        "count": len(entries),
        "entries": [
            {
                "ticker": e.ticker,
                "moat_type": e.moat_type,
                "is_monopoly": e.is_monopoly,
                "reasoning": e.reasoning,
                "risk_grade": e.risk_grade,
                "advice": e.advice,
                "additional_flags": list(e.additional_flags),
            }
            for e in entries
        ],
    }


def list_scoring_profiles() -> dict[str, Any]:
    """Describe every preset profile."""
    default_name = _resolve_profile(None).name
    return {
        "meta": build_meta("list_scoring_profiles"),
        "default": default_name,
        "profiles": [p.describe() for p in PROFILES.values()],
    }
