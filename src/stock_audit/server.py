"""Stock Audit MCP Server using FastMCP."""

import json
import logging
import os
from typing import Any

from fastmcp import FastMCP

from stock_audit import SCHEMA_VERSION, SERVER_VERSION
from stock_audit.prompts.templates import get_prompt
from stock_audit.resources.results_resource import ResourceNotFoundError, read_results_resource
from stock_audit.tools import audit as audit_tools
from stock_audit.tools import runway as runway_tools

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(
    name="stock-audit",
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def score_stocks(
    records: list[dict[str, Any]],
    narratives: list[dict[str, Any]] | None = None,
    profile: str | None = None,
    include_preview: bool = True,
) -> str:
    """
    Score a batch of securities with the deterministic audit engine.

    Each record runs through the firewall (junk category, sponsor holding,
    losses, leverage), then earns safety (50), moat (30) and valuation (20)
    points. Results come back sorted by score, highest first.

    IMPORTANT RENDERING INSTRUCTIONS:
    - Render results as a table in the order returned (do not re-sort)
    - Show verdict and score; show every red flag verbatim
    - A failed firewall always means score 0 and DESTROY; never soften it
    - Show fair_value with entry/exit/stop levels when present

    Args:
        records: List of dicts with 'ticker' plus any of name, sector, category,
            price, eps, nav, debt, sponsor_holding, nocfps, dividend_percent
        narratives: Optional list of dicts with ticker, moat_type, is_monopoly,
            reasoning, risk_grade (1-10), advice, additional_flags
        profile: Scoring profile - titan (default), strict, lenient
        include_preview: Include the top 5 rows as a flat table (default: true)

    Returns:
        JSON with summary, preview rows, per-security results and profile info
    """
    result = await audit_tools.score_stocks(
        records=records,
        narratives=narratives,
        profile=profile,
        include_preview=include_preview,
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def audit_document(
    content: str,
    mime_type: str = "text/plain",
    is_text: bool = True,
    profile: str | None = None,
) -> str:
    """
    Run the full audit on pasted market data or an uploaded document.

    An extraction model turns the content into records, a narrative model
    writes the moat/risk review, then the engine scores the batch. The
    latest successful run is served at audit://latest.

    Args:
        content: Pasted text, or base64 (or data URL) for images and PDFs
        mime_type: MIME type (text/plain, text/csv, image/png, application/pdf, ...)
        is_text: Whether content is plain text (default: true)
        profile: Scoring profile - titan (default), strict, lenient

    Returns:
        JSON with summary, per-security results and run token
    """
    result = await audit_tools.audit_document(
        content=content,
        mime_type=mime_type,
        is_text=is_text,
        profile=profile,
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def parse_narrative_payload(payload: str) -> str:
    """
    Parse a raw narrative model response the way the audit pipeline does.

    Tolerates markdown code fences, a wrapping object and truncated arrays.

    Args:
        payload: Raw model output text

    Returns:
        JSON with the normalized narrative entries
    """
    result = audit_tools.parse_narrative_payload(payload)
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def list_scoring_profiles() -> str:
    """
    List the available scoring profiles and their thresholds.

    Returns:
        JSON with the default profile name and each profile's settings
    """
    result = audit_tools.list_scoring_profiles()
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def empire_runway(liquid_cash: float, monthly_burn: float) -> str:
    """
    How many months of expenses liquid cash covers.

    Args:
        liquid_cash: Cash on hand
        monthly_burn: Monthly spend (0 is treated as 1)

    Returns:
        JSON with runway in months and years
    """
    result = await runway_tools.empire_runway(liquid_cash=liquid_cash, monthly_burn=monthly_burn)
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# RESOURCES
# ============================================================================


@mcp.resource("audit://latest")
def get_latest_audit() -> str:
    """
    Get the last committed audit run as CSV.

    Must call audit_document first to populate it.

    Returns:
        CSV with rank, ticker, score, verdict, metrics and red flags
    """
    try:
        csv_text, _ = read_results_resource()
        return csv_text
    except ResourceNotFoundError as e:
        return str(e)


# ============================================================================
# PROMPTS
# ============================================================================


@mcp.prompt
def extraction_prompt(raw_data: str) -> str:
    """Extract securities from pasted market data, review and score them."""
    result = get_prompt("extraction_prompt", {"raw_data": raw_data})
    if result:
        return result["messages"][0]["content"]
    return "Extract the stocks from the data and call score_stocks."


@mcp.prompt
def narrative_prompt(tickers_block: str) -> str:
    """Qualitative moat and risk review for a block of securities."""
    result = get_prompt("narrative_prompt", {"tickers_block": tickers_block})
    if result:
        return result["messages"][0]["content"]
    return f"Review these securities:\n{tickers_block}"


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Stock Audit MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    mcp.run()


if __name__ == "__main__":
    main()
