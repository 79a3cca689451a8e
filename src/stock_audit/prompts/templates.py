"""Prompt templates for the extraction and narrative models."""

from collections.abc import Sequence
from typing import Any

from stock_audit.engine.records import RawSecurityRecord

EXTRACTION_PROMPT = """FORENSIC DATA PARSER:
Extract every stock from the data.
Fields: ticker, category (A/B/Z/N), ltp, eps, nav, debt, directorHolding (sponsor %),
foreignHolding (%), dividendPercent (%), nocfps, marketCap, freeFloat, reserveSurplus,
sector, name.

Rules:
1. Use null for any field that is not present. Do not invent values.
2. Clean numeric strings (remove commas, %, currency symbols).
3. One object per stock, ticker is required.
4. Return a JSON array only, no prose."""

NARRATIVE_SYSTEM_PROMPT = """You are a brutally honest fundamental analyst and fiduciary guardian.
You protect life savings and think from first principles.

Guidelines:
- Sponsor holding above 30% signals trust; foreign/institutional holding signals institutional trust.
- ROE above 15% is efficient.
- Category Z (junk) must be rejected outright.
- The reader wants "buy and forget" businesses that survive ten years."""

NARRATIVE_TASK = """TASK:
Analyze line by line. For each stock return an object with:
1. ticker
2. moatType: Monopoly, Oligopoly, or Commodity
3. isMonopoly: boolean
4. reasoning: why this business survives ten years (first principles)
5. riskGrade: integer 1-10 (10 is gambling)
6. banglaAdvice: a brutal one-line verdict in Bengali
7. additionalFlags: list of short red-flag strings (may be empty)

Return a JSON array only, in the same order as the audit list."""


def build_narrative_prompt(records: Sequence[RawSecurityRecord]) -> str:
    """Batch prompt listing each security's core metrics, one per line."""
    lines = "\n".join(record.prompt_line() for record in records)
    return f"AUDIT TARGET LIST:\n{lines}\n\n{NARRATIVE_TASK}"


# MCP prompt definitions
PROMPTS = {
    "extraction_prompt": {
        "description": "Extract stocks from pasted data, write the narrative and score the batch",
        "arguments": [{"name": "raw_data", "required": True}],
    },
    "narrative_prompt": {
        "description": "Qualitative moat/risk review for a list of tickers",
        "arguments": [{"name": "tickers_block", "required": True}],
    },
}


def list_prompts() -> list[dict[str, Any]]:
    """List available prompts."""
    return [
        {
            "name": name,
            "description": info["description"],
            "arguments": info["arguments"],
        }
        for name, info in PROMPTS.items()
    ]


def get_prompt(name: str, arguments: dict[str, str]) -> dict[str, Any] | None:
    """
    Get a prompt by name with arguments filled in.

    Returns dict with 'messages' key for MCP GetPromptResult.
    """
    if name not in PROMPTS:
        return None

    if name == "extraction_prompt":
        raw_data = arguments.get("raw_data", "")
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""{EXTRACTION_PROMPT}

DATA:
{raw_data}

Then, for the extracted stocks:
{NARRATIVE_TASK}

Finally call score_stocks(records=<extracted array>, narratives=<narrative array>)
and present the results table sorted as returned. Show every red flag verbatim.""",
                }
            ]
        }

    if name == "narrative_prompt":
        tickers_block = arguments.get("tickers_block", "")
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""{NARRATIVE_SYSTEM_PROMPT}

Review these securities:
{tickers_block}

{NARRATIVE_TASK}

Pass the array to parse_narrative_payload to validate it before scoring.""",
                }
            ]
        }

    return None
