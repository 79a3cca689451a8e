"""Narrative collaborator: one batch call for moat, reasoning, risk and advice."""

import logging
import os
from collections.abc import Sequence
from typing import Any

from stock_audit.collaborators.client import LLMClient
from stock_audit.engine.records import NarrativeEntry, RawSecurityRecord
from stock_audit.prompts.templates import NARRATIVE_SYSTEM_PROMPT, build_narrative_prompt
from stock_audit.utils.payload import parse_json_array

logger = logging.getLogger(__name__)


def narrative_model() -> str:
    return os.environ.get("AUDIT_NARRATIVE_MODEL", "claude-sonnet-4-5")


def parse_narratives(text: str | None) -> list[NarrativeEntry]:
    """
    Parse a narrative response. Never raises.

    Every array item maps to one entry so positions stay aligned with the
    records; a non-object item becomes the default entry. A response that
    cannot be parsed at all yields [] and the engine falls back to defaults
    for every record.
    """
    items: list[Any] = parse_json_array(text)
    non_objects = sum(1 for item in items if not isinstance(item, dict))
    if non_objects:
        logger.info(f"{non_objects}/{len(items)} narrative entries were not objects, using defaults")
    return [NarrativeEntry.from_dict(item) for item in items]


async def generate_narratives(
    records: Sequence[RawSecurityRecord],
    client: LLMClient | None = None,
    model: str | None = None,
) -> list[NarrativeEntry]:
    """
    Request narrative fields for a whole batch in one call.

    Raises:
        CollaboratorError: If the model call itself fails
    """
    if not records:
        return []

    client = client or LLMClient()
    text = await client.agenerate(
        model or narrative_model(),
        build_narrative_prompt(records),
        system=NARRATIVE_SYSTEM_PROMPT,
        temperature=0.2,
    )
    entries = parse_narratives(text)
    if len(entries) < len(records):
        logger.info(f"Narrative returned {len(entries)} entries for {len(records)} records")
    return entries
