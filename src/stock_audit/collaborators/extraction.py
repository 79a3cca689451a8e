"""Extraction collaborator: raw upload -> RawSecurityRecord list."""

import logging
import os

from stock_audit.collaborators.client import LLMClient, build_content_blocks
from stock_audit.engine.records import InvalidRecordError, NoRecordsFoundError, RawSecurityRecord
from stock_audit.prompts.templates import EXTRACTION_PROMPT
from stock_audit.utils.payload import parse_json_array

logger = logging.getLogger(__name__)


def extraction_model() -> str:
    return os.environ.get("AUDIT_EXTRACTION_MODEL", "claude-3-5-haiku-latest")


def records_from_payload(items: list) -> list[RawSecurityRecord]:
    """
    Convert parsed extraction output to records.

    Entries that are not objects or carry no ticker are skipped. A ticker
    seen twice keeps its first row.

    Raises:
        NoRecordsFoundError: If nothing usable remains
    """
    records: list[RawSecurityRecord] = []
    seen: set[str] = set()
    skipped = 0
    for item in items:
        try:
            record = RawSecurityRecord.from_dict(item)
        except InvalidRecordError as e:
            skipped += 1
            logger.debug(f"Skipping extracted entry: {e}")
            continue
        if record.ticker in seen:
            skipped += 1
            logger.debug(f"Skipping repeated ticker {record.ticker}")
            continue
        seen.add(record.ticker)
        records.append(record)

    if skipped:
        logger.info(f"Extraction: kept {len(records)} records, skipped {skipped}")
    if not records:
        raise NoRecordsFoundError("No stock data found in the uploaded content")
    return records


async def extract_records(
    content: str,
    mime_type: str = "text/plain",
    is_text: bool = True,
    client: LLMClient | None = None,
    model: str | None = None,
) -> list[RawSecurityRecord]:
    """
    Turn pasted text or an uploaded document into records.

    Args:
        content: Plain text, or base64 / data URL when is_text is False
        mime_type: MIME type of the upload
        is_text: Whether content is plain text
        client: LLM client (a default one is built if None)
        model: Model name override

    Returns:
        Records in the order the model listed them

    Raises:
        NoRecordsFoundError: If the content is empty or nothing parseable came back
        ValueError: If binary content is not valid base64
        CollaboratorError: If the model call fails
    """
    if not content or not content.strip():
        raise NoRecordsFoundError("No content provided")

    client = client or LLMClient()
    blocks = build_content_blocks(EXTRACTION_PROMPT, content, mime_type, is_text)
    text = await client.agenerate(model or extraction_model(), blocks)
    return records_from_payload(parse_json_array(text))
