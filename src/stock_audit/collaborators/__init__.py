"""Clients for the extraction and narrative language models."""

from stock_audit.collaborators.client import (
    CollaboratorError,
    CollaboratorRateLimitedError,
    CollaboratorResponseError,
    LLMClient,
    build_content_blocks,
)
from stock_audit.collaborators.extraction import extract_records, records_from_payload
from stock_audit.collaborators.narrative import generate_narratives, parse_narratives

__all__ = [
    # Client
    "CollaboratorError",
    "CollaboratorRateLimitedError",
    "CollaboratorResponseError",
    "LLMClient",
    "build_content_blocks",
    # Extraction
    "extract_records",
    "records_from_payload",
    # Narrative
    "generate_narratives",
    "parse_narratives",
]
