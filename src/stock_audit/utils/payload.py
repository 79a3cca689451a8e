"""Defensive parsing of JSON arrays returned by language models."""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

# ```json ... ``` or ``` ... ``` wrappers, anywhere in the response
_CODE_FENCE = re.compile(r"```[a-zA-Z]*\s*(.*?)\s*```", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Return the body of the first markdown code fence, or the text unchanged."""
    match = _CODE_FENCE.search(text)
    if match:
        return match.group(1)
    # Unterminated fence: drop the opening marker and keep the rest
    if text.lstrip().startswith("```"):
        body = text.lstrip()[3:]
        newline = body.find("\n")
        return body[newline + 1:] if newline != -1 else body
    return text


_DECODER = json.JSONDecoder()


def _decode_at(text: str, index: int) -> Any:
    """Decode the JSON value starting at index, ignoring trailing text. None on failure."""
    try:
        value, _ = _DECODER.raw_decode(text, index)
    except json.JSONDecodeError:
        return None
    return value


def _close_truncated_array(text: str) -> list[Any] | None:
    """
    Best-effort repair of an array cut off mid-stream.

    Walks the text tracking string and nesting state, remembers the position
    after the last complete top-level element, and closes the array there.
    """
    depth = 0
    in_string = False
    escaped = False
    last_complete = -1

    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
            if depth == 1:
                last_complete = i

    if last_complete == -1:
        return None

    candidate = text[: last_complete + 1] + "]"
    try:
        result = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return result if isinstance(result, list) else None


def parse_json_array(text: str | None) -> list[Any]:
    """
    Parse a model response that should contain a JSON array.

    Tolerates markdown code fences, prose around the array, a single object
    instead of an array, an object wrapping the array under one key, and
    truncated arrays. Never raises: total failure returns [].

    Args:
        text: Raw response text (may be None)

    Returns:
        Parsed list (possibly empty)
    """
    if not text or not text.strip():
        return []

    body = strip_code_fences(text).strip()

    starts = [i for i, ch in enumerate(body) if ch == "["]
    obj_start = body.find("{")
    if obj_start != -1 and (not starts or obj_start < starts[0]):
        # Object first: either a lone record or a wrapper like {"results": [...]}
        parsed = _decode_at(body, obj_start)
        if isinstance(parsed, dict):
            for value in parsed.values():
                if isinstance(value, list):
                    return value
            return [parsed]

    if not starts:
        logger.warning("Model response contained no JSON array")
        return []

    # Prose may hold bracketed text like "[2 stocks]"; prefer an array of objects
    first_list: list[Any] | None = None
    for start in starts:
        parsed = _decode_at(body, start)
        if not isinstance(parsed, list):
            continue
        if any(isinstance(item, dict) for item in parsed):
            return parsed
        if first_list is None:
            first_list = parsed

    for start in starts:
        repaired = _close_truncated_array(body[start:])
        if repaired:
            logger.info(f"Recovered {len(repaired)} entries from truncated model response")
            return repaired

    if first_list is not None:
        return first_list

    logger.warning("Model response could not be parsed as a JSON array")
    return []
