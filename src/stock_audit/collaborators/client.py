"""HTTP client for the language-model collaborators.

Talks to an Anthropic-style messages endpoint with requests. Blocking calls
run on a small bounded executor so async tools never block the event loop.
Failures are raised as typed errors; this layer does not retry.
"""

import asyncio
import base64
import binascii
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any

import requests

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"

_max_workers = int(os.environ.get("AUDIT_LLM_MAX_WORKERS", "2"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)

# Media types sent as native document/image blocks; everything else is decoded to text
IMAGE_MIME_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}
DOCUMENT_MIME_TYPES = {"application/pdf"}


class CollaboratorError(Exception):
    """Raised when a collaborator call fails."""

    pass


class CollaboratorRateLimitedError(CollaboratorError):
    """Raised on HTTP 429."""

    def __init__(self, message: str, retry_after_seconds: int | None = None):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class CollaboratorResponseError(CollaboratorError):
    """Raised on transport failures, non-2xx statuses and empty bodies."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _strip_data_url(content: str) -> str:
    """'data:image/png;base64,AAAA' -> 'AAAA'. Plain base64 passes through."""
    if content.startswith("data:") and "," in content:
        return content.split(",", 1)[1]
    return content


def build_content_blocks(
    prompt: str,
    content: str,
    mime_type: str = "text/plain",
    is_text: bool = True,
) -> list[dict[str, Any]]:
    """
    Build the user message content for one extraction request.

    Args:
        prompt: Instruction text
        content: Raw text, or base64 (optionally a data URL) when is_text is False
        mime_type: MIME type of the uploaded content
        is_text: Whether content is plain text

    Returns:
        List of content blocks: instruction first, then the payload

    Raises:
        ValueError: If binary content is not valid base64
    """
    blocks: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
    mime_type = (mime_type or "text/plain").lower().strip()

    if is_text:
        blocks.append({"type": "text", "text": content})
        return blocks

    data = _strip_data_url(content)
    if mime_type in IMAGE_MIME_TYPES:
        blocks.append(
            {"type": "image", "source": {"type": "base64", "media_type": mime_type, "data": data}}
        )
    elif mime_type in DOCUMENT_MIME_TYPES:
        blocks.append(
            {"type": "document", "source": {"type": "base64", "media_type": mime_type, "data": data}}
        )
    else:
        # CSV/TXT uploaded as binary: decode and send as text
        try:
            text = base64.b64decode(data, validate=True).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Content is not valid base64 for {mime_type}: {e}") from e
        blocks.append({"type": "text", "text": text})
    return blocks


def _retry_after(response: requests.Response) -> int | None:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


class LLMClient:
    """Minimal messages-API client shared by both collaborators."""

    def __init__(
        self,
        api_key: str | None = None,
        endpoint: str | None = None,
        timeout: float | None = None,
        max_tokens: int | None = None,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key or os.environ.get(
            "AUDIT_LLM_API_KEY", os.environ.get("ANTHROPIC_API_KEY", "")
        )
        self.endpoint = endpoint or os.environ.get("AUDIT_LLM_ENDPOINT", DEFAULT_ENDPOINT)
        self.timeout = timeout or float(os.environ.get("AUDIT_LLM_TIMEOUT", "120"))
        self.max_tokens = max_tokens or int(os.environ.get("AUDIT_LLM_MAX_TOKENS", "8192"))
        self.session = session or requests.Session()

    def generate(
        self,
        model: str,
        content: list[dict[str, Any]] | str,
        system: str | None = None,
        temperature: float = 0.0,
    ) -> str:
        """
        Send one message and return the concatenated text of the reply.

        Raises:
            CollaboratorRateLimitedError: On HTTP 429
            CollaboratorResponseError: On transport error, other non-2xx, or empty reply
        """
        if not self.api_key:
            raise CollaboratorResponseError("No API key configured (set AUDIT_LLM_API_KEY)")

        headers = {
            "content-type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": API_VERSION,
        }
        payload: dict[str, Any] = {
            "model": model,
            "max_tokens": self.max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": content}],
        }
        if system:
            payload["system"] = system

        logger.info(f"Calling {model} at {self.endpoint}")
        try:
            resp = self.session.post(
                self.endpoint, headers=headers, json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise CollaboratorResponseError(f"Request to {model} failed: {e}") from e

        if resp.status_code == 429:
            retry_after = _retry_after(resp)
            logger.warning(f"{model}: rate limited (retry_after={retry_after})")
            raise CollaboratorRateLimitedError(
                f"{model} is rate limited", retry_after_seconds=retry_after
            )
        if not 200 <= resp.status_code < 300:
            raise CollaboratorResponseError(
                f"{model} returned HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise CollaboratorResponseError(f"{model} returned a non-JSON body") from e

        text = "".join(
            block.get("text", "")
            for block in data.get("content") or []
            if isinstance(block, dict) and block.get("type") == "text"
        )
        if not text.strip():
            raise CollaboratorResponseError(f"{model} returned an empty response")

        usage = data.get("usage") or {}
        logger.debug(f"{model}: {usage.get('output_tokens', 0)} output tokens")
        return text

    async def agenerate(
        self,
        model: str,
        content: list[dict[str, Any]] | str,
        system: str | None = None,
        temperature: float = 0.0,
    ) -> str:
        """Async wrapper running generate() on the bounded executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            _executor,
            partial(self.generate, model, content, system=system, temperature=temperature),
        )
