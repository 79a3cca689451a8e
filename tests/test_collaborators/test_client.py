"""Tests for the messages-API client."""

import asyncio
import base64
import os
from unittest.mock import MagicMock, patch

import pytest
import requests

from stock_audit.collaborators.client import (
    API_VERSION,
    CollaboratorRateLimitedError,
    CollaboratorResponseError,
    LLMClient,
    build_content_blocks,
)


def _response(status_code: int = 200, body=None, headers=None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.headers = headers or {}
    resp.text = text
    resp.json.return_value = body if body is not None else {}
    return resp


def _client(resp) -> tuple[LLMClient, MagicMock]:
    session = MagicMock()
    if isinstance(resp, Exception):
        session.post.side_effect = resp
    else:
        session.post.return_value = resp
    client = LLMClient(
        api_key="test-key",
        endpoint="https://llm.example/v1/messages",
        timeout=5,
        max_tokens=100,
        session=session,
    )
    return client, session


class TestBuildContentBlocks:
    """Tests for build_content_blocks function."""

    def test_text(self) -> None:
        """Plain text is sent as a second text block."""
        blocks = build_content_blocks("PROMPT", "GP 300 20 ...")
        assert blocks == [
            {"type": "text", "text": "PROMPT"},
            {"type": "text", "text": "GP 300 20 ..."},
        ]

    def test_image_data_url(self) -> None:
        """Images become base64 image blocks with the data URL prefix removed."""
        blocks = build_content_blocks("P", "data:image/png;base64,AAAA", "image/png", is_text=False)

        assert blocks[1]["type"] == "image"
        assert blocks[1]["source"] == {"type": "base64", "media_type": "image/png", "data": "AAAA"}

    def test_pdf(self) -> None:
        """PDFs become document blocks."""
        blocks = build_content_blocks("P", "JVBERi0=", "application/pdf", is_text=False)
        assert blocks[1]["type"] == "document"

    def test_binary_csv_decoded(self) -> None:
        """Other binary uploads are decoded to text."""
        encoded = base64.b64encode(b"ticker,eps\nGP,20").decode()
        blocks = build_content_blocks("P", encoded, "text/csv", is_text=False)
        assert blocks[1] == {"type": "text", "text": "ticker,eps\nGP,20"}

    def test_invalid_base64(self) -> None:
        """Undecodable binary content is rejected."""
        with pytest.raises(ValueError, match="not valid base64"):
            build_content_blocks("P", "***not base64***", "text/csv", is_text=False)


class TestLLMClientGenerate:
    """Tests for LLMClient.generate."""

    def test_success(self) -> None:
        """Text blocks are concatenated; headers and payload are well formed."""
        body = {
            "content": [
                {"type": "text", "text": "[{\"ticker\": "},
                {"type": "tool_use", "id": "x"},
                {"type": "text", "text": "\"GP\"}]"},
            ]
        }
        client, session = _client(_response(body=body))

        text = client.generate("model-a", "hello", system="SYS", temperature=0.2)

        assert text == '[{"ticker": "GP"}]'
        _, kwargs = session.post.call_args
        assert kwargs["headers"]["x-api-key"] == "test-key"
        assert kwargs["headers"]["anthropic-version"] == API_VERSION
        assert kwargs["json"]["model"] == "model-a"
        assert kwargs["json"]["system"] == "SYS"
        assert kwargs["json"]["max_tokens"] == 100
        assert kwargs["json"]["messages"] == [{"role": "user", "content": "hello"}]
        assert kwargs["timeout"] == 5

    def test_no_system_prompt(self) -> None:
        """system is omitted when not given."""
        client, session = _client(_response(body={"content": [{"type": "text", "text": "ok"}]}))
        client.generate("m", "hi")
        assert "system" not in session.post.call_args.kwargs["json"]

    def test_rate_limited(self) -> None:
        """HTTP 429 raises with retry_after_seconds."""
        client, _ = _client(_response(status_code=429, headers={"retry-after": "30"}))

        with pytest.raises(CollaboratorRateLimitedError) as exc_info:
            client.generate("m", "hi")

        assert exc_info.value.retry_after_seconds == 30

    def test_rate_limited_without_header(self) -> None:
        """A 429 without retry-after still raises."""
        client, _ = _client(_response(status_code=429))

        with pytest.raises(CollaboratorRateLimitedError) as exc_info:
            client.generate("m", "hi")

        assert exc_info.value.retry_after_seconds is None

    def test_server_error(self) -> None:
        """Non-2xx raises CollaboratorResponseError carrying the status."""
        client, _ = _client(_response(status_code=500, text="boom"))

        with pytest.raises(CollaboratorResponseError, match="HTTP 500") as exc_info:
            client.generate("m", "hi")

        assert exc_info.value.status_code == 500

    def test_empty_reply(self) -> None:
        """A reply with no text is an error."""
        client, _ = _client(_response(body={"content": []}))

        with pytest.raises(CollaboratorResponseError, match="empty"):
            client.generate("m", "hi")

    def test_transport_error(self) -> None:
        """requests failures are wrapped."""
        client, _ = _client(requests.ConnectionError("refused"))

        with pytest.raises(CollaboratorResponseError, match="refused"):
            client.generate("m", "hi")

    def test_missing_api_key(self) -> None:
        """No key configured fails before any request."""
        with patch.dict(os.environ, {}, clear=True):
            client = LLMClient(session=MagicMock())

        with pytest.raises(CollaboratorResponseError, match="No API key"):
            client.generate("m", "hi")
        client.session.post.assert_not_called()

    def test_env_configuration(self) -> None:
        """Endpoint, key and limits are read from the environment."""
        env = {
            "ANTHROPIC_API_KEY": "fallback-key",
            "AUDIT_LLM_ENDPOINT": "http://localhost:9000/v1/messages",
            "AUDIT_LLM_TIMEOUT": "7.5",
            "AUDIT_LLM_MAX_TOKENS": "256",
        }
        with patch.dict(os.environ, env, clear=True):
            client = LLMClient(session=MagicMock())

        assert client.api_key == "fallback-key"
        assert client.endpoint == "http://localhost:9000/v1/messages"
        assert client.timeout == 7.5
        assert client.max_tokens == 256


class TestLLMClientAgenerate:
    """Tests for the async wrapper."""

    def test_agenerate(self) -> None:
        """agenerate returns what generate returns."""
        client, _ = _client(_response(body={"content": [{"type": "text", "text": "[]"}]}))
        assert asyncio.run(client.agenerate("m", "hi")) == "[]"
