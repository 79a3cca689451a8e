"""Tests for the extraction collaborator."""

import asyncio

import pytest

from stock_audit.collaborators.client import CollaboratorResponseError
from stock_audit.collaborators.extraction import extract_records, records_from_payload
from stock_audit.engine.records import NoRecordsFoundError
from stock_audit.prompts.templates import EXTRACTION_PROMPT


class TestRecordsFromPayload:
    """Tests for records_from_payload function."""

    def test_converts_in_order(self) -> None:
        """Each object becomes a record, in model order."""
        records = records_from_payload([{"ticker": "b", "eps": "2"}, {"ticker": "A"}])

        assert [r.ticker for r in records] == ["B", "A"]
        assert records[0].eps == 2.0

    def test_skips_invalid_entries(self) -> None:
        """Entries without a ticker or that are not objects are skipped."""
        records = records_from_payload([{"name": "no ticker"}, "GP", {"ticker": "GP"}])
        assert [r.ticker for r in records] == ["GP"]

    def test_repeated_ticker_keeps_first(self) -> None:
        """A ticker listed twice keeps its first row."""
        records = records_from_payload([{"ticker": "GP", "eps": 1}, {"ticker": "gp", "eps": 9}])

        assert len(records) == 1
        assert records[0].eps == 1.0

    def test_nothing_usable(self) -> None:
        """No usable entries raises NoRecordsFoundError."""
        with pytest.raises(NoRecordsFoundError):
            records_from_payload([{"name": "x"}])


class TestExtractRecords:
    """Tests for extract_records function."""

    def test_text_upload(self, fake_client) -> None:
        """Fenced model output is parsed into records."""
        client = fake_client('```json\n[{"ticker": "GP", "ltp": "300"}]\n```')

        records = asyncio.run(extract_records("GP 300", client=client, model="extract-m"))

        assert records[0].ticker == "GP"
        assert records[0].price == 300.0
        call = client.calls[0]
        assert call["model"] == "extract-m"
        assert call["content"][0]["text"] == EXTRACTION_PROMPT
        assert call["content"][1]["text"] == "GP 300"

    def test_empty_content(self, fake_client) -> None:
        """Blank content fails without calling the model."""
        client = fake_client()

        with pytest.raises(NoRecordsFoundError):
            asyncio.run(extract_records("   ", client=client))
        assert client.calls == []

    def test_unparseable_reply(self, fake_client) -> None:
        """A reply with no array means no records."""
        with pytest.raises(NoRecordsFoundError):
            asyncio.run(extract_records("data", client=fake_client("Sorry, no table here.")))

    def test_collaborator_error_propagates(self, fake_client) -> None:
        """Transport errors are not swallowed."""
        client = fake_client(CollaboratorResponseError("down"))

        with pytest.raises(CollaboratorResponseError):
            asyncio.run(extract_records("data", client=client))

    def test_default_model_from_env(self, fake_client, monkeypatch) -> None:
        """AUDIT_EXTRACTION_MODEL selects the model."""
        monkeypatch.setenv("AUDIT_EXTRACTION_MODEL", "custom-extractor")
        client = fake_client('[{"ticker": "A"}]')

        asyncio.run(extract_records("data", client=client))

        assert client.calls[0]["model"] == "custom-extractor"
