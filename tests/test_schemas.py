"""Tests for response metadata and error envelopes."""

from datetime import datetime

from stock_audit import SCHEMA_VERSION, SERVER_VERSION
from stock_audit.utils.provenance import build_error_response, build_meta, build_provenance


class TestBuildMeta:
    """Tests for build_meta function."""

    def test_meta_versions(self) -> None:
        """Test meta carries server and schema versions plus the tool name."""
        meta = build_meta("score_stocks")

        assert meta["server_version"] == SERVER_VERSION
        assert meta["schema_version"] == SCHEMA_VERSION
        assert meta["tool"] == "score_stocks"

    def test_meta_duration_rounded(self) -> None:
        """Test duration is rounded to one decimal."""
        meta = build_meta("score_stocks", duration_ms=12.345)
        assert meta["duration_ms"] == 12.3

    def test_meta_no_duration(self) -> None:
        """Test duration is omitted when not measured."""
        assert "duration_ms" not in build_meta("list_scoring_profiles")


class TestBuildProvenance:
    """Tests for build_provenance function."""

    def test_source_and_default_warnings(self) -> None:
        """Test provenance always has a source and a warnings list."""
        prov = build_provenance(source="caller")
        assert prov["source"] == "caller"
        assert prov["warnings"] == []

    def test_datetime_as_of(self) -> None:
        """Test datetime as_of is serialized to ISO format."""
        prov = build_provenance(source="caller", as_of=datetime(2025, 3, 1, 10, 30))
        assert prov["as_of"] == "2025-03-01T10:30:00"

    def test_extra_fields(self) -> None:
        """Test model name and counts are carried through."""
        prov = build_provenance(source="extraction_model", model="m", count=3)
        assert prov["model"] == "m"
        assert prov["count"] == 3

    def test_custom_warnings_kept(self) -> None:
        """Test caller-supplied warnings are not overwritten."""
        prov = build_provenance(source="narrative_model", warnings=["short_response"])
        assert prov["warnings"] == ["short_response"]


class TestBuildErrorResponse:
    """Tests for build_error_response function."""

    def test_error_envelope(self) -> None:
        """Test error flag, type, message and meta are present."""
        response = build_error_response("no_data_found", "nothing", tool="audit_document")

        assert response["error"] is True
        assert response["error_type"] == "no_data_found"
        assert response["message"] == "nothing"
        assert response["meta"]["tool"] == "audit_document"
        assert "retry_after_seconds" not in response

    def test_retry_after(self) -> None:
        """Test rate-limit responses carry retry_after_seconds."""
        response = build_error_response("rate_limited", "slow down", retry_after_seconds=30)
        assert response["retry_after_seconds"] == 30
