"""Tests for input records, narrative entries and result serialization."""

import pytest

from stock_audit.engine.records import InvalidRecordError, NarrativeEntry, RawSecurityRecord


class TestRawSecurityRecord:
    """Tests for RawSecurityRecord construction."""

    def test_from_dict_aliases(self, raw_record_payload) -> None:
        """Extraction keys and string numbers are normalized."""
        record = RawSecurityRecord.from_dict(raw_record_payload)

        assert record.ticker == "SQUAREPHARMA"
        assert record.category == "A"
        assert record.price == 210.5
        assert record.debt == 1000.0
        assert record.sponsor_holding == 34.5
        assert record.foreign_holding == 12.0
        assert record.dividend_percent == 105.0
        assert record.sector == "Pharmaceuticals"

    def test_from_dict_unparseable_numbers(self) -> None:
        """Garbage numerics become None rather than failing the record."""
        record = RawSecurityRecord.from_dict({"ticker": "X", "eps": "n/a", "nav": "abc"})
        assert record.eps is None
        assert record.nav is None

    def test_from_dict_symbol_key(self) -> None:
        """'symbol' is accepted in place of 'ticker'."""
        assert RawSecurityRecord.from_dict({"symbol": "brac"}).ticker == "BRAC"

    def test_missing_ticker(self) -> None:
        """A record without a ticker is invalid."""
        with pytest.raises(InvalidRecordError, match="missing a ticker"):
            RawSecurityRecord.from_dict({"name": "Nameless", "eps": 1})

    def test_blank_ticker_direct(self) -> None:
        """Direct construction also rejects a blank ticker."""
        with pytest.raises(InvalidRecordError):
            RawSecurityRecord(ticker="  ")

    def test_not_a_mapping(self) -> None:
        """Non-object payloads are invalid."""
        with pytest.raises(InvalidRecordError, match="must be an object"):
            RawSecurityRecord.from_dict(["GP", 300])

    def test_negative_and_out_of_range_clamped(self) -> None:
        """Negative price and debt become 0; holdings are clamped to 0-100."""
        record = RawSecurityRecord(
            ticker="X", price=-5.0, debt=-1.0, sponsor_holding=150.0, foreign_holding=-3.0
        )
        assert record.price == 0.0
        assert record.debt == 0.0
        assert record.sponsor_holding == 100.0
        assert record.foreign_holding == 0.0

    def test_category_default(self) -> None:
        """Missing or blank category defaults to A."""
        assert RawSecurityRecord(ticker="X", category="").category == "A"

    def test_prompt_line(self) -> None:
        """Prompt line shows N/A for missing values."""
        line = RawSecurityRecord(ticker="X", price=12.5).prompt_line()
        assert "Ticker: X" in line
        assert "LTP: 12.5" in line
        assert "EPS: N/A" in line


class TestNarrativeEntry:
    """Tests for NarrativeEntry.from_dict."""

    def test_camel_case_payload(self) -> None:
        """Model keys are mapped onto entry fields."""
        entry = NarrativeEntry.from_dict(
            {
                "ticker": "gp",
                "moatType": "Oligopoly",
                "isMonopoly": "false",
                "reasoning": "Spectrum licences.",
                "riskGrade": "3",
                "banglaAdvice": "ধরে রাখুন",
                "additionalFlags": ["Regulatory overhang"],
            }
        )
        assert entry.ticker == "GP"
        assert entry.moat_type == "Oligopoly"
        assert entry.is_monopoly is False
        assert entry.risk_grade == 3
        assert entry.advice == "ধরে রাখুন"
        assert entry.additional_flags == ("Regulatory overhang",)

    @pytest.mark.parametrize(
        "raw,expected",
        [(7.6, 8), (0, 1), (15, 10), ("x", 10), (None, 10)],
    )
    def test_risk_grade_clamped(self, raw, expected) -> None:
        """Risk grade is rounded into 1-10; missing or junk is 10."""
        assert NarrativeEntry.from_dict({"riskGrade": raw}).risk_grade == expected

    def test_defaults_for_missing_fields(self) -> None:
        """Missing fields fall back to conservative defaults."""
        entry = NarrativeEntry.from_dict({})
        assert entry == NarrativeEntry.default()

    def test_non_mapping(self) -> None:
        """A non-object yields the default entry."""
        assert NarrativeEntry.from_dict("oops") == NarrativeEntry.default()

    def test_flags_not_a_list(self) -> None:
        """A string flags field is ignored."""
        assert NarrativeEntry.from_dict({"additionalFlags": "bad"}).additional_flags == ()
