"""Pytest configuration and fixtures."""

from typing import Any

import pytest

from stock_audit.engine.profile import TITAN_PROFILE, ScoringProfile
from stock_audit.engine.records import NarrativeEntry, RawSecurityRecord
from stock_audit.session import AuditSession


def build_record(**overrides: Any) -> RawSecurityRecord:
    """Healthy, cheap, debt-free security; override any field."""
    fields: dict[str, Any] = {
        "ticker": "FORT",
        "name": "Fortress Ltd",
        "sector": None,
        "category": "A",
        "price": 50.0,
        "eps": 10.0,
        "nav": 40.0,
        "debt": 0.0,
        "sponsor_holding": 50.0,
        "dividend_percent": 30.0,
    }
    fields.update(overrides)
    return RawSecurityRecord(**fields)


@pytest.fixture
def make_record():
    """Factory for records: make_record(ticker="X", debt=5.0)."""
    return build_record


@pytest.fixture
def titan_profile() -> ScoringProfile:
    """Canonical scoring profile."""
    return TITAN_PROFILE


@pytest.fixture
def fortress_record() -> RawSecurityRecord:
    """Zero debt, P/E 5, sponsor 50%: passes every firewall rule."""
    return build_record()


@pytest.fixture
def junk_record() -> RawSecurityRecord:
    """Otherwise perfect security in the Z category."""
    return build_record(ticker="JUNK", category="Z")


@pytest.fixture
def monopoly_narrative() -> NarrativeEntry:
    """Narrative claiming a monopoly moat."""
    return NarrativeEntry(
        ticker="FORT",
        moat_type="Monopoly",
        is_monopoly=True,
        reasoning="Sole licensed operator.",
        risk_grade=2,
        advice="Accumulate on dips.",
    )


@pytest.fixture
def sample_batch() -> list[RawSecurityRecord]:
    """Three securities that score differently."""
    return [
        build_record(ticker="MID", debt=4.0, nav=40.0, price=120.0),  # D/E 0.1, P/E 12
        build_record(ticker="TOP"),  # zero debt, P/E 5
        build_record(ticker="BAD", eps=-1.0),  # loss-making
    ]


@pytest.fixture
def raw_record_payload() -> dict[str, Any]:
    """Extraction-style payload with camelCase keys and string numbers."""
    return {
        "ticker": " squarepharma ",
        "name": "Square Pharmaceuticals",
        "sector": "Pharmaceuticals",
        "category": "a",
        "ltp": "210.50",
        "eps": "20.1",
        "nav": "130",
        "debt": "1,000",
        "directorHolding": "34.5%",
        "foreignHolding": 12,
        "nocfps": 18.2,
        "dividendPercent": "105",
    }


@pytest.fixture
def fresh_session() -> AuditSession:
    """Isolated session so tests never touch the global one."""
    return AuditSession()


class FakeLLMClient:
    """Stands in for LLMClient: returns canned replies (or raises) in call order."""

    def __init__(self, *replies: Any):
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    async def agenerate(self, model, content, system=None, temperature=0.0) -> str:
        self.calls.append(
            {"model": model, "content": content, "system": system, "temperature": temperature}
        )
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply()
        return reply


@pytest.fixture
def fake_client():
    """Factory for fake LLM clients: fake_client(extraction_reply, narrative_reply)."""
    return FakeLLMClient
