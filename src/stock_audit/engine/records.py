"""Typed records flowing through the scoring engine."""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Mapping

from stock_audit.utils.sanitize import sanitize_text, sanitize_text_list
from stock_audit.utils.validators import clamp, coerce_bool, coerce_number, normalize_ticker

logger = logging.getLogger(__name__)


class InvalidRecordError(ValueError):
    """Raised for structurally invalid input (missing or duplicate ticker)."""

    pass


class NoRecordsFoundError(ValueError):
    """Raised when extraction yields no usable records."""

    pass


class Verdict(str, Enum):
    """Final recommendation, most to least favourable, then the firewall verdict."""

    GOD_MODE_BUY = "GOD-MODE BUY"
    DEEP_VALUE = "DEEP VALUE"
    BUY = "BUY"
    HOLD = "HOLD"
    AVOID = "AVOID"
    OVERVALUED = "OVERVALUED"
    DESTROY = "DESTROY"


class ValuationLabel(str, Enum):
    CHEAP = "cheap"
    FAIR = "fair"
    EXPENSIVE = "expensive"


# attribute -> accepted payload keys, first hit wins.
# camelCase keys are what the extraction model returns.
_RECORD_ALIASES: dict[str, tuple[str, ...]] = {
    "price": ("ltp", "price", "last_price", "lastTradedPrice"),
    "eps": ("eps",),
    "nav": ("nav", "navps", "nav_per_share"),
    "debt": ("debt", "total_debt", "totalDebt"),
    "sponsor_holding": ("directorHolding", "sponsor_holding", "sponsorHolding", "director_holding"),
    "foreign_holding": ("foreignHolding", "foreign_holding", "institutionalHolding"),
    "nocfps": ("nocfps", "operating_cash_flow_per_share"),
    "dividend_percent": ("dividendPercent", "dividend_percent", "cashDividend"),
    "dividend_yield": ("dividendYield", "dividend_yield"),
    "market_cap": ("marketCap", "market_cap"),
    "free_float": ("freeFloat", "free_float"),
    "reserve_surplus": ("reserveSurplus", "reserve_surplus"),
}


def _first_present(payload: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


@dataclass(frozen=True)
class RawSecurityRecord:
    """One row of input data for a single security.

    Numeric fields are None when absent; the metrics calculator substitutes
    defaults. price, debt and holdings are never negative.
    """

    ticker: str
    name: str | None = None
    sector: str | None = None
    category: str = "A"
    price: float | None = None
    eps: float | None = None
    nav: float | None = None
    debt: float | None = None
    sponsor_holding: float | None = None
    foreign_holding: float | None = None
    nocfps: float | None = None
    dividend_percent: float | None = None
    dividend_yield: float | None = None
    market_cap: float | None = None
    free_float: float | None = None
    reserve_surplus: float | None = None

    def __post_init__(self) -> None:
        ticker = normalize_ticker(self.ticker)
        if ticker is None:
            raise InvalidRecordError("Record is missing a ticker")
        object.__setattr__(self, "ticker", ticker)

        category = (self.category or "A").upper().strip() or "A"
        object.__setattr__(self, "category", category)

        for attr in ("price", "debt"):
            value = getattr(self, attr)
            if value is not None and value < 0:
                object.__setattr__(self, attr, 0.0)
        for attr in ("sponsor_holding", "foreign_holding", "free_float"):
            value = getattr(self, attr)
            if value is not None:
                object.__setattr__(self, attr, clamp(value, 0.0, 100.0))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RawSecurityRecord":
        """
        Build a record from an untrusted mapping.

        Numeric fields are coerced (commas, % and currency symbols stripped);
        anything unparseable becomes None.

        Raises:
            InvalidRecordError: If payload is not a mapping or has no ticker
        """
        if not isinstance(payload, Mapping):
            raise InvalidRecordError(f"Record must be an object, got {type(payload).__name__}")

        ticker = normalize_ticker(_first_present(payload, ("ticker", "symbol", "code")))
        if ticker is None:
            raise InvalidRecordError("Record is missing a ticker")

        numbers = {
            attr: coerce_number(_first_present(payload, keys))
            for attr, keys in _RECORD_ALIASES.items()
        }
        category = _first_present(payload, ("category", "exchangeCategory"))

        return cls(
            ticker=ticker,
            name=sanitize_text(_optional_str(payload.get("name")), max_length=120),
            sector=sanitize_text(_optional_str(payload.get("sector")), max_length=80),
            category=str(category) if category is not None else "A",
            **numbers,
        )

    def prompt_line(self) -> str:
        """One-line summary of the core metrics, for the narrative prompt."""

        def fmt(value: float | None) -> str:
            return "N/A" if value is None else f"{value:g}"

        return (
            f"Ticker: {self.ticker} | Sector: {self.sector or 'N/A'} | "
            f"Category: {self.category} | LTP: {fmt(self.price)} | EPS: {fmt(self.eps)} | "
            f"NAV: {fmt(self.nav)} | Debt: {fmt(self.debt)} | "
            f"Sponsor%: {fmt(self.sponsor_holding)} | Foreign%: {fmt(self.foreign_holding)} | "
            f"Div%: {fmt(self.dividend_percent)} | NOCFPS: {fmt(self.nocfps)}"
        )


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class NarrativeEntry:
    """Qualitative fields for one security from the narrative model."""

    ticker: str | None = None
    moat_type: str = "Unknown"
    is_monopoly: bool = False
    reasoning: str = "Data unavailable."
    risk_grade: int = 10
    advice: str = "Audit unavailable."
    additional_flags: tuple[str, ...] = ()

    @classmethod
    def default(cls, ticker: str | None = None) -> "NarrativeEntry":
        """Conservative fallback used when the model omitted this security."""
        return cls(ticker=ticker)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "NarrativeEntry":
        """
        Build an entry from an untrusted mapping. Never raises for bad fields.

        Risk grade is rounded and clamped to 1-10; a missing or unparseable
        grade is maximal (10).
        """
        if not isinstance(payload, Mapping):
            return cls.default()

        grade = coerce_number(payload.get("riskGrade", payload.get("risk_grade")))
        risk_grade = 10 if grade is None else int(clamp(round(grade), 1, 10))

        moat = sanitize_text(_optional_str(payload.get("moatType", payload.get("moat_type"))), 60)
        reasoning = sanitize_text(_optional_str(payload.get("reasoning")), 1000)
        advice = sanitize_text(
            _optional_str(
                _first_present(payload, ("banglaAdvice", "advice", "localizedAdvice"))
            ),
            300,
        )
        flags = sanitize_text_list(
            _first_present(payload, ("additionalFlags", "additional_flags", "redFlags"))
        )

        return cls(
            ticker=normalize_ticker(payload.get("ticker")),
            moat_type=moat or "Unknown",
            is_monopoly=coerce_bool(payload.get("isMonopoly", payload.get("is_monopoly"))),
            reasoning=reasoning or "Data unavailable.",
            risk_grade=risk_grade,
            advice=advice or "Audit unavailable.",
            additional_flags=tuple(flags),
        )


@dataclass(frozen=True)
class DerivedMetrics:
    """Ratios computed from one RawSecurityRecord."""

    pe: float
    roe: float
    debt_to_equity: float
    price_to_book: float
    dividend_yield: float
    fair_value: float
    roe_meets_sector_minimum: bool


@dataclass(frozen=True)
class ScoreBreakdown:
    """Points awarded per component. All zero when the firewall fails."""

    safety: int = 0
    moat: int = 0
    valuation: int = 0

    @property
    def total(self) -> int:
        return int(clamp(self.safety + self.moat + self.valuation, 0, 100))


def _round2(value: float | None) -> float | None:
    if value is None:
        return None
    return round(value, 2)


@dataclass(frozen=True)
class AnalysisResult:
    """Scoring engine output for one security."""

    record: RawSecurityRecord
    metrics: DerivedMetrics
    score: int
    risk_grade: int
    verdict: Verdict
    valuation_label: ValuationLabel
    moat_type: str
    reasoning: str
    advice: str
    red_flags: tuple[str, ...]
    firewall_passed: bool
    score_breakdown: ScoreBreakdown = field(default_factory=ScoreBreakdown)
    entry_price: float | None = None
    exit_price: float | None = None
    stop_loss: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict. Metric and price floats are rounded to 2 dp."""
        metrics = {
            k: (_round2(v) if isinstance(v, float) else v)
            for k, v in asdict(self.metrics).items()
        }
        return {
            "record": asdict(self.record),
            "metrics": metrics,
            "score": self.score,
            "score_breakdown": {
                "safety": self.score_breakdown.safety,
                "moat": self.score_breakdown.moat,
                "valuation": self.score_breakdown.valuation,
            },
            "risk_grade": self.risk_grade,
            "verdict": self.verdict.value,
            "valuation_label": self.valuation_label.value,
            "moat_type": self.moat_type,
            "reasoning": self.reasoning,
            "advice": self.advice,
            "red_flags": list(self.red_flags),
            "firewall_passed": self.firewall_passed,
            "entry_price": _round2(self.entry_price),
            "exit_price": _round2(self.exit_price),
            "stop_loss": _round2(self.stop_loss),
        }
