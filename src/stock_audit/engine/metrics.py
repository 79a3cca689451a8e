"""Derived-ratio calculator."""

import logging
import math

from stock_audit.engine.profile import ScoringProfile, SectorBenchmark
from stock_audit.engine.records import DerivedMetrics, RawSecurityRecord
from stock_audit.utils.validators import clamp

logger = logging.getLogger(__name__)


def _or_zero(value: float | None) -> float:
    return 0.0 if value is None else value


def safe_nav(record: RawSecurityRecord) -> float:
    """NAV per share used as a denominator. Missing or non-positive -> 1."""
    nav = _or_zero(record.nav)
    return nav if nav > 0 else 1.0


def graham_fair_value(eps: float, nav: float, multiplier: float = 22.5) -> float | None:
    """sqrt(multiplier * EPS * NAV), or None unless both inputs are positive."""
    if eps <= 0 or nav <= 0:
        return None
    return math.sqrt(multiplier * eps * nav)


def dividend_yield(record: RawSecurityRecord, face_value: float = 10.0) -> float:
    """
    Dividend yield in percent.

    A declared yield wins. Otherwise the yield is derived from the declared
    cash dividend percentage of face value, which needs a positive price.
    """
    if record.dividend_yield is not None:
        return max(record.dividend_yield, 0.0)

    price = _or_zero(record.price)
    percent = _or_zero(record.dividend_percent)
    if percent <= 0 or price <= 0:
        return 0.0
    return face_value * (percent / 100) / price * 100


def compute_derived_metrics(
    record: RawSecurityRecord,
    profile: ScoringProfile,
    benchmark: SectorBenchmark | None = None,
) -> DerivedMetrics:
    """
    Compute ratios for one record. Pure; missing numerics count as zero.

    Args:
        record: Raw input row
        profile: Supplies the P/E sentinel, face value and fair-value constants
        benchmark: Sector thresholds (resolved from the profile if omitted)

    Returns:
        DerivedMetrics with every field finite
    """
    if benchmark is None:
        benchmark = profile.benchmark_for(record.sector)

    price = _or_zero(record.price)
    eps = _or_zero(record.eps)
    debt = _or_zero(record.debt)
    nav = safe_nav(record)

    if record.nav is None or record.nav <= 0:
        logger.debug(f"{record.ticker}: NAV missing or non-positive, dividing by 1")

    pe = price / eps if eps > 0 else profile.pe_sentinel
    roe = eps / nav * 100
    debt_to_equity = clamp(debt / nav, 0.0, profile.pe_sentinel)

    fair_value = graham_fair_value(eps, _or_zero(record.nav), profile.graham_multiplier)
    if fair_value is None:
        fair_value = price * profile.fair_value_fallback_ratio

    return DerivedMetrics(
        pe=pe,
        roe=roe,
        debt_to_equity=debt_to_equity,
        price_to_book=price / nav,
        dividend_yield=dividend_yield(record, profile.face_value),
        fair_value=fair_value,
        roe_meets_sector_minimum=roe >= benchmark.min_roe,
    )
