"""Verdict classification and valuation labels."""

from stock_audit.engine.profile import ScoringProfile, SectorBenchmark
from stock_audit.engine.records import (
    DerivedMetrics,
    RawSecurityRecord,
    ValuationLabel,
    Verdict,
)


def valuation_label(pe: float, ideal_pe: float, profile: ScoringProfile) -> ValuationLabel:
    """Cheap below the ideal P/E, expensive above a multiple of it, else fair."""
    if pe < ideal_pe:
        return ValuationLabel.CHEAP
    if pe > ideal_pe * profile.expensive_pe_multiple:
        return ValuationLabel.EXPENSIVE
    return ValuationLabel.FAIR


def override_verdict(
    record: RawSecurityRecord,
    metrics: DerivedMetrics,
    benchmark: SectorBenchmark,
    profile: ScoringProfile,
) -> Verdict | None:
    """
    Optional rules that short-circuit the score table.

    Deep value: price far below NAV with modest leverage.
    Overvalued: P/E far above the sector ideal while ROE misses the sector
    minimum, i.e. paying a growth multiple for weak earnings power.
    """
    if not profile.enable_overrides:
        return None

    price = record.price or 0.0
    nav = record.nav or 0.0
    if (
        price > 0
        and nav > 0
        and price < nav * profile.deep_value_nav_ratio
        and metrics.debt_to_equity <= profile.deep_value_max_debt_to_equity
    ):
        return Verdict.DEEP_VALUE

    if (
        metrics.pe > benchmark.ideal_pe * profile.overvalued_pe_multiple
        and not metrics.roe_meets_sector_minimum
    ):
        return Verdict.OVERVALUED

    return None


def _meets_god_mode_gates(
    record: RawSecurityRecord,
    metrics: DerivedMetrics,
    profile: ScoringProfile,
) -> bool:
    if profile.god_mode_min_yield is not None and metrics.dividend_yield < profile.god_mode_min_yield:
        return False
    if profile.god_mode_min_sponsor is not None and (
        (record.sponsor_holding or 0.0) < profile.god_mode_min_sponsor
    ):
        return False
    return True


def classify_verdict(
    firewall_passed: bool,
    score: int,
    record: RawSecurityRecord,
    metrics: DerivedMetrics,
    benchmark: SectorBenchmark,
    profile: ScoringProfile,
) -> Verdict:
    """
    Map firewall outcome and score to a verdict.

    Each call is independent: firewall failure -> DESTROY, then override
    rules, then the score table (god-mode / buy / hold / avoid).
    """
    if not firewall_passed:
        return Verdict.DESTROY

    override = override_verdict(record, metrics, benchmark, profile)
    if override is not None:
        return override

    if score >= profile.god_mode_threshold:
        if _meets_god_mode_gates(record, metrics, profile):
            return Verdict.GOD_MODE_BUY
        return Verdict.BUY
    if score >= profile.buy_threshold:
        return Verdict.BUY
    if score >= profile.hold_threshold:
        return Verdict.HOLD
    return Verdict.AVOID
