"""Weighted 50/30/20 scoring.

Capital safety dominates business quality, which dominates price paid.
Components are additive and each is capped at its weight, so the total
can never exceed 100.
"""

from stock_audit.engine.profile import ScoringProfile, SectorBenchmark
from stock_audit.engine.records import (
    DerivedMetrics,
    NarrativeEntry,
    RawSecurityRecord,
    ScoreBreakdown,
)


def safety_points(
    record: RawSecurityRecord,
    metrics: DerivedMetrics,
    benchmark: SectorBenchmark,
    profile: ScoringProfile,
) -> int:
    """Full marks for zero debt, sliding partial credit below the sector ceiling."""
    weights = profile.weights
    if (record.debt or 0.0) == 0:
        return weights.safety
    if metrics.debt_to_equity < benchmark.max_debt_to_equity:
        return weights.safety_tier1
    if metrics.debt_to_equity < benchmark.max_debt_to_equity * profile.safety_tier2_multiple:
        return weights.safety_tier2
    return 0


def moat_points(narrative: NarrativeEntry, profile: ScoringProfile) -> int:
    """Monopoly earns full marks, oligopoly partial, anything else nothing."""
    if narrative.is_monopoly:
        return profile.weights.moat
    if "oligopoly" in narrative.moat_type.lower():
        return profile.weights.moat_oligopoly
    return 0


def valuation_points(
    metrics: DerivedMetrics,
    benchmark: SectorBenchmark,
    profile: ScoringProfile,
) -> int:
    """Cheapness against the sector's ideal P/E."""
    if metrics.pe < benchmark.ideal_pe:
        return profile.weights.valuation
    if metrics.pe < benchmark.ideal_pe * profile.valuation_tier2_multiple:
        return profile.weights.valuation_tier2
    return 0


def score_security(
    record: RawSecurityRecord,
    metrics: DerivedMetrics,
    narrative: NarrativeEntry,
    benchmark: SectorBenchmark,
    profile: ScoringProfile,
) -> ScoreBreakdown:
    """
    Score a security that passed the firewall.

    Returns:
        ScoreBreakdown; use .total for the clamped 0-100 score
    """
    return ScoreBreakdown(
        safety=safety_points(record, metrics, benchmark, profile),
        moat=moat_points(narrative, profile),
        valuation=valuation_points(metrics, benchmark, profile),
    )
