"""Scoring engine entry point: reconcile, score, assemble, sort."""

import logging
from collections import Counter
from collections.abc import Sequence
from typing import Any

from stock_audit.engine.firewall import evaluate_firewall
from stock_audit.engine.metrics import compute_derived_metrics
from stock_audit.engine.profile import ScoringProfile, get_profile
from stock_audit.engine.records import (
    AnalysisResult,
    DerivedMetrics,
    InvalidRecordError,
    NarrativeEntry,
    RawSecurityRecord,
    ScoreBreakdown,
    Verdict,
)
from stock_audit.engine.scoring import score_security
from stock_audit.engine.verdict import classify_verdict, valuation_label
from stock_audit.utils.normalize import results_digest

logger = logging.getLogger(__name__)


def reconcile_narratives(
    records: Sequence[RawSecurityRecord],
    narratives: Sequence[NarrativeEntry] | None,
) -> list[NarrativeEntry]:
    """
    Pair every record with one narrative entry. Never raises.

    Matching order per record:
    1. an entry carrying the same ticker (first occurrence wins)
    2. the entry at the same position, if it carries no ticker or a ticker
       that matches no record in this batch
    3. NarrativeEntry.default()

    Returns:
        List aligned index-for-index with records
    """
    narratives = list(narratives or [])
    batch_tickers = {r.ticker for r in records}

    by_ticker: dict[str, NarrativeEntry] = {}
    for entry in narratives:
        if entry.ticker and entry.ticker not in by_ticker:
            by_ticker[entry.ticker] = entry

    aligned: list[NarrativeEntry] = []
    defaulted: list[str] = []
    for i, record in enumerate(records):
        entry = by_ticker.get(record.ticker)
        if entry is None and i < len(narratives):
            positional = narratives[i]
            if positional.ticker is None or positional.ticker not in batch_tickers:
                entry = positional
        if entry is None:
            entry = NarrativeEntry.default(record.ticker)
            defaulted.append(record.ticker)
        aligned.append(entry)

    if defaulted:
        logger.info(
            f"Narrative missing for {len(defaulted)}/{len(records)} records, "
            f"using defaults: {', '.join(defaulted)}"
        )
    return aligned


def trade_levels(
    price: float,
    metrics: DerivedMetrics,
    firewall_passed: bool,
    profile: ScoringProfile,
) -> tuple[float | None, float | None, float | None]:
    """
    Suggested (entry, exit, stop_loss) around fair value.

    No levels are suggested for disqualified or unpriced securities.
    """
    if not firewall_passed or price <= 0 or metrics.fair_value <= 0:
        return None, None, None
    entry = metrics.fair_value * (1 - profile.entry_discount)
    exit_ = metrics.fair_value * (1 + profile.exit_premium)
    stop = min(price, entry) * (1 - profile.stop_loss_pct)
    return entry, exit_, stop


def assemble_result(
    record: RawSecurityRecord,
    narrative: NarrativeEntry,
    profile: ScoringProfile,
) -> AnalysisResult:
    """Score one record. Pure function of its arguments."""
    benchmark = profile.benchmark_for(record.sector)
    metrics = compute_derived_metrics(record, profile, benchmark)
    firewall = evaluate_firewall(record, metrics, profile)

    if firewall.passed:
        breakdown = score_security(record, metrics, narrative, benchmark, profile)
    else:
        breakdown = ScoreBreakdown()
    score = breakdown.total

    verdict = classify_verdict(firewall.passed, score, record, metrics, benchmark, profile)

    red_flags = list(firewall.red_flags)
    for flag in narrative.additional_flags:
        if flag not in red_flags:
            red_flags.append(flag)

    entry, exit_, stop = trade_levels(record.price or 0.0, metrics, firewall.passed, profile)

    return AnalysisResult(
        record=record,
        metrics=metrics,
        score=score,
        risk_grade=narrative.risk_grade,
        verdict=verdict,
        valuation_label=valuation_label(metrics.pe, benchmark.ideal_pe, profile),
        moat_type=narrative.moat_type,
        reasoning=narrative.reasoning,
        advice=narrative.advice,
        red_flags=tuple(red_flags),
        firewall_passed=firewall.passed,
        score_breakdown=breakdown,
        entry_price=entry,
        exit_price=exit_,
        stop_loss=stop,
    )


def run_scoring(
    records: Sequence[RawSecurityRecord],
    narratives: Sequence[NarrativeEntry] | None = None,
    profile: ScoringProfile | None = None,
) -> list[AnalysisResult]:
    """
    Score a batch and sort it by score, highest first.

    The sort is stable, so equal scores keep their input order.

    Args:
        records: Raw records in input order
        narratives: Narrative entries, ticker- or index-aligned (may be short or None)
        profile: Scoring parameters (canonical profile if None)

    Returns:
        One AnalysisResult per record

    Raises:
        InvalidRecordError: If two records share a ticker
    """
    if profile is None:
        profile = get_profile()

    seen: set[str] = set()
    for record in records:
        if record.ticker in seen:
            raise InvalidRecordError(f"Duplicate ticker in batch: {record.ticker}")
        seen.add(record.ticker)

    aligned = reconcile_narratives(records, narratives)
    results = [
        assemble_result(record, narrative, profile)
        for record, narrative in zip(records, aligned)
    ]
    return sorted(results, key=lambda r: r.score, reverse=True)


def summarize_results(results: Sequence[AnalysisResult]) -> dict[str, Any]:
    """Batch summary: verdict counts, firewall failures, average score, digest."""
    rows = [r.to_dict() for r in results]
    counts = Counter(r.verdict for r in results)
    avg_score = sum(r.score for r in results) / len(results) if results else 0
    return {
        "count": len(results),
        "verdict_counts": {v.value: counts.get(v, 0) for v in Verdict},
        "firewall_failures": sum(1 for r in results if not r.firewall_passed),
        "average_score": round(avg_score, 2),
        "top_pick": results[0].record.ticker if results and results[0].firewall_passed else None,
        "results_digest": results_digest(rows),
    }
