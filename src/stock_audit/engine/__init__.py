"""Deterministic scoring engine."""

from stock_audit.engine.audit import (
    assemble_result,
    reconcile_narratives,
    run_scoring,
    summarize_results,
    trade_levels,
)
from stock_audit.engine.firewall import FirewallOutcome, evaluate_firewall
from stock_audit.engine.metrics import compute_derived_metrics, graham_fair_value
from stock_audit.engine.profile import (
    PROFILES,
    SECTOR_BENCHMARKS,
    ScoringProfile,
    ScoringWeights,
    SectorBenchmark,
    get_profile,
    resolve_benchmark,
)
from stock_audit.engine.records import (
    AnalysisResult,
    DerivedMetrics,
    InvalidRecordError,
    NarrativeEntry,
    NoRecordsFoundError,
    RawSecurityRecord,
    ScoreBreakdown,
    ValuationLabel,
    Verdict,
)
from stock_audit.engine.scoring import score_security
from stock_audit.engine.verdict import classify_verdict, valuation_label

__all__ = [
    # Entry point
    "run_scoring",
    "reconcile_narratives",
    "assemble_result",
    "summarize_results",
    "trade_levels",
    # Rules
    "FirewallOutcome",
    "evaluate_firewall",
    "compute_derived_metrics",
    "graham_fair_value",
    "score_security",
    "classify_verdict",
    "valuation_label",
    # Configuration
    "PROFILES",
    "SECTOR_BENCHMARKS",
    "ScoringProfile",
    "ScoringWeights",
    "SectorBenchmark",
    "get_profile",
    "resolve_benchmark",
    # Records
    "AnalysisResult",
    "DerivedMetrics",
    "InvalidRecordError",
    "NarrativeEntry",
    "NoRecordsFoundError",
    "RawSecurityRecord",
    "ScoreBreakdown",
    "ValuationLabel",
    "Verdict",
]
