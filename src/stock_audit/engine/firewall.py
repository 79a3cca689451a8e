"""Capital-preservation firewall.

Any disqualifying rule overrides the weighted score: the security gets
score 0 and verdict DESTROY. Rules are evaluated in a fixed order and
every triggered rule contributes one red flag, in that order.
"""

import operator
from dataclasses import dataclass
from typing import Any

from stock_audit.engine.profile import ScoringProfile
from stock_audit.engine.records import DerivedMetrics, RawSecurityRecord
from stock_audit.utils.validators import check_rule

JUNK_FLAG = "JUNK STATUS: {category} category detected. Never touch gambling assets."
OWNERSHIP_FLAG = (
    "TERMINAL OWNERSHIP: Sponsor holding {holding:g}% is below {threshold:g}%. "
    "This is a public dumping ground."
)
LOSS_FLAG = "CASH BURNER: Negative or zero EPS. This company destroys capital."
LEVERAGE_FLAG = (
    "DEBT TRAP: Debt/equity {ratio:.2f} exceeds {threshold:g}. "
    "Liabilities outweigh net assets."
)
CASH_FLOW_FLAG = (
    "CASH FLOW MISMATCH: EPS is positive but operating cash flow per share is negative. "
    "Earnings may not be real cash."
)


@dataclass(frozen=True)
class FirewallOutcome:
    """Pass/fail plus flags in rule-evaluation order."""

    passed: bool
    disqualifiers: tuple[str, ...]
    advisories: tuple[str, ...]
    rules: dict[str, Any]

    @property
    def red_flags(self) -> tuple[str, ...]:
        return self.disqualifiers + self.advisories


def evaluate_firewall(
    record: RawSecurityRecord,
    metrics: DerivedMetrics,
    profile: ScoringProfile,
) -> FirewallOutcome:
    """
    Decide whether a security is unconditionally disqualified.

    Order: category -> ownership -> profitability -> leverage, then the
    non-disqualifying cash-flow advisory.

    Args:
        record: Raw input row
        metrics: Derived ratios for the row
        profile: Thresholds

    Returns:
        FirewallOutcome
    """
    sponsor = record.sponsor_holding if record.sponsor_holding is not None else 0.0
    eps = record.eps if record.eps is not None else 0.0

    junk = record.category in profile.junk_categories
    low_ownership = check_rule(sponsor, profile.min_sponsor_holding, operator.lt)
    loss_making = check_rule(eps, 0.0, operator.le)
    over_leveraged = check_rule(metrics.debt_to_equity, profile.max_debt_to_equity, operator.gt)
    cash_mismatch = eps > 0 and check_rule(record.nocfps, 0.0, operator.lt) is True

    disqualifiers: list[str] = []
    if junk:
        disqualifiers.append(JUNK_FLAG.format(category=record.category))
    if low_ownership:
        disqualifiers.append(
            OWNERSHIP_FLAG.format(holding=sponsor, threshold=profile.min_sponsor_holding)
        )
    if loss_making:
        disqualifiers.append(LOSS_FLAG)
    if over_leveraged:
        disqualifiers.append(
            LEVERAGE_FLAG.format(
                ratio=metrics.debt_to_equity, threshold=profile.max_debt_to_equity
            )
        )

    advisories = (CASH_FLOW_FLAG,) if cash_mismatch else ()

    rules = {
        "junk_category": {"triggered": junk, "threshold": list(profile.junk_categories)},
        "low_sponsor_holding": {
            "triggered": low_ownership,
            "threshold": profile.min_sponsor_holding,
        },
        "non_positive_eps": {"triggered": loss_making, "threshold": 0.0},
        "excess_leverage": {
            "triggered": over_leveraged,
            "threshold": profile.max_debt_to_equity,
        },
        "cash_flow_mismatch": {"triggered": cash_mismatch, "advisory": True},
    }

    return FirewallOutcome(
        passed=not disqualifiers,
        disqualifiers=tuple(disqualifiers),
        advisories=advisories,
        rules=rules,
    )
