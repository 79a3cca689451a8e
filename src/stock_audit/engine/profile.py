"""Scoring profiles and the sector benchmark table.

A ScoringProfile is the complete, versioned parameter set for one scoring
run: firewall thresholds, 50/30/20 weights, verdict cut-offs and the
sector benchmark table. Profiles are immutable and passed explicitly into
the engine; nothing here is mutated at runtime.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

DEFAULT_SECTOR = "DEFAULT"


@dataclass(frozen=True)
class SectorBenchmark:
    """Reference thresholds for one industry."""

    ideal_pe: float
    min_roe: float  # percent
    max_debt_to_equity: float  # ceiling for safety partial credit

    def __post_init__(self) -> None:
        if self.ideal_pe <= 0:
            raise ValueError(f"ideal_pe must be positive, got {self.ideal_pe}")
        if self.max_debt_to_equity <= 0:
            raise ValueError(
                f"max_debt_to_equity must be positive, got {self.max_debt_to_equity}"
            )


def _normalize_sector(sector: str | None) -> str:
    """Lowercase and collapse whitespace so "Food &  Allied" == "food & allied"."""
    if not sector:
        return ""
    return " ".join(sector.lower().split())


def _build_table(entries: dict[str, SectorBenchmark]) -> Mapping[str, SectorBenchmark]:
    if DEFAULT_SECTOR not in entries:
        raise ValueError("Sector benchmark table must contain a DEFAULT entry")
    table = {
        (key if key == DEFAULT_SECTOR else _normalize_sector(key)): value
        for key, value in entries.items()
    }
    return MappingProxyType(table)


SECTOR_BENCHMARKS: Mapping[str, SectorBenchmark] = _build_table(
    {
        DEFAULT_SECTOR: SectorBenchmark(ideal_pe=10.0, min_roe=15.0, max_debt_to_equity=0.3),
        "Bank": SectorBenchmark(ideal_pe=8.0, min_roe=12.0, max_debt_to_equity=0.5),
        "Cement": SectorBenchmark(ideal_pe=12.0, min_roe=12.0, max_debt_to_equity=0.5),
        "Engineering": SectorBenchmark(ideal_pe=12.0, min_roe=12.0, max_debt_to_equity=0.5),
        "Food & Allied": SectorBenchmark(ideal_pe=15.0, min_roe=18.0, max_debt_to_equity=0.3),
        "Fuel & Power": SectorBenchmark(ideal_pe=10.0, min_roe=12.0, max_debt_to_equity=0.6),
        "Insurance": SectorBenchmark(ideal_pe=12.0, min_roe=10.0, max_debt_to_equity=0.2),
        "IT": SectorBenchmark(ideal_pe=15.0, min_roe=15.0, max_debt_to_equity=0.2),
        "NBFI": SectorBenchmark(ideal_pe=8.0, min_roe=10.0, max_debt_to_equity=0.5),
        "Pharmaceuticals": SectorBenchmark(ideal_pe=15.0, min_roe=15.0, max_debt_to_equity=0.4),
        "Telecommunication": SectorBenchmark(ideal_pe=14.0, min_roe=20.0, max_debt_to_equity=0.3),
        "Textile": SectorBenchmark(ideal_pe=8.0, min_roe=10.0, max_debt_to_equity=0.5),
        "Tannery": SectorBenchmark(ideal_pe=10.0, min_roe=12.0, max_debt_to_equity=0.4),
    }
)


def resolve_benchmark(
    sector: str | None,
    table: Mapping[str, SectorBenchmark] = SECTOR_BENCHMARKS,
) -> SectorBenchmark:
    """Look up a sector's benchmark. Unknown, blank or None resolves to DEFAULT."""
    return table.get(_normalize_sector(sector)) or table[DEFAULT_SECTOR]


@dataclass(frozen=True)
class ScoringWeights:
    """Maximum points per scoring component. Must sum to 100."""

    safety: int = 50
    moat: int = 30
    valuation: int = 20

    # Partial credit tiers
    safety_tier1: int = 20
    safety_tier2: int = 10
    moat_oligopoly: int = 15
    valuation_tier2: int = 10

    def __post_init__(self) -> None:
        total = self.safety + self.moat + self.valuation
        if total != 100:
            raise ValueError(f"Scoring weights must sum to 100, got {total}")
        for name, full, partial in (
            ("safety_tier1", self.safety, self.safety_tier1),
            ("safety_tier2", self.safety_tier1, self.safety_tier2),
            ("moat_oligopoly", self.moat, self.moat_oligopoly),
            ("valuation_tier2", self.valuation, self.valuation_tier2),
        ):
            if not 0 <= partial <= full:
                raise ValueError(f"{name}={partial} must be within [0, {full}]")


@dataclass(frozen=True)
class ScoringProfile:
    """Versioned parameter set for one scoring run."""

    name: str
    version: str

    # Firewall
    junk_categories: tuple[str, ...] = ("Z",)
    min_sponsor_holding: float = 15.0
    max_debt_to_equity: float = 1.0

    # Derived metrics
    pe_sentinel: float = 999.0
    face_value: float = 10.0
    fair_value_fallback_ratio: float = 0.85
    graham_multiplier: float = 22.5

    # Scoring
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    valuation_tier2_multiple: float = 1.5
    safety_tier2_multiple: float = 2.0

    # Verdict table
    god_mode_threshold: int = 80
    buy_threshold: int = 50
    hold_threshold: int = 30
    god_mode_min_yield: float | None = None
    god_mode_min_sponsor: float | None = None

    # Valuation label
    expensive_pe_multiple: float = 2.0

    # Optional override rules, evaluated before the verdict table
    enable_overrides: bool = False
    deep_value_nav_ratio: float = 0.6
    deep_value_max_debt_to_equity: float = 0.5
    overvalued_pe_multiple: float = 2.0

    # Suggested trade levels
    entry_discount: float = 0.20
    exit_premium: float = 0.20
    stop_loss_pct: float = 0.10

    sector_benchmarks: Mapping[str, SectorBenchmark] = field(
        default_factory=lambda: SECTOR_BENCHMARKS, compare=False
    )

    def __post_init__(self) -> None:
        if not (0 <= self.hold_threshold <= self.buy_threshold <= self.god_mode_threshold <= 100):
            raise ValueError(
                "Verdict thresholds must satisfy 0 <= hold <= buy <= god_mode <= 100, got "
                f"hold={self.hold_threshold} buy={self.buy_threshold} "
                f"god_mode={self.god_mode_threshold}"
            )
        if self.max_debt_to_equity <= 0:
            raise ValueError(f"max_debt_to_equity must be positive, got {self.max_debt_to_equity}")
        if not 0 <= self.min_sponsor_holding <= 100:
            raise ValueError(
                f"min_sponsor_holding must be within [0, 100], got {self.min_sponsor_holding}"
            )
        for name in ("entry_discount", "exit_premium", "stop_loss_pct"):
            value = getattr(self, name)
            if not 0 <= value < 1:
                raise ValueError(f"{name} must be within [0, 1), got {value}")
        if DEFAULT_SECTOR not in self.sector_benchmarks:
            raise ValueError("sector_benchmarks must contain a DEFAULT entry")
        # Category codes compare upper-case
        object.__setattr__(
            self, "junk_categories", tuple(c.upper().strip() for c in self.junk_categories)
        )

    def benchmark_for(self, sector: str | None) -> SectorBenchmark:
        """Resolve a sector against this profile's table."""
        return resolve_benchmark(sector, self.sector_benchmarks)

    def describe(self) -> dict:
        """Summary of the headline thresholds, for listing profiles."""
        return {
            "name": self.name,
            "version": self.version,
            "firewall": {
                "junk_categories": list(self.junk_categories),
                "min_sponsor_holding": self.min_sponsor_holding,
                "max_debt_to_equity": self.max_debt_to_equity,
            },
            "weights": {
                "safety": self.weights.safety,
                "moat": self.weights.moat,
                "valuation": self.weights.valuation,
            },
            "verdict_thresholds": {
                "god_mode": self.god_mode_threshold,
                "buy": self.buy_threshold,
                "hold": self.hold_threshold,
                "god_mode_min_yield": self.god_mode_min_yield,
                "god_mode_min_sponsor": self.god_mode_min_sponsor,
            },
            "overrides_enabled": self.enable_overrides,
            "sectors": sorted(k for k in self.sector_benchmarks if k != DEFAULT_SECTOR),
        }


TITAN_PROFILE = ScoringProfile(name="titan", version="7.0")

# Stricter governance: sponsor >= 30%, D/E <= 0.5, god-mode needs income and skin in the game
STRICT_PROFILE = replace(
    TITAN_PROFILE,
    name="strict",
    version="7.0-strict",
    min_sponsor_holding=30.0,
    max_debt_to_equity=0.5,
    god_mode_min_yield=7.0,
    god_mode_min_sponsor=30.0,
)

LENIENT_PROFILE = replace(
    TITAN_PROFILE,
    name="lenient",
    version="7.0-lenient",
    min_sponsor_holding=10.0,
    god_mode_threshold=75,
    enable_overrides=True,
)

PROFILES: Mapping[str, ScoringProfile] = MappingProxyType(
    {p.name: p for p in (TITAN_PROFILE, STRICT_PROFILE, LENIENT_PROFILE)}
)

DEFAULT_PROFILE_NAME = TITAN_PROFILE.name


def get_profile(name: str | None = None) -> ScoringProfile:
    """
    Look up a preset profile by name (case-insensitive).

    Args:
        name: Profile name; None selects the canonical profile

    Raises:
        ValueError: If no preset has that name
    """
    key = (name or DEFAULT_PROFILE_NAME).lower().strip()
    profile = PROFILES.get(key)
    if profile is None:
        raise ValueError(f"Unknown scoring profile '{name}'. Must be one of: {sorted(PROFILES)}")
    return profile
