"""Tabular views of audit results."""

from typing import Any

import pandas as pd

# Column order for the results table (always, in this order)
RESULT_COLUMNS = [
    "rank",
    "ticker",
    "name",
    "sector",
    "category",
    "price",
    "score",
    "verdict",
    "valuation_label",
    "firewall_passed",
    "risk_grade",
    "moat_type",
    "pe",
    "roe",
    "debt_to_equity",
    "price_to_book",
    "dividend_yield",
    "fair_value",
    "entry_price",
    "exit_price",
    "stop_loss",
    "red_flags",
]


def results_to_frame(rows: list[dict[str, Any]]) -> pd.DataFrame:
    """
    Flatten AnalysisResult dicts into one row per security.

    Rows keep their input order; rank is 1-based position. Red flags are
    joined with " | ". Missing columns are filled with NA for schema stability.

    Args:
        rows: Output of AnalysisResult.to_dict(), already sorted

    Returns:
        DataFrame with RESULT_COLUMNS in order
    """
    flat: list[dict[str, Any]] = []
    for rank, row in enumerate(rows, start=1):
        record = row.get("record", {})
        metrics = row.get("metrics", {})
        flat.append(
            {
                "rank": rank,
                "ticker": record.get("ticker"),
                "name": record.get("name"),
                "sector": record.get("sector"),
                "category": record.get("category"),
                "price": record.get("price"),
                "score": row.get("score"),
                "verdict": row.get("verdict"),
                "valuation_label": row.get("valuation_label"),
                "firewall_passed": row.get("firewall_passed"),
                "risk_grade": row.get("risk_grade"),
                "moat_type": row.get("moat_type"),
                "pe": metrics.get("pe"),
                "roe": metrics.get("roe"),
                "debt_to_equity": metrics.get("debt_to_equity"),
                "price_to_book": metrics.get("price_to_book"),
                "dividend_yield": metrics.get("dividend_yield"),
                "fair_value": metrics.get("fair_value"),
                "entry_price": row.get("entry_price"),
                "exit_price": row.get("exit_price"),
                "stop_loss": row.get("stop_loss"),
                "red_flags": " | ".join(row.get("red_flags") or []),
            }
        )

    df = pd.DataFrame(flat)
    for col in RESULT_COLUMNS:
        if col not in df.columns:
            df[col] = pd.NA

    return df[RESULT_COLUMNS]


def frame_to_rows(df: pd.DataFrame) -> list[dict]:
    """Convert to list of dicts for inline preview."""
    return df.to_dict("records")


def frame_to_csv(df: pd.DataFrame) -> str:
    """Convert to CSV string for the results resource."""
    return df.to_csv(index=False)
