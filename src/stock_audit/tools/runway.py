"""Empire runway audit: how many months liquid cash covers a monthly burn."""

import math
from time import perf_counter
from typing import Any

from stock_audit.utils.provenance import build_error_response, build_meta
from stock_audit.utils.validators import coerce_number


def runway_months(liquid_cash: float, monthly_burn: float) -> int:
    """
    Whole months of runway. A zero burn is treated as 1 per month.

    Raises:
        ValueError: If either input is negative
    """
    if liquid_cash < 0 or monthly_burn < 0:
        raise ValueError("liquid_cash and monthly_burn must be non-negative")
    return math.floor(liquid_cash / (monthly_burn or 1))


async def empire_runway(liquid_cash: Any, monthly_burn: Any) -> dict[str, Any]:
    """
    Compute personal cash runway.

    Args:
        liquid_cash: Cash on hand (numbers or numeric strings like "1,200,000")
        monthly_burn: Monthly spend

    Returns:
        Dict with runway in months and years
    """
    start_time = perf_counter()

    cash = coerce_number(liquid_cash)
    burn = coerce_number(monthly_burn)
    if cash is None or burn is None:
        return build_error_response(
            error_type="invalid_input",
            message="liquid_cash and monthly_burn must be numeric",
            tool="empire_runway",
        )

    try:
        months = runway_months(cash, burn)
    except ValueError as e:
        return build_error_response(
            error_type="invalid_input",
            message=str(e),
            tool="empire_runway",
        )

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "meta": build_meta("empire_runway", duration_ms),
        "liquid_cash": cash,
        "monthly_burn": burn,
        "runway_months": months,
        "runway_years": round(months / 12, 1),
    }
