# core/sizing.py
from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Optional

from core.accessors import as_float, as_non_negative, clamp, get_field
from core.models import CalculationResult
from core.settings import SizingParams

logger = logging.getLogger(__name__)

DEFAULT_PARAMS = SizingParams()


# ==========================================================
# Helpers
# ==========================================================
def _round_half_up(x: float) -> float:
    # Math.round: halves go up, not to even
    return float(math.floor(x + 0.5))


def _finite(x: float) -> float:
    # values that overflowed read as 0
    return x if math.isfinite(x) else 0.0


def _item_daily_kwh(item: Any) -> float:
    return as_non_negative(get_field(item, "total_daily_kwh", 0.0))


def days_per_week(op_days_week: Any) -> float:
    return clamp(as_float(op_days_week, 0.0), 0.0, 7.0)


def battery_size_kwh(pv_size_kw: float, params: SizingParams = DEFAULT_PARAMS) -> float:
    """Daily PV output times the autonomy days, rounded to the nearest increment."""
    step = params.battery_increment_kwh
    if step <= 0 or not math.isfinite(pv_size_kw) or pv_size_kw <= 0:
        return 0.0
    increments = pv_size_kw * params.battery_autonomy_days / step
    if not math.isfinite(increments):
        return 0.0
    return _finite(_round_half_up(increments) * step)


# ==========================================================
# Public API
# ==========================================================
def compute(
    op_days_week: Any,
    equipment_list: Optional[Iterable[Any]],
    peak_sun_hours: Any,
    params: Optional[SizingParams] = None,
) -> CalculationResult:
    """
    Load aggregation -> period projection -> PV and battery sizing.

    Pure and total: invalid numbers degrade to 0 instead of raising.
    `equipment_list` may hold EquipmentItem objects or mappings with a
    `total_daily_kwh` key.
    """
    p = params or DEFAULT_PARAMS

    dpw = days_per_week(op_days_week)
    days_per_month = (dpw / 7.0) * p.days_per_month
    days_per_year = (dpw / 7.0) * p.days_per_year

    total_daily = _finite(sum((_item_daily_kwh(it) for it in (equipment_list or [])), 0.0))
    total_monthly = _finite(total_daily * days_per_month)
    total_annual = _finite(total_daily * days_per_year)

    # average over every day of the year, not the raw operating-day demand
    daily_needed = total_annual / p.days_per_year if total_annual > 0 and p.days_per_year > 0 else 0.0

    psh = as_non_negative(peak_sun_hours)
    denom = psh * p.system_efficiency
    pv_size = _finite(daily_needed / denom) if daily_needed > 0 and denom > 0 else 0.0

    result = CalculationResult(
        daily=total_daily,
        monthly=total_monthly,
        annual=total_annual,
        pv_size=pv_size,
        battery_size=battery_size_kwh(pv_size, p),
    )
    logger.debug("compute(days=%s, psh=%s) -> %s", dpw, psh, result)
    return result
