# core/models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Union


# ==========================================================
# Entry mode of a line item
# ==========================================================
@dataclass(frozen=True)
class PowerHoursMode:
    power: float                      # W per unit
    hours: float                      # h/day per unit, 0..24

    @property
    def per_unit_kwh(self) -> float:
        return self.power * self.hours / 1000.0


@dataclass(frozen=True)
class DirectKwhMode:
    per_unit_kwh: float               # kWh/day per unit


EntryMode = Union[PowerHoursMode, DirectKwhMode]


# ==========================================================
# Equipment
# ==========================================================
@dataclass(frozen=True)
class EquipmentItem:
    """
    One line of the equipment list (one or more identical units).

    The daily total is always derived from `mode` and `qty`, so it can never
    drift from the fields that produced it.
    """

    id: str
    name: str
    qty: int
    mode: EntryMode

    @property
    def power(self) -> float:
        return self.mode.power if isinstance(self.mode, PowerHoursMode) else 0.0

    @property
    def hours(self) -> float:
        return self.mode.hours if isinstance(self.mode, PowerHoursMode) else 0.0

    @property
    def per_unit_kwh(self) -> float:
        return self.mode.per_unit_kwh

    @property
    def total_daily_kwh(self) -> float:
        return self.qty * self.per_unit_kwh


# ==========================================================
# Facility
# ==========================================================
@dataclass
class FacilityInfo:
    street_address: str = ""
    zip_code: str = ""
    op_hours_day: int = 10            # informational only
    op_days_week: int = 5             # 1..7, 0 = not set


# ==========================================================
# Outputs
# ==========================================================
@dataclass(frozen=True)
class IrradianceEstimate:
    peak_sun_hours: float             # kWh/m2/day equivalent
    description: str                  # location text
    message: str                      # line shown under the recommendation
    located: bool = False


@dataclass(frozen=True)
class CalculationResult:
    daily: float                      # kWh/day
    monthly: float                    # kWh/month
    annual: float                     # kWh/year
    pv_size: float                    # kW
    battery_size: float               # kWh
