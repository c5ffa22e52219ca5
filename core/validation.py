# core/validation.py
from __future__ import annotations

import math
from typing import Any, List, Tuple

from core.accessors import as_float, clamp
from core.models import FacilityInfo


class ValidationError(ValueError):
    """Raised when user input cannot be accepted."""


class EquipmentValidationError(ValidationError):
    pass


class FacilityValidationError(ValidationError):
    pass


ADDRESS_REQUIRED = "Please enter a Street Address."
ZIP_REQUIRED = "Please enter a Zip Code."
RESULTS_LOCKED = "Please enter a complete Street Address and Zip Code to see your results."


# ==========================================================
# Facility field rules
# ==========================================================
def clamp_op_days_week(value: Any) -> int:
    """1..7; a cleared or non-numeric value is 0 (not set)."""
    v = as_float(value, float("nan"))
    if math.isnan(v):
        return 0
    return int(clamp(v, 1, 7))


def clamp_op_hours_day(value: Any, default: int = 10) -> int:
    v = as_float(value, float("nan"))
    if math.isnan(v):
        return int(default)
    return int(clamp(v, 1, 24))


def normalize_facility(info: FacilityInfo) -> FacilityInfo:
    return FacilityInfo(
        street_address=str(info.street_address or ""),
        zip_code=str(info.zip_code or ""),
        op_hours_day=clamp_op_hours_day(info.op_hours_day),
        op_days_week=clamp_op_days_week(info.op_days_week),
    )


def validate_facility(info: FacilityInfo) -> Tuple[bool, List[str]]:
    errors: List[str] = []

    if not str(info.street_address or "").strip():
        errors.append(ADDRESS_REQUIRED)
    if not str(info.zip_code or "").strip():
        errors.append(ZIP_REQUIRED)

    return (len(errors) == 0), errors


def is_facility_complete(info: FacilityInfo) -> bool:
    ok, _ = validate_facility(info)
    return ok


def require_facility(info: FacilityInfo) -> FacilityInfo:
    ok, errors = validate_facility(info)
    if not ok:
        raise FacilityValidationError(" ".join(errors))
    return normalize_facility(info)
