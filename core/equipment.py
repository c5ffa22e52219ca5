# core/equipment.py
from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from core.accessors import as_float, as_int, as_non_negative, clamp
from core.models import DirectKwhMode, EntryMode, EquipmentItem, PowerHoursMode
from core.settings import EquipmentTemplate
from core.validation import EquipmentValidationError

logger = logging.getLogger(__name__)

MAX_HOURS = 24.0

NAME_REQUIRED = "Please provide an equipment name."
QTY_REQUIRED = "Quantity must be at least 1."
LOAD_REQUIRED = "Please provide either Power and Hours, or a Daily Load kWh."

EDITABLE_FIELDS = ("qty", "power", "hours", "per_unit_kwh")


# ==========================================================
# Entry form
# ==========================================================
def empty_form() -> Dict[str, Any]:
    return {"name": "", "qty": 1, "power": "", "hours": "", "kwh": ""}


def clamp_hours(value: Any) -> float:
    return clamp(as_non_negative(value), 0.0, MAX_HOURS)


def apply_template(form: Mapping[str, Any], template: Optional[EquipmentTemplate]) -> Dict[str, Any]:
    """
    A standard item pre-fills name and power. Selecting no template clears
    the template fields.
    """
    out = dict(form)
    if template is None:
        out.update(name="", power="", hours="")
        return out
    out.update(name=template.name, power=f"{template.power:g}", kwh="")
    return out


def field_locks(form: Mapping[str, Any]) -> Dict[str, bool]:
    """
    Which inputs are disabled: power/hours and per-unit kWh exclude each other.
    Only a positive value locks the other path; 0 cannot select a mode.
    """
    has_kwh = as_float(form.get("kwh")) > 0
    has_power_hours = as_float(form.get("power")) > 0 or as_float(form.get("hours")) > 0
    return {"power": has_kwh, "hours": has_kwh, "kwh": has_power_hours}


def resolve_entry_mode(power: Any, hours: Any, kwh: Any) -> Optional[EntryMode]:
    per_unit = as_float(kwh)
    if per_unit > 0:
        return DirectKwhMode(per_unit_kwh=per_unit)

    p = as_float(power)
    h = clamp_hours(hours)
    if p > 0 and h > 0:
        return PowerHoursMode(power=p, hours=h)
    return None


def validate_form(form: Mapping[str, Any]) -> Tuple[bool, List[str]]:
    errors: List[str] = []

    if not str(form.get("name") or "").strip():
        errors.append(NAME_REQUIRED)
        return False, errors

    if as_int(form.get("qty"), 0) < 1:
        errors.append(QTY_REQUIRED)

    if resolve_entry_mode(form.get("power"), form.get("hours"), form.get("kwh")) is None:
        errors.append(LOAD_REQUIRED)

    return (len(errors) == 0), errors


def new_item_id() -> str:
    return uuid.uuid4().hex


def item_from_form(form: Mapping[str, Any], item_id: Optional[str] = None) -> EquipmentItem:
    ok, errors = validate_form(form)
    if not ok:
        raise EquipmentValidationError(errors[0])

    mode = resolve_entry_mode(form.get("power"), form.get("hours"), form.get("kwh"))
    item = EquipmentItem(
        id=item_id or new_item_id(),
        name=str(form.get("name")).strip(),
        qty=as_int(form.get("qty")),
        mode=mode,
    )
    logger.debug("New equipment %s: %.3f kWh/day", item.name, item.total_daily_kwh)
    return item


# ==========================================================
# Table edits (each returns a new item)
# ==========================================================
def edit_qty(item: EquipmentItem, value: Any) -> EquipmentItem:
    # per-unit kWh is kept, the total rescales with qty
    return replace(item, qty=max(0, as_int(value)))


def edit_power(item: EquipmentItem, value: Any) -> EquipmentItem:
    return replace(item, mode=PowerHoursMode(power=as_non_negative(value), hours=item.hours))


def edit_hours(item: EquipmentItem, value: Any) -> EquipmentItem:
    return replace(item, mode=PowerHoursMode(power=item.power, hours=clamp_hours(value)))


def edit_per_unit_kwh(item: EquipmentItem, value: Any) -> EquipmentItem:
    return replace(item, mode=DirectKwhMode(per_unit_kwh=as_non_negative(value)))


_EDITORS = {
    "qty": edit_qty,
    "power": edit_power,
    "hours": edit_hours,
    "per_unit_kwh": edit_per_unit_kwh,
}


def edit_item(item: EquipmentItem, field: str, value: Any) -> EquipmentItem:
    fn = _EDITORS.get(field)
    if fn is None:
        raise ValueError(f"Field not editable: {field!r} (expected one of {EDITABLE_FIELDS})")
    return fn(item, value)


# ==========================================================
# List operations
# ==========================================================
def add_item(items: Sequence[EquipmentItem], item: EquipmentItem) -> List[EquipmentItem]:
    return [*items, item]


def remove_item(items: Sequence[EquipmentItem], item_id: str) -> List[EquipmentItem]:
    return [it for it in items if it.id != item_id]


def update_item(items: Sequence[EquipmentItem], item_id: str, field: str, value: Any) -> List[EquipmentItem]:
    return [edit_item(it, field, value) if it.id == item_id else it for it in items]


def find_template(templates: Sequence[EquipmentTemplate], name: Optional[str]) -> Optional[EquipmentTemplate]:
    return next((t for t in templates if t.name == name), None)
