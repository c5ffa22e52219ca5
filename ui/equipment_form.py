# ui/equipment_form.py
from __future__ import annotations

import math
from typing import Any, List, Optional, Tuple

import streamlit as st

from core.accessors import as_float
from core.equipment import (
    MAX_HOURS,
    add_item,
    apply_template,
    empty_form,
    field_locks,
    find_template,
    item_from_form,
    validate_form,
)

CUSTOM = "Custom equipment"


def _opt(x: Any) -> Optional[float]:
    v = as_float(x, float("nan"))
    return None if math.isnan(v) else v


def _key(ctx, name: str) -> str:
    return f"eq_{name}_{ctx.form_version}"


def _template_picker(ctx) -> None:
    names = [CUSTOM] + [t.name for t in ctx.settings.standard_equipment]
    current = ctx.form.get("template") or CUSTOM
    sel = st.selectbox(
        "Standard Equipment",
        options=names,
        index=names.index(current) if current in names else 0,
        key=_key(ctx, "template"),
    )
    if sel == current:
        return

    template = find_template(ctx.settings.standard_equipment, sel)
    ctx.form = apply_template(ctx.form, template)
    ctx.form["template"] = sel if template is not None else None
    ctx.form_version += 1
    st.rerun()


def render(ctx) -> None:
    st.markdown("### Add Equipment")
    _template_picker(ctx)

    form = ctx.form
    locks = field_locks(form)

    col1, col2 = st.columns([3, 1])
    with col1:
        form["name"] = st.text_input("Equipment Name", value=form.get("name", ""), key=_key(ctx, "name"))
    with col2:
        form["qty"] = st.number_input(
            "Quantity", min_value=1, step=1, value=int(as_float(form.get("qty"), 1) or 1), key=_key(ctx, "qty")
        )

    col3, col4, col5 = st.columns(3)
    with col3:
        power = st.number_input(
            "Power (W)", min_value=0.0, step=10.0, value=_opt(form.get("power")),
            disabled=locks["power"], key=_key(ctx, "power"),
        )
    with col4:
        hours = st.number_input(
            "Hours per Day", min_value=0.0, step=0.5, value=_opt(form.get("hours")),
            disabled=locks["hours"], key=_key(ctx, "hours"),
            help=f"Values above {MAX_HOURS:g} are clamped to {MAX_HOURS:g}.",
        )
    with col5:
        kwh = st.number_input(
            "Daily Load kWh (per unit)", min_value=0.0, step=0.1, value=_opt(form.get("kwh")),
            disabled=locks["kwh"], key=_key(ctx, "kwh"),
            help="Use instead of Power and Hours when the daily energy is known.",
        )

    form["power"] = "" if power is None else power
    form["hours"] = "" if hours is None else hours
    form["kwh"] = "" if kwh is None else kwh

    # the lock state depends on what was just typed
    if field_locks(form) != locks:
        st.rerun()

    if st.button("Add Equipment", type="primary"):
        submit(ctx)


def submit(ctx) -> None:
    ok, errors = validate(ctx)
    if not ok:
        for e in errors:
            st.toast(e)
        return

    item = item_from_form(ctx.form)

    ctx.equipment = add_item(ctx.equipment, item)
    ctx.form = empty_form()
    ctx.form_version += 1
    st.rerun()


def validate(ctx) -> Tuple[bool, List[str]]:
    return validate_form(ctx.form)
