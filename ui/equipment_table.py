# ui/equipment_table.py
from __future__ import annotations

import logging
import math
from typing import List, Sequence

import pandas as pd
import streamlit as st

from core.accessors import as_float
from core.equipment import remove_item, update_item
from core.models import DirectKwhMode, EquipmentItem
from core.paths import num

logger = logging.getLogger(__name__)

# DataFrame column -> editable item field
EDIT_COLUMNS = {
    "Qty": "qty",
    "Power (W)": "power",
    "Hours/Day": "hours",
    "kWh/Unit/Day": "per_unit_kwh",
}
NAME_COLUMN = "Equipment"
TOTAL_COLUMN = "Total kWh/Day"
REMOVE_COLUMN = "Remove"


# ==========================================================
# Items <-> DataFrame
# ==========================================================
def equipment_frame(items: Sequence[EquipmentItem]) -> pd.DataFrame:
    rows = []
    for it in items:
        direct = isinstance(it.mode, DirectKwhMode)
        rows.append({
            NAME_COLUMN: it.name,
            "Qty": it.qty,
            "Power (W)": None if direct else it.power,
            "Hours/Day": None if direct else it.hours,
            "kWh/Unit/Day": it.per_unit_kwh,
            TOTAL_COLUMN: it.total_daily_kwh,
            REMOVE_COLUMN: False,
        })
    columns = [NAME_COLUMN, *EDIT_COLUMNS, TOTAL_COLUMN, REMOVE_COLUMN]
    return pd.DataFrame(rows, columns=columns, index=pd.Index([it.id for it in items], name="id"))


def _changed(old, new) -> bool:
    # blank and NaN cells compare equal to each other
    o = as_float(old, float("nan"))
    n = as_float(new, float("nan"))
    if math.isnan(o) and math.isnan(n):
        return False
    return o != n


def apply_table_edits(items: Sequence[EquipmentItem], edited: pd.DataFrame) -> List[EquipmentItem]:
    """
    Replay the cells that differ from `equipment_frame(items)` as item edits,
    then drop the rows flagged for removal. Rows are matched by item id.
    """
    original = equipment_frame(items)
    out = list(items)

    for item_id, row in edited.iterrows():
        if item_id not in original.index:
            continue
        before = original.loc[item_id]
        for col, fld in EDIT_COLUMNS.items():
            if col in row and _changed(before[col], row[col]):
                logger.debug("Edit %s.%s: %r -> %r", item_id, fld, before[col], row[col])
                out = update_item(out, item_id, fld, row[col])

        if bool(row.get(REMOVE_COLUMN, False)):
            out = remove_item(out, item_id)

    return out


# ==========================================================
# Render
# ==========================================================
def render(ctx) -> None:
    st.markdown("### Equipment List")

    if not ctx.equipment:
        st.info("No equipment added yet.")
        return

    edited = st.data_editor(
        equipment_frame(ctx.equipment),
        key=f"eq_table_{ctx.table_version}",
        hide_index=True,
        num_rows="fixed",
        disabled=[NAME_COLUMN, TOTAL_COLUMN],
        column_config={
            "Qty": st.column_config.NumberColumn(min_value=0, step=1),
            "Power (W)": st.column_config.NumberColumn(min_value=0.0),
            "Hours/Day": st.column_config.NumberColumn(min_value=0.0, max_value=24.0),
            "kWh/Unit/Day": st.column_config.NumberColumn(min_value=0.0, format="%.3f"),
            TOTAL_COLUMN: st.column_config.NumberColumn(format="%.2f"),
            REMOVE_COLUMN: st.column_config.CheckboxColumn(),
        },
    )

    updated = apply_table_edits(ctx.equipment, edited)
    if updated != ctx.equipment:
        ctx.equipment = updated
        # edits are now in the items; start the editor over from them
        ctx.table_version += 1
        st.rerun()

    total = sum(it.total_daily_kwh for it in ctx.equipment)
    st.caption(f"{len(ctx.equipment)} line item(s), {num(total)} kWh/day in total")
