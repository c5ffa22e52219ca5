# app.py
from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# === make repo imports work under `streamlit run` ===
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ui import equipment_form, equipment_table, facility, results
from ui.state import ctx_get

SECTIONS = [
    facility.render,
    equipment_form.render,
    equipment_table.render,
    results.render,
]


def main() -> None:
    ctx = ctx_get(st)

    st.set_page_config(page_title=ctx.settings.report.title, layout="wide")
    st.title(ctx.settings.report.title)
    if ctx.settings.report.subtitle:
        st.caption(ctx.settings.report.subtitle)

    for render in SECTIONS:
        render(ctx)
        st.divider()


if __name__ == "__main__":
    main()
