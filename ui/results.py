# ui/results.py
from __future__ import annotations

import streamlit as st

from core.models import CalculationResult
from core.paths import num
from core.sizing import compute
from core.validation import RESULTS_LOCKED
from reports.exporter import ExportError, ExportInProgressError
from reports.views import build_header_view, build_results_view
from ui import facility
from ui.state import inputs_fingerprint, invalidate_pdf


def calculate(ctx) -> CalculationResult:
    return compute(
        ctx.facility.op_days_week,
        ctx.equipment,
        ctx.estimate.peak_sun_hours,
        ctx.settings.sizing,
    )


# ==========================================================
# KPIs
# ==========================================================
def _render_load(res: CalculationResult) -> None:
    st.markdown("#### Energy Consumption")
    c1, c2, c3 = st.columns(3)
    c1.metric("Total Daily Load", f"{num(res.daily)} kWh")
    c2.metric("Total Monthly Load", f"{num(res.monthly)} kWh")
    c3.metric("Total Annual Load", f"{num(res.annual)} kWh")


def _render_recommendation(ctx, res: CalculationResult) -> None:
    st.markdown("#### Solar + Storage Recommendation")
    c1, c2 = st.columns(2)
    c1.metric("Recommended Solar PV System Size", f"{num(res.pv_size)} kW")
    c2.metric("Recommended Battery Storage", f"{num(res.battery_size, 0)} kWh")
    st.caption(ctx.estimate.message)


# ==========================================================
# PDF
# ==========================================================
def _export(ctx, res: CalculationResult) -> None:
    try:
        with st.spinner("Generating PDF..."):
            ctx.pdf = ctx.exporter.export(
                build_header_view(ctx.settings),
                build_results_view(ctx.facility, res, ctx.estimate, ctx.equipment),
            )
        ctx.pdf_fingerprint = inputs_fingerprint(ctx)
    except ExportInProgressError as e:
        # the running export still owns ctx.pdf
        st.toast(str(e))
    except ExportError as e:
        invalidate_pdf(ctx)
        st.toast(str(e))


def _render_pdf(ctx, res: CalculationResult) -> None:
    if ctx.pdf is not None and ctx.pdf_fingerprint != inputs_fingerprint(ctx):
        invalidate_pdf(ctx)

    col_a, col_b = st.columns([1, 2])
    with col_a:
        if st.button("Generate PDF", disabled=ctx.exporter.loading):
            _export(ctx, res)
    with col_b:
        if ctx.pdf is not None:
            st.download_button(
                "Download PDF",
                data=ctx.pdf,
                file_name=ctx.settings.report.file_name,
                mime="application/pdf",
            )
        else:
            st.caption("Generates a PDF of the results shown above.")


def render(ctx) -> None:
    st.markdown("### Results")

    ok, _ = facility.validate(ctx)
    if not ok:
        st.warning(RESULTS_LOCKED)
        return

    res = calculate(ctx)
    _render_load(res)
    _render_recommendation(ctx, res)
    _render_pdf(ctx, res)
