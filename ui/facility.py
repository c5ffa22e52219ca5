# ui/facility.py
from __future__ import annotations

import logging
from typing import List, Tuple

import streamlit as st

from core.models import FacilityInfo
from core.validation import clamp_op_days_week, clamp_op_hours_day, validate_facility

logger = logging.getLogger(__name__)


def _refresh_estimate(ctx) -> None:
    z = ctx.facility.zip_code.strip()
    if z == ctx.estimate_zip:
        return
    # a newer zip from a later rerun bumps the sequence; this result is then dropped
    seq = ctx.irradiance.submit(z)
    with st.spinner("Looking up solar irradiance..."):
        estimate = ctx.irradiance.wait(seq)
    if estimate is None:
        return
    ctx.estimate = estimate
    ctx.estimate_zip = z
    logger.debug("Irradiance for %r (#%d): %s", z, seq, estimate)


def render(ctx) -> None:
    st.markdown("### Facility Information")
    f = ctx.facility

    street = st.text_input("Street Address", value=f.street_address, placeholder="123 Main St")

    col1, col2, col3 = st.columns(3)
    with col1:
        zip_code = st.text_input("Zip Code", value=f.zip_code, max_chars=10, placeholder="85001")
    with col2:
        hours = st.number_input(
            "Operating Hours per Day",
            min_value=1,
            max_value=24,
            step=1,
            value=int(f.op_hours_day) if f.op_hours_day else None,
        )
    with col3:
        days = st.number_input(
            "Operating Days per Week",
            min_value=1,
            max_value=7,
            step=1,
            value=int(f.op_days_week) if f.op_days_week else None,
        )

    ctx.facility = FacilityInfo(
        street_address=street,
        zip_code=zip_code,
        op_hours_day=clamp_op_hours_day(hours, ctx.settings.default_op_hours_day),
        op_days_week=clamp_op_days_week(days),
    )
    _refresh_estimate(ctx)


def validate(ctx) -> Tuple[bool, List[str]]:
    return validate_facility(ctx.facility)
