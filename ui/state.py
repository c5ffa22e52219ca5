# ui/state.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.equipment import empty_form
from core.irradiance import BackgroundIrradianceLookup, IrradianceLookup, PROMPT_MESSAGE, default_estimate
from core.models import EquipmentItem, FacilityInfo, IrradianceEstimate
from core.settings import Settings, load_settings
from reports.exporter import ReportExporter
from reports.rendering import load_rendering_service


# ==========================================================
# Session context
# ==========================================================
@dataclass
class SessionCtx:
    settings: Settings
    irradiance: BackgroundIrradianceLookup
    exporter: ReportExporter

    # ------------------------------------------------------
    # User inputs
    # ------------------------------------------------------
    facility: FacilityInfo = field(default_factory=FacilityInfo)
    equipment: List[EquipmentItem] = field(default_factory=list)
    form: Dict[str, Any] = field(default_factory=empty_form)

    # widget keys are suffixed with these so a bump resets the widgets
    form_version: int = 0
    table_version: int = 0

    # ------------------------------------------------------
    # Derived
    # ------------------------------------------------------
    estimate: Optional[IrradianceEstimate] = None
    estimate_zip: Optional[str] = None

    pdf: Optional[bytes] = None
    pdf_fingerprint: Optional[str] = None


def new_ctx(settings: Optional[Settings] = None) -> SessionCtx:
    s = settings or load_settings()
    ctx = SessionCtx(
        settings=s,
        irradiance=BackgroundIrradianceLookup(IrradianceLookup(s.irradiance)),
        exporter=ReportExporter(lambda: load_rendering_service(s.report.title)),
        facility=FacilityInfo(op_hours_day=s.default_op_hours_day, op_days_week=s.default_op_days_week),
    )
    ctx.estimate = default_estimate(s.irradiance, PROMPT_MESSAGE)
    ctx.estimate_zip = ""
    return ctx


def ctx_get(st) -> SessionCtx:
    """Session context from session_state, created on first access."""
    if "load_ctx" not in st.session_state:
        st.session_state["load_ctx"] = new_ctx()
    return st.session_state["load_ctx"]


def inputs_fingerprint(ctx: SessionCtx) -> str:
    """Changes whenever anything shown in the report changes."""
    return repr((ctx.facility, ctx.equipment, ctx.estimate))


def invalidate_pdf(ctx: SessionCtx) -> None:
    ctx.pdf = None
    ctx.pdf_fingerprint = None
