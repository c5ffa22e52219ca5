# reports/views.py
"""
Report views: plain data describing what the PDF shows.

A view knows nothing about matplotlib or reportlab; the rendering service
turns it into an image.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from core.models import CalculationResult, EquipmentItem, FacilityInfo, IrradianceEstimate
from core.paths import num
from core.settings import Settings


@dataclass(frozen=True)
class ReportRow:
    label: str
    value: str
    highlight: Optional[str] = None   # palette key, e.g. "SOLAR"


@dataclass(frozen=True)
class ReportSection:
    heading: str
    rows: Tuple[ReportRow, ...] = ()


@dataclass(frozen=True)
class ReportView:
    kind: str                         # "header" | "results"
    title: str
    subtitle: str = ""
    sections: Tuple[ReportSection, ...] = ()
    notes: Tuple[str, ...] = ()

    @property
    def line_count(self) -> int:
        return sum(1 + len(s.rows) for s in self.sections) + len(self.notes)


def build_header_view(settings: Settings) -> ReportView:
    return ReportView(kind="header", title=settings.report.title, subtitle=settings.report.subtitle)


def _facility_section(facility: FacilityInfo) -> ReportSection:
    return ReportSection(
        heading="Facility Information",
        rows=(
            ReportRow("Street Address", facility.street_address.strip()),
            ReportRow("Zip Code", facility.zip_code.strip()),
            ReportRow("Operating Hours per Day", f"{facility.op_hours_day} h"),
            ReportRow("Operating Days per Week", f"{facility.op_days_week} days"),
        ),
    )


def _equipment_section(equipment: Iterable[EquipmentItem]) -> Optional[ReportSection]:
    rows = tuple(
        ReportRow(f"{it.qty} x {it.name}", f"{num(it.total_daily_kwh)} kWh/day")
        for it in equipment
    )
    if not rows:
        return None
    return ReportSection(heading="Equipment", rows=rows)


def build_results_view(
    facility: FacilityInfo,
    result: CalculationResult,
    estimate: IrradianceEstimate,
    equipment: Iterable[EquipmentItem] = (),
) -> ReportView:
    sections = [_facility_section(facility)]

    eq = _equipment_section(equipment)
    if eq is not None:
        sections.append(eq)

    sections.append(
        ReportSection(
            heading="Energy Consumption",
            rows=(
                ReportRow("Total Daily Load", f"{num(result.daily)} kWh"),
                ReportRow("Total Monthly Load", f"{num(result.monthly)} kWh"),
                ReportRow("Total Annual Load", f"{num(result.annual)} kWh"),
            ),
        )
    )
    sections.append(
        ReportSection(
            heading="Solar + Storage Recommendation",
            rows=(
                ReportRow("Recommended Solar PV System Size", f"{num(result.pv_size)} kW", "SOLAR"),
                ReportRow("Recommended Battery Storage", f"{num(result.battery_size, 0)} kWh", "STORAGE"),
            ),
        )
    )

    return ReportView(
        kind="results",
        title="Results",
        sections=tuple(sections),
        notes=(estimate.message,) if estimate.message else (),
    )
