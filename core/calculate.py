# core/calculate.py
"""
Command line entry point:

    load-calculator PROJECT.yaml [--pdf OUT] [--config CFG] [-v]

PROJECT.yaml:

    facility:
      street_address: 100 Main St
      zip_code: "85001"
      op_hours_day: 10
      op_days_week: 5
    equipment:
      - template: "LED Lighting (per 1k sqft)"   # optional, pre-fills name and power
        qty: 20
        hours: 10
      - name: Walk-in Freezer
        qty: 1
        kwh: 30
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from core.equipment import apply_template, empty_form, find_template, item_from_form
from core.irradiance import IrradianceLookup
from core.models import EquipmentItem, FacilityInfo
from core.paths import num, prepare_output
from core.settings import Settings, load_settings
from core.sizing import compute
from core.validation import ValidationError, require_facility
from reports.exporter import ExportError, ReportExporter
from reports.rendering import load_rendering_service
from reports.views import build_header_view, build_results_view

logger = logging.getLogger(__name__)


def _read_project(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Project file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid project file (must be a mapping): {path}")
    return data


def facility_from_dict(raw: Dict[str, Any], settings: Settings) -> FacilityInfo:
    return FacilityInfo(
        street_address=str(raw.get("street_address") or ""),
        zip_code=str(raw.get("zip_code") or ""),
        op_hours_day=raw.get("op_hours_day", settings.default_op_hours_day),
        op_days_week=raw.get("op_days_week", settings.default_op_days_week),
    )


def equipment_from_list(raw: Sequence[Any], settings: Settings) -> List[EquipmentItem]:
    items: List[EquipmentItem] = []
    for i, entry in enumerate(raw or []):
        if not isinstance(entry, dict):
            raise ValueError(f"equipment[{i}] must be a mapping")

        form = empty_form()
        if entry.get("template"):
            template = find_template(settings.standard_equipment, entry["template"])
            if template is None:
                raise ValueError(f"equipment[{i}]: unknown template {entry['template']!r}")
            form = apply_template(form, template)

        form.update({k: entry[k] for k in ("name", "qty", "power", "hours", "kwh") if k in entry})
        try:
            items.append(item_from_form(form))
        except ValidationError as e:
            raise type(e)(f"equipment[{i}]: {e}") from e
    return items


def _print_results(facility: FacilityInfo, items: Sequence[EquipmentItem], result, estimate) -> None:
    print(f"Facility: {facility.street_address}, {facility.zip_code}")
    print(f"Schedule: {facility.op_hours_day} h/day, {facility.op_days_week} days/week")
    for it in items:
        print(f"  {it.qty:>4} x {it.name:<30} {num(it.total_daily_kwh):>10} kWh/day")
    print(f"Total Daily Load:   {num(result.daily)} kWh")
    print(f"Total Monthly Load: {num(result.monthly)} kWh")
    print(f"Total Annual Load:  {num(result.annual)} kWh")
    print(f"Recommended Solar PV System Size: {num(result.pv_size)} kW")
    print(f"Recommended Battery Storage:      {num(result.battery_size, 0)} kWh")
    print(estimate.message)


def _export_pdf(out: str, settings: Settings, facility, items, result, estimate) -> str:
    exporter = ReportExporter(lambda: load_rendering_service(settings.report.title))
    return exporter.export_to_file(
        build_header_view(settings),
        build_results_view(facility, result, estimate, items),
        out,
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="load-calculator",
        description="Commercial electric load and solar + storage sizing.",
    )
    ap.add_argument("project", help="YAML file with facility and equipment sections")
    ap.add_argument("--pdf", nargs="?", const="", default=None,
                    help="write a PDF report (default: output/<report file name>)")
    ap.add_argument("--config", default=None, help="YAML config merged over the defaults")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.config)
        project = _read_project(Path(args.project))
        facility = require_facility(facility_from_dict(project.get("facility") or {}, settings))
        items = equipment_from_list(project.get("equipment") or [], settings)
    except (OSError, ValueError, yaml.YAMLError) as e:
        # ValidationError is a ValueError
        logger.debug("Input rejected", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2

    lookup = IrradianceLookup(settings.irradiance, latency_s=0)
    estimate = asyncio.run(lookup.lookup(facility.zip_code))
    result = compute(facility.op_days_week, items, estimate.peak_sun_hours, settings.sizing)

    _print_results(facility, items, result, estimate)

    if args.pdf is not None:
        out = args.pdf or prepare_output(settings.report.output_dir, settings.report.file_name)["pdf"]
        try:
            path = _export_pdf(out, settings, facility, items, result, estimate)
        except ExportError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        print(f"PDF: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
