# core/settings.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent / "config"
DEFAULTS_PATH = CONFIG_DIR / "defaults.yaml"
ENV_CONFIG = "LOADCALC_CONFIG"


# ==========================================================
# YAML loading
# ==========================================================
def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config (must be a mapping): {path}")
    return data


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in (overrides or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    sec = raw.get(name) or {}
    if not isinstance(sec, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return sec


# ==========================================================
# Settings model
# ==========================================================
@dataclass(frozen=True)
class SizingParams:
    days_per_month: float = 30.44
    days_per_year: float = 365.25
    system_efficiency: float = 0.85
    battery_autonomy_days: float = 2.0
    battery_increment_kwh: float = 5.0


@dataclass(frozen=True)
class Region:
    prefixes: Tuple[str, ...]
    peak_sun_hours: float
    location: str


@dataclass(frozen=True)
class IrradianceSettings:
    default_peak_sun_hours: float = 4.5
    default_location: str = "an average US location"
    min_zip_length: int = 5
    simulated_latency_s: float = 0.5
    debounce_s: float = 0.5
    timeout_s: float = 5.0
    regions: Tuple[Region, ...] = ()


@dataclass(frozen=True)
class EquipmentTemplate:
    name: str
    power: float


@dataclass(frozen=True)
class ReportSettings:
    title: str = "Commercial Electric Load Calculator"
    subtitle: str = ""
    file_name: str = "Commercial_Electric_Load_Report.pdf"
    output_dir: str = "output"


@dataclass(frozen=True)
class Settings:
    sizing: SizingParams = field(default_factory=SizingParams)
    irradiance: IrradianceSettings = field(default_factory=IrradianceSettings)
    standard_equipment: Tuple[EquipmentTemplate, ...] = ()
    report: ReportSettings = field(default_factory=ReportSettings)
    default_op_hours_day: int = 10
    default_op_days_week: int = 5


def _regions(raw: List[Any]) -> Tuple[Region, ...]:
    out: List[Region] = []
    for i, r in enumerate(raw or []):
        if not isinstance(r, dict):
            raise ValueError(f"irradiance.regions[{i}] must be a mapping")
        if "peak_sun_hours" not in r or "location" not in r:
            raise ValueError(f"irradiance.regions[{i}] needs 'peak_sun_hours' and 'location'")
        prefixes = r.get("prefixes") or []
        if isinstance(prefixes, str):
            prefixes = [prefixes]
        out.append(
            Region(
                prefixes=tuple(str(p) for p in prefixes),
                peak_sun_hours=float(r["peak_sun_hours"]),
                location=str(r["location"]),
            )
        )
    return tuple(out)


def _templates(raw: List[Any]) -> Tuple[EquipmentTemplate, ...]:
    out: List[EquipmentTemplate] = []
    for i, t in enumerate(raw or []):
        if not isinstance(t, dict) or not t.get("name"):
            raise ValueError(f"standard_equipment[{i}] needs a 'name'")
        out.append(EquipmentTemplate(name=str(t["name"]), power=float(t.get("power", 0.0))))
    return tuple(out)


def settings_from_dict(raw: Dict[str, Any]) -> Settings:
    sz = _section(raw, "sizing")
    irr = _section(raw, "irradiance")
    rep = _section(raw, "report")
    fac = _section(raw, "facility")

    sizing = SizingParams(**{k: float(v) for k, v in sz.items() if k in SizingParams.__dataclass_fields__})

    irr_kwargs = {k: v for k, v in irr.items() if k in IrradianceSettings.__dataclass_fields__ and k != "regions"}
    irradiance = IrradianceSettings(regions=_regions(irr.get("regions")), **irr_kwargs)

    report = ReportSettings(**{k: str(v) for k, v in rep.items() if k in ReportSettings.__dataclass_fields__})

    return Settings(
        sizing=sizing,
        irradiance=irradiance,
        standard_equipment=_templates(raw.get("standard_equipment")),
        report=report,
        default_op_hours_day=int(fac.get("op_hours_day", 10)),
        default_op_days_week=int(fac.get("op_days_week", 5)),
    )


def load_settings(path: Optional[str | Path] = None) -> Settings:
    """
    Load defaults.yaml and merge the override file on top, if one is given
    (argument or LOADCALC_CONFIG).
    """
    raw = _read_yaml(DEFAULTS_PATH)

    override = path or os.environ.get(ENV_CONFIG)
    if override:
        logger.debug("Merging config override %s", override)
        raw = _deep_merge(raw, _read_yaml(Path(override)))

    try:
        return settings_from_dict(raw)
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid config {override or DEFAULTS_PATH}: {e}") from e
