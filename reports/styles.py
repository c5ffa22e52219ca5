# reports/styles.py
from __future__ import annotations

from typing import Dict


def report_palette() -> Dict[str, str]:
    return {
        "PRIMARY": "#0B2E4A",
        "BORDER": "#D7DCE3",
        "SOFT": "#F5F7FA",
        "TEXT": "#101828",
        "MUTED": "#344054",

        # Recommendation highlights
        "SOLAR": "#F9A825",
        "STORAGE": "#1B7F3A",
    }

