# core/paths.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional


def base_dir() -> Path:
    """Stable base for output folders (repo root when run from source)."""
    try:
        return Path(__file__).resolve().parents[1]
    except Exception:
        return Path(os.getcwd()).resolve()


def prepare_output(folder: str = "output", file_name: str = "Commercial_Electric_Load_Report.pdf",
                   root: Optional[Path] = None) -> Dict[str, str]:
    out_dir = Path(root) if root is not None else base_dir() / folder
    out_dir.mkdir(parents=True, exist_ok=True)

    return {
        "out_dir": str(out_dir),
        "pdf": str(out_dir / file_name),
    }


def num(x: float, nd: int = 2) -> str:
    return f"{x:,.{nd}f}"
