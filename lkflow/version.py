"""Package version and build provenance stored alongside flow results."""
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Dict

import numpy as np

__version__ = "0.1.0"


def _git(*args: str) -> str | None:
    try:
        proc = subprocess.run(["git", *args], cwd=Path(__file__).resolve().parent, capture_output=True, text=True)
    except OSError:
        return None
    return proc.stdout.strip() if proc.returncode == 0 else None


def get_build_meta() -> Dict[str, str]:
    return {
        "version": __version__,
        "git_hash": _git("rev-parse", "--short", "HEAD") or "unknown",
        "dirty": "1" if _git("status", "--porcelain") else "0",
        "numpy": np.__version__,
    }


def get_version_string() -> str:
    meta = get_build_meta()
    rev = meta["git_hash"] + ("+dirty" if meta["dirty"] == "1" else "")
    return f"{meta['version']} ({rev}, numpy {meta['numpy']})"
