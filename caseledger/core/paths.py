#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants and configuration for the caseledger project.

Paths are Path objects relative to the project root so that the CLI has
sensible defaults when run from a checkout:

    ROOT/
    ├── caseledger/    # Source package
    ├── data/          # SQLite database and integrity config
    └── logs/          # Application logs

Every default can be overridden from the command line.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine project root directory.

    Assumes this file is at ROOT/caseledger/core/paths.py.

    Returns:
        Path object for project root
    """
    # paths.py -> core/ -> caseledger/ -> ROOT/
    return Path(__file__).resolve().parent.parent.parent


# ----- Project directory -----
ROOT: Path = _get_project_root()
DATA_DIR = ROOT / "data"

# --- Database ---
DB_DIR = DATA_DIR / "ledger"
DB_PATH = DB_DIR / "caseledger.db"

# --- Integrity engine ---
CONFIG_PATH = DATA_DIR / "integrity.yaml"

# ---- Logs ----
LOG_DIR = ROOT / "logs"
