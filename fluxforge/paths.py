"""
fluxforge.paths
~~~~~~~~~~~~~~~
Single source of truth for filesystem paths used across the app.
Import these instead of hard-coding strings anywhere else.
"""

import os
import sys
from pathlib import Path

APP_NAME = "FluxForge"

# Project root = the directory that contains main.py
PROJECT_ROOT = Path(__file__).resolve().parent.parent

BIN_DIR = PROJECT_ROOT / "bin"


def backend_bin() -> Path:
    """The converter executable; FLUXFORGE_BACKEND overrides the bundled one."""
    override = os.environ.get("FLUXFORGE_BACKEND")
    if override:
        return Path(override)
    name = "fluxforge-backend.exe" if sys.platform == "win32" else "fluxforge-backend"
    return BIN_DIR / name


# ── Config location ───────────────────────────────────────────────────────────
#   Windows  : %APPDATA%\FluxForge\config.json
#   macOS    : ~/Library/Application Support/FluxForge/config.json
#   Linux    : ~/.config/FluxForge/config.json

def config_dir() -> Path:
    if sys.platform == "win32":
        base = Path.home() / "AppData" / "Roaming"
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


def config_file() -> Path:
    return config_dir() / "config.json"


def default_export_root() -> Path:
    """Where exports go when the user has not picked a folder."""
    return Path.home() / "Documents"


def validate_backend() -> list[str]:
    """
    Return a list of error strings if the backend is missing/non-executable.
    Empty list means all good.
    """
    binary = backend_bin()
    errors: list[str] = []
    if not binary.exists():
        errors.append(f"Backend not found: {binary}")
    elif not binary.is_file():
        errors.append(f"Not a file: {binary}")
    elif sys.platform != "win32" and not binary.stat().st_mode & 0o111:
        errors.append(f"Not executable: {binary}")
    return errors
