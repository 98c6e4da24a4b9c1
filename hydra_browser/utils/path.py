"""
Utilities for resolving the data directory and download save paths.
"""

import os
import sys
from pathlib import Path

from pathvalidate import sanitize_filename

APP_DIR_NAME = "Hydra"


def get_data_dir() -> Path:
    """
    Returns the per-user data directory holding the persisted JSON documents.

    `HYDRA_DATA_DIR` takes precedence over the platform location.
    """
    if override := os.getenv("HYDRA_DATA_DIR"):
        return Path(override).expanduser()

    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    elif sys.platform == "darwin":
        base_dir = Path("~/Library/Application Support")
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / APP_DIR_NAME


def get_default_download_dir() -> Path:
    return Path.home() / "Downloads"


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def unique_save_path(directory: Path, filename: str) -> Path:
    """
    Resolves a save path inside `directory` that does not collide with an
    existing file.

    The exact filename is used when free; otherwise `(1)`, `(2)`, ... is
    appended to the stem until a free name is found, e.g. `report.pdf` ->
    `report(2).pdf` when `report.pdf` and `report(1).pdf` already exist.
    """
    safe_name = sanitize_filename(filename, platform="auto") or "download"
    candidate = directory / safe_name
    if not candidate.exists():
        return candidate

    stem, suffix = _split_extension(safe_name)
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem}({counter}){suffix}"
        counter += 1
    return candidate


def _split_extension(filename: str) -> tuple[str, str]:
    # Only the last extension counts: archive.tar.gz -> ("archive.tar", ".gz")
    stem, dot, ext = filename.rpartition(".")
    if not dot or not stem:
        return filename, ""
    return stem, f".{ext}"
