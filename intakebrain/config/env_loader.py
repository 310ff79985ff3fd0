"""Helper to load .env files so credentials are available to every module."""
from __future__ import annotations

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_LOADED_PATHS: List[Path] = []


def _candidate_paths() -> List[Path]:
    """Ordered .env paths to try, with INTAKE_ENV_PATH taking priority."""
    package_dir = Path(__file__).resolve().parents[1]
    candidates: List[Path] = []

    override = os.environ.get("INTAKE_ENV_PATH")
    if override:
        candidates.append(Path(override))

    candidates.extend([package_dir.parent / ".env", package_dir / ".env"])

    deduped: List[Path] = []
    for path in candidates:
        if path not in deduped:
            deduped.append(path)
    return deduped


def load_env(*, force: bool = False) -> List[Path]:
    """
    Load environment variables from .env files (if present) into os.environ.
    Returns the list of files that were loaded.
    """
    global _LOADED_PATHS
    if _LOADED_PATHS and not force:
        return _LOADED_PATHS

    loaded: List[Path] = []
    for env_path in _candidate_paths():
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)
            loaded.append(env_path)

    _LOADED_PATHS = loaded
    return _LOADED_PATHS
