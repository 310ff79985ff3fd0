"""Centralized logging configuration for intakebrain."""
from __future__ import annotations

import logging
import os
from typing import Optional

from intakebrain.config.env_loader import load_env

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once using env overrides."""
    load_env()
    if logging.getLogger().handlers:
        return

    log_level = (level or os.environ.get("INTAKE_LOG_LEVEL", "INFO")).upper()
    log_format = os.environ.get("INTAKE_LOG_FORMAT", DEFAULT_FORMAT)

    logging.basicConfig(level=log_level, format=log_format)

    # Keep third-party clients quiet unless we are debugging
    for noisy in ("httpx", "openai", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
