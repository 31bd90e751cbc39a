"""Startup validation and configuration checks."""

import logging
import os

from .config import get_default_max_errors, get_default_timeout

logger = logging.getLogger("app.startup")


def validate_config() -> None:
    """Warn when diagnostics settings in the environment cannot be used."""
    raw_max = os.environ.get("DIAGNOSTICS_MAX_ERRORS", "").strip()
    if raw_max and get_default_max_errors() is None:
        logger.warning("DIAGNOSTICS_MAX_ERRORS=%r is not an integer; no default cap applied", raw_max)
    raw_timeout = os.environ.get("DIAGNOSTICS_TIMEOUT", "").strip()
    if raw_timeout and get_default_timeout() is None:
        logger.warning("DIAGNOSTICS_TIMEOUT=%r is not a positive number; checks run unbounded", raw_timeout)
