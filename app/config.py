"""Configuration from environment."""

import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def get_host() -> str:
    return os.environ.get("HOST", "0.0.0.0").strip()


def get_port() -> int:
    try:
        return int(os.environ.get("PORT", "8000"))
    except ValueError:
        return 8000


def get_default_max_errors() -> Optional[int]:
    """Cap applied when a request does not set maxErrors. Unset means no cap."""
    raw = os.environ.get("DIAGNOSTICS_MAX_ERRORS", "").strip()
    if not raw:
        return None
    try:
        return max(0, int(raw))
    except ValueError:
        return None


def get_default_timeout() -> Optional[float]:
    """Seconds allowed per check when a request does not set timeout."""
    raw = os.environ.get("DIAGNOSTICS_TIMEOUT", "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def get_cors_origins() -> List[str]:
    raw = os.environ.get("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]
