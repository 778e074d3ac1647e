"""
Runtime configuration for the receipt analyzer.

Values come from the process environment, with an optional .env file loaded
on import. Every accessor reads os.getenv at call time so a key rotated in the
environment is picked up without a restart.
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv(override=False)

DEFAULT_VISION_MODEL = "gemini-1.5-flash"
DEFAULT_RATE_LIMIT = "30/minute"

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _optional_number(name: str, cast):
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return cast(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}")


def default_api_key() -> Optional[str]:
    """Process-wide fallback credential, used when the caller sends no apiKey."""
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or None


def vision_model_name() -> str:
    return os.getenv("VISION_MODEL", DEFAULT_VISION_MODEL)


def vision_max_retries() -> int:
    # 1 = a single attempt, no retry
    return int(os.getenv("VISION_MAX_RETRIES", "1"))


def vision_timeout() -> Optional[float]:
    return _optional_number("VISION_TIMEOUT", float)


def max_image_bytes() -> Optional[int]:
    return _optional_number("MAX_IMAGE_BYTES", int)


def strict_receipt_schema() -> bool:
    return _flag("STRICT_RECEIPT_SCHEMA", "false")


def analyze_rate_limit() -> str:
    return os.getenv("ANALYZE_RATE_LIMIT", DEFAULT_RATE_LIMIT)


def rate_limit_enabled() -> bool:
    return _flag("RATE_LIMIT_ENABLED", "true")


def frontend_origin() -> Optional[str]:
    return os.getenv("FRONTEND_ORIGIN") or None


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
