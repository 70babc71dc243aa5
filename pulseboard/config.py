"""
PULSEBOARD CONFIGURATION
Environment-driven settings for storage, text generation and the HTTP server

Values are read from the process environment after loading a local .env file.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_GENERATION_TIMEOUT = 30.0  # seconds
DEFAULT_SQLITE_PATH = "pulseboard.db"
STORAGE_BACKENDS = ("memory", "sqlite", "supabase")


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _as_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, using {default}")
        return default
    if value <= 0:
        logger.warning(f"{name}={raw!r} must be positive, using {default}")
        return default
    return value


def _as_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default


def _as_list(value: Optional[str], default: List[str]) -> List[str]:
    if value is None or not value.strip():
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime settings for one Pulseboard process"""
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = DEFAULT_MODEL
    generation_timeout: float = DEFAULT_GENERATION_TIMEOUT
    storage_backend: str = "memory"
    sqlite_path: str = DEFAULT_SQLITE_PATH
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    seed_data: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def generation_configured(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def get_settings(env_file: Optional[str] = None) -> Settings:
    """Build settings from the environment (and .env, if present)"""
    load_dotenv(env_file)

    backend = os.getenv("PULSEBOARD_STORAGE", "memory").strip().lower()
    if backend not in STORAGE_BACKENDS:
        logger.warning(f"Unknown PULSEBOARD_STORAGE={backend!r}, using memory")
        backend = "memory"

    return Settings(
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        anthropic_model=os.getenv("ANTHROPIC_MODEL", DEFAULT_MODEL),
        generation_timeout=_as_float("GENERATION_TIMEOUT_SECONDS", DEFAULT_GENERATION_TIMEOUT),
        storage_backend=backend,
        sqlite_path=os.getenv("PULSEBOARD_SQLITE_PATH", DEFAULT_SQLITE_PATH),
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_key=os.getenv("SUPABASE_KEY") or None,
        seed_data=_as_bool(os.getenv("PULSEBOARD_SEED_DATA"), default=True),
        cors_origins=_as_list(os.getenv("PULSEBOARD_CORS_ORIGINS"), ["*"]),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_as_int("PORT", 8000),
    )
