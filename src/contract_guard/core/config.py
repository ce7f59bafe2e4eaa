"""
Configuration
=============
Environment-driven settings for the CLIs and the live validation middleware.

A `.env` file at the repository root is loaded first (if present); real
environment variables always win over it.

  API_BASE_URL               Base URL the smoke tests hit   (default http://localhost:5000)
  API_AUTH_TOKEN             Bearer token for authenticated smoke checks
  SMOKE_TIMEOUT_SECONDS      Per-check HTTP timeout          (default 5)
  CONTRACT_GUARD_SEED        Fixture generator seed          (default 12345)
  CONTRACT_GUARD_LOG_LEVEL   Logging level for the CLIs      (default INFO)
  CONTRACT_GUARD_REPORT_DIR  Where exported reports go       (default reports)
  CONTRACT_GUARD_ENV         "development" enables live response validation (default production)
"""

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

_env_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=_env_path)

logger = logging.getLogger("contract_guard")

DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_SEED = 12345


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_BASE_URL
    api_auth_token: str = ""
    smoke_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    seed: int = DEFAULT_SEED
    log_level: str = "INFO"
    report_dir: str = "reports"
    environment: str = "production"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "")
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"⚠️  {name}={raw!r} is not a number - using {default}")
        return default
    if value <= 0:
        logger.warning(f"⚠️  {name} must be positive - using {default}")
        return default
    return value


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"⚠️  {name}={raw!r} is not an integer - using {default}")
        return default


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment (or an explicit mapping, for tests)."""
    env = os.environ if env is None else env
    return Settings(
        api_base_url=(env.get("API_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        api_auth_token=env.get("API_AUTH_TOKEN", ""),
        smoke_timeout_seconds=_read_float(env, "SMOKE_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        seed=_read_int(env, "CONTRACT_GUARD_SEED", DEFAULT_SEED),
        log_level=(env.get("CONTRACT_GUARD_LOG_LEVEL") or "INFO").upper(),
        report_dir=env.get("CONTRACT_GUARD_REPORT_DIR") or "reports",
        environment=env.get("CONTRACT_GUARD_ENV") or "production",
    )


def configure_logging(settings: Settings) -> None:
    """Logging setup for CLI entry points. Library code never calls this."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s [%(levelname)s] %(message)s',
    )
