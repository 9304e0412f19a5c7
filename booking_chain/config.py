"""
Centralized configuration with environment variable overrides.

Scheduling defaults (fallback durations, the finishing service) and
logging settings live here. Nothing is hardcoded in resolver logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from booking_chain.logging_context import configure_logging

load_dotenv()

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var ("1", "true", "yes", "on")."""
    return os.getenv(env_var, default).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class SchedulingConfig:
    """Fallbacks applied when catalog or booking data is incomplete."""

    default_service_duration_min: int = _safe_int("DEFAULT_SERVICE_DURATION_MIN", "30")
    legacy_booking_duration_min: int = _safe_int("LEGACY_BOOKING_DURATION_MIN", "60")
    finishing_service_name: str = os.getenv("FINISHING_SERVICE_NAME", "Blow-dry")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    trace_decisions: bool = _safe_bool("TRACE_DECISIONS", "false")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.scheduling.default_service_duration_min < 1:
        raise ValueError(
            "DEFAULT_SERVICE_DURATION_MIN must be >= 1, "
            f"got {config.scheduling.default_service_duration_min}"
        )
    if config.scheduling.legacy_booking_duration_min < 1:
        raise ValueError(
            "LEGACY_BOOKING_DURATION_MIN must be >= 1, "
            f"got {config.scheduling.legacy_booking_duration_min}"
        )
    if not config.scheduling.finishing_service_name.strip():
        raise ValueError("FINISHING_SERVICE_NAME must not be blank")
    if not isinstance(logging.getLevelName(config.log_level.upper()), int):
        raise ValueError(f"LOG_LEVEL is not a known level: {config.log_level!r}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    configure_logging(getattr(logging, config.log_level.upper(), logging.INFO))
    logger.info(
        "Configuration loaded (finishing service '%s')",
        config.scheduling.finishing_service_name,
    )
    return config


# Singleton instance
settings = load_config()
