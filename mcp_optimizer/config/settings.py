"""Centralized configuration loading."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_PORT = 5000


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    # Listener
    host: str
    port: int

    # Lighthouse engine
    lighthouse_command: str
    audit_timeout: float
    browser_launch_timeout: int

    log_level: str


def _get_optional_env(key: str, default: str) -> str:
    """Get optional environment variable with default."""
    value = os.getenv(key)
    return value.strip() if value and value.strip() else default


def _get_int_env(key: str, default: int) -> int:
    """Get an integer environment variable, naming the key on bad input."""
    raw = _get_optional_env(key, str(default))
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}")


def _get_float_env(key: str, default: float) -> float:
    """Get a float environment variable, naming the key on bad input."""
    raw = _get_optional_env(key, str(default))
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}")


def resolve_port() -> int:
    """Resolve the listening port: PORT, then AUDIT_PORT, then the default."""
    for key in ("PORT", "AUDIT_PORT"):
        if _get_optional_env(key, ""):
            return _get_int_env(key, DEFAULT_PORT)
    return DEFAULT_PORT


def load_config() -> Config:
    """Load and validate configuration from environment."""
    load_dotenv()

    return Config(
        host=_get_optional_env("AUDIT_HOST", "0.0.0.0"),
        port=resolve_port(),
        lighthouse_command=_get_optional_env("LIGHTHOUSE_COMMAND", "lighthouse"),
        audit_timeout=_get_float_env("AUDIT_TIMEOUT", 600.0),
        browser_launch_timeout=_get_int_env("BROWSER_LAUNCH_TIMEOUT", 30),
        log_level=_get_optional_env("LOG_LEVEL", "INFO").upper(),
    )


# Singleton config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the configuration singleton."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset config singleton (useful for testing)."""
    global _config
    _config = None
