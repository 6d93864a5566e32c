"""Environment-driven settings for the goguma server."""

from __future__ import annotations

import logging
import os
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_EXEMPT_USER = "권진호"
DEFAULT_SESSION_DAYS = 7
DEFAULT_PORT = 3001
SECRET_KEY_FILENAME = "secret_key"


def _env_flag(name: str, default: bool) -> bool:
    """Parse truthy feature-toggle values from the environment."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return max(minimum, int(raw))
    except ValueError:
        logger.warning("Invalid %s value: %r. Using default %s.", name, raw, default)
        return default


def utc_today():
    """Current calendar date in UTC (day granularity, no time of day)."""
    return datetime.now(timezone.utc).date()


def load_secret_key(instance_path: Path) -> str:
    """Return SECRET_KEY from the environment or a key file kept in the instance folder.

    The key file is written once so signed session cookies stay valid across restarts.
    """
    env_value = (os.environ.get("SECRET_KEY") or "").strip()
    if env_value:
        return env_value

    key_path = instance_path / SECRET_KEY_FILENAME
    if key_path.exists():
        stored = key_path.read_text(encoding="utf-8").strip()
        if stored:
            return stored

    key_path.parent.mkdir(parents=True, exist_ok=True)
    generated = secrets.token_hex(32)
    key_path.write_text(generated, encoding="utf-8")
    logger.info("Generated new session secret at %s", key_path)
    return generated


def build_config(instance_path: Path) -> dict:
    """Collect app.config values from the environment."""
    database_url: Optional[str] = (os.environ.get("DATABASE_URL") or "").strip() or None
    if not database_url:
        database_url = f"sqlite:///{instance_path / 'goguma.db'}"

    exempt_user = os.environ.get("GOGUMA_EXEMPT_USER")
    if exempt_user is None:
        exempt_user = DEFAULT_EXEMPT_USER

    return {
        "SQLALCHEMY_DATABASE_URI": database_url,
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "GOGUMA_EXEMPT_USER": exempt_user.strip() or None,
        "SESSION_DAYS": _env_int("SESSION_DAYS", DEFAULT_SESSION_DAYS, minimum=1),
        "SESSION_COOKIE_SECURE": _env_flag("SESSION_COOKIE_SECURE", False),
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "LOG_LEVEL": (os.environ.get("LOG_LEVEL") or "INFO").strip().upper(),
        "PORT": _env_int("PORT", DEFAULT_PORT, minimum=1),
        "TODAY_PROVIDER": utc_today,
    }
