"""Environment-driven settings.

Values come from the process environment; a local ``.env`` file is loaded
first when present.
"""
from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel

try:
    load_dotenv()
except Exception as e:  # pragma: no cover
    logger.warning(f"Failed to load .env file: {e}")


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    database_url: str = "sqlite:///./viewaccess.db"
    api_key: Optional[str] = None
    actor_roles_header: str = "X-Actor-Roles"
    rate_limit: str = "120/minute"
    rate_limit_enabled: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            database_url=os.getenv("DATABASE_URL") or defaults.database_url,
            api_key=os.getenv("API_KEY") or None,
            actor_roles_header=os.getenv("ACTOR_ROLES_HEADER")
            or defaults.actor_roles_header,
            rate_limit=os.getenv("RATE_LIMIT") or defaults.rate_limit,
            rate_limit_enabled=_env_flag("RATE_LIMIT_ENABLED"),
            log_level=(os.getenv("LOG_LEVEL") or defaults.log_level).upper(),
        )


def get_settings() -> Settings:
    """Read settings fresh from the environment on every call."""
    return Settings.from_env()
