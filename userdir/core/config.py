"""
Configuration for the user directory.

Settings come from environment variables (optionally loaded from a .env
file) prefixed with USERDIR_. Values are validated once per process and
cached; tests call reset_settings() after changing the environment.
"""

import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from ..utils.exceptions import ConfigError

ENV_PREFIX = "USERDIR_"


class Settings(BaseModel):
    app_name: str = "UserDirectory"
    environment: str = "production"

    log_level: str = "INFO"
    log_file: Optional[str] = None

    cache_ttl_seconds: float = Field(default=300, gt=0)
    default_page_size: int = Field(default=10, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    session_expiry_hours: int = Field(default=24, ge=1)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Bootstrap administrator seeded into every fresh store
    admin_login: str = "Admin"
    admin_password: str = "Admin_123"
    admin_name: str = "System Administrator"
    system_actor: str = "System"


_settings: Optional[Settings] = None


def _read_env() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for name in Settings.model_fields:
        raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw.strip() != "":
            values[name] = raw.strip()
    return values


def load_settings(**overrides: Any) -> Settings:
    """Build settings from the environment, with explicit overrides on top."""
    load_dotenv()
    values = _read_env()
    values.update(overrides)
    try:
        return Settings(**values)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid settings: {e}")


def get_settings() -> Settings:
    """Process-wide settings singleton"""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None


def is_production(settings: Optional[Settings] = None) -> bool:
    settings = settings or get_settings()
    return settings.environment.strip().lower() == "production"
