"""
Application settings resolved from an optional JSON file and the environment.

Configuration is always constructed explicitly and handed to the components
that need it; nothing in the package reads a global settings object.
"""

import json
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from .core.enums import BackendType
from .core.exceptions import ConfigurationError

DEFAULT_DATA_FILE = os.path.join("data", "scheduler-data.json")


class DatabaseConfig(BaseModel):
    """Connection settings for the relational backends."""
    backend: BackendType = BackendType.SQLITE
    database_path: str = os.path.join("data", "coursekeeper.db")
    host: str = "localhost"
    port: int = Field(5432, ge=1, le=65535)
    database: str = "coursekeeper"
    user: str = "coursekeeper"
    password: str = ""
    min_connections: int = Field(2, ge=1)
    max_connections: int = Field(10, ge=1)
    connection_timeout: float = Field(30.0, gt=0)


class SchedulerConfig(BaseModel):
    """Deadline scanner settings."""
    enabled: bool = True
    interval_seconds: float = Field(3600.0, gt=0)
    upcoming_window_days: int = Field(3, ge=1)


class AppConfig(BaseModel):
    """Top level configuration for one CourseKeeper process."""
    backend: BackendType = BackendType.JSON
    data_file: str = DEFAULT_DATA_FILE
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    rest_host: str = "0.0.0.0"
    rest_port: int = Field(8000, ge=1, le=65535)
    log_level: str = "INFO"

    def database_config(self) -> DatabaseConfig:
        """Database settings with the backend matching the selected one."""
        if self.backend == BackendType.JSON:
            return self.database
        return self.database.model_copy(update={"backend": self.backend})


_ENV_OVERRIDES = {
    "COURSEKEEPER_BACKEND": ("backend",),
    "COURSEKEEPER_DATA_FILE": ("data_file",),
    "COURSEKEEPER_DB_PATH": ("database", "database_path"),
    "COURSEKEEPER_DB_HOST": ("database", "host"),
    "COURSEKEEPER_DB_PORT": ("database", "port"),
    "COURSEKEEPER_DB_NAME": ("database", "database"),
    "COURSEKEEPER_DB_USER": ("database", "user"),
    "COURSEKEEPER_DB_PASSWORD": ("database", "password"),
    "COURSEKEEPER_SCAN_INTERVAL": ("scheduler", "interval_seconds"),
    "COURSEKEEPER_LOG_LEVEL": ("log_level",),
}


def _apply_env_overrides(data: Dict[str, Any], environ: Dict[str, str]) -> Dict[str, Any]:
    for env_name, path in _ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if not value:
            continue
        target = data
        for key in path[:-1]:
            target = target.setdefault(key, {})
        target[path[-1]] = value
    return data


def load_config(path: Optional[str] = None, environ: Optional[Dict[str, str]] = None,
                **overrides: Any) -> AppConfig:
    """Build an AppConfig from a JSON file, environment variables and keyword overrides.

    Later sources win: file < environment < keyword overrides.
    """
    data: Dict[str, Any] = {}
    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to read configuration file {path}: {str(e)}")

    data = _apply_env_overrides(data, dict(os.environ) if environ is None else environ)
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return AppConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {str(e)}")
