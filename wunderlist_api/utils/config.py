"""
Configuration management
"""
import os
from enum import Enum
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, field_validator


# ============================================
# CONFIGURATION DEFAULTS
# ============================================

class ConfigDefaults:
    """Default configuration values as constants"""

    # Transport defaults
    HOST_DEFAULT = "www.wunderlist.com"
    PATH_DEFAULT = "/"
    SCHEME_DEFAULT = "http"
    SCHEMES = ("http", "https")

    # Session cookie
    SESSION_COOKIE_NAME = "WLSESSID"

    # Config file defaults
    CONFIG_PATH_DEFAULT = "config/wunderlist.yaml"

    # Environment variable prefix
    ENV_PREFIX = "WUNDERLIST_"


class TaskDeletePolicy(str, Enum):
    """How a task deletion is keyed on the wire."""
    # list id + task name, no task id (what the web front end historically sent)
    LEGACY = "legacy"
    BY_ID = "by_id"


# ============================================
# CONFIGURATION MODELS
# ============================================

class WunderlistConfig(BaseModel):
    """Client configuration"""
    host: str = ConfigDefaults.HOST_DEFAULT
    path: str = ConfigDefaults.PATH_DEFAULT
    scheme: str = ConfigDefaults.SCHEME_DEFAULT
    timeout: Optional[float] = None  # None leaves the transport default in place
    user_agent: Optional[str] = None

    # Behaviour toggles
    refresh_on_cache_miss: bool = False
    task_delete_policy: TaskDeletePolicy = TaskDeletePolicy.LEGACY

    # Optional credentials for WunderlistClient.from_config
    email: Optional[str] = None
    password: Optional[str] = None
    session_id: Optional[str] = None

    @field_validator("scheme")
    @classmethod
    def _check_scheme(cls, value: str) -> str:
        value = value.lower()
        if value not in ConfigDefaults.SCHEMES:
            raise ValueError(f"scheme must be one of {ConfigDefaults.SCHEMES}, got {value!r}")
        return value

    @field_validator("task_delete_policy", mode="before")
    @classmethod
    def _normalize_policy(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        if not value.startswith("/"):
            value = "/" + value
        return value

    @property
    def base_url(self) -> str:
        """Scheme, host and base path without a trailing slash."""
        return f"{self.scheme}://{self.host}{self.path.rstrip('/')}"


def load_config(config_path: str = ConfigDefaults.CONFIG_PATH_DEFAULT) -> WunderlistConfig:
    """
    Load configuration from a YAML file and environment variables.

    The file may hold the settings at the top level or under a
    ``wunderlist:`` key. ``${VAR}`` placeholders are replaced from the
    environment (after loading ``.env``).
    """
    load_dotenv()

    with open(config_path, 'r') as f:
        config_dict = yaml.safe_load(f) or {}

    if isinstance(config_dict, dict) and isinstance(config_dict.get("wunderlist"), dict):
        config_dict = config_dict["wunderlist"]

    # Unset placeholders fall back to the field defaults
    config_dict = {k: v for k, v in _replace_env_vars(config_dict).items() if v is not None}

    return WunderlistConfig(**config_dict)


def config_from_env(environ: Optional[Dict[str, str]] = None) -> WunderlistConfig:
    """
    Build configuration from WUNDERLIST_* environment variables.

    Unset variables keep their defaults.
    """
    if environ is None:
        load_dotenv()
        environ = dict(os.environ)

    values: Dict[str, Any] = {}
    for field_name in WunderlistConfig.model_fields:
        raw = environ.get(ConfigDefaults.ENV_PREFIX + field_name.upper())
        if raw is None or raw == "":
            continue
        if field_name == "refresh_on_cache_miss":
            values[field_name] = raw.strip().lower() in ("1", "true", "yes", "on")
        else:
            values[field_name] = raw

    return WunderlistConfig(**values)


def _replace_env_vars(obj: Any) -> Any:
    """
    Recursively replace ${VAR} placeholders with environment variables.

    Placeholders whose variable is unset become None so optional fields
    fall back to "not configured".
    """
    if isinstance(obj, dict):
        return {k: _replace_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_replace_env_vars(item) for item in obj]
    elif isinstance(obj, str) and obj.startswith("${") and obj.endswith("}"):
        return os.getenv(obj[2:-1])
    return obj
