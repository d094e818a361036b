"""Project settings for endfield.

Settings come from three layers, later ones winning:

1. Field defaults on :class:`EndfieldSettings`
2. ``<project>/endfield.yaml`` under a top-level ``config:`` key, with
   ``${VAR}``, ``${VAR:-default}`` and ``${VAR:?message}`` placeholders
   substituted from the environment
3. ``ENDFIELD_<FIELD>`` environment variables (``.env`` in the project root
   is loaded first and never overrides variables that are already set)
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from cachetools.func import lru_cache  # type: ignore
from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from endfield.errors import ConfigurationError

SETTINGS_FILE = "endfield.yaml"
ENV_PREFIX = "ENDFIELD_"

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


class EndfieldSettings(BaseModel):
    kubectl_binary: str = Field(default="kubectl", description="kubectl executable")
    helm_binary: str = Field(default="helm", description="helm executable")
    field_manager: str = Field(
        default="endfield", description="Field manager for server-side apply"
    )
    install_wait: bool = Field(
        default=False, description="Wait for release resources to become ready"
    )
    install_timeout: str = Field(
        default="5m", description="Wait limit when install_wait is enabled"
    )
    debounce_seconds: float = Field(
        default=0.3, ge=0, description="Watcher window for duplicate events"
    )
    log_level: str = Field(default="INFO", description="Default log sink level")


def substitute_env_vars(text: str) -> str:
    """Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message

    Raises:
        ConfigurationError: If a required variable is not set
    """

    def replacer(match: re.Match[str]) -> str:
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ConfigurationError(
                    f"Required environment variable {var_name}: {error_msg}"
                )
            return value

        value = os.getenv(var_expr)
        if value is None:
            raise ConfigurationError(
                f"Required environment variable {var_expr} not set"
            )
        return value

    return _PLACEHOLDER.sub(replacer, text)


def _read_settings_file(path: Path) -> dict[str, Any]:
    try:
        content = substitute_env_vars(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {path}", details=str(exc)) from exc

    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Error parsing {path}", details=str(exc)) from exc

    if not isinstance(loaded, dict) or "config" not in loaded:
        raise ConfigurationError(f"Invalid {path}: missing 'config' key")
    return dict(loaded["config"] or {})


def _env_overrides() -> dict[str, str]:
    overrides = {}
    for name in EndfieldSettings.model_fields:
        value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value
    if overrides:
        logger.debug(f"Environment overrides: {sorted(overrides)}")
    return overrides


def load_settings(project_root: str | Path = ".") -> EndfieldSettings:
    """Load settings for a project directory.

    Args:
        project_root: Directory that may hold ``endfield.yaml`` and ``.env``

    Returns:
        Validated settings

    Raises:
        ConfigurationError: If the settings file is unreadable, malformed or
            fails validation
    """
    root = Path(project_root)
    load_dotenv(root / ".env", override=False)

    data: dict[str, Any] = {}
    settings_path = root / SETTINGS_FILE
    if settings_path.is_file():
        logger.debug(f"Loading settings from {settings_path}")
        data = _read_settings_file(settings_path)
    data.update(_env_overrides())

    try:
        return EndfieldSettings(**data)
    except ValidationError as exc:
        raise ConfigurationError("Invalid configuration", details=str(exc)) from exc


@lru_cache(maxsize=1)
def get_settings() -> EndfieldSettings:
    """Settings for the current working directory, loaded once."""
    return load_settings(Path.cwd())
