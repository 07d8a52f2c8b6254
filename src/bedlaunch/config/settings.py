"""Launcher settings models and loading helpers."""

from __future__ import annotations

import json
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

HOME_ENV_VAR = "BEDLAUNCH_HOME"


class UsageSettings(BaseModel):
    """Session usage tracking configuration."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    sqlite_path: str = "usage.sqlite"


class LauncherSettings(BaseModel):
    """Root launcher settings model."""

    model_config = ConfigDict(extra="forbid")

    assistant_binary: str = "claude"
    validation_timeout_seconds: float = Field(default=15.0, gt=0)
    catalog_timeout_seconds: float = Field(default=30.0, gt=0)
    usage: UsageSettings = UsageSettings()


class SettingsError(RuntimeError):
    """Raised when launcher settings cannot be decoded or validated."""


def default_home() -> Path:
    """Return the launcher home directory.

    Returns:
        ``$BEDLAUNCH_HOME`` when set, else ``~/.bedlaunch``.
    """
    override = os.environ.get(HOME_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".bedlaunch"


def settings_file(home: Path) -> Path:
    """Return the settings path under ``home``, preferring YAML."""
    yaml_path = home / "config.yaml"
    json_path = home / "settings.json"
    if yaml_path.exists():
        return yaml_path
    if json_path.exists():
        return json_path
    return yaml_path


def _decode_settings_payload(path: Path) -> dict[str, object]:
    """Decode settings payload from JSON or YAML.

    Args:
        path: Settings file path.

    Returns:
        Parsed mapping payload.

    Raises:
        SettingsError: If decode fails or payload is not an object.
    """
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SettingsError(f"Invalid settings JSON: {exc}") from exc
    else:
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise SettingsError(f"Invalid settings YAML: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise SettingsError("Invalid settings payload: root must be an object")
    return payload


def load_settings(path: Path) -> LauncherSettings:
    """Load launcher settings from disk, defaulting when missing.

    Args:
        path: Settings file path.

    Returns:
        Parsed settings, or defaults when the file does not exist.

    Raises:
        SettingsError: If payload decode or validation fails.
    """
    if not path.exists():
        return LauncherSettings()
    payload = _decode_settings_payload(path)
    try:
        return LauncherSettings.model_validate(payload)
    except ValidationError as exc:
        raise SettingsError(f"Invalid settings payload: {exc}") from exc


def usage_db_path(home: Path, settings: LauncherSettings) -> Path:
    """Resolve the usage database path relative to ``home``."""
    path = Path(settings.usage.sqlite_path).expanduser()
    if path.is_absolute():
        return path
    return home / path
