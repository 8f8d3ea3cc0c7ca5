"""Settings I/O: YAML file, then environment overrides, then validation."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError
from .models import LauncherSettings, validate_settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "retrolaunch.yaml"
CONFIG_ENV = "RETROLAUNCH_CONFIG"

ENV_OVERRIDES = {
    "RETROLAUNCH_DB_DIR": "db_dir",
    "RETROLAUNCH_RULES": "rules_path",
    "RETROLAUNCH_ID_LIST": "ps1_id_list",
    "RETROLAUNCH_LOG_LEVEL": "log_level",
}
# in KiB, same variable ContentHasher reads for its default
HASH_CHUNK_ENV = "RETROLAUNCH_HASH_CHUNK_KB"


def get_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV, "").strip()
    if override:
        return Path(override)
    return Path.cwd() / DEFAULT_CONFIG_NAME


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Could not read settings: {exc}", file_path=str(path)) from exc
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Malformed settings file: {exc}", file_path=str(path)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Settings file must contain a mapping", file_path=str(path))
    return data


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name, "").strip()
        if value:
            data[key] = value

    chunk_kb = os.environ.get(HASH_CHUNK_ENV, "").strip()
    if chunk_kb:
        try:
            data["hash_chunk_size"] = int(chunk_kb) * 1024
        except ValueError as exc:
            raise ConfigurationError(f"{HASH_CHUNK_ENV} must be an integer, got {chunk_kb!r}") from exc
    return data


def load_settings(config_path: Optional[Union[str, Path]] = None) -> LauncherSettings:
    """Load settings.

    An explicitly given (or ``$RETROLAUNCH_CONFIG``) file must exist; a missing
    default file just means defaults.
    """
    explicit = config_path is not None or bool(os.environ.get(CONFIG_ENV, "").strip())
    path = Path(config_path) if config_path is not None else get_config_path()

    data: Dict[str, Any] = {}
    if path.is_file():
        data = _read_yaml(path)
    elif explicit:
        raise ConfigurationError("Settings file does not exist", file_path=str(path))
    else:
        logger.debug("No settings file at %s, using defaults", path)

    data = _apply_env_overrides(data)
    try:
        return validate_settings(data)
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}", file_path=str(path)) from exc


def save_settings(settings: LauncherSettings, config_path: Union[str, Path]) -> None:
    path = Path(config_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(settings.model_dump(), f, sort_keys=True)
    except OSError as exc:
        raise ConfigurationError(f"Could not write settings: {exc}", file_path=str(path)) from exc
