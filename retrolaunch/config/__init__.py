"""Launcher settings."""

from .io import get_config_path, load_settings, save_settings
from .models import LauncherSettings, validate_settings

__all__ = [
    "LauncherSettings",
    "get_config_path",
    "load_settings",
    "save_settings",
    "validate_settings",
]
