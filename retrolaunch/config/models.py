from __future__ import annotations

from typing import Any, Dict, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class _BaseConfigModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class LauncherSettings(_BaseConfigModel):
    """Where the launcher finds its databases and rules, and how it reads them."""

    db_dir: str = "db"
    dat_pattern: str = "*.dat"
    rules_path: str = "launch.conf"
    ps1_id_list: str = "db/ps1.idlst"
    hash_chunk_size: int = Field(default=4096, gt=0)
    max_token_len: int = Field(default=255, gt=0)
    log_level: str = "INFO"
    # also match rules against "system.name"
    match_qualified_names: bool = False

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


def validate_settings(payload: Dict[str, Any]) -> LauncherSettings:
    return cast(LauncherSettings, LauncherSettings.model_validate(payload))
