from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .scoring_rules import ScoringRules


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _data_dir(test_mode: bool = False) -> str:
    base = _project_root() / "data"
    return str(base / "test") if test_mode else str(base)


class DatabaseSettings(BaseModel):
    filename: str = "scoreline.db"
    url: str | None = None
    echo: bool = False

    def database_path(self, test_mode: bool = False, data_dir: str | None = None) -> str:
        """Return the full path to the sqlite database file."""
        directory = data_dir or _data_dir(test_mode)
        os.makedirs(directory, exist_ok=True)
        return os.path.join(directory, self.filename)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_logs: bool = False
    directory: str | None = None
    events_retention_size: int = 2 * 1024 * 1024

    @model_validator(mode="before")
    @classmethod
    def _alias_json(cls, data: Any) -> Any:
        if isinstance(data, dict) and "json" in data and "json_logs" not in data:
            data = dict(data)
            data["json_logs"] = data.pop("json")
        return data


class ScoringSettings(BaseModel):
    default_rules: ScoringRules = Field(default_factory=ScoringRules)
    max_batch_writes: int = Field(
        default=5000,
        ge=1,
        description="Largest number of staged writes accepted in one commit unit.",
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SCORELINE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    test_mode: bool = False
    data_dir: str | None = None
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)

    @model_validator(mode="before")
    @classmethod
    def _apply_yaml_overrides(cls, data: Any) -> Any:
        overrides = _load_yaml_overrides()
        if not overrides:
            return data
        merged: Dict[str, Any] = dict(overrides)
        if isinstance(data, dict):
            merged.update(data)
        return merged

    def database_path(self) -> str:
        return self.database.database_path(self.test_mode, self.data_dir)

    def database_url(self) -> str:
        if self.database.url:
            return self.database.url
        return build_sqlite_url(self.database_path())


def build_sqlite_url(path: str) -> str:
    return f"sqlite+aiosqlite:///{os.path.abspath(path)}"


def _load_yaml_overrides() -> Dict[str, Any]:
    candidates: list[Path] = []
    explicit = os.getenv("SCORELINE_CONFIG")
    if explicit:
        candidates.append(Path(explicit).resolve())
    candidates.append(_project_root() / "config" / "scoreline.yaml")

    for path in candidates:
        if not path.exists():
            continue
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if isinstance(data, dict):
            return data
    return {}


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return Settings()


__all__ = [
    "DatabaseSettings",
    "LoggingSettings",
    "ScoringSettings",
    "Settings",
    "build_sqlite_url",
    "load_settings",
    "_project_root",
    "_data_dir",
]
