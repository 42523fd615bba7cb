from .core import (
    DatabaseSettings,
    LoggingSettings,
    ScoringSettings,
    Settings,
    build_sqlite_url,
    load_settings,
    _project_root,
    _data_dir,
)
from .scoring_rules import DEFAULT_SCORING_RULES, ScoringRules

__all__ = [
    "DatabaseSettings",
    "LoggingSettings",
    "ScoringSettings",
    "Settings",
    "build_sqlite_url",
    "load_settings",
    "_project_root",
    "_data_dir",
    "DEFAULT_SCORING_RULES",
    "ScoringRules",
]
