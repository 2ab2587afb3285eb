"""
Ingestion settings and their YAML loader.
"""

from .settings import (
    CategoryKeyword,
    IngestionSettings,
    SettingsLoader,
    load_settings,
    read_env_overrides,
)

__all__ = [
    "CategoryKeyword",
    "IngestionSettings",
    "SettingsLoader",
    "load_settings",
    "read_env_overrides",
]
