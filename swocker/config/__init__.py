"""Configuration package for lifecycle settings and startup validation."""

from .settings import (
    SettingsLoadError,
    SwockerSettings,
    config_build_runtime_config,
    config_build_store_endpoint,
    config_load_settings,
)

__all__ = [
    "SettingsLoadError",
    "SwockerSettings",
    "config_build_runtime_config",
    "config_build_store_endpoint",
    "config_load_settings",
]
