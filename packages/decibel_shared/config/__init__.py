"""Public API for shared Decibel configuration utilities."""

from .models import (
    CONFIG_PATH_ENV,
    DEFAULT_CONFIG_PATH,
    ComponentsSettings,
    CoreHealthSettings,
    CoreSettings,
    DecibelSettings,
    LoggingSettings,
    ObservabilitySettings,
    load_settings,
    resolve_component_settings,
)

__all__ = [
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG_PATH",
    "ComponentsSettings",
    "CoreHealthSettings",
    "CoreSettings",
    "DecibelSettings",
    "LoggingSettings",
    "ObservabilitySettings",
    "load_settings",
    "resolve_component_settings",
]
