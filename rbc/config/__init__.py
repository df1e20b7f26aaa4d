"""Configuration module for RBC."""

from .settings import (
    TLS_MODE_INSECURE,
    TLS_MODE_STRICT,
    SettingsValidationError,
    SweepSettings,
    load_settings,
)

__all__ = [
    "TLS_MODE_INSECURE",
    "TLS_MODE_STRICT",
    "SettingsValidationError",
    "SweepSettings",
    "load_settings",
]
