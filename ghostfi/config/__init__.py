"""
Configuration Module
====================

Centralized configuration management using Pydantic Settings.
Loads from environment variables (prefix ``GHOSTFI_``) with type validation
and defaults.

Usage:
    from ghostfi.config import settings

    print(settings.circuit_workspace)
    print(settings.engine.binary)
"""

from ghostfi.config.settings import (
    EngineSettings,
    Environment,
    LedgerMode,
    LedgerSettings,
    LogLevel,
    Settings,
    get_settings,
)


# Global settings instance (singleton)
settings = get_settings()

__all__ = [
    "Settings",
    "EngineSettings",
    "LedgerSettings",
    "get_settings",
    "settings",
    "Environment",
    "LogLevel",
    "LedgerMode",
]
