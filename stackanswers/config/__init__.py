"""
Central configuration for stackanswers

This package contains:
- Settings: configuration manager with environment variable support
- Configuration dataclasses for every component
"""

from .settings import (
    settings,
    Settings,
    AppConfig,
    SearchEngineConfig,
    FetchConfig,
    MarkerConfig,
    SessionConfig,
    ServerConfig,
)

__all__ = [
    "settings",
    "Settings",
    "AppConfig",
    "SearchEngineConfig",
    "FetchConfig",
    "MarkerConfig",
    "SessionConfig",
    "ServerConfig",
]
