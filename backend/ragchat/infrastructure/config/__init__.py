"""Application configuration."""

from .minimax import MiniMaxConfig
from .settings import EnvironmentOption, Settings, get_settings, settings

__all__ = ["EnvironmentOption", "MiniMaxConfig", "Settings", "get_settings", "settings"]
