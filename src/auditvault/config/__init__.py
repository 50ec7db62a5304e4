"""Configuration module for auditvault."""

from auditvault.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
