"""
Configuration module for customhook.

Uses pydantic-settings for environment variable and YAML file loading.
"""

from customhook.config.settings import Settings
from customhook.config.sources import ConfigFileError

__all__ = ["ConfigFileError", "Settings"]
