"""Configuration management for servicecall.

This module exports the main Settings class and configuration utilities.
"""

from servicecall.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
