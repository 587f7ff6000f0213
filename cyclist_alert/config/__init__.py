"""Configuration management module for the cyclist fall alert system."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
