"""Configuration module -- exports the Settings class."""

from src.config.settings import Settings

__all__ = ["Settings"]
