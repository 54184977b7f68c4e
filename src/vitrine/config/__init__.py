"""Configuration module for Vitrine."""

from vitrine.config.settings import IndexFieldMapping, Settings, get_settings

__all__ = ["Settings", "get_settings", "IndexFieldMapping"]
