"""
Configuration module for the site.

Provides:
- YAML settings loading with validation
- Environment variable substitution
"""

from .loader import ConfigLoader, Settings, load_settings

__all__ = ["ConfigLoader", "Settings", "load_settings"]
