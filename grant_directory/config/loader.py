"""
YAML configuration loader with validation.

Loads site settings from YAML files with:
- Environment variable substitution
- Type validation
- Default values
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
import structlog

logger = structlog.get_logger(__name__)


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, warning and empty string if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)
        else:
            value = os.getenv(var_expr)
            if value is None:
                logger.warning("env_var_not_set", var=var_expr)
                return ""
            return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


@dataclass
class Settings:
    """Site configuration."""

    site_name: str = "Grant Directory"
    site_url: str = "https://www.grantdirectory.org"
    host: str = "0.0.0.0"
    port: int = 8080
    grants_path: str = "data/grants.jsonl"
    agencies_path: Optional[str] = None
    page_size: int = 12
    max_page_size: int = 50


class ConfigLoader:
    """
    Configuration loader for site settings.

    Loads YAML config files and validates against expected schema.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        content = substitute_env_vars(content)
        config = yaml.safe_load(content)

        return config or {}

    def load_settings(self, filename: str = "settings.yml") -> Settings:
        """
        Load site settings from YAML.

        Args:
            filename: Settings file name

        Returns:
            Settings object

        Raises:
            ValueError: If a numeric value cannot be parsed
        """
        config = self.load_file(filename)
        return self._parse_settings(config)

    def _parse_settings(self, data: dict) -> Settings:
        site = data.get("site") or {}
        server = data.get("server") or {}
        paths = data.get("data") or {}
        listing = data.get("listing") or {}
        defaults = Settings()

        try:
            port = int(server.get("port", defaults.port))
            page_size = int(listing.get("page_size", defaults.page_size))
            max_page_size = int(listing.get("max_page_size", defaults.max_page_size))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid numeric setting: {e}") from e

        if page_size < 1 or max_page_size < page_size:
            raise ValueError(
                f"Invalid page sizes: page_size={page_size}, max_page_size={max_page_size}"
            )

        return Settings(
            site_name=site.get("name") or defaults.site_name,
            site_url=str(site.get("url") or defaults.site_url).rstrip("/"),
            host=str(server.get("host") or defaults.host),
            port=port,
            grants_path=str(paths.get("grants_path") or defaults.grants_path),
            agencies_path=paths.get("agencies_path") or None,
            page_size=page_size,
            max_page_size=max_page_size,
        )


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Convenience function to load site settings.

    Args:
        config_path: Optional path to settings.yml

    Returns:
        Settings object
    """
    if config_path:
        loader = ConfigLoader(str(Path(config_path).parent))
        return loader.load_settings(Path(config_path).name)
    else:
        loader = ConfigLoader()
        return loader.load_settings()
