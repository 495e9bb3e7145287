"""
Configuration management for FPL Pulse.

Handles loading of settings from YAML files and environment variables,
with built-in defaults for every key so the client works without a
settings file.
"""

import copy
import os
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml
from dotenv import load_dotenv


# Load environment variables
load_dotenv()


DEFAULT_SETTINGS: Dict[str, Any] = {
    "api": {
        "fpl": {
            "base_url": "https://fantasy.premierleague.com/api",
        },
        "proxy": {
            "prefixes": [
                "https://api.allorigins.win/raw?url=",
                "https://corsproxy.io/?",
                "https://api.codetabs.com/v1/proxy?quest=",
            ],
            "timeout": 15,
            "user_agent": "fpl-pulse/0.1",
        },
    },
    "cache": {
        "bootstrap_ttl_seconds": 300,
        "serve_stale_on_error": True,
    },
    "news": {
        "feeds": [
            {
                "name": "BBC Sport - Football",
                "url": "https://feeds.bbci.co.uk/sport/football/rss.xml",
                "icon": "📺",
            },
            {
                "name": "Sky Sports - Football",
                "url": "https://www.skysports.com/rss/12040",
                "icon": "🎯",
            },
            {
                "name": "Guardian - Football",
                "url": "https://www.theguardian.com/football/rss",
                "icon": "📰",
            },
        ],
        "keywords": [
            "premier league", "liverpool", "manchester", "arsenal", "chelsea",
            "tottenham", "newcastle", "aston villa", "brighton", "west ham",
            "bournemouth", "fulham", "brentford", "crystal palace", "wolves",
            "everton", "nottingham", "leicester", "ipswich", "southampton",
            "fpl", "fantasy",
        ],
        "general_marker": "Football",
        "per_feed_limit": 10,
        "max_articles": 20,
        "description_length": 150,
        "raise_on_empty": False,
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "console_enabled": True,
        "file_enabled": False,
        "file": "logs/fpl_pulse.log",
        "max_bytes": 10485760,
        "backup_count": 5,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested dicts merge, everything else replaces."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def find_project_root(start: Optional[Path] = None) -> Optional[Path]:
    """Walk upwards from ``start`` looking for the directory holding pyproject.toml."""
    current_dir = start or Path(__file__).parent
    while current_dir.parent != current_dir:
        if (current_dir / "pyproject.toml").exists():
            return current_dir
        current_dir = current_dir.parent
    return None


class Config:
    """Configuration manager for FPL Pulse."""

    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file. Defaults to settings.yaml in project root.
            overrides: Extra settings merged on top of the file (mainly for tests)
        """
        if config_path is None:
            self.project_root = find_project_root() or Path.cwd()
            config_path = self.project_root / "settings.yaml"
        else:
            config_path = Path(config_path)
            self.project_root = config_path.parent

        self.config_path = config_path
        self._config = _deep_merge(DEFAULT_SETTINGS, self._load_config())
        if overrides:
            self._config = _deep_merge(self._config, overrides)
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file, empty if the file does not exist."""
        if not self.config_path.exists():
            return {}
        try:
            with open(self.config_path, 'r') as f:
                config = yaml.safe_load(f)
            return config or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

    def _apply_env_overrides(self):
        level = self.get_env("FPL_PULSE_LOG_LEVEL")
        if level:
            self._config["logging"]["level"] = level
        base_url = self.get_env("FPL_PULSE_BASE_URL")
        if base_url:
            self._config["api"]["fpl"]["base_url"] = base_url

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., 'api.proxy.timeout')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        try:
            value = self._config
            for part in key.split('.'):
                value = value[part]
            return value
        except (KeyError, TypeError):
            return default

    def get_env(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get environment variable."""
        return os.getenv(key, default)

    def get_proxy_prefixes(self) -> List[str]:
        """Get the ordered list of CORS proxy prefixes."""
        return list(self.get("api.proxy.prefixes", []))

    def get_feed_sources(self) -> List[Dict[str, str]]:
        """Get configured news feed sources."""
        return list(self.get("news.feeds", []))


# Global configuration instance
_config = None


def get_config(config_path: Optional[str] = None) -> Config:
    """
    Get global configuration instance.

    Args:
        config_path: Path to config file (only used on first call)

    Returns:
        Configuration instance
    """
    global _config
    if _config is None:
        _config = Config(config_path)
    return _config


def get_logger(name: str) -> logging.Logger:
    """
    Get configured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger
    """
    # Import here to avoid circular imports
    from .logging_setup import setup_logging

    # Setup logging on first call
    if not logging.getLogger().handlers:
        setup_logging()

    return logging.getLogger(name)
