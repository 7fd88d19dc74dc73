"""
Configuration management for RootByte.
"""
import os
import copy
import json
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv

from rootbyte.core.errors import ConfigError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_CONFIG = {
    "paths": {
        "site_dir": "src",
        "content_dir": "src/content",
        "articles_dir": "src/content/articles",
        "backup_dir": "backups"
    },
    "site": {
        "base_url": "https://rootbyte.com",
        "categories": ["ai", "devices", "internet", "crypto", "gaming", "space"]
    },
    "news_api": {
        "endpoint": "https://newsapi.org/v2/top-headlines",
        "category": "technology",
        "language": "en",
        "timeout_seconds": 10
    },
    "gemini": {
        "base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "model": "gemini-2.0-flash",
        "source_char_budget": 600
    },
    "breaking": {
        "page_size": 30,
        "spike_threshold": 4,
        "expires_hours": 12,
        "replace_policy": "always"
    },
    "trending": {
        "page_size": 20,
        "max_stories": 4,
        "max_ticker": 8
    },
    "validation": {
        "min_words": 300,
        "words_per_minute": 200,
        "min_root_year": 1800,
        "reading_time_tolerance": 2
    },
    "backup": {
        "keep": 10
    }
}

REPLACE_POLICIES = ("always", "stronger")


class Config:
    """
    Configuration manager for RootByte.
    """
    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the Config.

        Args:
            config_path: Path to a YAML or JSON configuration file
        """
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> Dict:
        """
        Load configuration from file or use defaults.

        Returns:
            Configuration dictionary
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path:
            path = Path(self.config_path)
            if path.exists():
                try:
                    user_config = self._read_file(path)
                except (OSError, ValueError, yaml.YAMLError) as e:
                    logger.error(f"Error loading config from {self.config_path}: {e}")
                    logger.warning("Using default configuration")
                else:
                    if user_config:
                        self._update_dict(config, user_config)
            else:
                logger.warning(f"Config file {self.config_path} not found, using defaults")

        # Override with environment variables
        self._override_from_env(config)

        return config

    def validate(self) -> None:
        """
        Check values that have a fixed set of choices.

        Raises:
            ConfigError: If a value is not allowed
        """
        policy = self.get('breaking.replace_policy')
        if policy not in REPLACE_POLICIES:
            raise ConfigError(
                f"breaking.replace_policy must be one of {', '.join(REPLACE_POLICIES)}, got {policy!r}"
            )

    @staticmethod
    def _read_file(path: Path) -> Dict:
        suffix = path.suffix.lower()
        with open(path, 'r', encoding='utf-8') as f:
            if suffix in ['.yaml', '.yml']:
                return yaml.safe_load(f)
            if suffix == '.json':
                return json.load(f)
        raise ValueError(f"Unsupported config file format: {path.suffix}")

    def _update_dict(self, target: Dict, source: Dict) -> None:
        """
        Recursively update a dictionary.

        Args:
            target: Target dictionary to update
            source: Source dictionary with new values
        """
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value

    def _override_from_env(self, config: Dict, prefix: str = 'ROOTBYTE_') -> None:
        """
        Override configuration with environment variables.

        Sections are separated by a double underscore so that keys may
        contain single underscores, e.g. ROOTBYTE_SITE__BASE_URL.

        Args:
            config: Configuration dictionary to update
            prefix: Prefix for environment variables
        """
        for key, value in os.environ.items():
            if not key.startswith(prefix) or key == 'ROOTBYTE_CONFIG_PATH':
                continue

            parts = key[len(prefix):].lower().split('__')

            current = config
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]

            try:
                current[parts[-1]] = json.loads(value)
            except json.JSONDecodeError:
                current[parts[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Dot-separated key path (e.g., 'paths.content_dir')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        current = self.config
        for part in key.split('.'):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current


# Global configuration instance
config = Config(os.getenv('ROOTBYTE_CONFIG_PATH'))


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        key: Dot-separated key path (e.g., 'paths.content_dir')
        default: Default value if key not found

    Returns:
        Configuration value
    """
    return config.get(key, default)


def news_api_key() -> Optional[str]:
    """Return the NewsAPI key, or None when it is not configured."""
    return os.getenv('NEWS_API_KEY') or None


def gemini_api_key() -> Optional[str]:
    """Return the Gemini key, or None when it is not configured."""
    return os.getenv('GEMINI_API_KEY') or None
