# gh_explorer/core/config.py - Configuration management
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from .exceptions import ConfigurationError

CONFIG_FILE = "config.yml"
CONFIG_ENV_VAR = "GH_EXPLORER_CONFIG"

SUPPORTED_LANGUAGES = [
    "JavaScript",
    "TypeScript",
    "Python",
    "Java",
    "Go",
    "Rust",
    "C",
    "C++",
    "C#",
    "Ruby",
    "PHP",
    "Swift",
    "Kotlin",
    "Scala",
    "Haskell",
    "Elixir",
    "Dart",
    "Lua",
    "Shell",
    "R",
]


def get_config_path() -> str:
    """Resolve config file path (env override first)"""
    return os.getenv(CONFIG_ENV_VAR, CONFIG_FILE)


def load_config(path: str | None = None) -> dict[str, Any]:
    """Load configuration from config.yml, merged over the defaults"""
    path = path or get_config_path()
    config = get_default_config()
    if not os.path.exists(path):
        # Return default config if file doesn't exist
        return config

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the root")

    return _merge(config, data)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_default_config() -> dict[str, Any]:
    """Return default configuration"""
    return {
        "github": {
            "search_url": "https://api.github.com/search/repositories",
            "rate_limit_url": "https://api.github.com/rate_limit",
            "min_stars": 1000,
            "page_size": 100,
        },
        "fetch": {"timeout_ms": 10000, "max_retries": 3, "retry_delay_ms": 1000},
        "rate_limit": {
            "check_threshold_ms": 60000,
            "check_timeout_ms": 5000,
            "warning_threshold": 10,
        },
        "cache": {
            "duration_ms": 3600000,
            "max_size": 10,
            "db_path": "data/gh_explorer.db",
        },
        "ui": {"warning_duration_ms": 5000},
        "languages": list(SUPPORTED_LANGUAGES),
    }


def get_config_value(path: str, default: Any = None) -> Any:
    """Get configuration value by dot-separated path (e.g., 'fetch.max_retries')"""
    config = get_config()
    keys = path.split(".")
    value = config

    try:
        for key in keys:
            value = value[key]
        return value
    except (KeyError, TypeError):
        return default


# Global config instance
_config = None


def get_config() -> dict[str, Any]:
    """Get global config instance (cached)"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next read reloads the file"""
    global _config
    _config = None


@dataclass
class FetcherSettings:
    """Injected settings for the fetch orchestration layer (times in ms)"""

    api_base_url: str = "https://api.github.com/search/repositories"
    rate_limit_url: str = "https://api.github.com/rate_limit"
    min_stars: int = 1000
    page_size: int = 100
    fetch_timeout: int = 10000
    max_retries: int = 3
    retry_delay: int = 1000
    cache_duration: int = 3600000
    max_cache_size: int = 10
    rate_check_threshold: int = 60000
    rate_check_timeout: int = 5000
    rate_warning_threshold: int = 10
    warning_duration: int = 5000
    db_path: str = "data/gh_explorer.db"
    languages: list[str] = field(default_factory=lambda: list(SUPPORTED_LANGUAGES))

    def __post_init__(self):
        for name in ("page_size", "fetch_timeout", "max_cache_size", "rate_check_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive", {name: getattr(self, name)})
        for name in ("min_stars", "max_retries", "retry_delay", "cache_duration"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative", {name: getattr(self, name)})

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "FetcherSettings":
        """Build settings from a loaded config mapping"""
        github = config.get("github", {})
        fetch = config.get("fetch", {})
        rate_limit = config.get("rate_limit", {})
        cache = config.get("cache", {})
        ui = config.get("ui", {})
        defaults = cls()

        try:
            return cls(
                api_base_url=str(github.get("search_url", defaults.api_base_url)),
                rate_limit_url=str(github.get("rate_limit_url", defaults.rate_limit_url)),
                min_stars=int(github.get("min_stars", defaults.min_stars)),
                page_size=int(github.get("page_size", defaults.page_size)),
                fetch_timeout=int(fetch.get("timeout_ms", defaults.fetch_timeout)),
                max_retries=int(fetch.get("max_retries", defaults.max_retries)),
                retry_delay=int(fetch.get("retry_delay_ms", defaults.retry_delay)),
                cache_duration=int(cache.get("duration_ms", defaults.cache_duration)),
                max_cache_size=int(cache.get("max_size", defaults.max_cache_size)),
                rate_check_threshold=int(
                    rate_limit.get("check_threshold_ms", defaults.rate_check_threshold)
                ),
                rate_check_timeout=int(
                    rate_limit.get("check_timeout_ms", defaults.rate_check_timeout)
                ),
                rate_warning_threshold=int(
                    rate_limit.get("warning_threshold", defaults.rate_warning_threshold)
                ),
                warning_duration=int(ui.get("warning_duration_ms", defaults.warning_duration)),
                db_path=str(cache.get("db_path", defaults.db_path)),
                languages=[str(lang) for lang in config.get("languages", defaults.languages)],
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e


def load_settings(path: str | None = None) -> FetcherSettings:
    """Load FetcherSettings from the config file (or defaults)"""
    config = load_config(path) if path else get_config()
    return FetcherSettings.from_config(config)
