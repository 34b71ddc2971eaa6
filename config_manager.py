"""
Configuration management for the reading personalization service.
Handles loading, validating, and providing access to application settings.
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    """Application configuration settings."""
    host: str
    port: int
    debug: bool


@dataclass
class PersonalizationConfig:
    """Personalization engine settings."""
    history_limit: int
    completion_threshold: float
    history_threshold: float
    recommendation_limit: int
    favorite_category_min_reads: int
    session_retention_days: int
    max_active_visitors: int = 1024


@dataclass
class PathsConfig:
    """Path configuration settings."""
    user_data_dir: str
    catalog_file: str
    log_file: Optional[str] = None


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "web_app_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self._config = self._get_default_config()

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    self._merge_config(json.load(f))
            except (json.JSONDecodeError, FileNotFoundError) as e:
                logger.warning(f"Ignoring invalid config file {self.config_file}: {e}")

        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "app": {
                "host": "0.0.0.0",
                "port": 22581,
                "debug": False
            },
            "personalization": {
                "history_limit": 100,
                "completion_threshold": 90,
                "history_threshold": 20,
                "recommendation_limit": 10,
                "favorite_category_min_reads": 3,
                "session_retention_days": 365,
                "max_active_visitors": 1024
            },
            "paths": {
                "user_data_dir": "user_data",
                "catalog_file": "data/posts.json",
                "log_file": None
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config and isinstance(values, dict):
                self._config[section].update(values)
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        # Personalization settings
        if os.getenv("HISTORY_LIMIT"):
            self._config["personalization"]["history_limit"] = int(os.getenv("HISTORY_LIMIT"))

        if os.getenv("RECOMMENDATION_LIMIT"):
            self._config["personalization"]["recommendation_limit"] = int(os.getenv("RECOMMENDATION_LIMIT"))

        if os.getenv("SESSION_RETENTION_DAYS"):
            self._config["personalization"]["session_retention_days"] = int(os.getenv("SESSION_RETENTION_DAYS"))

        # Paths
        if os.getenv("USER_DATA_DIR"):
            self._config["paths"]["user_data_dir"] = os.getenv("USER_DATA_DIR")

        if os.getenv("CATALOG_FILE"):
            self._config["paths"]["catalog_file"] = os.getenv("CATALOG_FILE")

        if os.getenv("LOG_FILE"):
            self._config["paths"]["log_file"] = os.getenv("LOG_FILE")

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"]
        )

    def get_personalization_config(self) -> PersonalizationConfig:
        """Get personalization engine configuration."""
        p_config = self._config["personalization"]
        return PersonalizationConfig(
            history_limit=p_config["history_limit"],
            completion_threshold=p_config["completion_threshold"],
            history_threshold=p_config["history_threshold"],
            recommendation_limit=p_config["recommendation_limit"],
            favorite_category_min_reads=p_config["favorite_category_min_reads"],
            session_retention_days=p_config["session_retention_days"],
            max_active_visitors=p_config["max_active_visitors"]
        )

    def get_paths_config(self) -> PathsConfig:
        """Get paths configuration."""
        paths_config = self._config["paths"]
        return PathsConfig(
            user_data_dir=paths_config["user_data_dir"],
            catalog_file=paths_config["catalog_file"],
            log_file=paths_config.get("log_file")
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_app_config() -> AppConfig:
    """Get application configuration."""
    return config_manager.get_app_config()


def get_personalization_config() -> PersonalizationConfig:
    """Get personalization engine configuration."""
    return config_manager.get_personalization_config()


def get_paths_config() -> PathsConfig:
    """Get paths configuration."""
    return config_manager.get_paths_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()


def save_config() -> None:
    """Save configuration to file."""
    config_manager.save_config()
