"""Configuration loader for gojobs"""

import os
import logging
from pathlib import Path
from typing import Optional, Dict, Any, Mapping
import yaml

from gojobs.models.config import AppConfig


# Environment variable -> (section, key); section None means top level
ENV_OVERRIDES = {
    'API_URL': ('api', 'url'),
    'API_KEY': ('api', 'key'),
    'ALLOWED_ORIGIN': ('api', 'origin'),
    'API_TIMEOUT': ('api', 'timeout'),
    'CACHE_SECRET': (None, 'admin_secret'),
    'TIMEZONE': (None, 'timezone'),
    'LOG_LEVEL': (None, 'log_level'),
    'SCHEDULED_JOB_TIME': ('scheduler', 'times'),
    'CACHE_BACKEND': ('cache', 'backend'),
    'CACHE_PATH': ('cache', 'path'),
    'CACHE_MAX_AGE_HOURS': ('cache', 'max_age_hours'),
    'REDIS_HOST': ('redis', 'host'),
    'REDIS_PORT': ('redis', 'port'),
    'REDIS_DB': ('redis', 'db'),
}


class ConfigLoader:
    """
    Loads and validates application configuration from a YAML file and the environment

    Environment variables take precedence over values from the file, so a
    deployment can run from environment variables alone.
    """

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize configuration loader

        Args:
            config_path: Path to configuration file (defaults to config.yaml in the
                working directory; a missing default file is not an error)
            environ: Environment mapping (defaults to os.environ)
        """
        self.logger = logging.getLogger("gojobs.config")

        self.required = config_path is not None
        self.config_path = Path(config_path) if config_path else Path.cwd() / "config.yaml"
        self.environ = os.environ if environ is None else environ
        self.logger.debug(f"Configuration path: {self.config_path}")

    def load(self) -> AppConfig:
        """
        Load configuration from file and environment

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If an explicitly requested configuration file doesn't exist
            ValueError: If configuration is invalid
            yaml.YAMLError: If YAML parsing fails
        """
        config_data = self._read_file()
        self._apply_environment(config_data)

        try:
            app_config = AppConfig.from_dict(config_data)
        except Exception as e:
            self.logger.error(f"Failed to load configuration: {e}")
            raise

        self.logger.info(
            f"Configuration loaded: cache={app_config.cache.backend}, "
            f"schedule={', '.join(str(t) for t in app_config.scheduler.times)} {app_config.timezone}, "
            f"API URL {'set' if app_config.api.url else 'not set'}, "
            f"API key {'set' if app_config.api.key else 'not set'}"
        )
        return app_config

    def _read_file(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            if self.required:
                raise FileNotFoundError(
                    f"Configuration file not found: {self.config_path}\n"
                    f"Create it from config.example.yaml or omit --config to use environment variables."
                )
            self.logger.info("No configuration file found, using defaults and environment")
            return {}

        self.logger.info(f"Loading configuration from: {self.config_path}")
        try:
            with open(self.config_path, 'r') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self.logger.error(f"Failed to parse YAML configuration: {e}")
            raise

        if config_data is None:
            return {}
        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")
        return config_data

    def _apply_environment(self, config_data: Dict[str, Any]) -> None:
        for variable, (section, key) in ENV_OVERRIDES.items():
            value = self.environ.get(variable)
            if value is None or value == "":
                continue
            if section is None:
                config_data[key] = value
            else:
                target = config_data.get(section)
                if not isinstance(target, dict):
                    target = {}
                    config_data[section] = target
                target[key] = value
            self.logger.debug(f"Configuration override from environment: {variable}")

    @staticmethod
    def load_from_path(path: str) -> AppConfig:
        """
        Convenience method to load configuration from a specific path

        Args:
            path: Path to configuration file

        Returns:
            AppConfig instance
        """
        loader = ConfigLoader(path)
        return loader.load()

    @staticmethod
    def load_default() -> AppConfig:
        """Load configuration from config.yaml (if present) and the environment"""
        loader = ConfigLoader()
        return loader.load()
