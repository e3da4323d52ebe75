"""
Configuration loading and management for Webex Room Sync.

This module handles loading configuration from an optional YAML file and
environment variables, with validation and defaults. The result is an
immutable SyncConfig that the entry points pass to the orchestrator.
"""

import os
import yaml
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Any, Optional, Tuple
from dotenv import load_dotenv

from room_sync.webex_client import DEFAULT_API_URL

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = 'config.yaml'


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing required fields."""
    pass


def parse_recipients(value: Any) -> Tuple[str, ...]:
    """Split a comma-delimited address list (or a YAML list) into clean entries."""
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(',')
    return tuple(str(item).strip() for item in value if item and str(item).strip())


@dataclass(frozen=True)
class SyncConfig:
    """Settings for one sync run. Built once at startup and never mutated."""

    token: str
    source_room_id: str
    destination_room_id: str
    notify_emails: Tuple[str, ...] = ()
    api_base_url: str = DEFAULT_API_URL
    max_members: int = 1000
    max_workers: int = 10
    request_timeout: float = 30
    logging: Dict[str, Any] = field(default_factory=dict, compare=False)

    def swapped(self) -> 'SyncConfig':
        """Same settings with source and destination exchanged."""
        return self.with_rooms(self.destination_room_id, self.source_room_id)

    def with_rooms(self, source_room_id: str, destination_room_id: str) -> 'SyncConfig':
        if source_room_id == destination_room_id:
            raise ConfigurationError("Source and destination rooms must be different")
        return replace(self, source_room_id=source_room_id, destination_room_id=destination_room_id)


class ConfigLoader:
    """Handles loading and validation of application configuration."""

    # Environment variable mappings, applied over the YAML file
    ENV_OVERRIDES = {
        'webex.token': 'WEBEX_TOKEN',
        'webex.api_base_url': 'WEBEX_API_URL',
        'sync.source_room_id': 'SRC_ROOM_ID',
        'sync.destination_room_id': 'DST_ROOM_ID',
        'notifications.send_results': 'SEND_RESULTS',
        'logging.level': 'LOG_LEVEL',
    }

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_path: Path to config file. If None, uses CONFIG_PATH env var or 'config.yaml'
        """
        self.explicit_path = bool(config_path or os.getenv('CONFIG_PATH'))
        self.config_path = config_path or os.getenv('CONFIG_PATH', DEFAULT_CONFIG_PATH)
        self.config = {}

    def load(self) -> SyncConfig:
        """
        Load configuration from file and apply environment overrides.

        Returns:
            Validated SyncConfig

        Raises:
            ConfigurationError: If an explicit config file is missing or validation fails
        """
        # .env files are a local convenience; Lambda supplies real env vars
        if not os.getenv('AWS_LAMBDA_FUNCTION_NAME'):
            load_dotenv(override=False)

        self.config = self._read_file()

        self._apply_env_overrides()
        self._apply_defaults()
        self._validate()

        logger.info("Configuration loaded successfully")
        return self._build()

    def _read_file(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            if self.explicit_path:
                raise ConfigurationError(f"Configuration file not found: {self.config_path}")
            logger.debug(f"No configuration file at {self.config_path}, using environment only")
            return {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {self.config_path} must contain a mapping")
        logger.debug(f"Read configuration file {self.config_path}")
        return data

    def _apply_env_overrides(self):
        """Apply environment variable overrides."""
        for config_key, env_var in self.ENV_OVERRIDES.items():
            env_value = os.getenv(env_var)
            if env_value:
                self._set_nested_value(self.config, config_key, env_value)
                logger.debug(f"Applied environment override for {config_key}")

    def _set_nested_value(self, config: Dict, key_path: str, value: Any):
        """Set a nested configuration value using dot notation."""
        keys = key_path.split('.')
        current = config
        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]
        current[keys[-1]] = value

    def _apply_defaults(self):
        """Apply default values for optional configuration fields."""
        for section in ('webex', 'sync', 'notifications', 'logging'):
            if not isinstance(self.config.get(section), dict):
                self.config[section] = {}

        webex_config = self.config.setdefault('webex', {})
        webex_config.setdefault('api_base_url', DEFAULT_API_URL)
        webex_config.setdefault('request_timeout', 30)

        sync_config = self.config.setdefault('sync', {})
        sync_config.setdefault('max_members', 1000)
        sync_config.setdefault('max_workers', 10)

        self.config.setdefault('notifications', {}).setdefault('send_results', '')

        logging_defaults = {
            'level': 'INFO',
            'log_dir': None,
            'retention_days': 7,
        }
        logging_config = self.config.setdefault('logging', {})
        for key, value in logging_defaults.items():
            logging_config.setdefault(key, value)

    def _validate(self):
        """Validate required configuration fields."""
        errors = []

        webex_config = self.config.get('webex', {})
        sync_config = self.config.get('sync', {})

        if not webex_config.get('token'):
            errors.append("Missing Webex access token (webex.token or WEBEX_TOKEN)")

        source = sync_config.get('source_room_id')
        destination = sync_config.get('destination_room_id')
        if not source:
            errors.append("Missing source room (sync.source_room_id or SRC_ROOM_ID)")
        if not destination:
            errors.append("Missing destination room (sync.destination_room_id or DST_ROOM_ID)")
        if source and destination and source == destination:
            errors.append("Source and destination rooms must be different")

        for section, key in (('sync', 'max_members'), ('sync', 'max_workers'), ('webex', 'request_timeout')):
            value = self.config[section].get(key)
            try:
                number = float(value)
            except (TypeError, ValueError):
                errors.append(f"{section}.{key} must be a number, got {value!r}")
                continue
            if number <= 0:
                errors.append(f"{section}.{key} must be positive")
            elif key == 'max_members' and number > 1000:
                errors.append("sync.max_members cannot exceed 1000")

        if errors:
            raise ConfigurationError("Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in errors))

    def _build(self) -> SyncConfig:
        webex_config = self.config['webex']
        sync_config = self.config['sync']
        return SyncConfig(
            token=str(webex_config['token']),
            source_room_id=str(sync_config['source_room_id']),
            destination_room_id=str(sync_config['destination_room_id']),
            notify_emails=parse_recipients(self.config['notifications'].get('send_results')),
            api_base_url=webex_config['api_base_url'],
            max_members=int(sync_config['max_members']),
            max_workers=int(sync_config['max_workers']),
            request_timeout=float(webex_config['request_timeout']),
            logging=dict(self.config['logging']),
        )


def load_config(config_path: Optional[str] = None) -> SyncConfig:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to config file

    Returns:
        Loaded SyncConfig
    """
    loader = ConfigLoader(config_path)
    return loader.load()
