"""Configuration loading and validation for the record-keeping policy."""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from .models.healing_models import RecordConfiguration
from .exceptions import ConfigurationError
from .config import settings

logger = logging.getLogger(__name__)


class RecordConfigLoader:
    """Loads and validates the record-keeping policy."""

    DEFAULT_CONFIG = {
        "healing_records": {
            "selector": {
                "url_for_key": False
            },
            "metrics": {
                "allow": True,
                "default_project": "no-project",
                "max_workers": 2
            },
            "results": {
                "replace_previous": False
            }
        }
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize config loader with optional custom path."""
        self.config_path = Path(
            config_path or settings.HEALING_CONFIG_PATH)
        self._config_cache: Optional[RecordConfiguration] = None
        self._config_file_mtime: Optional[float] = None

    def load_config(self, force_reload: bool = False) -> RecordConfiguration:
        """Load and validate the record-keeping policy.

        Args:
            force_reload: Force reload even if cached config exists

        Returns:
            RecordConfiguration: Validated configuration object

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not force_reload and self._config_cache and self._is_config_current():
            return self._config_cache

        try:
            config_data = self._load_config_file()
            record_config = self._parse_record_config(config_data)
            self._validate_config(record_config)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Failed to load record configuration: {e}")
            raise ConfigurationError(
                f"Configuration loading failed: {e}") from e

        self._config_cache = record_config
        if self.config_path.exists():
            self._config_file_mtime = self.config_path.stat().st_mtime

        logger.info(
            f"Loaded record configuration from {self.config_path}")
        return record_config

    def save_config(self, config: RecordConfiguration) -> None:
        """Save configuration to file.

        Raises:
            ConfigurationError: If saving fails
        """
        self._validate_config(config)
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            config_data = {
                "healing_records": self._config_to_dict(config)
            }
            with open(self.config_path, 'w', encoding='utf-8') as f:
                yaml.dump(config_data, f, default_flow_style=False, indent=2)

            self._config_cache = config
            self._config_file_mtime = self.config_path.stat().st_mtime

            logger.info(
                f"Saved record configuration to {self.config_path}")

        except OSError as e:
            logger.error(f"Failed to save record configuration: {e}")
            raise ConfigurationError(
                f"Configuration saving failed: {e}") from e

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from file or return defaults."""
        if not self.config_path.exists():
            logger.info(
                f"Config file {self.config_path} not found, using defaults")
            return self._deep_merge(self.DEFAULT_CONFIG, {})

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")

        if not isinstance(config_data, dict):
            raise ConfigurationError("Config file must contain a mapping")

        # Merge with defaults to ensure all keys exist
        return self._deep_merge(self.DEFAULT_CONFIG, config_data)

    def _parse_record_config(self, config_data: Dict[str, Any]) -> RecordConfiguration:
        """Parse configuration data into RecordConfiguration object."""
        section = config_data.get("healing_records", {})
        selector = section.get("selector", {})
        metrics = section.get("metrics", {})
        results = section.get("results", {})

        return RecordConfiguration(
            url_for_key=selector.get("url_for_key", False),
            allow_metrics=metrics.get("allow", True),
            default_project=metrics.get("default_project", "no-project"),
            replace_previous_results=results.get("replace_previous", False),
            metrics_max_workers=metrics.get("max_workers", 2)
        )

    def _config_to_dict(self, config: RecordConfiguration) -> Dict[str, Any]:
        """Convert RecordConfiguration to nested dictionary structure."""
        return {
            "selector": {
                "url_for_key": config.url_for_key
            },
            "metrics": {
                "allow": config.allow_metrics,
                "default_project": config.default_project,
                "max_workers": config.metrics_max_workers
            },
            "results": {
                "replace_previous": config.replace_previous_results
            }
        }

    def _validate_config(self, config: RecordConfiguration) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If validation fails
        """
        errors = []

        flags = {
            "selector.url_for_key": config.url_for_key,
            "metrics.allow": config.allow_metrics,
            "results.replace_previous": config.replace_previous_results
        }
        for name, value in flags.items():
            if not isinstance(value, bool):
                errors.append(f"{name} must be true or false, got {value!r}")

        if not isinstance(config.default_project, str) or not config.default_project.strip():
            errors.append("metrics.default_project must be a non-empty string")

        if (not isinstance(config.metrics_max_workers, int) or isinstance(config.metrics_max_workers, bool)
                or not 1 <= config.metrics_max_workers <= 16):
            errors.append("metrics.max_workers must be between 1 and 16")

        if errors:
            raise ConfigurationError(
                "Configuration validation failed: " + "; ".join(errors))

    def _is_config_current(self) -> bool:
        """Check if cached config is still current."""
        if not self.config_path.exists():
            return self._config_file_mtime is None

        current_mtime = self.config_path.stat().st_mtime
        return self._config_file_mtime == current_mtime

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = {
            key: self._deep_merge(value, {}) if isinstance(value, dict) else value
            for key, value in base.items()
        }

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


# Global config loader instance
config_loader = RecordConfigLoader()


def get_record_config(force_reload: bool = False) -> RecordConfiguration:
    """Get the current record-keeping policy."""
    return config_loader.load_config(force_reload)
