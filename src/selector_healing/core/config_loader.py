"""Configuration loading and validation utilities for selector healing."""

import copy
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from .models.healing_models import HealingConfiguration
from .config import settings

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""
    pass


class HealingConfigLoader:
    """Loads and validates selector healing configuration."""

    DEFAULT_CONFIG = {
        "self_healing": {
            "enabled": True,
            "scoring": {
                "score_threshold": 0.3
            },
            "results": {
                "max_results": None,
                "fallback_score_factor": 0.8
            },
            "store": {
                "consult_store": True
            }
        }
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize config loader with optional custom path."""
        self.config_path = Path(
            config_path or settings.HEALING_CONFIG_PATH)
        self._config_cache: Optional[HealingConfiguration] = None
        self._config_file_mtime: Optional[float] = None

    def load_config(self, force_reload: bool = False) -> HealingConfiguration:
        """Load and validate selector healing configuration.

        Args:
            force_reload: Force reload even if cached config exists

        Returns:
            HealingConfiguration: Validated configuration object

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not force_reload and self._config_cache and self._is_config_current():
            return self._config_cache

        try:
            config_data = self._load_config_file()
            healing_config = self._parse_healing_config(config_data)
            self._validate_config(healing_config)
        except ConfigurationError as e:
            logger.error(f"Failed to load selector healing configuration: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to load selector healing configuration: {e}")
            raise ConfigurationError(
                f"Configuration loading failed: {e}") from e

        self._config_cache = healing_config
        if self.config_path.exists():
            self._config_file_mtime = self.config_path.stat().st_mtime
        else:
            self._config_file_mtime = None

        logger.info(
            f"Loaded selector healing configuration from {self.config_path}")
        return healing_config

    def save_config(self, config: HealingConfiguration) -> None:
        """Save configuration to file.

        Args:
            config: Configuration to save

        Raises:
            ConfigurationError: If saving fails
        """
        self._validate_config(config)

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

            config_data = {
                "self_healing": self._config_to_dict(config)
            }

            with open(self.config_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config_data, f, default_flow_style=False, indent=2)

            self._config_cache = config
            self._config_file_mtime = self.config_path.stat().st_mtime

            logger.info(
                f"Saved selector healing configuration to {self.config_path}")

        except OSError as e:
            logger.error(f"Failed to save selector healing configuration: {e}")
            raise ConfigurationError(
                f"Configuration saving failed: {e}") from e

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from file or return defaults."""
        if not self.config_path.exists():
            logger.info(
                f"Config file {self.config_path} not found, using defaults")
            return copy.deepcopy(self.DEFAULT_CONFIG)

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read config file: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigurationError("Config file must contain a mapping")

        # Merge with defaults to ensure all keys exist
        return self._deep_merge(copy.deepcopy(self.DEFAULT_CONFIG), config_data)

    def _parse_healing_config(self, config_data: Dict[str, Any]) -> HealingConfiguration:
        """Parse configuration data into HealingConfiguration object."""
        healing_section = config_data.get("self_healing") or {}

        scoring = healing_section.get("scoring") or {}
        results = healing_section.get("results") or {}
        store = healing_section.get("store") or {}

        try:
            max_results = results.get("max_results")
            return HealingConfiguration(
                enabled=bool(healing_section.get("enabled", True)),
                score_threshold=float(scoring.get("score_threshold", 0.3)),
                fallback_score_factor=float(
                    results.get("fallback_score_factor", 0.8)),
                max_results=int(max_results) if max_results is not None else None,
                consult_store=bool(store.get("consult_store", True))
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e

    def _config_to_dict(self, config: HealingConfiguration) -> Dict[str, Any]:
        """Convert HealingConfiguration to nested dictionary structure."""
        return {
            "enabled": config.enabled,
            "scoring": {
                "score_threshold": config.score_threshold
            },
            "results": {
                "max_results": config.max_results,
                "fallback_score_factor": config.fallback_score_factor
            },
            "store": {
                "consult_store": config.consult_store
            }
        }

    def _validate_config(self, config: HealingConfiguration) -> None:
        """Validate configuration values.

        Args:
            config: Configuration to validate

        Raises:
            ConfigurationError: If validation fails
        """
        errors = []

        if config.score_threshold < 0.0 or config.score_threshold > 1.0:
            errors.append("score_threshold must be between 0.0 and 1.0")

        if config.fallback_score_factor < 0.0 or config.fallback_score_factor > 1.0:
            errors.append("fallback_score_factor must be between 0.0 and 1.0")

        if config.max_results is not None and config.max_results < 1:
            errors.append("max_results must be at least 1 when set")

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
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def get_healing_config(config_path: Optional[str] = None, force_reload: bool = False) -> HealingConfiguration:
    """Load the selector healing configuration.

    Args:
        config_path: Optional YAML path overriding HEALING_CONFIG_PATH
        force_reload: Force reload from file

    Returns:
        HealingConfiguration: Current configuration
    """
    if config_path:
        return HealingConfigLoader(config_path).load_config(force_reload)
    return config_loader.load_config(force_reload)


# Global config loader instance
config_loader = HealingConfigLoader()
