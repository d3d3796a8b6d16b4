"""Tests for environment settings and the YAML healing configuration loader."""

import os

import pytest
import yaml
from pydantic import ValidationError

from selector_healing.core.config import Settings
from selector_healing.core.config_loader import ConfigurationError, HealingConfigLoader, get_healing_config
from selector_healing.core.models.healing_models import HealingConfiguration


class TestSettings:
    """Test environment-backed settings."""

    def test_defaults(self, monkeypatch):
        """Test default settings values."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("HEALING_CONFIG_PATH", raising=False)
        settings = Settings(_env_file=None)

        assert settings.HEALING_CONFIG_PATH == "config/self_healing.yaml"
        assert settings.LOG_LEVEL == "INFO"

    def test_log_level_is_normalized(self):
        """Test that the log level is upper-cased."""
        assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_invalid_log_level(self):
        """Test that unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, LOG_LEVEL="chatty")

    def test_environment_override(self, monkeypatch):
        """Test reading settings from the environment."""
        monkeypatch.setenv("HEALING_CONFIG_PATH", "/etc/healing.yaml")
        monkeypatch.setenv("STRUCTURED_LOGGING", "true")
        settings = Settings(_env_file=None)

        assert settings.HEALING_CONFIG_PATH == "/etc/healing.yaml"
        assert settings.STRUCTURED_LOGGING is True


class TestHealingConfigLoader:
    """Test loading, validating and saving the YAML configuration."""

    def setup_method(self):
        """Set up test fixtures."""
        self.defaults = HealingConfiguration()

    def write_config(self, path, data):
        path.write_text(yaml.safe_dump(data), encoding="utf-8")

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test that a missing file yields the built-in defaults."""
        config = HealingConfigLoader(str(tmp_path / "missing.yaml")).load_config()

        assert config == self.defaults
        assert config.score_threshold == 0.3
        assert config.fallback_score_factor == 0.8
        assert config.max_results is None
        assert config.enabled is True
        assert config.consult_store is True

    def test_partial_file_is_merged_over_defaults(self, tmp_path):
        """Test that unspecified keys keep their default values."""
        path = tmp_path / "healing.yaml"
        self.write_config(path, {"self_healing": {"scoring": {"score_threshold": 0.5}, "results": {"max_results": 3}}})

        config = HealingConfigLoader(str(path)).load_config()

        assert config.score_threshold == 0.5
        assert config.max_results == 3
        assert config.fallback_score_factor == 0.8
        assert config.consult_store is True

    def test_disabled(self, tmp_path):
        """Test switching healing off."""
        path = tmp_path / "healing.yaml"
        self.write_config(path, {"self_healing": {"enabled": False}})

        assert HealingConfigLoader(str(path)).load_config().enabled is False

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML raises ConfigurationError."""
        path = tmp_path / "healing.yaml"
        path.write_text("self_healing: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            HealingConfigLoader(str(path)).load_config()

    def test_top_level_must_be_mapping(self, tmp_path):
        """Test that a YAML list is rejected."""
        path = tmp_path / "healing.yaml"
        path.write_text("- one\n- two\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            HealingConfigLoader(str(path)).load_config()

    @pytest.mark.parametrize("section,key,value", [
        ("scoring", "score_threshold", 1.5),
        ("scoring", "score_threshold", -0.1),
        ("results", "fallback_score_factor", 2),
        ("results", "max_results", 0),
    ])
    def test_out_of_range_values(self, tmp_path, section, key, value):
        """Test validation of numeric settings."""
        path = tmp_path / "healing.yaml"
        self.write_config(path, {"self_healing": {section: {key: value}}})

        with pytest.raises(ConfigurationError):
            HealingConfigLoader(str(path)).load_config()

    def test_non_numeric_value(self, tmp_path):
        """Test that a value of the wrong type is rejected."""
        path = tmp_path / "healing.yaml"
        self.write_config(path, {"self_healing": {"scoring": {"score_threshold": "high"}}})

        with pytest.raises(ConfigurationError):
            HealingConfigLoader(str(path)).load_config()

    def test_save_and_reload(self, tmp_path):
        """Test writing a configuration and loading it back."""
        path = tmp_path / "nested" / "healing.yaml"
        loader = HealingConfigLoader(str(path))
        config = HealingConfiguration(score_threshold=0.4, max_results=5, consult_store=False)

        loader.save_config(config)
        reloaded = HealingConfigLoader(str(path)).load_config()

        assert reloaded == config
        saved = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert saved["self_healing"]["store"]["consult_store"] is False

    def test_save_rejects_invalid_config(self, tmp_path):
        """Test that invalid configurations are never written."""
        path = tmp_path / "healing.yaml"
        with pytest.raises(ConfigurationError):
            HealingConfigLoader(str(path)).save_config(HealingConfiguration(score_threshold=3.0))
        assert not path.exists()

    def test_cache_is_reused_until_file_changes(self, tmp_path):
        """Test that the cached configuration is refreshed when the file's mtime changes."""
        path = tmp_path / "healing.yaml"
        self.write_config(path, {"self_healing": {"scoring": {"score_threshold": 0.4}}})
        loader = HealingConfigLoader(str(path))

        first = loader.load_config()
        assert loader.load_config() is first

        self.write_config(path, {"self_healing": {"scoring": {"score_threshold": 0.6}}})
        stat = path.stat()
        os.utime(path, (stat.st_atime, stat.st_mtime + 10))

        assert loader.load_config().score_threshold == 0.6

    def test_force_reload(self, tmp_path):
        """Test bypassing the cache."""
        path = tmp_path / "healing.yaml"
        self.write_config(path, {"self_healing": {"enabled": True}})
        loader = HealingConfigLoader(str(path))

        first = loader.load_config()
        assert loader.load_config(force_reload=True) is not first

    def test_get_healing_config_with_path(self, tmp_path):
        """Test the module-level helper with an explicit path."""
        path = tmp_path / "healing.yaml"
        self.write_config(path, {"self_healing": {"results": {"fallback_score_factor": 0.5}}})

        assert get_healing_config(str(path)).fallback_score_factor == 0.5


class TestHealingConfiguration:
    """Test the configuration dataclass."""

    def test_dict_round_trip(self):
        """Test to_dict and from_dict."""
        config = HealingConfiguration(enabled=False, max_results=2)
        assert HealingConfiguration.from_dict(config.to_dict()) == config
