"""Tests for nestegg.core.config."""

import json
import os

import pytest
import yaml

from nestegg.core.config import Config
from nestegg.core.exceptions import ConfigurationError


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.get("paths.data_dir").endswith(".nestegg")
        assert config.get("display.currency") == "USD"
        assert config.get("market_data.provider") == "yahoo"

    def test_custom_data_dir(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        assert config.get("paths.data_dir") == tmp_dir
        assert config.get("paths.log_dir") == os.path.join(tmp_dir, "logs")

    def test_custom_env_prefix(self, monkeypatch, tmp_dir):
        monkeypatch.setenv("MYAPP_DISPLAY__CURRENCY", "EUR")
        config = Config(env_prefix="MYAPP_", data_dir=tmp_dir)
        assert config.get("display.currency") == "EUR"

    def test_yaml_config_file(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            yaml.dump({"market_data": {"provider": "coingecko", "timeout": 5}}, f)

        config = Config(config_file=config_path, data_dir=tmp_dir)
        assert config.get("market_data.provider") == "coingecko"
        assert config.get("market_data.timeout") == 5
        assert config.get("market_data.max_concurrency") == 8

    def test_json_config_file(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.json")
        with open(config_path, "w") as f:
            json.dump({"display": {"currency": "GBP"}}, f)

        assert Config(config_file=config_path, data_dir=tmp_dir).get("display.currency") == "GBP"

    def test_env_overrides_file(self, tmp_dir, monkeypatch):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            yaml.dump({"display": {"currency": "GBP"}}, f)

        monkeypatch.setenv("NESTEGG_DISPLAY__CURRENCY", "JPY")
        config = Config(config_file=config_path, data_dir=tmp_dir)
        assert config.get("display.currency") == "JPY"

    def test_missing_file_uses_defaults(self, tmp_dir):
        config = Config(config_file=os.path.join(tmp_dir, "nope.yaml"), data_dir=tmp_dir)
        assert config.get("logging.level") == "WARNING"

    def test_malformed_file_raises(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            f.write("display: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Could not parse"):
            Config(config_file=config_path, data_dir=tmp_dir)

    def test_non_mapping_file_raises(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            f.write("- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            Config(config_file=config_path, data_dir=tmp_dir)

    def test_get_missing_key(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "fallback") == "fallback"

    def test_typed_getters(self, tmp_dir, monkeypatch):
        monkeypatch.setenv("NESTEGG_MARKET_DATA__TIMEOUT", "45")
        config = Config(data_dir=tmp_dir)
        assert config.get("market_data.timeout") == "45"
        assert config.get_int("market_data.timeout") == 45
        assert config.get_float("missing.rate", 0.5) == 0.5

    def test_typed_getter_rejects_garbage(self, tmp_dir, monkeypatch):
        monkeypatch.setenv("NESTEGG_MARKET_DATA__TIMEOUT", "soon")
        config = Config(data_dir=tmp_dir)
        with pytest.raises(ConfigurationError, match="must be an integer"):
            config.get_int("market_data.timeout")

    def test_get_bool(self, tmp_dir, monkeypatch):
        monkeypatch.setenv("NESTEGG_LOGGING__TO_FILE", "yes")
        config = Config(data_dir=tmp_dir)
        assert config.get_bool("logging.to_file") is True
        assert config.get_bool("missing.flag") is False

        monkeypatch.setenv("NESTEGG_LOGGING__TO_FILE", "sometimes")
        with pytest.raises(ConfigurationError, match="must be a boolean"):
            Config(data_dir=tmp_dir).get_bool("logging.to_file")

    def test_set(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        config.set("custom.nested.value", 42)
        assert config.get("custom.nested.value") == 42

    def test_ensure_directories(self, tmp_dir):
        data_dir = os.path.join(tmp_dir, "data")
        config = Config(data_dir=data_dir)
        config.ensure_directories()
        assert os.path.isdir(os.path.join(data_dir, "logs"))

    def test_extra_defaults(self, tmp_dir):
        config = Config(data_dir=tmp_dir, defaults={"custom": {"key": "value"}})
        assert config.get("custom.key") == "value"

