"""Tests for environment-backed configuration."""

import sys
from pathlib import Path

import pytest

from noise.app_config import DEFAULT_API_BASE_URL, NoiseEnvironConfig
from noise.config import EnvironConfig, config


class TestEnvironConfig:
    def test_singleton(self):
        assert EnvironConfig() is config

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("NOISE_TEST_ONLY_KEY", "from-env")

        config.reload()

        assert config["NOISE_TEST_ONLY_KEY"] == "from-env"
        assert "NOISE_TEST_ONLY_KEY" in config

    def test_missing_key(self):
        with pytest.raises(KeyError):
            config["NOISE_DEFINITELY_MISSING_KEY"]
        assert config.get("NOISE_DEFINITELY_MISSING_KEY", "fallback") == "fallback"

    @pytest.mark.parametrize(
        "raw, expected",
        [(None, 30.0), ("", 30.0), ("12.5", 12.5), ("abc", 30.0), ("0", 30.0), ("-3", 30.0)],
    )
    def test_get_positive_float(self, monkeypatch, raw, expected):
        if raw is None:
            monkeypatch.delitem(config._config, "NOISE_TEST_TIMEOUT", raising=False)
        else:
            monkeypatch.setitem(config._config, "NOISE_TEST_TIMEOUT", raw)

        assert config.get_positive_float("NOISE_TEST_TIMEOUT", 30.0) == expected


class TestNoiseEnvironConfig:
    def test_defaults_shape(self):
        settings = NoiseEnvironConfig()

        assert settings.NOISE_API_BASE_URL
        assert settings.HTTP_TIMEOUT_SECONDS > 0
        assert settings.LIVE_JOIN_TIMEOUT_SECONDS > 0
        assert settings.PUSH_PLATFORM

    def test_state_path(self, tmp_path):
        settings = NoiseEnvironConfig(NOISE_DATA_DIR=tmp_path, NOISE_STATE_FILENAME="s.json")

        assert settings.state_path == Path(tmp_path) / "s.json"

    def test_default_base_url_is_versioned(self):
        assert DEFAULT_API_BASE_URL.endswith("/api/v1/")


class TestInitLogger:
    @pytest.mark.parametrize("debug", [True, False])
    def test_init_logger_replaces_sinks(self, debug):
        from loguru import logger

        from noise.log import init_logger

        init_logger(debug)
        logger.debug("debug message after init")
        logger.info("info message after init")

        logger.remove()
        logger.add(sys.stderr)
