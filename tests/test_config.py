#!/usr/bin/env python3
"""
Unit Tests for topicbus.config

Tests:
- Boolean parsing of environment values
- Dispatch mode validation
- validate_config() against patched settings
- Environment variables picked up at import time
"""

import importlib
from unittest.mock import patch

import pytest

from topicbus import config
from topicbus.exceptions import ConfigError, TopicBusError


class TestParseBool:

    @pytest.mark.parametrize("raw", ["1", "true", "TRUE", " yes ", "On", True])
    def test_true_values(self, raw):
        assert config.parse_bool("X", raw) is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off", False])
    def test_false_values(self, raw):
        assert config.parse_bool("X", raw) is False

    def test_unknown_value_raises(self):
        with pytest.raises(ConfigError) as exc_info:
            config.parse_bool("X", "perhaps")

        assert exc_info.value.name == "X"
        assert exc_info.value.value == "perhaps"
        assert isinstance(exc_info.value, ValueError)
        assert isinstance(exc_info.value, TopicBusError)


class TestValidation:

    def test_dispatch_mode_normalised(self):
        assert config.validate_dispatch_mode(" Snapshot ") == "snapshot"
        assert config.validate_dispatch_mode("live") == "live"

    def test_defaults_are_valid(self):
        config.validate_config()

    def test_bad_dispatch_mode(self):
        with patch('topicbus.config.DISPATCH_MODE', 'random'):
            with pytest.raises(ConfigError):
                config.validate_config()

    def test_bad_isolation_flag(self):
        with patch('topicbus.config.ISOLATE_CALLBACK_ERRORS', 'sometimes'):
            with pytest.raises(ConfigError):
                config.validate_config()

    def test_bad_log_level(self):
        with patch('topicbus.config.LOG_LEVEL', 'LOUD'):
            with pytest.raises(ConfigError, match="LOG_LEVEL"):
                config.validate_config()


class TestEnvironment:

    def test_values_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("TOPICBUS_DISPATCH_MODE", "LIVE")
        monkeypatch.setenv("TOPICBUS_ISOLATE_CALLBACK_ERRORS", "on")
        monkeypatch.setenv("TOPICBUS_LOG_LEVEL", "debug")
        try:
            importlib.reload(config)

            assert config.DISPATCH_MODE == "live"
            assert config.parse_bool("ISOLATE", config.ISOLATE_CALLBACK_ERRORS) is True
            assert config.LOG_LEVEL == "DEBUG"
            config.validate_config()
        finally:
            monkeypatch.undo()
            importlib.reload(config)

        assert config.DISPATCH_MODE == "snapshot"
