"""Tests for configuration classes."""

import os
import pytest
from unittest.mock import patch

from config import (
    AppConfig,
    CORSConfig,
    GameConfig,
    HistoryConfig,
    RateLimitConfig,
    TableConfig,
    _parse_cors_origins,
)
from flip7.rules import RuleSet


class TestCORSConfig:
    """Tests for CORSConfig class."""

    def test_cors_default_origins(self):
        """Test that default CORS origins are set correctly."""
        with patch.dict(os.environ, {}, clear=True):
            config = CORSConfig()

            assert "http://localhost:5050" in config.allowed_origins

    def test_cors_parses_origins_with_whitespace(self):
        """Test that CORS origins are split and stripped."""
        env_origins = "  http://example.com  ,  http://localhost:3000  ,"
        with patch.dict(os.environ, {"CORS_ORIGINS": env_origins}):
            origins = _parse_cors_origins()

            assert origins == ["http://example.com", "http://localhost:3000"]


class TestRateLimitConfig:
    """Tests for RateLimitConfig class."""

    def test_rate_limit_defaults(self):
        """Test default rate limit values."""
        with patch.dict(os.environ, {}, clear=True):
            config = RateLimitConfig()

            assert config.enabled is True
            assert config.requests_per_minute == 60

    def test_rate_limit_from_env(self):
        """Test rate limit configuration from environment."""
        with patch.dict(os.environ, {"RATE_LIMIT_ENABLED": "FALSE", "RATE_LIMIT_RPM": "120"}):
            config = RateLimitConfig()

            assert config.enabled is False
            assert config.requests_per_minute == 120


class TestGameConfig:
    """Tests for GameConfig class."""

    def test_game_config_defaults(self):
        """Test default game configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            config = GameConfig()

            assert config.victory_threshold == 200
            assert config.min_players == 2
            assert config.max_players == 10
            assert config.mode == "interactive"
            assert config.auto_target == 4
            assert config.confirm_second_chance is True
            assert config.turn_order_follows_dealer is False

    def test_game_config_from_env(self):
        """Test game settings from environment."""
        env = {
            "FLIP7_VICTORY_THRESHOLD": "150",
            "FLIP7_MODE": "AUTO",
            "FLIP7_AUTO_TARGET": "5",
            "FLIP7_CONFIRM_SECOND_CHANCE": "false",
            "FLIP7_TURN_ORDER_FOLLOWS_DEALER": "true",
        }
        with patch.dict(os.environ, env):
            config = GameConfig()

            assert config.victory_threshold == 150
            assert config.mode == "auto"
            assert config.auto_target == 5
            assert config.confirm_second_chance is False
            assert config.turn_order_follows_dealer is True

    def test_unknown_mode_falls_back(self):
        """Test an unknown mode means interactive play."""
        with patch.dict(os.environ, {"FLIP7_MODE": "turbo"}):
            assert GameConfig().mode == "interactive"

    def test_game_config_frozen(self):
        """Test that GameConfig is frozen (immutable)."""
        config = GameConfig()

        with pytest.raises(Exception):  # dataclasses.FrozenInstanceError
            config.victory_threshold = 10

    def test_rules_from_config(self):
        """Test the rule set built from configuration."""
        with patch.dict(os.environ, {"FLIP7_VICTORY_THRESHOLD": "120"}, clear=True):
            rules = RuleSet.from_config(GameConfig())

            assert rules.victory_threshold == 120
            assert rules.confirm_second_chance is True
            assert rules.flip7_bonus == 15

    def test_invalid_threshold_rejected(self):
        """Test invalid settings surface when the rules are built."""
        with patch.dict(os.environ, {"FLIP7_VICTORY_THRESHOLD": "0"}):
            with pytest.raises(ValueError):
                RuleSet.from_config(GameConfig())


class TestTableAndHistoryConfig:
    """Tests for TableConfig and HistoryConfig."""

    def test_defaults(self):
        """Test the table waits for two players and history is on."""
        with patch.dict(os.environ, {}, clear=True):
            assert TableConfig().expected_players == 2
            history = HistoryConfig()
            assert history.enabled is True
            assert history.path == "logs/game_history.txt"

    def test_from_env(self):
        """Test table and history settings from environment."""
        env = {"FLIP7_EXPECTED_PLAYERS": "4", "FLIP7_HISTORY": "false", "FLIP7_HISTORY_PATH": "/tmp/h.txt"}
        with patch.dict(os.environ, env):
            assert TableConfig().expected_players == 4
            assert HistoryConfig().enabled is False
            assert HistoryConfig().path == "/tmp/h.txt"


class TestAppConfig:
    """Tests for AppConfig class."""

    def test_app_config_defaults(self):
        """Test default AppConfig values."""
        with patch.dict(os.environ, {}, clear=True):
            config = AppConfig()

            assert config.debug is False
            assert config.host == "0.0.0.0"
            assert config.port == 5050

    def test_app_config_port_from_env(self):
        """Test the port from environment."""
        with patch.dict(os.environ, {"PORT": "6000", "DEBUG": "true"}):
            config = AppConfig()

            assert config.port == 6000
            assert config.debug is True

    def test_app_config_has_nested_configs(self):
        """Test that AppConfig has nested configuration objects."""
        config = AppConfig()

        assert isinstance(config.game, GameConfig)
        assert isinstance(config.table, TableConfig)
        assert isinstance(config.history, HistoryConfig)
        assert isinstance(config.cors, CORSConfig)
        assert isinstance(config.rate_limit, RateLimitConfig)
