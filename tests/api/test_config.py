"""Tests for configuration classes."""

import os
import pytest
from unittest.mock import patch


class TestCORSConfig:
    """Tests for CORSConfig class."""

    def test_cors_default_origins(self):
        """Test that default CORS origins are set correctly."""
        with patch.dict(os.environ, {}, clear=True):
            from config import CORSConfig

            config = CORSConfig()

            assert "http://localhost:8000" in config.allowed_origins

    def test_cors_parses_origins_with_whitespace(self):
        """Test that CORS origins are split on commas and stripped."""
        env_origins = "  http://example.com  ,  http://localhost:3000  ,"
        with patch.dict(os.environ, {"CORS_ORIGINS": env_origins}):
            from config import _parse_cors_origins

            origins = _parse_cors_origins()

            assert origins == ["http://example.com", "http://localhost:3000"]


class TestRateLimitConfig:
    """Tests for RateLimitConfig class."""

    def test_rate_limit_defaults(self):
        """Test default rate limit values."""
        with patch.dict(os.environ, {}, clear=True):
            from config import RateLimitConfig

            config = RateLimitConfig()

            assert config.enabled is True
            assert config.requests_per_minute == 120

    def test_rate_limit_from_env(self):
        """Test rate limit configuration from environment."""
        with patch.dict(
            os.environ,
            {"RATE_LIMIT_ENABLED": "FALSE", "RATE_LIMIT_RPM": "30"},
        ):
            from config import RateLimitConfig

            config = RateLimitConfig()

            assert config.enabled is False
            assert config.requests_per_minute == 30


class TestRedisConfig:
    """Tests for RedisConfig class."""

    def test_redis_url_without_password(self):
        """Test URL building without a password."""
        with patch.dict(os.environ, {}, clear=True):
            from config import RedisConfig

            assert RedisConfig().url == "redis://localhost:6379/0"

    def test_redis_url_with_password(self):
        """Test URL building with a password."""
        with patch.dict(
            os.environ,
            {"REDIS_HOST": "redis.example.com", "REDIS_PORT": "6380", "REDIS_PASSWORD": "pw"},
        ):
            from config import RedisConfig

            assert RedisConfig().url == "redis://:pw@redis.example.com:6380/0"


class TestAdvisorConfig:
    """Tests for AdvisorConfig class."""

    def test_advisor_defaults(self):
        """Test default shoe and sizing settings."""
        with patch.dict(os.environ, {}, clear=True):
            from config import AdvisorConfig

            config = AdvisorConfig()

            assert config.num_decks == 8
            assert config.commission_rate == 2.0
            assert config.capital == 10_000_000
            assert config.kelly_fraction == 0.25
            assert config.min_win_probability == 0.01

    def test_advisor_from_env(self):
        """Test advisor settings from environment."""
        with patch.dict(
            os.environ,
            {
                "NUM_DECKS": "6",
                "COMMISSION_RATE": "1.25",
                "CAPITAL": "50000",
                "KELLY_FRACTION": "0.5",
                "MIN_WIN_PROBABILITY": "0.02",
            },
        ):
            from config import AdvisorConfig

            config = AdvisorConfig()

            assert config.num_decks == 6
            assert config.commission_rate == 1.25
            assert config.capital == 50000
            assert config.kelly_fraction == 0.5
            assert config.min_win_probability == 0.02

    def test_advisor_rejects_bad_kelly_fraction(self):
        """Test that a Kelly fraction outside (0, 1] is rejected."""
        with patch.dict(os.environ, {"KELLY_FRACTION": "1.5"}):
            from config import AdvisorConfig

            with pytest.raises(ValueError):
                AdvisorConfig()


class TestLoggingConfig:
    """Tests for LoggingConfig and setup_logging."""

    def test_logging_level_upper_cased(self):
        """Test that the log level is normalised to upper case."""
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True):
            from config import LoggingConfig

            config = LoggingConfig()

            assert config.level == "DEBUG"
            assert config.file is None

    def test_setup_logging_writes_file(self, tmp_path):
        """Test that a log file handler is added when a file is configured."""
        import logging
        from logging.handlers import RotatingFileHandler

        from config import LoggingConfig
        from logging_config import setup_logging

        log_file = tmp_path / "logs" / "advisor.log"
        setup_logging(LoggingConfig(level="INFO", file=str(log_file)))
        try:
            logging.getLogger("test").info("hello")
            handlers = logging.getLogger().handlers
            assert any(isinstance(h, RotatingFileHandler) for h in handlers)
            assert log_file.exists()
        finally:
            setup_logging(LoggingConfig(level="INFO", file=None))


class TestAppConfig:
    """Tests for AppConfig class."""

    def test_server_settings_from_env(self):
        """Test host, port, debug and session TTL from environment."""
        with patch.dict(
            os.environ,
            {"HOST": "0.0.0.0", "PORT": "9000", "DEBUG": "yes", "SESSION_TTL": "60"},
        ):
            from config import AppConfig

            config = AppConfig()

            assert config.host == "0.0.0.0"
            assert config.port == 9000
            assert config.debug is True
            assert config.session_ttl == 60

    def test_secret_key_generated_when_unset(self):
        """Test that a random secret is generated without SECRET_KEY."""
        with patch.dict(os.environ, {}, clear=True):
            from config import SecurityConfig

            assert SecurityConfig().secret_key != SecurityConfig().secret_key

    def test_rate_limit_string(self):
        """Test the slowapi limit notation."""
        from config import RateLimitConfig

        assert RateLimitConfig(enabled=True, requests_per_minute=30).limit == "30/minute"

    @pytest.mark.parametrize("env", [{"NUM_DECKS": "0"}, {"NUM_DECKS": "9"}, {"CAPITAL": "-1"}])
    def test_advisor_rejects_out_of_range(self, env):
        """Test range checks on advisor settings."""
        with patch.dict(os.environ, env):
            from config import AdvisorConfig

            with pytest.raises(ValueError):
                AdvisorConfig()
