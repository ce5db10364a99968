"""Configuration management with environment variable support."""

import os
import secrets
from dataclasses import dataclass, field
from typing import Any, Callable


def _env(name: str, default: str, cast: Callable[[str], Any] = str) -> Any:
    """Dataclass field read from the environment when the config is built."""
    return field(default_factory=lambda: cast(os.getenv(name, default)))


def _flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_cors_origins() -> list[str]:
    """Split CORS_ORIGINS on commas, dropping blanks."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:8000")
    return [o.strip() for o in origins.split(",") if o.strip()]


@dataclass(frozen=True)
class CORSConfig:
    """CORS configuration."""

    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["GET", "POST"])
    allow_headers: list[str] = field(default_factory=lambda: ["Content-Type", "X-Session-ID"])


@dataclass(frozen=True)
class RateLimitConfig:
    """slowapi limits for the REST endpoints."""

    enabled: bool = _env("RATE_LIMIT_ENABLED", "true", _flag)
    requests_per_minute: int = _env("RATE_LIMIT_RPM", "120", int)

    @property
    def limit(self) -> str:
        """Limit string in slowapi notation."""
        return f"{self.requests_per_minute}/minute"


@dataclass(frozen=True)
class SecurityConfig:
    """Secret used to sign session tokens."""

    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET_KEY") or secrets.token_urlsafe(32)
    )


@dataclass(frozen=True)
class RedisConfig:
    """Redis connection for the session store."""

    host: str = _env("REDIS_HOST", "localhost")
    port: int = _env("REDIS_PORT", "6379", int)
    db: int = _env("REDIS_DB", "0", int)
    password: str | None = field(default_factory=lambda: os.getenv("REDIS_PASSWORD"))

    @property
    def url(self) -> str:
        """Build Redis connection URL."""
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


@dataclass(frozen=True)
class LoggingConfig:
    """Log level and optional rotating log file."""

    level: str = _env("LOG_LEVEL", "INFO", str.upper)
    file: str | None = field(default_factory=lambda: os.getenv("LOG_FILE") or None)
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5


@dataclass(frozen=True)
class AdvisorConfig:
    """Default shoe and bet-sizing settings for analysis requests."""

    num_decks: int = _env("NUM_DECKS", "8", int)
    commission_rate: float = _env("COMMISSION_RATE", "2.0", float)
    capital: int = _env("CAPITAL", "10000000", int)
    kelly_fraction: float = _env("KELLY_FRACTION", "0.25", float)
    min_win_probability: float = _env("MIN_WIN_PROBABILITY", "0.01", float)

    def __post_init__(self) -> None:
        if not 1 <= self.num_decks <= 8:
            raise ValueError(f"num_decks must be 1-8, got {self.num_decks}")
        if not 0.0 < self.kelly_fraction <= 1.0:
            raise ValueError(f"kelly_fraction must be in (0, 1], got {self.kelly_fraction}")
        if not 0.0 <= self.min_win_probability < 1.0:
            raise ValueError("min_win_probability must be in [0, 1)")
        if self.capital < 0 or self.commission_rate < 0:
            raise ValueError("capital and commission_rate must not be negative")


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = _env("DEBUG", "false", _flag)
    host: str = _env("HOST", "127.0.0.1")
    port: int = _env("PORT", "8000", int)
    session_ttl: int = _env("SESSION_TTL", str(12 * 3600), int)  # seconds

    redis: RedisConfig = field(default_factory=RedisConfig)
    advisor: AdvisorConfig = field(default_factory=AdvisorConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
config = AppConfig()
