"""Configuration management with environment variable support."""

import os
from dataclasses import dataclass, field
from typing import Literal


def _env_flag(name: str, default: str) -> bool:
    """Read a true/false environment variable."""
    return os.getenv(name, default).lower() == "true"


def _parse_cors_origins() -> list[str]:
    """Parse CORS_ORIGINS environment variable."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:5050")
    return [o.strip() for o in origins.split(",") if o.strip()]


def _parse_mode() -> Literal["interactive", "auto"]:
    """Parse FLIP7_MODE, falling back to interactive play."""
    mode = os.getenv("FLIP7_MODE", "interactive").lower()
    return "auto" if mode == "auto" else "interactive"


@dataclass(frozen=True)
class CORSConfig:
    """CORS configuration."""

    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["*"])
    allow_headers: list[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class RateLimitConfig:
    """Rate limiting configuration."""

    enabled: bool = field(default_factory=lambda: _env_flag("RATE_LIMIT_ENABLED", "true"))
    requests_per_minute: int = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_RPM", "60"))
    )


@dataclass(frozen=True)
class GameConfig:
    """Default game configuration."""

    victory_threshold: int = field(
        default_factory=lambda: int(os.getenv("FLIP7_VICTORY_THRESHOLD", "200"))
    )
    min_players: int = 2
    max_players: int = 10
    mode: Literal["interactive", "auto"] = field(default_factory=_parse_mode)
    auto_target: int = field(default_factory=lambda: int(os.getenv("FLIP7_AUTO_TARGET", "4")))
    confirm_second_chance: bool = field(
        default_factory=lambda: _env_flag("FLIP7_CONFIRM_SECOND_CHANCE", "true")
    )
    turn_order_follows_dealer: bool = field(
        default_factory=lambda: _env_flag("FLIP7_TURN_ORDER_FOLLOWS_DEALER", "false")
    )


@dataclass(frozen=True)
class TableConfig:
    """Remote table configuration."""

    expected_players: int = field(
        default_factory=lambda: int(os.getenv("FLIP7_EXPECTED_PLAYERS", "2"))
    )


@dataclass(frozen=True)
class HistoryConfig:
    """Game history file configuration."""

    enabled: bool = field(default_factory=lambda: _env_flag("FLIP7_HISTORY", "true"))
    path: str = field(
        default_factory=lambda: os.getenv("FLIP7_HISTORY_PATH", "logs/game_history.txt")
    )


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_flag("DEBUG", "false"))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "5050")))

    game: GameConfig = field(default_factory=GameConfig)
    table: TableConfig = field(default_factory=TableConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)


# Global configuration instance
config = AppConfig()
