"""
Auction house application config
"""
import logging
import tomllib
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

from auctionhouse.core.logging import parse_log_level

MIN_POLL_INTERVAL_SECONDS = 5
MAX_POLL_INTERVAL_SECONDS = 30


class ConfigError(Exception):
    """
    Raised when the config is invalid
    """


@dataclass(slots=True)
class DatabaseConfig:
    """
    [database]
    """

    url: str = "sqlite:///auctionhouse.db"


@dataclass(slots=True)
class ServerConfig:
    """
    [server]
    """

    host: str | None = None
    port: int = 8008


@dataclass(slots=True)
class AuthConfig:
    """
    [auth]
    """

    # used to sign session tokens
    secret_key: str = ""
    token_ttl_days: int = 30

    @property
    def token_ttl(self) -> timedelta:
        return timedelta(days=self.token_ttl_days)


@dataclass(slots=True)
class AuctionsConfig:
    """
    [auctions]
    """

    poll_interval_seconds: int = 15
    collision_window_minutes: int = 30
    # if not set, then inactive auctions are never ended automatically
    auto_end_after_hours: float | None = None

    @property
    def poll_interval(self) -> timedelta:
        return timedelta(seconds=self.poll_interval_seconds)

    @property
    def collision_window(self) -> timedelta:
        return timedelta(minutes=self.collision_window_minutes)

    @property
    def auto_end_after(self) -> timedelta | None:
        if self.auto_end_after_hours is None:
            return None
        return timedelta(hours=self.auto_end_after_hours)


@dataclass(slots=True)
class LoggingConfig:
    """
    [logging]
    """

    level: int = logging.INFO


@dataclass(slots=True)
class AppConfig:
    """
    Application config, which is loaded from a TOML file

    Example
    -------
    [database]
    url = "sqlite:///auctionhouse.db"

    [server]
    host = "localhost"
    port = 8008

    [auth]
    secret_key = "change-me"
    token_ttl_days = 30

    [auctions]
    poll_interval_seconds = 15
    collision_window_minutes = 30
    auto_end_after_hours = 24

    [logging]
    level = "INFO"
    """

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    auctions: AuctionsConfig = field(default_factory=AuctionsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        if not self.auth.secret_key:
            raise ConfigError("[auth] secret_key is required")
        if self.auth.token_ttl_days <= 0:
            raise ConfigError("[auth] token_ttl_days must be positive")
        if (
            not MIN_POLL_INTERVAL_SECONDS
            <= self.auctions.poll_interval_seconds
            <= MAX_POLL_INTERVAL_SECONDS
        ):
            raise ConfigError(
                f"[auctions] poll_interval_seconds must be {MIN_POLL_INTERVAL_SECONDS}-{MAX_POLL_INTERVAL_SECONDS}"
            )
        if self.auctions.collision_window_minutes < 0:
            raise ConfigError("[auctions] collision_window_minutes must be >= 0")
        if (
            self.auctions.auto_end_after_hours is not None
            and self.auctions.auto_end_after_hours <= 0
        ):
            raise ConfigError("[auctions] auto_end_after_hours must be positive")

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "AppConfig":
        """
        :raise ConfigError: if the config is invalid
        """
        try:
            logging_config = dict(config.get("logging", {}))
            if "level" in logging_config:
                logging_config["level"] = parse_log_level(logging_config["level"])

            return cls(
                database=DatabaseConfig(**config.get("database", {})),
                server=ServerConfig(**config.get("server", {})),
                auth=AuthConfig(**config.get("auth", {})),
                auctions=AuctionsConfig(**config.get("auctions", {})),
                logging=LoggingConfig(**logging_config),
            )
        except (TypeError, ValueError) as err:
            raise ConfigError(f"invalid config: {err}") from err

    @classmethod
    def from_config_file(cls, file: Path) -> "AppConfig":
        """
        Loads the config from the specified TOML config file
        """
        with open(file, "rb") as config_file:
            config = tomllib.load(config_file)
        return cls.from_dict(config)
