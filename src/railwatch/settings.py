"""Process settings read from the environment (and .env defaults)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .backoff_controller import DEFAULT_BASE_INTERVAL_SECONDS, DEFAULT_MAX_INTERVAL_SECONDS, BackoffConfig
from .config import ConfigurationError, env_int, env_seconds, env_str
from .history_ledger import DEFAULT_HISTORY_CAPACITY
from .polling_engine import DEFAULT_FETCH_TIMEOUT_SECONDS
from .railway_api.client import DEFAULT_API_URL

DEFAULT_DATA_DIRECTORY = Path.home() / ".config" / "railwatch"


@dataclass(frozen=True)
class MonitorSettings:
    base_interval_seconds: float = DEFAULT_BASE_INTERVAL_SECONDS
    max_interval_seconds: float = DEFAULT_MAX_INTERVAL_SECONDS
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    history_capacity: int = DEFAULT_HISTORY_CAPACITY
    api_url: str = DEFAULT_API_URL
    config_path: Path = DEFAULT_DATA_DIRECTORY / "config.json"
    credentials_path: Path = DEFAULT_DATA_DIRECTORY / "token"
    redis_url: Optional[str] = None
    webhook_url: Optional[str] = None
    notify_window_seconds: float = 0.0
    notify_max_per_window: int = 0

    @classmethod
    def from_env(cls) -> "MonitorSettings":
        defaults = cls()
        base = env_seconds("RAILWATCH_BASE_INTERVAL_SECONDS", or_value=defaults.base_interval_seconds)
        maximum = env_seconds("RAILWATCH_MAX_INTERVAL_SECONDS", or_value=defaults.max_interval_seconds)
        timeout = env_seconds("RAILWATCH_FETCH_TIMEOUT_SECONDS", or_value=defaults.fetch_timeout_seconds)
        capacity = env_int("RAILWATCH_HISTORY_CAPACITY", or_value=defaults.history_capacity)
        window = env_seconds("RAILWATCH_NOTIFY_WINDOW_SECONDS", or_value=defaults.notify_window_seconds)
        max_per_window = env_int("RAILWATCH_NOTIFY_MAX_PER_WINDOW", or_value=defaults.notify_max_per_window)
        config_path = env_str("RAILWATCH_CONFIG_PATH")
        credentials_path = env_str("RAILWATCH_CREDENTIALS_PATH")
        settings = cls(
            base_interval_seconds=float(base),
            max_interval_seconds=float(maximum),
            fetch_timeout_seconds=float(timeout),
            history_capacity=int(capacity),
            api_url=env_str("RAILWATCH_API_URL", or_value=defaults.api_url) or defaults.api_url,
            config_path=Path(config_path).expanduser() if config_path else defaults.config_path,
            credentials_path=Path(credentials_path).expanduser() if credentials_path else defaults.credentials_path,
            redis_url=env_str("RAILWATCH_REDIS_URL"),
            webhook_url=env_str("RAILWATCH_WEBHOOK_URL"),
            notify_window_seconds=float(window),
            notify_max_per_window=int(max_per_window),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.base_interval_seconds <= 0:
            raise ConfigurationError.invalid_value("RAILWATCH_BASE_INTERVAL_SECONDS", self.base_interval_seconds, "Must be positive")
        if self.max_interval_seconds < self.base_interval_seconds:
            raise ConfigurationError.invalid_value(
                "RAILWATCH_MAX_INTERVAL_SECONDS", self.max_interval_seconds, "Must not be below the base interval"
            )
        if self.fetch_timeout_seconds <= 0:
            raise ConfigurationError.invalid_value("RAILWATCH_FETCH_TIMEOUT_SECONDS", self.fetch_timeout_seconds, "Must be positive")
        if self.history_capacity <= 0:
            raise ConfigurationError.invalid_value("RAILWATCH_HISTORY_CAPACITY", self.history_capacity, "Must be positive")
        if self.notify_max_per_window < 0:
            raise ConfigurationError.invalid_value("RAILWATCH_NOTIFY_MAX_PER_WINDOW", self.notify_max_per_window, "Must be non-negative")

    @property
    def throttle_enabled(self) -> bool:
        return self.notify_window_seconds > 0 and self.notify_max_per_window > 0

    def backoff_config(self) -> BackoffConfig:
        return BackoffConfig(base_interval=self.base_interval_seconds, max_interval=self.max_interval_seconds)


__all__ = ["DEFAULT_API_URL", "MonitorSettings"]
