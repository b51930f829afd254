"""Rate-limit backoff for the polling interval."""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_BASE_INTERVAL_SECONDS = 30.0
DEFAULT_MAX_INTERVAL_SECONDS = 300.0
DEFAULT_MULTIPLIER = 2.0


@dataclass(frozen=True)
class BackoffConfig:
    """Configuration for exponential poll-interval backoff"""

    base_interval: float = DEFAULT_BASE_INTERVAL_SECONDS
    max_interval: float = DEFAULT_MAX_INTERVAL_SECONDS
    multiplier: float = DEFAULT_MULTIPLIER

    def __post_init__(self) -> None:
        if self.base_interval <= 0:
            raise ValueError("base_interval must be positive")
        if self.max_interval < self.base_interval:
            raise ValueError("max_interval must be >= base_interval")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")


def calculate_interval(config: BackoffConfig, consecutive_rate_limits: int) -> float:
    """
    Poll interval after ``consecutive_rate_limits`` rate-limited cycles.

    Args:
        config: Backoff configuration
        consecutive_rate_limits: Number of consecutive rate-limited cycles (0 = none)

    Returns:
        ``min(base * multiplier ** (n - 1), max)`` for n >= 1, else the base interval
    """
    if consecutive_rate_limits <= 0:
        return config.base_interval
    return min(
        config.base_interval * (config.multiplier ** (consecutive_rate_limits - 1)),
        config.max_interval,
    )


class BackoffController:
    """Tracks consecutive rate-limit failures and derives the next poll interval.

    Both transition methods return True when ``current_interval`` changed so the
    caller knows to re-arm its timer.
    """

    def __init__(self, config: BackoffConfig | None = None) -> None:
        self.config = config or BackoffConfig()
        self.consecutive_rate_limits = 0
        self.current_interval = self.config.base_interval

    def on_rate_limited(self) -> bool:
        previous = self.current_interval
        self.consecutive_rate_limits += 1
        self.current_interval = calculate_interval(self.config, self.consecutive_rate_limits)
        logger.warning(
            "Rate limited %d time(s) in a row; poll interval %.0fs -> %.0fs",
            self.consecutive_rate_limits,
            previous,
            self.current_interval,
        )
        return self.current_interval != previous

    def on_success_or_non_rate_limit_failure(self) -> bool:
        if self.consecutive_rate_limits == 0:
            return False
        previous = self.current_interval
        self.consecutive_rate_limits = 0
        self.current_interval = self.config.base_interval
        logger.info("Rate limiting cleared; poll interval reset to %.0fs", self.current_interval)
        return self.current_interval != previous

    def reset(self) -> None:
        self.consecutive_rate_limits = 0
        self.current_interval = self.config.base_interval


__all__ = ["BackoffConfig", "BackoffController", "calculate_interval"]
