from __future__ import annotations

"""Runtime helpers for working with environment-backed configuration."""

import os
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

from .errors import ConfigurationError

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}

ENV_FILE_VARIABLE = "RAILWATCH_ENV_FILE"
_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".config" / "railwatch" / "railwatch.env")

_DEFAULT_VALUES: Dict[str, str] | None = None


def _dotenv_candidates() -> Tuple[Path, ...]:
    explicit = os.getenv(ENV_FILE_VARIABLE)
    if explicit:
        return (Path(explicit).expanduser(),) + _DOTENV_CANDIDATES
    return _DOTENV_CANDIDATES


def _load_default_values() -> Dict[str, str]:
    """Load fallback values from .env-style files; earlier files win."""
    from .runtime_helpers import DotenvLoader

    global _DEFAULT_VALUES
    if _DEFAULT_VALUES is not None:
        return _DEFAULT_VALUES

    defaults: Dict[str, str] = {}
    for path in _dotenv_candidates():
        for key, value in DotenvLoader.load_from_file(path).items():
            defaults.setdefault(key, value)

    _DEFAULT_VALUES = defaults
    return defaults


def reset_default_values() -> None:
    """Forget cached .env defaults so the next lookup re-reads the files."""
    global _DEFAULT_VALUES
    _DEFAULT_VALUES = None


def _default_value(name: str) -> Optional[str]:
    return _load_default_values().get(name)


def env_str(
    name: str,
    or_value: str | None = None,
    *,
    required: bool = False,
    allow_blank: bool = False,
) -> str | None:
    """Fetch an environment variable as a string, falling back to .env defaults."""

    raw = os.getenv(name)
    value = raw.strip() if raw is not None else None

    if value is None or (not allow_blank and value == ""):
        configured_default = _default_value(name)
        if configured_default is not None:
            value = configured_default.strip()

    if value is None or (not allow_blank and value == ""):
        if required:
            raise ConfigurationError.missing_value(name, "required environment variable is not set")
        return or_value
    return value


def env_int(name: str, or_value: int | None = None, *, required: bool = False) -> int | None:
    """Fetch an environment variable and coerce it to ``int``."""

    raw = env_str(name)
    if raw is None:
        if required and or_value is None:
            raise ConfigurationError.missing_value(name, "required environment variable is not set")
        return or_value
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError.invalid_value(name, raw, "Expected an integer") from exc


def env_float(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    """Fetch an environment variable and coerce it to ``float``."""

    raw = env_str(name)
    if raw is None:
        if required and or_value is None:
            raise ConfigurationError.missing_value(name, "required environment variable is not set")
        return or_value
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError.invalid_value(name, raw, "Expected a number") from exc


def env_bool(name: str, or_value: bool | None = None, *, required: bool = False) -> bool | None:
    """Fetch an environment variable and coerce it to ``bool``."""

    raw = env_str(name)
    if raw is None:
        if required and or_value is None:
            raise ConfigurationError.missing_value(name, "required environment variable is not set")
        return or_value

    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError.invalid_value(name, raw, "Expected a boolean such as true/false or 1/0")


def env_list(
    name: str,
    *,
    or_value: Sequence[str] | None = None,
    separator: str = ",",
    required: bool = False,
) -> Tuple[str, ...] | None:
    """Fetch a delimited list from the environment, de-duplicated in order."""
    from .runtime_helpers import ListNormalizer

    raw = env_str(name)
    if raw is None:
        if required and not or_value:
            raise ConfigurationError.missing_value(name, "required environment variable is not set")
        if or_value is None:
            return None
        return tuple(or_value)

    items = ListNormalizer.split_and_normalize(raw, separator)
    if not items and required:
        raise ConfigurationError.missing_value(name, "must contain at least one value")
    return ListNormalizer.deduplicate_preserving_order(items)


def env_seconds(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    """Convenience wrapper for durations stored as (possibly fractional) seconds."""

    value = env_float(name, or_value=or_value, required=required)
    if value is None:
        return None
    if value < 0:
        raise ConfigurationError.invalid_value(name, value, "Must be non-negative")
    return value


__all__ = [
    "ConfigurationError",
    "ENV_FILE_VARIABLE",
    "env_bool",
    "env_float",
    "env_int",
    "env_list",
    "env_seconds",
    "env_str",
    "reset_default_values",
]
