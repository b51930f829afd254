"""Dotenv file loading utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple

from ..errors import ConfigurationError

_EXPORT_PREFIX = "export "


class DotenvLoader:
    """Loads default settings from .env-style files."""

    @staticmethod
    def load_from_file(path: Path) -> Dict[str, str]:
        """
        Load key-value pairs from a .env file.

        Args:
            path: Path to .env file

        Returns:
            Dictionary of variables; empty when the file does not exist

        Raises:
            ConfigurationError: If the file exists but cannot be read
        """
        if not path.exists():
            return {}

        values: Dict[str, str] = {}
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError.load_failed("settings", str(path)) from exc

        for line in text.splitlines():
            parsed = DotenvLoader._parse_env_line(line.strip())
            if parsed is None:
                continue
            key, value = parsed
            values[key] = value
        return values

    @staticmethod
    def _parse_env_line(line: str) -> Optional[Tuple[str, str]]:
        """Return ``(key, value)`` for an assignment line, None for blanks and comments."""
        if not line or line.startswith("#") or "=" not in line:
            return None
        if line.startswith(_EXPORT_PREFIX):
            line = line[len(_EXPORT_PREFIX) :]
        key, raw_value = line.split("=", 1)
        key = key.strip()
        if not key:
            return None
        value = raw_value.strip()
        if value[:1] in ("'", '"') and value[-1:] == value[:1] and len(value) >= 2:
            value = value[1:-1]
        elif " #" in value:
            value = value.split(" #", 1)[0].rstrip()
        return key, value


__all__ = ["DotenvLoader"]
