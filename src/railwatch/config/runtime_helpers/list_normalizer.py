"""List normalization utilities for environment variables."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple


class ListNormalizer:
    """Splits delimited values such as ``svc-a, svc-b`` into clean items."""

    @staticmethod
    def split_and_normalize(raw_value: str, separator: str) -> List[str]:
        """Split on ``separator`` (no split when empty) and drop blank items."""
        parts: Iterable[str] = raw_value.split(separator) if separator else [raw_value]
        return [item.strip() for item in parts if item.strip()]

    @staticmethod
    def deduplicate_preserving_order(items: Sequence[str]) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(items))


__all__ = ["ListNormalizer"]
