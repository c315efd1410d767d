"""Loader configuration, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


def _env_timeout(key: str, default: float | None) -> float | None:
    raw = os.environ.get(key)
    if raw is None:
        return default
    if raw.strip().lower() in ("", "none", "0"):
        return None
    return float(raw)


def _env_bool(key: str, default: bool) -> bool:
    raw = os.environ.get(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{key} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class LoaderConfig:
    """Tuning knobs for the aggregation pipeline.

    ``max_concurrency`` caps simultaneous file reads per scan,
    ``item_timeout`` bounds each project/dependency load in seconds
    (``None`` disables it), ``atomic_writes`` makes the writer replace
    files through a temporary sibling.
    """

    max_concurrency: int = 16
    item_timeout: float | None = 30.0
    atomic_writes: bool = False

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {self.max_concurrency}")
        if self.item_timeout is not None and self.item_timeout <= 0:
            raise ValueError(f"item_timeout must be positive, got {self.item_timeout}")

    @classmethod
    def from_env(cls) -> LoaderConfig:
        """Build a config from ``PLUGINDESK_*`` environment variables."""
        return cls(
            max_concurrency=_env_int("PLUGINDESK_MAX_CONCURRENCY", cls.max_concurrency),
            item_timeout=_env_timeout("PLUGINDESK_ITEM_TIMEOUT", cls.item_timeout),
            atomic_writes=_env_bool("PLUGINDESK_ATOMIC_WRITES", cls.atomic_writes),
        )
