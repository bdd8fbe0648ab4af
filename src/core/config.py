"""Runtime configuration model for mapcache.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_CACHE_ROOT,
    DEFAULT_LOCK_TIMEOUT_SECONDS,
    DEFAULT_TARGET_NAMESPACE,
    DEFAULT_WORKING_NAMESPACE,
    SOURCE_MAPPINGS_DIR_NAME,
)
from core.errors import MapCacheConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class MapCacheConfig:
    """Validated runtime configuration.

    Attributes:
        cache_root: Persistent cache root shared across builds.
        refresh_deps: Whether a full dependency refresh was requested.
        working_namespace: Namespace used as source while processors run.
        target_namespace: Namespace written as source in cached artifacts.
        lock_timeout: Seconds to wait for a cache entry lock.
    """

    cache_root: Path
    refresh_deps: bool
    working_namespace: str
    target_namespace: str
    lock_timeout: float

    @property
    def source_mappings_dir(self) -> Path:
        """Directory holding cached source mappings artifacts."""
        return self.cache_root / SOURCE_MAPPINGS_DIR_NAME

    @classmethod
    def from_env(cls) -> "MapCacheConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            MapCacheConfigError: If environment values are invalid.
        """
        cache_root_value = os.getenv("MAPCACHE_CACHE_ROOT", str(DEFAULT_CACHE_ROOT))
        refresh_deps = _parse_bool("MAPCACHE_REFRESH_DEPS", os.getenv("MAPCACHE_REFRESH_DEPS", ""))
        working_namespace = _parse_namespace(
            "MAPCACHE_WORKING_NAMESPACE",
            os.getenv("MAPCACHE_WORKING_NAMESPACE", DEFAULT_WORKING_NAMESPACE),
        )
        target_namespace = _parse_namespace(
            "MAPCACHE_TARGET_NAMESPACE",
            os.getenv("MAPCACHE_TARGET_NAMESPACE", DEFAULT_TARGET_NAMESPACE),
        )
        lock_timeout = _parse_lock_timeout(
            os.getenv("MAPCACHE_LOCK_TIMEOUT", str(DEFAULT_LOCK_TIMEOUT_SECONDS))
        )
        return cls(
            cache_root=Path(cache_root_value).expanduser().resolve(),
            refresh_deps=refresh_deps,
            working_namespace=working_namespace,
            target_namespace=target_namespace,
            lock_timeout=lock_timeout,
        )


def _parse_bool(variable: str, raw_value: str) -> bool:
    """Parse a boolean environment value.

    Raises:
        MapCacheConfigError: If value is not a recognized boolean literal.
    """
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise MapCacheConfigError(
        f"Invalid {variable} value: expected a boolean, got '{raw_value}'. "
        f"Set {variable} to one of: {', '.join(_TRUE_VALUES + _FALSE_VALUES[:-1])}."
    )


def _parse_namespace(variable: str, raw_value: str) -> str:
    namespace = raw_value.strip()
    if not namespace or any(character.isspace() for character in namespace):
        raise MapCacheConfigError(
            f"Invalid {variable} value: '{raw_value}' is not a namespace name. "
            "Namespace names must be non-empty and contain no whitespace."
        )
    return namespace


def _parse_lock_timeout(raw_value: str) -> float:
    """Parse the lock timeout environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed timeout in seconds; negative means wait forever.

    Raises:
        MapCacheConfigError: If value cannot be parsed into float.
    """
    try:
        return float(raw_value)
    except ValueError as error:
        raise MapCacheConfigError(
            "Invalid MAPCACHE_LOCK_TIMEOUT value: "
            f"expected seconds as a number, got '{raw_value}'. "
            "Set MAPCACHE_LOCK_TIMEOUT to a numeric value."
        ) from error
