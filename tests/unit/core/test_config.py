"""Unit tests for core config parsing."""

from __future__ import annotations

import pytest

from core.config import MapCacheConfig
from core.errors import MapCacheConfigError


def test_from_env_reads_cache_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve cache root from environment."""
    monkeypatch.setenv("MAPCACHE_CACHE_ROOT", "./.tmp-mapcache")

    config = MapCacheConfig.from_env()

    assert config.cache_root.name == ".tmp-mapcache"
    assert config.source_mappings_dir == config.cache_root / "source_mappings"


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Defaults should describe the intermediary to named pipeline."""
    for variable in (
        "MAPCACHE_REFRESH_DEPS",
        "MAPCACHE_WORKING_NAMESPACE",
        "MAPCACHE_TARGET_NAMESPACE",
        "MAPCACHE_LOCK_TIMEOUT",
    ):
        monkeypatch.delenv(variable, raising=False)

    config = MapCacheConfig.from_env()

    assert config.refresh_deps is False
    assert (config.working_namespace, config.target_namespace) == ("intermediary", "named")
    assert config.lock_timeout == 60.0


def test_from_env_parses_refresh_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    """Boolean literals should enable refresh."""
    monkeypatch.setenv("MAPCACHE_REFRESH_DEPS", "Yes")

    assert MapCacheConfig.from_env().refresh_deps is True


def test_from_env_raises_for_invalid_refresh_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for non-boolean refresh values."""
    monkeypatch.setenv("MAPCACHE_REFRESH_DEPS", "sometimes")

    with pytest.raises(MapCacheConfigError):
        MapCacheConfig.from_env()


def test_from_env_raises_for_invalid_lock_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for non-numeric lock timeout."""
    monkeypatch.setenv("MAPCACHE_LOCK_TIMEOUT", "soon")

    with pytest.raises(MapCacheConfigError):
        MapCacheConfig.from_env()


def test_from_env_raises_for_blank_namespace(monkeypatch: pytest.MonkeyPatch) -> None:
    """Namespace names must not be blank."""
    monkeypatch.setenv("MAPCACHE_TARGET_NAMESPACE", "  ")

    with pytest.raises(MapCacheConfigError):
        MapCacheConfig.from_env()
