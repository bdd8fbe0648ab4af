"""Transform-and-cache resolution of source mappings.

Given a base mapping table and an ordered processor chain, this module
returns the path of the table the build should use: the base table itself
when no processors are configured, otherwise a cached artifact named after
the chain identity, producing it on a cache miss.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from filelock import FileLock, Timeout

from core.config import MapCacheConfig
from core.constants import (
    CACHE_FILE_EXTENSION,
    DEFAULT_LOCK_TIMEOUT_SECONDS,
    DEFAULT_TARGET_NAMESPACE,
    DEFAULT_WORKING_NAMESPACE,
    LOCK_FILE_SUFFIX,
    LOCKS_DIR_NAME,
)
from core.errors import IOFailure, StageFailure
from core.logging_config import get_logger
from mappings.mapping_io import load_mappings_file, write_mappings_file
from mappings.tree import MappingStore
from processors.base import ProcessorChain

_LOGGER = get_logger(__name__)


class SourceMappingsCache:
    """Cache of processed mapping tables inside one injected directory."""

    def __init__(
        self,
        cache_dir: Path,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
    ) -> None:
        """Bind the cache to a directory.

        Args:
            cache_dir: Directory holding cached artifacts; created on demand.
            lock_timeout: Seconds to wait for an artifact lock, negative for no limit.
        """
        self._cache_dir = cache_dir
        self._lock_timeout = lock_timeout

    @classmethod
    def from_config(cls, config: MapCacheConfig) -> "SourceMappingsCache":
        return cls(config.source_mappings_dir, lock_timeout=config.lock_timeout)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def artifact_path(self, chain: ProcessorChain) -> Path:
        """Return the artifact path keyed by the chain identity."""
        return self._cache_dir / f"{chain.identity()}{CACHE_FILE_EXTENSION}"

    def resolve(
        self,
        base_path: Path,
        chain: ProcessorChain,
        force_refresh: bool = False,
        working_namespace: str = DEFAULT_WORKING_NAMESPACE,
        target_namespace: str = DEFAULT_TARGET_NAMESPACE,
    ) -> Path:
        """Resolve the mapping table for a processor chain.

        Args:
            base_path: Canonical base mapping table.
            chain: Ordered processors; empty means pass-through.
            force_refresh: Recompute even when an artifact exists.
            working_namespace: Source namespace while processors run.
            target_namespace: Source namespace of the written artifact.

        Returns:
            ``base_path`` for an empty chain, otherwise the artifact path.

        Raises:
            FormatError: If the base table is malformed.
            NamespaceNotFoundError: If a namespace is not declared by the table.
            StageFailure: If a processor fails.
            IOFailure: If reading, writing, or locking fails.
        """
        if len(chain) == 0:
            _LOGGER.info("source_mappings_passthrough", base_path=str(base_path))
            return base_path

        chain_hash = chain.identity()
        artifact_path = self.artifact_path(chain)
        with self._lock(artifact_path):
            if artifact_path.exists() and not force_refresh:
                _LOGGER.debug("source_mappings_cache_hit", path=str(artifact_path))
                return artifact_path

            _LOGGER.info(
                "source_mappings_creating",
                chain_hash=chain_hash,
                force_refresh=force_refresh,
            )
            _remove_stale(artifact_path)
            store = load_mappings_file(base_path, working_namespace)
            transformed = run_chain(chain, store)
            if not transformed:
                _LOGGER.info("source_mappings_unchanged", chain_hash=chain_hash)
            write_mappings_file(store, target_namespace, artifact_path)
            _LOGGER.info("source_mappings_created", path=str(artifact_path))
        return artifact_path

    def _lock(self, artifact_path: Path) -> "_AcquiredLock":
        lock_dir = self._cache_dir / LOCKS_DIR_NAME
        created_dirs = _missing_directories(lock_dir)
        _ensure_directory(lock_dir)
        lock_path = lock_dir / (artifact_path.name + LOCK_FILE_SUFFIX)
        return _AcquiredLock(
            FileLock(str(lock_path), timeout=self._lock_timeout), lock_path, created_dirs
        )


class _AcquiredLock:
    """Context manager translating lock timeouts into IOFailure.

    When the guarded block raises, the lock file and the directories created
    for it are removed after release, so a failed resolve leaves the cache
    directory as it found it.
    """

    def __init__(self, lock: FileLock, lock_path: Path, created_dirs: list[Path]) -> None:
        self._lock = lock
        self._lock_path = lock_path
        self._created_dirs = created_dirs
        self._created_lock_file = False

    def __enter__(self) -> None:
        self._created_lock_file = not self._lock_path.exists()
        try:
            self._lock.acquire()
        except Timeout as error:
            self._discard()
            raise IOFailure(
                f"Timed out waiting for cache lock {self._lock_path}. "
                "Another build may be producing the same source mappings; retry later."
            ) from error
        except OSError as error:
            self._discard()
            raise IOFailure(f"Failed to acquire cache lock {self._lock_path}: {error}.") from error

    def __exit__(self, exc_type: type[BaseException] | None, *exc_info: object) -> None:
        self._lock.release()
        if exc_type is not None:
            if self._created_lock_file:
                self._remove(self._lock_path.unlink, self._lock_path)
            self._discard()

    def _discard(self) -> None:
        for directory in self._created_dirs:
            self._remove(directory.rmdir, directory)

    def _remove(self, remove: Callable[[], None], path: Path) -> None:
        try:
            remove()
        except FileNotFoundError:
            pass
        except OSError as error:
            # Another build may be using the path.
            _LOGGER.warning("source_mappings_cleanup_skipped", path=str(path), error=str(error))


def run_chain(chain: ProcessorChain, store: MappingStore) -> bool:
    """Run every processor in order against one store.

    Returns:
        Whether any processor reported a change.

    Raises:
        StageFailure: If a processor raises; remaining processors are skipped.
    """
    transformed = False
    for processor in chain:
        try:
            changed = processor.process(store)
        except Exception as error:
            raise StageFailure(processor.name, error) from error
        _LOGGER.debug("mapping_processor_ran", processor=processor.name, changed=bool(changed))
        transformed = transformed or bool(changed)
    return transformed


def resolve_source_mappings(
    base_path: Path,
    chain: ProcessorChain,
    cache_dir: Path,
    force_refresh: bool = False,
    working_namespace: str = DEFAULT_WORKING_NAMESPACE,
    target_namespace: str = DEFAULT_TARGET_NAMESPACE,
) -> Path:
    """Resolve source mappings with a cache bound to ``cache_dir``."""
    cache = SourceMappingsCache(cache_dir)
    return cache.resolve(
        base_path,
        chain,
        force_refresh=force_refresh,
        working_namespace=working_namespace,
        target_namespace=target_namespace,
    )


def _ensure_directory(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise IOFailure(
            f"Failed to create cache directory {directory}: {error}. "
            "Check permissions on the cache root."
        ) from error


def _missing_directories(directory: Path) -> list[Path]:
    """Return the missing directories on the way to ``directory``, deepest first."""
    missing: list[Path] = []
    while not directory.exists():
        missing.append(directory)
        if directory.parent == directory:
            break
        directory = directory.parent
    return missing


def _remove_stale(artifact_path: Path) -> None:
    try:
        artifact_path.unlink(missing_ok=True)
    except OSError as error:
        raise IOFailure(f"Failed to remove stale artifact {artifact_path}: {error}.") from error
