"""mapcache exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class MapCacheError(Exception):
    """Base exception for all mapcache failures."""


class MapCacheConfigError(MapCacheError):
    """Raised for invalid runtime configuration."""


class ChainSpecError(MapCacheError):
    """Raised for invalid or unsupported processor chain spec files."""


class FormatError(MapCacheError):
    """Raised for malformed serialized mapping tables."""


class NamespaceNotFoundError(MapCacheError):
    """Raised when a requested namespace is not declared by a mapping table."""

    def __init__(self, namespace: str, namespaces: tuple[str, ...]) -> None:
        self.namespace = namespace
        self.namespaces = namespaces
        declared = ", ".join(namespaces)
        super().__init__(
            f"Namespace '{namespace}' not found in mapping table (declared: {declared}). "
            "Use one of the declared namespaces."
        )


class StageFailure(MapCacheError):
    """Raised when a mapping processor fails; wraps the processor's own error."""

    def __init__(self, stage_name: str, cause: BaseException) -> None:
        self.stage_name = stage_name
        super().__init__(
            f"Mapping processor '{stage_name}' failed: {cause}. "
            "Fix the processor configuration and rebuild."
        )


class IOFailure(MapCacheError):
    """Raised for filesystem read, write, create, or lock failures."""
