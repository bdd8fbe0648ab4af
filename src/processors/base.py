"""Mapping processor capability and ordered chains.

A processor receives the shared mutable store, optionally changes it, and
reports whether anything changed. A chain is an ordered, immutable sequence
of processors whose identity hash keys cached source mappings.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Iterator, Mapping, Protocol, Sequence, runtime_checkable

from core.constants import HASH_ALGORITHM
from mappings.tree import MappingStore


@runtime_checkable
class MappingProcessor(Protocol):
    """Capability implemented by every mapping processor."""

    @property
    def name(self) -> str:
        """Stable processor type name used in logs and errors."""
        ...

    def identity(self) -> str:
        """Return a stable fingerprint of the effective parameters."""
        ...

    def process(self, store: MappingStore) -> bool:
        """Mutate the store in place and return whether anything changed."""
        ...


class ProcessorChain:
    """Ordered processors plus an optional base-table identity.

    Attributes:
        processors: Processors in execution order.
        base_identity: Optional fingerprint of the base table folded into the
            chain identity so a new base table never reuses stale artifacts.
    """

    def __init__(
        self,
        processors: Sequence[MappingProcessor] = (),
        base_identity: str | None = None,
    ) -> None:
        self.processors: tuple[MappingProcessor, ...] = tuple(processors)
        self.base_identity = base_identity

    def __iter__(self) -> Iterator[MappingProcessor]:
        return iter(self.processors)

    def __len__(self) -> int:
        return len(self.processors)

    def identity(self) -> str:
        """Hash processor names and fingerprints in order."""
        payload = {
            "base": self.base_identity,
            "processors": [[processor.name, processor.identity()] for processor in self.processors],
        }
        return hash_payload(payload)


def fingerprint(processor_name: str, params: Mapping[str, object]) -> str:
    """Render canonical JSON for one processor's parameters."""
    return json.dumps(
        {"type": processor_name, "params": params},
        sort_keys=True,
        separators=(",", ":"),
    )


def hash_payload(payload: object) -> str:
    """Compute a stable hex digest of a JSON-serializable payload."""
    normalized = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    hash_builder = hashlib.new(HASH_ALGORITHM)
    hash_builder.update(normalized.encode("utf-8"))
    return hash_builder.hexdigest()


def hash_file(file_path: Path, chunk_size: int = 1 << 16) -> str:
    """Compute a hex digest of a file's bytes."""
    hash_builder = hashlib.new(HASH_ALGORITHM)
    with file_path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            hash_builder.update(chunk)
    return hash_builder.hexdigest()
