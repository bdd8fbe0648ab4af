"""Load and serialize mapping tables in a chosen namespace orientation.

Reads parse a table and re-root it on the requested source namespace.
Writes serialize through a namespace-switch view and publish files
atomically so a failed write never leaves a partial table behind.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import TextIO

from core.constants import MAPPINGS_FILE_ENCODING
from core.errors import IOFailure
from core.logging_config import get_logger
from mappings.namespace_switch import reroot, switch_namespace
from mappings.tiny_v2 import read_tiny_v2, write_tiny_v2
from mappings.tree import MappingStore

_LOGGER = get_logger(__name__)


def load_mappings(
    reader: TextIO, source_namespace: str, source_name: str | None = None
) -> MappingStore:
    """Parse a table and express it with ``source_namespace`` as source.

    Args:
        reader: Text stream holding a Tiny v2 table.
        source_namespace: Namespace to use as the logical source.
        source_name: Optional label used in error messages.

    Returns:
        Mapping store rooted on ``source_namespace``.

    Raises:
        FormatError: If the table is malformed.
        NamespaceNotFoundError: If the namespace is not declared.
    """
    store = read_tiny_v2(reader, source_name)
    return reroot(store, source_namespace)


def load_mappings_file(mappings_path: Path, source_namespace: str) -> MappingStore:
    """Read a UTF-8 table from disk; see ``load_mappings``.

    Raises:
        IOFailure: If the file cannot be read.
    """
    try:
        with mappings_path.open("r", encoding=MAPPINGS_FILE_ENCODING) as reader:
            return load_mappings(reader, source_namespace, str(mappings_path))
    except OSError as error:
        raise IOFailure(
            f"Failed to read mapping table {mappings_path}: {error}. "
            "Check that the file exists and is readable."
        ) from error


def serialize_mappings(store: MappingStore, dest_namespace: str, writer: TextIO) -> None:
    """Write a store with ``dest_namespace`` as the declared source namespace.

    Classes and members lacking a ``dest_namespace`` identifier are skipped.

    Raises:
        NamespaceNotFoundError: If the namespace is not declared.
    """
    view = switch_namespace(store, dest_namespace)
    skipped = view.count_skipped()
    if skipped:
        _LOGGER.warning(
            "mappings_skipped_missing_source",
            namespace=dest_namespace,
            skipped=skipped,
        )
    write_tiny_v2(view, writer)


def write_mappings_file(store: MappingStore, dest_namespace: str, output_path: Path) -> None:
    """Serialize to a sibling temporary file and rename it over ``output_path``.

    Raises:
        IOFailure: If writing or publishing the file fails.
        NamespaceNotFoundError: If the namespace is not declared.
    """
    store.require_namespace(dest_namespace)
    try:
        file_descriptor, temp_name = tempfile.mkstemp(
            prefix=f".{output_path.name}.", suffix=".tmp", dir=output_path.parent
        )
    except OSError as error:
        raise IOFailure(
            f"Failed to create temporary file next to {output_path}: {error}. "
            "Check directory permissions and free space."
        ) from error
    temp_path = Path(temp_name)
    try:
        with os.fdopen(file_descriptor, "w", encoding=MAPPINGS_FILE_ENCODING, newline="\n") as writer:
            serialize_mappings(store, dest_namespace, writer)
        os.replace(temp_path, output_path)
    except OSError as error:
        temp_path.unlink(missing_ok=True)
        raise IOFailure(
            f"Failed to write mapping table {output_path}: {error}. "
            "Check directory permissions and free space."
        ) from error
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
