"""Public SDK surface for mapcache.

This module provides a stable import path for build integrations.
It re-exports the cache, mapping store, and processor models.
"""

from __future__ import annotations

from cache.source_mappings import SourceMappingsCache, resolve_source_mappings, run_chain
from core.chain_spec import ChainSpec, ProcessorSpec, load_chain_spec
from core.config import MapCacheConfig
from core.errors import (
    FormatError,
    IOFailure,
    MapCacheError,
    NamespaceNotFoundError,
    StageFailure,
)
from mappings.mapping_io import (
    load_mappings,
    load_mappings_file,
    serialize_mappings,
    write_mappings_file,
)
from mappings.namespace_switch import NamespaceSwitch, reroot, switch_namespace
from mappings.tree import ArgEntry, ClassEntry, MappingStore, MemberEntry, VarEntry
from processors.base import MappingProcessor, ProcessorChain
from processors.registry import build_chain, supported_processor_types

__all__ = [
    "ArgEntry",
    "ChainSpec",
    "ClassEntry",
    "FormatError",
    "IOFailure",
    "MapCacheConfig",
    "MapCacheError",
    "MappingProcessor",
    "MappingStore",
    "MemberEntry",
    "NamespaceNotFoundError",
    "NamespaceSwitch",
    "ProcessorChain",
    "ProcessorSpec",
    "SourceMappingsCache",
    "StageFailure",
    "VarEntry",
    "build_chain",
    "load_chain_spec",
    "load_mappings",
    "load_mappings_file",
    "reroot",
    "resolve_source_mappings",
    "run_chain",
    "serialize_mappings",
    "supported_processor_types",
    "switch_namespace",
    "write_mappings_file",
]
