"""Unit tests for the public SDK surface."""

from __future__ import annotations

from pathlib import Path

import mapcache


def test_sdk_exports_resolve_pipeline(tmp_path: Path, base_mappings_path: Path) -> None:
    """SDK re-exports should be enough to build and resolve a chain."""
    spec = mapcache.ChainSpec(
        version=1,
        processors=(
            mapcache.ProcessorSpec(
                processor_type="suffix_names",
                params={"namespace": "named", "suffix": "_sdk", "kinds": ["class"]},
            ),
        ),
    )
    chain = mapcache.build_chain(spec)

    artifact_path = mapcache.resolve_source_mappings(base_mappings_path, chain, tmp_path)
    store = mapcache.load_mappings_file(artifact_path, "named")

    assert store.get_class("net/minecraft/world/World_sdk") is not None


def test_sdk_all_names_resolve() -> None:
    """Every exported name should exist on the module."""
    assert all(hasattr(mapcache, name) for name in mapcache.__all__)
