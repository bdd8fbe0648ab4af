"""Unit tests for built-in mapping processors."""

from __future__ import annotations

import pytest

from core.errors import NamespaceNotFoundError
from mappings.mapping_io import load_mappings_file
from processors.builtin import (
    FillMissingNamesProcessor,
    InterfaceInjectionProcessor,
    RenameProcessor,
    SuffixNamesProcessor,
)
from tests.fixture_paths import fixture_path


def _base_store():
    return load_mappings_file(fixture_path("mappings/base.tiny"), "intermediary")


def test_suffix_names_appends_to_every_named_identifier() -> None:
    """Suffix processor should rewrite classes, members and args."""
    store = _base_store()

    changed = SuffixNamesProcessor(namespace="named", suffix="_patched").process(store)
    block = store.get_class("net/minecraft/class_1")
    method = next(block.methods())

    assert changed is True
    assert block.names["named"] == "net/minecraft/block/Block_patched"
    assert method.args[0].names["named"] == "world_patched"


def test_suffix_names_respects_kinds() -> None:
    """Only selected entry kinds should be rewritten."""
    store = _base_store()

    SuffixNamesProcessor(namespace="named", suffix="_x", kinds=("field",)).process(store)
    block = store.get_class("net/minecraft/class_1")

    assert block.names["named"] == "net/minecraft/block/Block"
    assert next(block.fields()).names["named"] == "hardness_x"


def test_suffix_names_refuses_source_namespace() -> None:
    """Source names key lookups and must not be rewritten."""
    with pytest.raises(ValueError):
        SuffixNamesProcessor(namespace="intermediary", suffix="_x").process(_base_store())


def test_suffix_names_unknown_namespace_raises() -> None:
    """Unknown namespaces should fail the processor."""
    with pytest.raises(NamespaceNotFoundError):
        SuffixNamesProcessor(namespace="official", suffix="_x").process(_base_store())


def test_rename_processor_renames_classes_and_members() -> None:
    """Rename keys should address classes and members by source name."""
    store = _base_store()
    processor = RenameProcessor(
        namespace="named",
        renames={
            "net/minecraft/class_2": "net/minecraft/world/Level",
            "net/minecraft/class_1.field_1": "strength",
        },
    )

    changed = processor.process(store)

    assert changed is True
    assert store.get_class("net/minecraft/class_2").names["named"] == "net/minecraft/world/Level"
    assert next(store.get_class("net/minecraft/class_1").fields()).names["named"] == "strength"


def test_rename_processor_reports_no_change_when_names_match() -> None:
    """Renaming to the current name is not a change."""
    processor = RenameProcessor(
        namespace="named", renames={"net/minecraft/class_2": "net/minecraft/world/World"}
    )

    assert processor.process(_base_store()) is False


def test_fill_missing_names_only_adds() -> None:
    """Fill processor should add names where absent and keep existing ones."""
    store = load_mappings_file(fixture_path("mappings/partial_named.tiny"), "intermediary")

    changed = FillMissingNamesProcessor(namespace="named", from_namespace="intermediary").process(
        store
    )

    assert changed is True
    assert store.get_class("net/minecraft/class_3").names["named"] == "net/minecraft/class_3"
    assert store.get_class("net/minecraft/class_1").names["named"] == "net/minecraft/block/Block"


def test_interface_injection_comment_is_idempotent() -> None:
    """Injecting the same interface twice should add one comment line."""
    store = _base_store()
    processor = InterfaceInjectionProcessor(
        injections={"net/minecraft/class_2": ("net/fabricmc/api/FabricWorld",)}
    )

    first = processor.process(store)
    second = processor.process(store)

    assert (first, second) == (True, False)
    assert store.get_class("net/minecraft/class_2").comment == (
        "Interface injection: implements net/fabricmc/api/FabricWorld"
    )


def test_interface_injection_appends_to_existing_comment() -> None:
    """Existing class comments should be kept above injection lines."""
    store = _base_store()
    processor = InterfaceInjectionProcessor(injections={"net/minecraft/class_1": ("a/Tickable",)})

    processor.process(store)

    assert store.get_class("net/minecraft/class_1").comment == (
        "A block in the world.\nInterface injection: implements a/Tickable"
    )


def test_processor_identity_changes_with_parameters() -> None:
    """Identity fingerprints should differ when parameters differ."""
    first = SuffixNamesProcessor(namespace="named", suffix="_a")
    second = SuffixNamesProcessor(namespace="named", suffix="_b")

    assert first.identity() != second.identity()
    assert first.identity() == SuffixNamesProcessor(namespace="named", suffix="_a").identity()
