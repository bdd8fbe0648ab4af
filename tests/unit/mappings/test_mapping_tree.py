"""Unit tests for the in-memory mapping store."""

from __future__ import annotations

import pytest

from core.errors import FormatError, NamespaceNotFoundError
from mappings.tree import ArgEntry, ClassEntry, MappingStore, MemberEntry


def _store() -> MappingStore:
    store = MappingStore(("intermediary", "named"))
    store.add_class(ClassEntry(names={"intermediary": "a/class_1", "named": "a/Block"}))
    store.add_class(ClassEntry(names={"intermediary": "a/class_2"}))
    return store


def test_store_requires_two_namespaces() -> None:
    """Stores need an intermediate and a readable namespace at least."""
    with pytest.raises(FormatError):
        MappingStore(("intermediary",))


def test_store_rejects_duplicate_namespaces() -> None:
    """Namespace names must be unique."""
    with pytest.raises(FormatError):
        MappingStore(("named", "named"))


def test_add_class_requires_source_name() -> None:
    """Classes without a source name violate the store invariant."""
    store = _store()

    with pytest.raises(FormatError):
        store.add_class(ClassEntry(names={"named": "a/Orphan"}))


def test_add_member_rejects_duplicate() -> None:
    """Members are unique by source name and descriptor."""
    store = _store()
    owner = store.get_class("a/class_1")
    store.add_member(owner, MemberEntry(kind="field", names={"intermediary": "f_1"}, desc="I"))

    with pytest.raises(FormatError, match="Duplicate field"):
        store.add_member(owner, MemberEntry(kind="field", names={"intermediary": "f_1"}, desc="I"))


def test_add_arg_rejects_duplicate_index() -> None:
    """Arguments are unique by local-variable index."""
    method = MemberEntry(kind="method", names={"intermediary": "m_1"}, desc="(I)V")
    method.add_arg(ArgEntry(lv_index=1))

    with pytest.raises(FormatError):
        method.add_arg(ArgEntry(lv_index=1))


def test_map_descriptor_rewrites_known_classes() -> None:
    """Descriptors should map known classes and keep unknown ones."""
    store = _store()

    mapped = store.map_descriptor("(La/class_1;La/class_2;Ljava/lang/String;)V", "named")

    assert mapped == "(La/Block;La/class_2;Ljava/lang/String;)V"


def test_require_namespace_raises_for_unknown() -> None:
    """Unknown namespaces should raise NamespaceNotFoundError."""
    with pytest.raises(NamespaceNotFoundError) as error_info:
        _store().require_namespace("official")

    assert error_info.value.namespace == "official"
