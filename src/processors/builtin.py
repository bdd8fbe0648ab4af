"""Built-in mapping processors.

Each processor is an immutable value object: its parameters fully
determine both its effect on a store and its identity fingerprint.
Processors never rename identifiers of the store's source namespace,
because source names key the class and member lookups.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping

from mappings.tree import ClassEntry, MappingStore
from processors.base import fingerprint

ENTRY_KINDS = ("class", "field", "method", "arg", "var")

_INTERFACE_COMMENT_PREFIX = "Interface injection: implements "


def _require_destination(store: MappingStore, namespace: str) -> None:
    store.require_namespace(namespace)
    if namespace == store.source_namespace:
        raise ValueError(
            f"Namespace '{namespace}' is the source namespace and cannot be rewritten."
        )


def _iter_names(store: MappingStore, kinds: tuple[str, ...]) -> Iterator[dict[str, str]]:
    """Yield the names dict of every entry whose kind is selected."""
    for class_entry in store.classes():
        if "class" in kinds:
            yield class_entry.names
        for member in class_entry.members:
            if member.kind in kinds:
                yield member.names
            if "arg" in kinds:
                yield from (arg.names for arg in member.args)
            if "var" in kinds:
                yield from (var.names for var in member.vars)


@dataclass(frozen=True)
class SuffixNamesProcessor:
    """Append a suffix to every identifier of one namespace."""

    namespace: str
    suffix: str
    kinds: tuple[str, ...] = ENTRY_KINDS

    @property
    def name(self) -> str:
        return "suffix_names"

    def identity(self) -> str:
        return fingerprint(
            self.name,
            {"namespace": self.namespace, "suffix": self.suffix, "kinds": sorted(self.kinds)},
        )

    def process(self, store: MappingStore) -> bool:
        _require_destination(store, self.namespace)
        if not self.suffix:
            return False
        changed = False
        for names in _iter_names(store, self.kinds):
            current = names.get(self.namespace)
            if current is not None:
                names[self.namespace] = current + self.suffix
                changed = True
        return changed


@dataclass(frozen=True)
class RenameProcessor:
    """Rename classes and members of one namespace by source name.

    Keys are source-namespace names: ``owner`` for a class, ``owner.member``
    for every field or method with that source name.
    """

    namespace: str
    renames: Mapping[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return "rename"

    def identity(self) -> str:
        return fingerprint(self.name, {"namespace": self.namespace, "renames": dict(self.renames)})

    def process(self, store: MappingStore) -> bool:
        _require_destination(store, self.namespace)
        source_namespace = store.source_namespace
        changed = False
        for class_entry in store.classes():
            owner = class_entry.names[source_namespace]
            changed |= _rename(class_entry.names, self.namespace, self.renames.get(owner))
            for member in class_entry.members:
                member_key = f"{owner}.{member.names[source_namespace]}"
                changed |= _rename(member.names, self.namespace, self.renames.get(member_key))
        return changed


def _rename(names: dict[str, str], namespace: str, new_name: str | None) -> bool:
    if new_name is None or names.get(namespace) == new_name:
        return False
    names[namespace] = new_name
    return True


@dataclass(frozen=True)
class FillMissingNamesProcessor:
    """Copy identifiers into a namespace wherever it has none."""

    namespace: str
    from_namespace: str

    @property
    def name(self) -> str:
        return "fill_missing"

    def identity(self) -> str:
        return fingerprint(
            self.name, {"namespace": self.namespace, "from_namespace": self.from_namespace}
        )

    def process(self, store: MappingStore) -> bool:
        _require_destination(store, self.namespace)
        store.require_namespace(self.from_namespace)
        changed = False
        for names in _iter_names(store, ENTRY_KINDS):
            fallback = names.get(self.from_namespace)
            if self.namespace not in names and fallback is not None:
                names[self.namespace] = fallback
                changed = True
        return changed


@dataclass(frozen=True)
class InterfaceInjectionProcessor:
    """Document injected interfaces on class comments.

    ``injections`` maps a class source name to the interfaces injected into
    it. Each interface is recorded once as a comment line so applying the
    processor twice leaves the comment unchanged.
    """

    injections: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return "inject_interfaces"

    def identity(self) -> str:
        return fingerprint(
            self.name,
            {"injections": {owner: list(values) for owner, values in self.injections.items()}},
        )

    def process(self, store: MappingStore) -> bool:
        changed = False
        for owner, interfaces in self.injections.items():
            class_entry = store.get_class(owner)
            if class_entry is None:
                continue
            for interface in interfaces:
                changed |= _append_comment_line(
                    class_entry, _INTERFACE_COMMENT_PREFIX + interface
                )
        return changed


def _append_comment_line(class_entry: ClassEntry, line: str) -> bool:
    existing = class_entry.comment
    if existing is not None and line in existing.split("\n"):
        return False
    class_entry.comment = line if not existing else f"{existing}\n{line}"
    return True
