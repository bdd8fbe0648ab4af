"""Source-namespace switching over a mapping store.

A switch re-roots which namespace is treated as the source for iteration and
serialization. It is a read-only view: identifier strings are shared with the
underlying store and nothing is copied or mutated until a caller asks for a
materialized store through ``reroot``.

Classes and members that lack an identifier in the new source namespace are
skipped together with their children. Arguments and local variables may lack
one; they keep an empty source column.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from core.logging_config import get_logger
from mappings.tree import (
    ArgEntry,
    ClassEntry,
    MappingStore,
    MemberEntry,
    MemberKind,
    VarEntry,
)

_LOGGER = get_logger(__name__)

Names = tuple["str | None", ...]


@dataclass(frozen=True)
class ArgRecord:
    lv_index: int
    names: Names
    comment: str | None


@dataclass(frozen=True)
class VarRecord:
    lv_index: int
    start_offset: int
    lvt_row_index: int
    names: Names
    comment: str | None


@dataclass(frozen=True)
class MemberRecord:
    """Member as seen from the switched source namespace."""

    kind: MemberKind
    names: Names
    desc: str
    comment: str | None
    args: tuple[ArgRecord, ...]
    vars: tuple[VarRecord, ...]


@dataclass(frozen=True)
class ClassRecord:
    """Class as seen from the switched source namespace."""

    names: Names
    comment: str | None
    members: tuple[MemberRecord, ...]


class NamespaceSwitch:
    """Read-only view of a store rooted on another source namespace."""

    def __init__(self, store: MappingStore, source_namespace: str) -> None:
        """Create the view.

        Args:
            store: Store to view.
            source_namespace: Namespace presented as the source.

        Raises:
            NamespaceNotFoundError: If the namespace is not declared by the store.
        """
        store.require_namespace(source_namespace)
        self._store = store
        self._source_namespace = source_namespace
        # The old source takes the new source's column so switching back restores the order.
        self._namespaces = (source_namespace,) + tuple(
            store.source_namespace if namespace == source_namespace else namespace
            for namespace in store.destination_namespaces
        )

    @property
    def store(self) -> MappingStore:
        return self._store

    @property
    def source_namespace(self) -> str:
        return self._source_namespace

    @property
    def namespaces(self) -> tuple[str, ...]:
        return self._namespaces

    @property
    def properties(self) -> dict[str, str | None]:
        return self._store.properties

    def classes(self) -> Iterator[ClassRecord]:
        """Yield classes that have a name in the view's source namespace."""
        for entry in self._store.classes():
            if entry.names.get(self._source_namespace):
                yield self._class_record(entry)

    def count_skipped(self) -> int:
        """Count classes and members dropped for lacking a source name."""
        skipped = 0
        for entry in self._store.classes():
            if not entry.names.get(self._source_namespace):
                skipped += 1 + len(entry.members)
                continue
            skipped += sum(
                1 for member in entry.members if not member.names.get(self._source_namespace)
            )
        return skipped

    def _names(self, names: dict[str, str]) -> Names:
        return tuple(names.get(namespace) for namespace in self._namespaces)

    def _class_record(self, entry: ClassEntry) -> ClassRecord:
        members = tuple(
            self._member_record(member)
            for member in entry.members
            if member.names.get(self._source_namespace)
        )
        return ClassRecord(names=self._names(entry.names), comment=entry.comment, members=members)

    def _member_record(self, member: MemberEntry) -> MemberRecord:
        return MemberRecord(
            kind=member.kind,
            names=self._names(member.names),
            desc=self._store.map_descriptor(member.desc, self._source_namespace),
            comment=member.comment,
            args=tuple(self._arg_record(arg) for arg in member.args),
            vars=tuple(self._var_record(var) for var in member.vars),
        )

    def _arg_record(self, arg: ArgEntry) -> ArgRecord:
        return ArgRecord(lv_index=arg.lv_index, names=self._names(arg.names), comment=arg.comment)

    def _var_record(self, var: VarEntry) -> VarRecord:
        return VarRecord(
            lv_index=var.lv_index,
            start_offset=var.start_offset,
            lvt_row_index=var.lvt_row_index,
            names=self._names(var.names),
            comment=var.comment,
        )


def switch_namespace(store: MappingStore, source_namespace: str) -> NamespaceSwitch:
    """Return a view of the store rooted on the given source namespace."""
    return NamespaceSwitch(store, source_namespace)


def reroot(store: MappingStore, source_namespace: str) -> MappingStore:
    """Materialize a store whose source namespace is ``source_namespace``.

    Returns the store itself when it is already rooted on that namespace.
    """
    view = switch_namespace(store, source_namespace)
    if source_namespace == store.source_namespace:
        return store
    skipped = view.count_skipped()
    if skipped:
        _LOGGER.warning(
            "mappings_skipped_missing_source",
            namespace=source_namespace,
            skipped=skipped,
        )
    return build_store(view)


def build_store(view: NamespaceSwitch) -> MappingStore:
    """Copy a view into a new store with the view's namespace order."""
    namespaces = view.namespaces
    rerooted = MappingStore(namespaces, view.properties)
    for class_record in view.classes():
        owner = rerooted.add_class(
            ClassEntry(names=_names_dict(namespaces, class_record.names), comment=class_record.comment)
        )
        for member_record in class_record.members:
            member = rerooted.add_member(
                owner,
                MemberEntry(
                    kind=member_record.kind,
                    names=_names_dict(namespaces, member_record.names),
                    desc=member_record.desc,
                    comment=member_record.comment,
                ),
            )
            for arg_record in member_record.args:
                member.add_arg(
                    ArgEntry(
                        lv_index=arg_record.lv_index,
                        names=_names_dict(namespaces, arg_record.names),
                        comment=arg_record.comment,
                    )
                )
            for var_record in member_record.vars:
                member.add_var(
                    VarEntry(
                        lv_index=var_record.lv_index,
                        start_offset=var_record.start_offset,
                        lvt_row_index=var_record.lvt_row_index,
                        names=_names_dict(namespaces, var_record.names),
                        comment=var_record.comment,
                    )
                )
    return rerooted


def _names_dict(namespaces: tuple[str, ...], names: Names) -> dict[str, str]:
    return {namespace: name for namespace, name in zip(namespaces, names) if name is not None}
