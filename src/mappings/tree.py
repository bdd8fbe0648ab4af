"""In-memory multi-namespace mapping tree.

This module holds a fully built mapping table: ordered class entries with
their fields, methods, method arguments, and local variables, each carrying
one identifier per known namespace. The first declared namespace is the
store's source namespace; member descriptors are kept in that namespace.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, Literal, Mapping, Sequence

from core.errors import FormatError, NamespaceNotFoundError

MemberKind = Literal["field", "method"]

_CLASS_IN_DESCRIPTOR = re.compile(r"L([^;]+);")


@dataclass
class ArgEntry:
    """Method argument keyed by local-variable index."""

    lv_index: int
    names: dict[str, str] = field(default_factory=dict)
    comment: str | None = None


@dataclass
class VarEntry:
    """Method local variable keyed by index, start offset and LVT row."""

    lv_index: int
    start_offset: int
    lvt_row_index: int
    names: dict[str, str] = field(default_factory=dict)
    comment: str | None = None

    @property
    def key(self) -> tuple[int, int, int]:
        return (self.lv_index, self.start_offset, self.lvt_row_index)


@dataclass
class MemberEntry:
    """Field or method entry of a class.

    Attributes:
        kind: Either ``"field"`` or ``"method"``.
        names: Identifier per namespace; absent namespaces are missing keys.
        desc: JVM descriptor expressed in the store's source namespace.
        comment: Optional documentation comment.
        args: Method arguments in file order.
        vars: Method local variables in file order.
    """

    kind: MemberKind
    names: dict[str, str]
    desc: str
    comment: str | None = None
    args: list[ArgEntry] = field(default_factory=list)
    vars: list[VarEntry] = field(default_factory=list)

    def get_arg(self, lv_index: int) -> ArgEntry | None:
        for arg in self.args:
            if arg.lv_index == lv_index:
                return arg
        return None

    def add_arg(self, arg: ArgEntry) -> ArgEntry:
        """Append an argument, rejecting a duplicate local-variable index."""
        if self.kind != "method":
            raise FormatError(f"Field '{self.desc}' cannot declare method arguments.")
        if self.get_arg(arg.lv_index) is not None:
            raise FormatError(f"Duplicate argument with lv index {arg.lv_index}.")
        self.args.append(arg)
        return arg

    def add_var(self, var: VarEntry) -> VarEntry:
        """Append a local variable, rejecting a duplicate key."""
        if self.kind != "method":
            raise FormatError(f"Field '{self.desc}' cannot declare local variables.")
        if any(existing.key == var.key for existing in self.vars):
            raise FormatError(f"Duplicate local variable {var.key}.")
        self.vars.append(var)
        return var


@dataclass
class ClassEntry:
    """Class entry with members in file order."""

    names: dict[str, str]
    comment: str | None = None
    members: list[MemberEntry] = field(default_factory=list)

    def fields(self) -> Iterator[MemberEntry]:
        return (member for member in self.members if member.kind == "field")

    def methods(self) -> Iterator[MemberEntry]:
        return (member for member in self.members if member.kind == "method")

    def get_member(
        self, kind: MemberKind, source_name: str, desc: str, source_namespace: str
    ) -> MemberEntry | None:
        for member in self.members:
            if (
                member.kind == kind
                and member.desc == desc
                and member.names.get(source_namespace) == source_name
            ):
                return member
        return None


class MappingStore:
    """Ordered, multi-namespace mapping table.

    A store is built completely by a loader (or by re-rooting another store)
    and afterwards mutated only by mapping processors.
    """

    def __init__(
        self,
        namespaces: Sequence[str],
        properties: Mapping[str, str | None] | None = None,
    ) -> None:
        """Create an empty store.

        Args:
            namespaces: Namespace names; the first one is the source namespace.
            properties: Optional file-level properties in file order.

        Raises:
            FormatError: If fewer than two or duplicate namespaces are given.
        """
        namespace_tuple = tuple(namespaces)
        if len(namespace_tuple) < 2:
            raise FormatError(
                f"Mapping table must declare at least 2 namespaces, got {len(namespace_tuple)}."
            )
        if any(not namespace for namespace in namespace_tuple):
            raise FormatError("Mapping table declares an empty namespace name.")
        if len(set(namespace_tuple)) != len(namespace_tuple):
            raise FormatError(
                f"Mapping table declares duplicate namespaces: {', '.join(namespace_tuple)}."
            )
        self._namespaces = namespace_tuple
        self.properties: dict[str, str | None] = dict(properties or {})
        self._classes: list[ClassEntry] = []
        self._class_index: dict[str, ClassEntry] = {}

    @property
    def namespaces(self) -> tuple[str, ...]:
        return self._namespaces

    @property
    def source_namespace(self) -> str:
        return self._namespaces[0]

    @property
    def destination_namespaces(self) -> tuple[str, ...]:
        return self._namespaces[1:]

    def require_namespace(self, namespace: str) -> None:
        """Raise NamespaceNotFoundError unless the namespace is declared."""
        if namespace not in self._namespaces:
            raise NamespaceNotFoundError(namespace, self._namespaces)

    def classes(self) -> Iterator[ClassEntry]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)

    def get_class(self, source_name: str) -> ClassEntry | None:
        return self._class_index.get(source_name)

    def add_class(self, entry: ClassEntry) -> ClassEntry:
        """Append a class entry.

        Raises:
            FormatError: If the entry has no source name or duplicates one.
        """
        source_name = entry.names.get(self.source_namespace)
        if not source_name:
            raise FormatError(
                f"Class entry is missing a '{self.source_namespace}' source name."
            )
        if source_name in self._class_index:
            raise FormatError(
                f"Duplicate class '{source_name}' under source namespace "
                f"'{self.source_namespace}'."
            )
        self._classes.append(entry)
        self._class_index[source_name] = entry
        return entry

    def add_member(self, owner: ClassEntry, member: MemberEntry) -> MemberEntry:
        """Append a member to a class owned by this store.

        Raises:
            FormatError: If the member lacks a source name or duplicates one.
        """
        source_name = member.names.get(self.source_namespace)
        if not source_name:
            raise FormatError(
                f"Member of class '{owner.names[self.source_namespace]}' is missing a "
                f"'{self.source_namespace}' source name."
            )
        if not member.desc:
            raise FormatError(f"Member '{source_name}' is missing a descriptor.")
        duplicate = owner.get_member(member.kind, source_name, member.desc, self.source_namespace)
        if duplicate is not None:
            raise FormatError(
                f"Duplicate {member.kind} '{source_name}{member.desc}' in class "
                f"'{owner.names[self.source_namespace]}'."
            )
        owner.members.append(member)
        return member

    def map_class_name(self, source_name: str, namespace: str) -> str:
        """Map a source-namespace class name into another namespace.

        Classes unknown to the table, or lacking the namespace, keep their name.
        """
        entry = self._class_index.get(source_name)
        if entry is None:
            return source_name
        return entry.names.get(namespace, source_name)

    def map_descriptor(self, desc: str, namespace: str) -> str:
        """Rewrite every class reference of a descriptor into a namespace."""
        if namespace == self.source_namespace:
            return desc
        return _CLASS_IN_DESCRIPTOR.sub(
            lambda match: f"L{self.map_class_name(match.group(1), namespace)};", desc
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MappingStore):
            return NotImplemented
        return (
            self._namespaces == other._namespaces
            and self.properties == other.properties
            and self._classes == other._classes
        )

    def __repr__(self) -> str:
        return f"MappingStore(namespaces={self._namespaces!r}, classes={len(self._classes)})"
