"""Tiny v2 mapping format reader and writer.

The format is line oriented and tab separated::

    tiny	2	0	intermediary	named
    	escaped-names
    c	net/minecraft/class_1	net/minecraft/Block
    	c	A class comment.
    	m	(Lnet/minecraft/class_1;)V	method_1	setParent
    		p	1		parent
    	f	I	field_1	size

Indentation depth selects the record scope: classes at depth 0, fields and
methods at depth 1, arguments and local variables at depth 2, and comments
one level below the entry they document. Missing non-source names are empty
columns.

The reader builds a store rooted on the file's declared source namespace.
The writer emits the canonical form of a namespace-switch view: tab
indentation, ``\\n`` line endings, comments first among children, and a
trailing newline.
"""

from __future__ import annotations

from typing import Iterable, Iterator, TextIO

from core.constants import (
    ESCAPED_NAMES_PROPERTY,
    TINY_V2_HEADER,
    TINY_V2_MAJOR_VERSION,
    TINY_V2_MINOR_VERSION,
)
from core.errors import FormatError
from mappings.namespace_switch import ClassRecord, MemberRecord, Names, NamespaceSwitch
from mappings.tree import ArgEntry, ClassEntry, MappingStore, MemberEntry, VarEntry

_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}
_UNESCAPES = {"\\": "\\", "n": "\n", "r": "\r", "t": "\t", "0": "\0"}
_MEMBER_KINDS = {"f": "field", "m": "method"}


def escape(value: str) -> str:
    """Escape backslash and control characters for a Tiny v2 column."""
    return "".join(_ESCAPES.get(character, character) for character in value)


def unescape(value: str) -> str:
    """Reverse ``escape``.

    Raises:
        ValueError: If the value holds an unknown or dangling escape.
    """
    if "\\" not in value:
        return value
    characters: list[str] = []
    index = 0
    while index < len(value):
        character = value[index]
        if character != "\\":
            characters.append(character)
            index += 1
            continue
        if index + 1 >= len(value) or value[index + 1] not in _UNESCAPES:
            raise ValueError(f"invalid escape sequence at column offset {index}")
        characters.append(_UNESCAPES[value[index + 1]])
        index += 2
    return "".join(characters)


def read_tiny_v2(reader: TextIO, source_name: str | None = None) -> MappingStore:
    """Parse a Tiny v2 table into a store rooted on the file's source namespace.

    Args:
        reader: Text stream positioned at the header line.
        source_name: Optional label (usually a path) used in error messages.

    Returns:
        Fully built mapping store.

    Raises:
        FormatError: If the input is malformed.
    """
    return _TinyV2Parser(reader, source_name or "<stream>").parse()


class _TinyV2Parser:
    """Single-use line parser keeping the current class/member/argument scope."""

    def __init__(self, reader: TextIO, source_name: str) -> None:
        self._lines = _numbered_lines(reader)
        self._source_name = source_name
        self._line_number = 0
        self._escaped_names = False
        self._store: MappingStore | None = None
        self._class: ClassEntry | None = None
        self._member: MemberEntry | None = None
        self._local: ArgEntry | VarEntry | None = None

    def parse(self) -> MappingStore:
        store = self._parse_header()
        in_properties = True
        for self._line_number, line in self._lines:
            depth, columns = _split_line(line)
            if in_properties and depth == 1:
                self._parse_property(store, columns)
                continue
            in_properties = False
            try:
                self._parse_record(store, depth, columns)
            except FormatError as error:
                raise self._error(str(error)) from error
        return store

    def _parse_header(self) -> MappingStore:
        for self._line_number, line in self._lines:
            columns = line.split("\t")
            if columns[0] != TINY_V2_HEADER or len(columns) < 3:
                raise self._error("expected a 'tiny' header line")
            if columns[1:3] != [str(TINY_V2_MAJOR_VERSION), str(TINY_V2_MINOR_VERSION)]:
                raise self._error(
                    f"unsupported format version {'.'.join(columns[1:3])}, "
                    f"expected {TINY_V2_MAJOR_VERSION}.{TINY_V2_MINOR_VERSION}"
                )
            try:
                self._store = MappingStore(columns[3:])
            except FormatError as error:
                raise self._error(str(error)) from error
            return self._store
        raise self._error("input is empty, expected a 'tiny' header line")

    def _parse_property(self, store: MappingStore, columns: list[str]) -> None:
        if not columns[0] or len(columns) > 2:
            raise self._error("malformed property line")
        store.properties[columns[0]] = columns[1] if len(columns) == 2 else None
        if columns[0] == ESCAPED_NAMES_PROPERTY:
            self._escaped_names = True

    def _parse_record(self, store: MappingStore, depth: int, columns: list[str]) -> None:
        kind = columns[0]
        if kind == "c" and depth > 0:
            self._parse_comment(depth, columns)
        elif depth == 0 and kind == "c":
            names = self._names(store, columns[1:])
            self._class = store.add_class(ClassEntry(names=names))
            self._member = None
            self._local = None
        elif depth == 1 and kind in _MEMBER_KINDS:
            self._require(self._class is not None and len(columns) >= 2, "member outside class")
            names = self._names(store, columns[2:])
            member = MemberEntry(kind=_MEMBER_KINDS[kind], names=names, desc=columns[1])  # type: ignore[arg-type]
            self._member = store.add_member(self._class, member)  # type: ignore[arg-type]
            self._local = None
        elif depth == 2 and kind == "p":
            self._require(self._member is not None and len(columns) >= 2, "argument outside method")
            lv_index = self._int(columns[1], "argument lv index")
            names = self._names(store, columns[2:], optional_source=True)
            self._local = self._member.add_arg(ArgEntry(lv_index=lv_index, names=names))  # type: ignore[union-attr]
        elif depth == 2 and kind == "v":
            self._require(self._member is not None and len(columns) >= 4, "variable outside method")
            var = VarEntry(
                lv_index=self._int(columns[1], "variable lv index"),
                start_offset=self._int(columns[2], "variable start offset"),
                lvt_row_index=self._int(columns[3], "variable lvt row index"),
                names=self._names(store, columns[4:], optional_source=True),
            )
            self._local = self._member.add_var(var)  # type: ignore[union-attr]
        else:
            raise FormatError(f"unexpected token '{kind}' at indentation depth {depth}")

    def _parse_comment(self, depth: int, columns: list[str]) -> None:
        target = {1: self._class, 2: self._member, 3: self._local}.get(depth)
        self._require(target is not None and len(columns) == 2, "comment without owner")
        self._require(target.comment is None, "duplicate comment")  # type: ignore[union-attr]
        target.comment = self._unescape(columns[1])  # type: ignore[union-attr]
        if depth == 1:
            self._member = None
            self._local = None
        elif depth == 2:
            self._local = None

    def _names(
        self, store: MappingStore, columns: list[str], optional_source: bool = False
    ) -> dict[str, str]:
        if len(columns) != len(store.namespaces):
            raise FormatError(
                f"expected {len(store.namespaces)} namespace columns, got {len(columns)}"
            )
        names = {
            namespace: self._unescape(column) if self._escaped_names else column
            for namespace, column in zip(store.namespaces, columns)
            if column
        }
        if not optional_source and store.source_namespace not in names:
            raise FormatError(f"missing '{store.source_namespace}' source name")
        return names

    def _int(self, value: str, label: str) -> int:
        try:
            return int(value)
        except ValueError as error:
            raise FormatError(f"{label} must be an integer, got '{value}'") from error

    def _unescape(self, value: str) -> str:
        try:
            return unescape(value)
        except ValueError as error:
            raise FormatError(str(error)) from error

    def _require(self, condition: bool, message: str) -> None:
        if not condition:
            raise FormatError(message)

    def _error(self, message: str) -> FormatError:
        return FormatError(
            f"Malformed mapping table {self._source_name}:{self._line_number}: "
            f"{message.rstrip('.')}."
        )


def _numbered_lines(reader: TextIO) -> Iterator[tuple[int, str]]:
    for line_number, line in enumerate(reader, 1):
        stripped = line.rstrip("\r\n")
        if stripped:
            yield line_number, stripped


def _split_line(line: str) -> tuple[int, list[str]]:
    depth = len(line) - len(line.lstrip("\t"))
    return depth, line[depth:].split("\t")


def write_tiny_v2(view: NamespaceSwitch, writer: TextIO) -> None:
    """Write the canonical Tiny v2 form of a namespace-switch view.

    Args:
        view: View whose source namespace becomes the file's source namespace.
        writer: Text stream receiving the table.

    Raises:
        FormatError: If a file property holds a tab or line break.
    """
    properties = dict(view.properties)
    escaped_names = ESCAPED_NAMES_PROPERTY in properties or _needs_escaping(view)
    if escaped_names:
        properties.setdefault(ESCAPED_NAMES_PROPERTY, None)
    property_lines = [_property_line(key, value) for key, value in properties.items()]
    writer.write(
        "\t".join(
            [TINY_V2_HEADER, str(TINY_V2_MAJOR_VERSION), str(TINY_V2_MINOR_VERSION), *view.namespaces]
        )
        + "\n"
    )
    for line in property_lines:
        writer.write(line + "\n")
    for class_record in view.classes():
        for line in _class_lines(class_record, escaped_names):
            writer.write(line + "\n")


def _property_line(key: str, value: str | None) -> str:
    columns = [key] if value is None else [key, value]
    if not key or any(_is_unwritable(column) for column in columns):
        raise FormatError(
            f"Property {key!r} cannot be written to a Tiny v2 table: "
            "keys must be non-empty and neither keys nor values may hold tabs or line breaks."
        )
    return "\t" + "\t".join(columns)


def _is_unwritable(column: str) -> bool:
    return any(character in column for character in "\t\n\r")


def _class_lines(record: ClassRecord, escaped: bool) -> Iterator[str]:
    yield "c\t" + _join_names(record.names, escaped)
    if record.comment is not None:
        yield "\tc\t" + escape(record.comment)
    for member in record.members:
        yield from _member_lines(member, escaped)


def _member_lines(record: MemberRecord, escaped: bool) -> Iterator[str]:
    marker = "f" if record.kind == "field" else "m"
    yield f"\t{marker}\t{record.desc}\t" + _join_names(record.names, escaped)
    if record.comment is not None:
        yield "\t\tc\t" + escape(record.comment)
    for arg in record.args:
        yield f"\t\tp\t{arg.lv_index}\t" + _join_names(arg.names, escaped)
        if arg.comment is not None:
            yield "\t\t\tc\t" + escape(arg.comment)
    for var in record.vars:
        yield (
            f"\t\tv\t{var.lv_index}\t{var.start_offset}\t{var.lvt_row_index}\t"
            + _join_names(var.names, escaped)
        )
        if var.comment is not None:
            yield "\t\t\tc\t" + escape(var.comment)


def _join_names(names: Names, escaped: bool) -> str:
    return "\t".join(escape(name) if escaped else name for name in _present(names))


def _present(names: Names) -> Iterable[str]:
    return (name or "" for name in names)


def _needs_escaping(view: NamespaceSwitch) -> bool:
    def escapable(names: Names) -> bool:
        return any(name is not None and escape(name) != name for name in names)

    for class_record in view.classes():
        if escapable(class_record.names):
            return True
        for member in class_record.members:
            if escapable(member.names):
                return True
            if any(escapable(local.names) for local in (*member.args, *member.vars)):
                return True
    return False
