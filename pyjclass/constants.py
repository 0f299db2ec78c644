"""
Constant pool entries and the constant pool decoder.

Pool entries refer to each other by index; those references are kept as raw
indices and resolved through the owning :class:`ConstantPool`.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Iterator, Optional, Union

from .errors import MalformedConstantPool, UnexpectedConstantKind, UnresolvedConstantReference
from .reader import ByteReader


class ConstantPoolTag(IntEnum):
    UTF8 = 1
    INTEGER = 3
    FLOAT = 4
    LONG = 5
    DOUBLE = 6
    CLASS = 7
    STRING = 8
    FIELDREF = 9
    METHODREF = 10
    INTERFACE_METHODREF = 11
    NAME_AND_TYPE = 12
    METHOD_HANDLE = 15
    METHOD_TYPE = 16
    DYNAMIC = 17
    INVOKE_DYNAMIC = 18


class MethodHandleKind(IntEnum):
    GET_FIELD = 1
    GET_STATIC = 2
    PUT_FIELD = 3
    PUT_STATIC = 4
    INVOKE_VIRTUAL = 5
    INVOKE_STATIC = 6
    INVOKE_SPECIAL = 7
    NEW_INVOKE_SPECIAL = 8
    INVOKE_INTERFACE = 9


@dataclass(frozen=True)
class Utf8Constant:
    value: str
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.UTF8


@dataclass(frozen=True)
class IntegerConstant:
    value: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INTEGER


@dataclass(frozen=True)
class FloatConstant:
    """IEEE 754 single; ``bits`` is kept so NaN payloads compare equal."""
    bits: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.FLOAT

    @property
    def value(self) -> float:
        return struct.unpack(">f", struct.pack(">I", self.bits))[0]


@dataclass(frozen=True)
class LongConstant:
    value: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.LONG


@dataclass(frozen=True)
class DoubleConstant:
    """IEEE 754 double; ``bits`` is kept so NaN payloads compare equal."""
    bits: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.DOUBLE

    @property
    def value(self) -> float:
        return struct.unpack(">d", struct.pack(">Q", self.bits))[0]


@dataclass(frozen=True)
class ClassConstant:
    name_index: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.CLASS


@dataclass(frozen=True)
class StringConstant:
    string_index: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.STRING


@dataclass(frozen=True)
class FieldrefConstant:
    class_index: int
    name_and_type_index: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.FIELDREF


@dataclass(frozen=True)
class MethodrefConstant:
    class_index: int
    name_and_type_index: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHODREF


@dataclass(frozen=True)
class InterfaceMethodrefConstant:
    class_index: int
    name_and_type_index: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INTERFACE_METHODREF


@dataclass(frozen=True)
class NameAndTypeConstant:
    name_index: int
    descriptor_index: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.NAME_AND_TYPE


@dataclass(frozen=True)
class MethodHandleConstant:
    reference_kind: MethodHandleKind
    reference_index: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHOD_HANDLE


@dataclass(frozen=True)
class MethodTypeConstant:
    descriptor_index: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHOD_TYPE


@dataclass(frozen=True)
class DynamicConstant:
    bootstrap_method_attr_index: int
    name_and_type_index: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.DYNAMIC


@dataclass(frozen=True)
class InvokeDynamicConstant:
    bootstrap_method_attr_index: int
    name_and_type_index: int
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INVOKE_DYNAMIC


Constant = Union[
    Utf8Constant, IntegerConstant, FloatConstant, LongConstant, DoubleConstant,
    ClassConstant, StringConstant, FieldrefConstant, MethodrefConstant,
    InterfaceMethodrefConstant, NameAndTypeConstant, MethodHandleConstant,
    MethodTypeConstant, DynamicConstant, InvokeDynamicConstant,
]

MEMBER_REFS = (FieldrefConstant, MethodrefConstant, InterfaceMethodrefConstant)

# Constants that may appear as ldc operands or bootstrap method arguments
LOADABLE = (
    IntegerConstant, FloatConstant, LongConstant, DoubleConstant, ClassConstant,
    StringConstant, MethodHandleConstant, MethodTypeConstant, DynamicConstant,
)


def _kind_names(kinds: tuple) -> tuple[str, ...]:
    return tuple(kind.__name__ for kind in kinds)


class ConstantPool:
    """The class file's constant pool, indexed from 1.

    Long and Double entries occupy two indices; the upper one is a gap that
    must never be referenced.
    """

    def __init__(self, count: int, entries: dict[int, Constant], gaps: frozenset = frozenset(),
                 offsets: Optional[dict[int, int]] = None):
        self.count = count
        self._entries = dict(entries)
        self._gaps = frozenset(gaps)
        self._offsets = dict(offsets or {})

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[int, Constant]]:
        return iter(sorted(self._entries.items()))

    def __contains__(self, index: int) -> bool:
        return index in self._entries

    def __getitem__(self, index: int) -> Constant:
        return self.get(index)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConstantPool):
            return NotImplemented
        return self.count == other.count and self._entries == other._entries

    def __repr__(self) -> str:
        return f"ConstantPool(count={self.count}, entries={len(self._entries)})"

    def get(self, index: int, *kinds: type, offset: Optional[int] = None) -> Constant:
        """Return the entry at ``index``, checking it is one of ``kinds`` if given."""
        entry = self._entries.get(index)
        if entry is None:
            if index in self._gaps:
                raise MalformedConstantPool(
                    f"Constant pool index {index} is the unusable second slot "
                    f"of a Long or Double constant", offset)
            raise UnresolvedConstantReference(index, offset)
        if kinds and not isinstance(entry, kinds):
            raise UnexpectedConstantKind(index, _kind_names(kinds), type(entry).__name__, offset)
        return entry

    def offset_of(self, index: int) -> Optional[int]:
        """Byte offset of the entry's tag in the class file, when known."""
        return self._offsets.get(index)

    def optional(self, index: int, *kinds: type, offset: Optional[int] = None) -> Optional[Constant]:
        """Like :meth:`get`, but index 0 means absent."""
        if index == 0:
            return None
        return self.get(index, *kinds, offset=offset)

    def utf8(self, index: int, offset: Optional[int] = None) -> str:
        return self.get(index, Utf8Constant, offset=offset).value

    def class_name(self, index: int, offset: Optional[int] = None) -> str:
        """Internal name of the Class constant at ``index``."""
        entry = self.get(index, ClassConstant, offset=offset)
        return self.utf8(entry.name_index)

    def name_and_type(self, index: int, offset: Optional[int] = None) -> tuple[str, str]:
        entry = self.get(index, NameAndTypeConstant, offset=offset)
        return self.utf8(entry.name_index), self.utf8(entry.descriptor_index)

    def validate(self):
        """Check that every reference between pool entries has the right kind."""
        for index, entry in self:
            offset = self.offset_of(index)
            if isinstance(entry, ClassConstant):
                self.get(entry.name_index, Utf8Constant, offset=offset)
            elif isinstance(entry, StringConstant):
                self.get(entry.string_index, Utf8Constant, offset=offset)
            elif isinstance(entry, MethodTypeConstant):
                self.get(entry.descriptor_index, Utf8Constant, offset=offset)
            elif isinstance(entry, NameAndTypeConstant):
                self.get(entry.name_index, Utf8Constant, offset=offset)
                self.get(entry.descriptor_index, Utf8Constant, offset=offset)
            elif isinstance(entry, MEMBER_REFS):
                self.get(entry.class_index, ClassConstant, offset=offset)
                self.get(entry.name_and_type_index, NameAndTypeConstant, offset=offset)
            elif isinstance(entry, (DynamicConstant, InvokeDynamicConstant)):
                self.get(entry.name_and_type_index, NameAndTypeConstant, offset=offset)
            elif isinstance(entry, MethodHandleConstant):
                self.get(entry.reference_index, *_HANDLE_TARGETS[entry.reference_kind], offset=offset)


_HANDLE_TARGETS = {
    MethodHandleKind.GET_FIELD: (FieldrefConstant,),
    MethodHandleKind.GET_STATIC: (FieldrefConstant,),
    MethodHandleKind.PUT_FIELD: (FieldrefConstant,),
    MethodHandleKind.PUT_STATIC: (FieldrefConstant,),
    MethodHandleKind.INVOKE_VIRTUAL: (MethodrefConstant,),
    MethodHandleKind.INVOKE_STATIC: (MethodrefConstant, InterfaceMethodrefConstant),
    MethodHandleKind.INVOKE_SPECIAL: (MethodrefConstant, InterfaceMethodrefConstant),
    MethodHandleKind.NEW_INVOKE_SPECIAL: (MethodrefConstant,),
    MethodHandleKind.INVOKE_INTERFACE: (InterfaceMethodrefConstant,),
}


def decode_modified_utf8(raw: bytes) -> str:
    """Decode the JVM's modified UTF-8 (NUL as C0 80, CESU-8 surrogate pairs)."""
    text = raw.replace(b"\xc0\x80", b"\x00").decode("utf-8", "surrogatepass")
    if any("\ud800" <= ch <= "\udfff" for ch in text):
        text = text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")
    return text


def _read_utf8(reader: ByteReader, offset: int) -> Utf8Constant:
    length = reader.read_u2()
    raw = reader.read_bytes(length)
    try:
        return Utf8Constant(decode_modified_utf8(raw))
    except UnicodeDecodeError as e:
        raise MalformedConstantPool(f"Invalid modified UTF-8 in constant: {e.reason}", offset) from e


def _read_method_handle(reader: ByteReader, offset: int) -> MethodHandleConstant:
    kind = reader.read_u1()
    ref_idx = reader.read_u2()
    try:
        reference_kind = MethodHandleKind(kind)
    except ValueError:
        raise MalformedConstantPool(f"Unknown method handle reference kind: {kind}", offset) from None
    return MethodHandleConstant(reference_kind, ref_idx)


_CONSTANT_READERS = {
    ConstantPoolTag.UTF8: _read_utf8,
    ConstantPoolTag.INTEGER: lambda r, _: IntegerConstant(r.read_i4()),
    ConstantPoolTag.FLOAT: lambda r, _: FloatConstant(r.read_u4()),
    ConstantPoolTag.LONG: lambda r, _: LongConstant(r.read_i8()),
    ConstantPoolTag.DOUBLE: lambda r, _: DoubleConstant(r.read_u8()),
    ConstantPoolTag.CLASS: lambda r, _: ClassConstant(r.read_u2()),
    ConstantPoolTag.STRING: lambda r, _: StringConstant(r.read_u2()),
    ConstantPoolTag.FIELDREF: lambda r, _: FieldrefConstant(r.read_u2(), r.read_u2()),
    ConstantPoolTag.METHODREF: lambda r, _: MethodrefConstant(r.read_u2(), r.read_u2()),
    ConstantPoolTag.INTERFACE_METHODREF: lambda r, _: InterfaceMethodrefConstant(r.read_u2(), r.read_u2()),
    ConstantPoolTag.NAME_AND_TYPE: lambda r, _: NameAndTypeConstant(r.read_u2(), r.read_u2()),
    ConstantPoolTag.METHOD_HANDLE: _read_method_handle,
    ConstantPoolTag.METHOD_TYPE: lambda r, _: MethodTypeConstant(r.read_u2()),
    ConstantPoolTag.DYNAMIC: lambda r, _: DynamicConstant(r.read_u2(), r.read_u2()),
    ConstantPoolTag.INVOKE_DYNAMIC: lambda r, _: InvokeDynamicConstant(r.read_u2(), r.read_u2()),
}


def read_constant_pool(reader: ByteReader, count: int) -> ConstantPool:
    """Read ``count - 1`` pool slots; ``count`` is the stored constant_pool_count."""
    entries = {}
    gaps = set()
    offsets = {}
    i = 1
    while i < count:
        offset = reader.pos
        tag = reader.read_u1()
        read_entry = _CONSTANT_READERS.get(tag)
        if read_entry is None:
            raise MalformedConstantPool(f"Unknown constant pool tag: {tag}", offset)
        entries[i] = read_entry(reader, offset)
        offsets[i] = offset

        if tag in (ConstantPoolTag.LONG, ConstantPoolTag.DOUBLE):
            # Long and Double take 2 slots
            if i + 1 >= count:
                raise MalformedConstantPool(
                    f"Wide constant at index {i} has no room for its second slot", offset)
            gaps.add(i + 1)
            i += 2
        else:
            i += 1

    pool = ConstantPool(count, entries, frozenset(gaps), offsets)
    pool.validate()
    return pool
