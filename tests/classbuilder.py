"""
Minimal class file writer used to produce test inputs.

Attributes and members are encoded to bytes against the builder's constant
pool as they are added, so the pool is complete by the time to_bytes() runs.
"""

import struct
from typing import Optional


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


def u1(value: int) -> bytes:
    return struct.pack(">B", value)


def u2(value: int) -> bytes:
    return struct.pack(">H", value)


def u4(value: int) -> bytes:
    return struct.pack(">I", value)


class PoolWriter:
    """Builds a constant pool, reusing identical entries."""

    def __init__(self):
        self._entries: list = [None]  # 1-indexed
        self._cache: dict = {}

    @property
    def count(self) -> int:
        return len(self._entries)

    def _add(self, entry: tuple) -> int:
        if entry in self._cache:
            return self._cache[entry]
        idx = len(self._entries)
        self._entries.append(entry)
        self._cache[entry] = idx
        # Long and Double take two slots
        if entry[0] in (LONG, DOUBLE):
            self._entries.append(None)
        return idx

    def add_utf8(self, value: str) -> int:
        return self._add((UTF8, value.encode("utf-8")))

    def add_utf8_bytes(self, raw: bytes) -> int:
        return self._add((UTF8, raw))

    def add_integer(self, value: int) -> int:
        return self._add((INTEGER, value))

    def add_float(self, value: float) -> int:
        return self._add((FLOAT, value))

    def add_long(self, value: int) -> int:
        return self._add((LONG, value))

    def add_double(self, value: float) -> int:
        return self._add((DOUBLE, value))

    def add_class(self, internal_name: str) -> int:
        return self._add((CLASS, self.add_utf8(internal_name)))

    def add_string(self, value: str) -> int:
        return self._add((STRING, self.add_utf8(value)))

    def add_name_and_type(self, name: str, descriptor: str) -> int:
        return self._add((NAME_AND_TYPE, self.add_utf8(name), self.add_utf8(descriptor)))

    def add_fieldref(self, class_name: str, name: str, descriptor: str) -> int:
        return self._add((FIELDREF, self.add_class(class_name), self.add_name_and_type(name, descriptor)))

    def add_methodref(self, class_name: str, name: str, descriptor: str) -> int:
        return self._add((METHODREF, self.add_class(class_name), self.add_name_and_type(name, descriptor)))

    def add_interface_methodref(self, class_name: str, name: str, descriptor: str) -> int:
        return self._add((INTERFACE_METHODREF, self.add_class(class_name),
                          self.add_name_and_type(name, descriptor)))

    def add_method_handle(self, kind: int, ref_index: int) -> int:
        return self._add((METHOD_HANDLE, kind, ref_index))

    def add_method_type(self, descriptor: str) -> int:
        return self._add((METHOD_TYPE, self.add_utf8(descriptor)))

    def add_invoke_dynamic(self, bootstrap_index: int, name: str, descriptor: str) -> int:
        return self._add((INVOKE_DYNAMIC, bootstrap_index, self.add_name_and_type(name, descriptor)))

    def add_raw(self, tag: int, *fields: int) -> int:
        """Add an entry of ``tag`` whose fields are all u2, without checking them."""
        return self._add((tag,) + fields)

    def write(self) -> bytes:
        out = bytearray(u2(len(self._entries)))
        for entry in self._entries[1:]:
            if entry is None:
                continue
            tag = entry[0]
            out.append(tag)
            if tag == UTF8:
                out.extend(u2(len(entry[1])))
                out.extend(entry[1])
            elif tag == INTEGER:
                out.extend(struct.pack(">i", entry[1]))
            elif tag == FLOAT:
                out.extend(struct.pack(">f", entry[1]))
            elif tag == LONG:
                out.extend(struct.pack(">q", entry[1]))
            elif tag == DOUBLE:
                out.extend(struct.pack(">d", entry[1]))
            elif tag == METHOD_HANDLE:
                out.append(entry[1])
                out.extend(u2(entry[2]))
            else:
                for value in entry[1:]:
                    out.extend(u2(value))
        return bytes(out)


def attribute(cp: PoolWriter, name: str, payload: bytes, length: Optional[int] = None) -> bytes:
    """Encode an attribute; ``length`` overrides the declared length."""
    declared = len(payload) if length is None else length
    return u2(cp.add_utf8(name)) + u4(declared) + payload


def attribute_list(attributes) -> bytes:
    return u2(len(attributes)) + b"".join(attributes)


def member(cp: PoolWriter, access_flags: int, name: str, descriptor: str, attributes=()) -> bytes:
    return (u2(access_flags) + u2(cp.add_utf8(name)) + u2(cp.add_utf8(descriptor))
            + attribute_list(attributes))


def code_attribute(cp: PoolWriter, code: bytes, max_stack: int = 1, max_locals: int = 1,
                   exception_table=(), attributes=()) -> bytes:
    payload = u2(max_stack) + u2(max_locals) + u4(len(code)) + code
    payload += u2(len(exception_table))
    for start_pc, end_pc, handler_pc, catch_type in exception_table:
        payload += u2(start_pc) + u2(end_pc) + u2(handler_pc) + u2(catch_type)
    payload += attribute_list(attributes)
    return attribute(cp, "Code", payload)


def element_value(cp: PoolWriter, tag: str, value) -> bytes:
    """Encode an annotation element value from (tag, value)."""
    out = tag.encode("ascii")
    if tag in "BCISZ":
        out += u2(cp.add_integer(value))
    elif tag == "D":
        out += u2(cp.add_double(value))
    elif tag == "F":
        out += u2(cp.add_float(value))
    elif tag == "J":
        out += u2(cp.add_long(value))
    elif tag == "s":
        out += u2(cp.add_utf8(value))
    elif tag == "e":
        # Enum: value is (type_desc, const_name)
        out += u2(cp.add_utf8(value[0])) + u2(cp.add_utf8(value[1]))
    elif tag == "c":
        # Class: value is a return descriptor
        out += u2(cp.add_utf8(value))
    elif tag == "@":
        # Nested annotation: value is (type_desc, elements)
        out += annotation(cp, *value)
    elif tag == "[":
        # Array: value is list of (tag, value)
        out += u2(len(value))
        for elem_tag, elem_value in value:
            out += element_value(cp, elem_tag, elem_value)
    else:
        raise ValueError(f"Unsupported element tag: {tag}")
    return out


def annotation(cp: PoolWriter, type_descriptor: str, elements: Optional[dict] = None) -> bytes:
    """Encode an annotation; ``elements`` maps name -> (tag, value)."""
    elements = elements or {}
    out = u2(cp.add_utf8(type_descriptor)) + u2(len(elements))
    for name, (tag, value) in elements.items():
        out += u2(cp.add_utf8(name)) + element_value(cp, tag, value)
    return out


def annotations_payload(cp: PoolWriter, annotations) -> bytes:
    """Counted annotations from a list of (type_desc, elements)."""
    return u2(len(annotations)) + b"".join(annotation(cp, *ann) for ann in annotations)


class ClassBuilder:
    """Assembles a class file from pre-encoded members and attributes."""

    def __init__(self, name: Optional[str] = "Test", super_class: Optional[str] = "java/lang/Object",
                 version: tuple[int, int] = (52, 0), access_flags: int = 0x0021):
        self.cp = PoolWriter()
        self.version = version
        self.access_flags = access_flags
        self.this_class = self.cp.add_class(name) if name else 0
        self.super_class = self.cp.add_class(super_class) if super_class else 0
        self.interfaces: list[int] = []
        self.fields: list[bytes] = []
        self.methods: list[bytes] = []
        self.attributes: list[bytes] = []

    def add_interface(self, name: str):
        self.interfaces.append(self.cp.add_class(name))

    def add_field(self, access_flags: int, name: str, descriptor: str, attributes=()):
        self.fields.append(member(self.cp, access_flags, name, descriptor, attributes))

    def add_method(self, access_flags: int, name: str, descriptor: str, attributes=()):
        self.methods.append(member(self.cp, access_flags, name, descriptor, attributes))

    def add_attribute(self, name: str, payload: bytes, length: Optional[int] = None):
        self.attributes.append(attribute(self.cp, name, payload, length))

    def to_bytes(self) -> bytes:
        out = bytearray()
        out.extend(u4(0xCAFEBABE))
        out.extend(u2(self.version[1]) + u2(self.version[0]))
        out.extend(self.cp.write())
        out.extend(u2(self.access_flags))
        out.extend(u2(self.this_class))
        out.extend(u2(self.super_class))
        out.extend(u2(len(self.interfaces)))
        for idx in self.interfaces:
            out.extend(u2(idx))
        out.extend(u2(len(self.fields)))
        for fld in self.fields:
            out.extend(fld)
        out.extend(u2(len(self.methods)))
        for method in self.methods:
            out.extend(method)
        out.extend(attribute_list(self.attributes))
        return bytes(out)
