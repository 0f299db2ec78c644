"""
Decoded class file model: fields, methods and the class itself.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Optional

from .attributes import (
    AttributeInfo, CodeAttribute, ExceptionsAttribute, find_attribute, read_attributes,
)
from .constants import ClassConstant, ConstantPool
from .descriptors import FieldType, MethodDescriptor, parse_field_descriptor, parse_method_descriptor
from .flags import ClassAccessFlags, FieldAccessFlags, MethodAccessFlags
from .options import ReaderOptions
from .reader import ByteReader


class ClassFileVersion:
    JAVA_6 = (50, 0)
    JAVA_7 = (51, 0)
    JAVA_8 = (52, 0)


class _Member:
    """Lookups shared by fields, methods and classes."""

    attributes: tuple[AttributeInfo, ...]

    def attribute(self, name: str) -> Optional[AttributeInfo]:
        return find_attribute(self.attributes, name)

    def attributes_named(self, name: str) -> tuple[AttributeInfo, ...]:
        return tuple(attr for attr in self.attributes if attr.name == name)

    @property
    def signature(self) -> Optional[str]:
        attr = self.attribute("Signature")
        return attr.info.signature if attr else None

    @property
    def is_deprecated(self) -> bool:
        return self.attribute("Deprecated") is not None


def _read_member_header(reader: ByteReader, cp: ConstantPool) -> tuple[int, int, int, str, str]:
    access = reader.read_u2()
    offset = reader.pos
    name_idx = reader.read_u2()
    desc_idx = reader.read_u2()
    return access, name_idx, desc_idx, cp.utf8(name_idx, offset), cp.utf8(desc_idx, offset + 2)


@dataclass(frozen=True)
class FieldInfo(_Member):
    """Parsed field information."""
    access_flags: FieldAccessFlags
    name_index: int
    descriptor_index: int
    name: str
    descriptor: str
    attributes: tuple[AttributeInfo, ...] = ()

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions) -> "FieldInfo":
        access, name_idx, desc_idx, name, descriptor = _read_member_header(reader, cp)
        attrs = read_attributes(reader, cp, options)
        return cls(FieldAccessFlags(access), name_idx, desc_idx, name, descriptor, attrs)

    @cached_property
    def field_type(self) -> FieldType:
        return parse_field_descriptor(self.descriptor)

    @property
    def constant_value(self):
        attr = self.attribute("ConstantValue")
        return attr.info.value if attr else None


@dataclass(frozen=True)
class MethodInfo(_Member):
    """Parsed method information."""
    access_flags: MethodAccessFlags
    name_index: int
    descriptor_index: int
    name: str
    descriptor: str
    attributes: tuple[AttributeInfo, ...] = ()

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions) -> "MethodInfo":
        access, name_idx, desc_idx, name, descriptor = _read_member_header(reader, cp)
        attrs = read_attributes(reader, cp, options)
        return cls(MethodAccessFlags(access), name_idx, desc_idx, name, descriptor, attrs)

    @cached_property
    def method_type(self) -> MethodDescriptor:
        return parse_method_descriptor(self.descriptor)

    @property
    def code(self) -> Optional[CodeAttribute]:
        attr = self.attribute("Code")
        return attr.info if attr else None

    @property
    def exceptions(self) -> tuple[str, ...]:
        attr = self.attribute("Exceptions")
        if attr and isinstance(attr.info, ExceptionsAttribute):
            return attr.info.exceptions
        return ()


@dataclass(frozen=True)
class ClassFile(_Member):
    """A decoded Java class file. Build instances with :func:`pyjclass.parse_class`."""

    MAGIC = 0xCAFEBABE

    magic: int
    minor_version: int
    major_version: int
    constant_pool: ConstantPool
    access_flags: ClassAccessFlags
    this_class_index: int
    super_class_index: int
    this_class: Optional[ClassConstant]
    super_class: Optional[ClassConstant]  # None only for java/lang/Object and module-info
    interface_indices: tuple[int, ...]
    interfaces: tuple[ClassConstant, ...]
    fields: tuple[FieldInfo, ...]
    methods: tuple[MethodInfo, ...]
    attributes: tuple[AttributeInfo, ...]

    @property
    def version(self) -> tuple[int, int]:
        return (self.major_version, self.minor_version)

    @property
    def name(self) -> Optional[str]:
        if self.this_class is None:
            return None
        return self.constant_pool.utf8(self.this_class.name_index)

    @property
    def super_name(self) -> Optional[str]:
        if self.super_class is None:
            return None
        return self.constant_pool.utf8(self.super_class.name_index)

    @property
    def interface_names(self) -> tuple[str, ...]:
        return tuple(self.constant_pool.utf8(c.name_index) for c in self.interfaces)

    @property
    def source_file(self) -> Optional[str]:
        attr = self.attribute("SourceFile")
        return attr.info.source_file if attr else None

    def field(self, name: str) -> Optional[FieldInfo]:
        for fld in self.fields:
            if fld.name == name:
                return fld
        return None

    def method(self, name: str, descriptor: Optional[str] = None) -> Optional[MethodInfo]:
        for method in self.methods:
            if method.name == name and (descriptor is None or method.descriptor == descriptor):
                return method
        return None
