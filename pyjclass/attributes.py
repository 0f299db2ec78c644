"""
Class, field, method and code attributes (JVMS 4.7).

Every attribute starts with a u2 name index and a u4 length. The name picks
the payload reader; names we do not know are kept as raw bytes. Payloads are
read from a reader bounded to the declared length, so a payload that reads
more or fewer bytes than declared is reported as AttributeLengthMismatch.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .annotations import (
    Annotation, ElementValue, read_counted_annotations, read_element_value,
    read_parameter_annotations,
)
from .constants import (
    LOADABLE, Constant, ConstantPool, DoubleConstant, FloatConstant,
    IntegerConstant, LongConstant, MethodHandleConstant, StringConstant,
)
from .errors import AttributeLengthMismatch, TruncatedInput
from .flags import InnerClassAccessFlags, ParameterAccessFlags
from .options import ReaderOptions
from .reader import ByteReader
from .stackmap import StackMapFrame, read_stack_map_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstantValueAttribute:
    constantvalue_index: int
    constant: Union[IntegerConstant, FloatConstant, LongConstant, DoubleConstant, StringConstant]
    value: object  # resolved Python value; str for String constants

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        offset = reader.pos
        cv_idx = reader.read_u2()
        constant = cp.get(cv_idx, IntegerConstant, FloatConstant, LongConstant,
                          DoubleConstant, StringConstant, offset=offset)
        if isinstance(constant, StringConstant):
            value = cp.utf8(constant.string_index, offset)
        else:
            value = constant.value
        return cls(cv_idx, constant, value)


@dataclass(frozen=True)
class ExceptionTableEntry:
    """An entry in the exception table."""
    start_pc: int
    end_pc: int
    handler_pc: int
    catch_type: int  # 0 for finally (catches all), otherwise constant pool index of class
    catch_type_name: Optional[str]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool):
        start_pc = reader.read_u2()
        end_pc = reader.read_u2()
        handler_pc = reader.read_u2()
        offset = reader.pos
        catch_type = reader.read_u2()
        catch_name = cp.class_name(catch_type, offset) if catch_type else None
        return cls(start_pc, end_pc, handler_pc, catch_type, catch_name)


@dataclass(frozen=True)
class CodeAttribute:
    """Code attribute for a method. ``code`` is kept as opaque bytes."""
    max_stack: int
    max_locals: int
    code: bytes
    exception_table: tuple[ExceptionTableEntry, ...]
    attributes: tuple["AttributeInfo", ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        max_stack = reader.read_u2()
        max_locals = reader.read_u2()
        code_length = reader.read_u4()
        code = reader.read_bytes(code_length)
        table_length = reader.read_u2()
        exception_table = tuple(ExceptionTableEntry.read(reader, cp) for _ in range(table_length))
        attributes = read_attributes(reader, cp, options)
        return cls(max_stack, max_locals, code, exception_table, attributes)

    def attribute(self, name: str) -> Optional["AttributeInfo"]:
        return find_attribute(self.attributes, name)


@dataclass(frozen=True)
class StackMapTableAttribute:
    entries: tuple[StackMapFrame, ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        return cls(read_stack_map_table(reader, cp, options.jvms_verification_types))


@dataclass(frozen=True)
class ExceptionsAttribute:
    exception_index_table: tuple[int, ...]
    exceptions: tuple[str, ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        num_exc = reader.read_u2()
        indices = []
        names = []
        for _ in range(num_exc):
            offset = reader.pos
            exc_idx = reader.read_u2()
            indices.append(exc_idx)
            names.append(cp.class_name(exc_idx, offset))
        return cls(tuple(indices), tuple(names))


@dataclass(frozen=True)
class InnerClassInfo:
    """Represents an entry in the InnerClasses attribute."""
    inner_class_info_index: int
    outer_class_info_index: int
    inner_name_index: int
    access_flags: InnerClassAccessFlags
    inner_class: str  # Internal name like "Outer$Inner"
    outer_class: Optional[str]  # Internal name like "Outer", None for anonymous/local
    inner_name: Optional[str]  # Simple name like "Inner", None for anonymous

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool):
        offset = reader.pos
        inner_class_idx = reader.read_u2()
        outer_class_idx = reader.read_u2()
        inner_name_idx = reader.read_u2()
        inner_access = InnerClassAccessFlags(reader.read_u2())
        return cls(
            inner_class_idx, outer_class_idx, inner_name_idx, inner_access,
            inner_class=cp.class_name(inner_class_idx, offset),
            outer_class=cp.class_name(outer_class_idx, offset + 2) if outer_class_idx else None,
            inner_name=cp.utf8(inner_name_idx, offset + 4) if inner_name_idx else None,
        )


@dataclass(frozen=True)
class InnerClassesAttribute:
    classes: tuple[InnerClassInfo, ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        num_classes = reader.read_u2()
        return cls(tuple(InnerClassInfo.read(reader, cp) for _ in range(num_classes)))


@dataclass(frozen=True)
class EnclosingMethodAttribute:
    class_index: int
    method_index: int  # NameAndType, 0 when not enclosed by a method
    class_name: str
    method_name: Optional[str]
    method_descriptor: Optional[str]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        offset = reader.pos
        class_idx = reader.read_u2()
        method_idx = reader.read_u2()
        class_name = cp.class_name(class_idx, offset)
        method_name = method_desc = None
        if method_idx:
            method_name, method_desc = cp.name_and_type(method_idx, offset + 2)
        return cls(class_idx, method_idx, class_name, method_name, method_desc)


@dataclass(frozen=True)
class SyntheticAttribute:
    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        return cls()


@dataclass(frozen=True)
class DeprecatedAttribute:
    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        return cls()


@dataclass(frozen=True)
class SignatureAttribute:
    signature_index: int
    signature: str

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        offset = reader.pos
        sig_idx = reader.read_u2()
        return cls(sig_idx, cp.utf8(sig_idx, offset))


@dataclass(frozen=True)
class SourceFileAttribute:
    sourcefile_index: int
    source_file: str

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        offset = reader.pos
        sf_idx = reader.read_u2()
        return cls(sf_idx, cp.utf8(sf_idx, offset))


@dataclass(frozen=True)
class SourceDebugExtensionAttribute:
    debug_extension: bytes

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        return cls(reader.read_bytes(reader.remaining))


@dataclass(frozen=True)
class LineNumberEntry:
    start_pc: int
    line_number: int


@dataclass(frozen=True)
class LineNumberTableAttribute:
    line_number_table: tuple[LineNumberEntry, ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        table_length = reader.read_u2()
        return cls(tuple(
            LineNumberEntry(reader.read_u2(), reader.read_u2()) for _ in range(table_length)))


@dataclass(frozen=True)
class LocalVariableEntry:
    start_pc: int
    length: int
    name_index: int
    descriptor_index: int
    index: int  # local variable slot
    name: str
    descriptor: str


@dataclass(frozen=True)
class LocalVariableTypeEntry:
    start_pc: int
    length: int
    name_index: int
    signature_index: int
    index: int
    name: str
    signature: str


def _read_local_variables(reader: ByteReader, cp: ConstantPool, entry_type: type) -> tuple:
    table_length = reader.read_u2()
    entries = []
    for _ in range(table_length):
        start_pc = reader.read_u2()
        length = reader.read_u2()
        offset = reader.pos
        name_idx = reader.read_u2()
        type_idx = reader.read_u2()
        slot = reader.read_u2()
        entries.append(entry_type(
            start_pc, length, name_idx, type_idx, slot,
            cp.utf8(name_idx, offset), cp.utf8(type_idx, offset + 2)))
    return tuple(entries)


@dataclass(frozen=True)
class LocalVariableTableAttribute:
    local_variable_table: tuple[LocalVariableEntry, ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        return cls(_read_local_variables(reader, cp, LocalVariableEntry))


@dataclass(frozen=True)
class LocalVariableTypeTableAttribute:
    local_variable_type_table: tuple[LocalVariableTypeEntry, ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        return cls(_read_local_variables(reader, cp, LocalVariableTypeEntry))


@dataclass(frozen=True)
class RuntimeVisibleAnnotationsAttribute:
    annotations: tuple[Annotation, ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        return cls(read_counted_annotations(reader, cp))


@dataclass(frozen=True)
class RuntimeInvisibleAnnotationsAttribute:
    annotations: tuple[Annotation, ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        return cls(read_counted_annotations(reader, cp))


@dataclass(frozen=True)
class RuntimeVisibleParameterAnnotationsAttribute:
    parameter_annotations: tuple[tuple[Annotation, ...], ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        return cls(read_parameter_annotations(reader, cp))


@dataclass(frozen=True)
class RuntimeInvisibleParameterAnnotationsAttribute:
    parameter_annotations: tuple[tuple[Annotation, ...], ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        return cls(read_parameter_annotations(reader, cp))


@dataclass(frozen=True)
class AnnotationDefaultAttribute:
    default_value: ElementValue

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        return cls(read_element_value(reader, cp))


@dataclass(frozen=True)
class BootstrapMethod:
    bootstrap_method_ref: int
    bootstrap_arguments: tuple[int, ...]
    method_handle: MethodHandleConstant
    arguments: tuple[Constant, ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool):
        offset = reader.pos
        ref_idx = reader.read_u2()
        handle = cp.get(ref_idx, MethodHandleConstant, offset=offset)
        num_args = reader.read_u2()
        indices = []
        arguments = []
        for _ in range(num_args):
            offset = reader.pos
            arg_idx = reader.read_u2()
            indices.append(arg_idx)
            arguments.append(cp.get(arg_idx, *LOADABLE, offset=offset))
        return cls(ref_idx, tuple(indices), handle, tuple(arguments))


@dataclass(frozen=True)
class BootstrapMethodsAttribute:
    bootstrap_methods: tuple[BootstrapMethod, ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        num_methods = reader.read_u2()
        return cls(tuple(BootstrapMethod.read(reader, cp) for _ in range(num_methods)))


@dataclass(frozen=True)
class MethodParameter:
    name_index: int  # 0 for a parameter without a name
    name: Optional[str]
    access_flags: ParameterAccessFlags


@dataclass(frozen=True)
class MethodParametersAttribute:
    parameters: tuple[MethodParameter, ...]

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool, options: ReaderOptions):
        parameters_count = reader.read_u1()
        parameters = []
        for _ in range(parameters_count):
            offset = reader.pos
            name_idx = reader.read_u2()
            flags = ParameterAccessFlags(reader.read_u2())
            name = cp.utf8(name_idx, offset) if name_idx else None
            parameters.append(MethodParameter(name_idx, name, flags))
        return cls(tuple(parameters))


@dataclass(frozen=True)
class UnknownAttribute:
    """An attribute we have no reader for, kept as its raw bytes."""
    info: bytes


AttributePayload = Union[
    ConstantValueAttribute, CodeAttribute, StackMapTableAttribute, ExceptionsAttribute,
    InnerClassesAttribute, EnclosingMethodAttribute, SyntheticAttribute, DeprecatedAttribute,
    SignatureAttribute, SourceFileAttribute, SourceDebugExtensionAttribute,
    LineNumberTableAttribute, LocalVariableTableAttribute, LocalVariableTypeTableAttribute,
    RuntimeVisibleAnnotationsAttribute, RuntimeInvisibleAnnotationsAttribute,
    RuntimeVisibleParameterAnnotationsAttribute, RuntimeInvisibleParameterAnnotationsAttribute,
    AnnotationDefaultAttribute, BootstrapMethodsAttribute, MethodParametersAttribute,
    UnknownAttribute,
]


@dataclass(frozen=True)
class AttributeInfo:
    """Generic attribute header plus the decoded payload."""
    name_index: int
    name: str
    length: int
    info: AttributePayload


ATTRIBUTE_TYPES = {
    "ConstantValue": ConstantValueAttribute,
    "Code": CodeAttribute,
    "StackMapTable": StackMapTableAttribute,
    "Exceptions": ExceptionsAttribute,
    "InnerClasses": InnerClassesAttribute,
    "EnclosingMethod": EnclosingMethodAttribute,
    "Synthetic": SyntheticAttribute,
    "Signature": SignatureAttribute,
    "SourceFile": SourceFileAttribute,
    "SourceDebugExtension": SourceDebugExtensionAttribute,
    "LineNumberTable": LineNumberTableAttribute,
    "LocalVariableTable": LocalVariableTableAttribute,
    "LocalVariableTypeTable": LocalVariableTypeTableAttribute,
    "Deprecated": DeprecatedAttribute,
    "RuntimeVisibleAnnotations": RuntimeVisibleAnnotationsAttribute,
    "RuntimeInvisibleAnnotations": RuntimeInvisibleAnnotationsAttribute,
    "RuntimeVisibleParameterAnnotations": RuntimeVisibleParameterAnnotationsAttribute,
    "RuntimeInvisibleParameterAnnotations": RuntimeInvisibleParameterAnnotationsAttribute,
    "AnnotationDefault": AnnotationDefaultAttribute,
    "BootstrapMethods": BootstrapMethodsAttribute,
    "MethodParameters": MethodParametersAttribute,
}

# Misspelled name emitted by some old tools; only honoured with legacy_attribute_names
LEGACY_ATTRIBUTE_TYPES = {
    "RuntimeVisibleParamterAnnotations": RuntimeVisibleParameterAnnotationsAttribute,
}


def _attribute_type(name: str, options: ReaderOptions) -> Optional[type]:
    attr_type = ATTRIBUTE_TYPES.get(name)
    if attr_type is None and options.legacy_attribute_names:
        attr_type = LEGACY_ATTRIBUTE_TYPES.get(name)
    return attr_type


def read_attribute(reader: ByteReader, cp: ConstantPool, options: ReaderOptions) -> AttributeInfo:
    """Read one attribute: header, then its payload."""
    offset = reader.pos
    name_idx = reader.read_u2()
    length = reader.read_u4()
    name = cp.utf8(name_idx, offset)
    payload = reader.fork(length)
    start = payload.pos

    attr_type = _attribute_type(name, options)
    if attr_type is None:
        logger.debug("Keeping unknown attribute %r (%d bytes) at offset %d", name, length, offset)
        return AttributeInfo(name_idx, name, length, UnknownAttribute(payload.read_bytes(length)))

    try:
        info = attr_type.read(payload, cp, options)
    except TruncatedInput as e:
        raise AttributeLengthMismatch(name, length, None, e.offset) from e
    if payload.remaining:
        raise AttributeLengthMismatch(name, length, payload.pos - start, payload.pos)
    return AttributeInfo(name_idx, name, length, info)


def read_attributes(reader: ByteReader, cp: ConstantPool, options: ReaderOptions) -> tuple[AttributeInfo, ...]:
    """Read a u2 attributes_count followed by that many attributes."""
    count = reader.read_u2()
    return tuple(read_attribute(reader, cp, options) for _ in range(count))


def find_attribute(attributes: tuple[AttributeInfo, ...], name: str) -> Optional[AttributeInfo]:
    """First attribute called ``name``, or None."""
    for attr in attributes:
        if attr.name == name:
            return attr
    return None
