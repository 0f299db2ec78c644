"""
Annotations and annotation element values (JVMS 4.7.16).

Element values form a recursive tagged union: arrays hold further element
values and nested annotations hold further element-value pairs.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from .constants import (
    ClassConstant, ConstantPool, DoubleConstant, FloatConstant, IntegerConstant,
    LongConstant, Utf8Constant,
)
from .errors import MalformedAnnotation
from .reader import ByteReader


# Constant kind expected behind each primitive / string tag
CONST_VALUE_KINDS = {
    "B": IntegerConstant,
    "C": IntegerConstant,
    "D": DoubleConstant,
    "F": FloatConstant,
    "I": IntegerConstant,
    "J": LongConstant,
    "S": IntegerConstant,
    "Z": IntegerConstant,
    "s": Utf8Constant,
}


@dataclass(frozen=True)
class ConstElementValue:
    """A primitive or String value (tags B C D F I J S Z s)."""
    tag: str
    const_value_index: int
    constant: Union[IntegerConstant, FloatConstant, LongConstant, DoubleConstant, Utf8Constant]

    @property
    def value(self):
        if self.tag == "Z":
            return bool(self.constant.value)
        if self.tag == "C":
            return chr(self.constant.value & 0xFFFF)
        return self.constant.value


@dataclass(frozen=True)
class EnumElementValue:
    type_name_index: int
    const_name_index: int
    type_name: str
    const_name: str
    tag: ClassVar[str] = "e"


@dataclass(frozen=True)
class ClassElementValue:
    """A class literal.

    ``class_info`` is normally a Utf8 return descriptor (``Ljava/lang/String;``,
    ``V``); a Class constant is accepted as well, in which case ``name`` is its
    internal name.
    """
    class_info_index: int
    class_info: Union[Utf8Constant, ClassConstant]
    name: str
    tag: ClassVar[str] = "c"


@dataclass(frozen=True)
class AnnotationElementValue:
    annotation: "Annotation"
    tag: ClassVar[str] = "@"


@dataclass(frozen=True)
class ArrayElementValue:
    """Array of values; elements need not share a tag."""
    values: tuple
    tag: ClassVar[str] = "["


ElementValue = Union[
    ConstElementValue, EnumElementValue, ClassElementValue,
    AnnotationElementValue, ArrayElementValue,
]


@dataclass(frozen=True)
class ElementValuePair:
    name_index: int
    name: str
    value: ElementValue


@dataclass(frozen=True)
class Annotation:
    """A parsed annotation."""
    type_index: int
    type_name: str  # field descriptor, e.g. "Ljava/lang/Deprecated;"
    element_value_pairs: tuple[ElementValuePair, ...] = ()

    @classmethod
    def read(cls, reader: ByteReader, cp: ConstantPool) -> "Annotation":
        offset = reader.pos
        type_idx = reader.read_u2()
        type_name = cp.utf8(type_idx, offset)
        num_pairs = reader.read_u2()
        pairs = []
        for _ in range(num_pairs):
            offset = reader.pos
            name_idx = reader.read_u2()
            name = cp.utf8(name_idx, offset)
            pairs.append(ElementValuePair(name_idx, name, read_element_value(reader, cp)))
        return cls(type_idx, type_name, tuple(pairs))

    @property
    def elements(self) -> dict[str, ElementValue]:
        return {pair.name: pair.value for pair in self.element_value_pairs}

    def element(self, name: str) -> Optional[ElementValue]:
        for pair in self.element_value_pairs:
            if pair.name == name:
                return pair.value
        return None


def _read_const_value(tag: str, reader: ByteReader, cp: ConstantPool) -> ConstElementValue:
    offset = reader.pos
    const_idx = reader.read_u2()
    constant = cp.get(const_idx, CONST_VALUE_KINDS[tag], offset=offset)
    return ConstElementValue(tag, const_idx, constant)


def _read_enum_value(tag: str, reader: ByteReader, cp: ConstantPool) -> EnumElementValue:
    offset = reader.pos
    type_idx = reader.read_u2()
    const_idx = reader.read_u2()
    return EnumElementValue(type_idx, const_idx, cp.utf8(type_idx, offset), cp.utf8(const_idx, offset + 2))


def _read_class_value(tag: str, reader: ByteReader, cp: ConstantPool) -> ClassElementValue:
    offset = reader.pos
    class_idx = reader.read_u2()
    class_info = cp.get(class_idx, Utf8Constant, ClassConstant, offset=offset)
    if isinstance(class_info, ClassConstant):
        name = cp.utf8(class_info.name_index, offset)
    else:
        name = class_info.value
    return ClassElementValue(class_idx, class_info, name)


def _read_annotation_value(tag: str, reader: ByteReader, cp: ConstantPool) -> AnnotationElementValue:
    return AnnotationElementValue(Annotation.read(reader, cp))


def _read_array_value(tag: str, reader: ByteReader, cp: ConstantPool) -> ArrayElementValue:
    num_values = reader.read_u2()
    return ArrayElementValue(tuple(read_element_value(reader, cp) for _ in range(num_values)))


_VALUE_READERS = {
    **{tag: _read_const_value for tag in CONST_VALUE_KINDS},
    "e": _read_enum_value,
    "c": _read_class_value,
    "@": _read_annotation_value,
    "[": _read_array_value,
}


def read_element_value(reader: ByteReader, cp: ConstantPool) -> ElementValue:
    """Read one tagged element value."""
    offset = reader.pos
    tag = chr(reader.read_u1())
    read_value = _VALUE_READERS.get(tag)
    if read_value is None:
        raise MalformedAnnotation(f"Unknown annotation element value tag: {tag!r}", offset)
    return read_value(tag, reader, cp)


def read_counted_annotations(reader: ByteReader, cp: ConstantPool) -> tuple[Annotation, ...]:
    """Read a u2 count followed by that many annotations."""
    num_annotations = reader.read_u2()
    return tuple(Annotation.read(reader, cp) for _ in range(num_annotations))


def read_parameter_annotations(reader: ByteReader, cp: ConstantPool) -> tuple[tuple[Annotation, ...], ...]:
    """Read a u1 parameter count, then one annotation block per parameter."""
    num_parameters = reader.read_u1()
    return tuple(read_counted_annotations(reader, cp) for _ in range(num_parameters))
