"""
Field and method descriptor parser using Lark.
See JVMS 4.3 for the descriptor grammar.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Union

from lark import Lark
from lark.visitors import Transformer_NonRecursive
from lark.exceptions import LarkError

from .errors import InvalidDescriptor


GRAMMAR_FILE = Path(__file__).parent / "descriptor.lark"

MAX_ARRAY_DIMENSIONS = 255

BASE_TYPE_NAMES = {
    "B": "byte", "C": "char", "D": "double", "F": "float",
    "I": "int", "J": "long", "S": "short", "Z": "boolean", "V": "void",
}


@dataclass(frozen=True)
class BaseType:
    """Primitive type or void (B, C, D, F, I, J, S, Z, V)."""
    code: str

    @property
    def name(self) -> str:
        return BASE_TYPE_NAMES[self.code]

    @property
    def size(self) -> int:
        """Local variable slots used by this type."""
        if self.code == "V":
            return 0
        return 2 if self.code in "JD" else 1

    def descriptor(self) -> str:
        return self.code


@dataclass(frozen=True)
class ClassType:
    """Class or interface type, by internal name (java/lang/String)."""
    name: str

    @property
    def size(self) -> int:
        return 1

    def descriptor(self) -> str:
        return f"L{self.name};"


@dataclass(frozen=True)
class ArrayType:
    element_type: Union[BaseType, ClassType]
    dimensions: int = 1

    @property
    def size(self) -> int:
        return 1

    def descriptor(self) -> str:
        return "[" * self.dimensions + self.element_type.descriptor()


FieldType = Union[BaseType, ClassType, ArrayType]


@dataclass(frozen=True)
class MethodDescriptor:
    parameter_types: tuple[FieldType, ...]
    return_type: Union[FieldType, BaseType]

    @property
    def parameter_slots(self) -> int:
        return sum(p.size for p in self.parameter_types)

    def descriptor(self) -> str:
        params = "".join(p.descriptor() for p in self.parameter_types)
        return f"({params}){self.return_type.descriptor()}"


VOID = BaseType("V")


class DescriptorTransformer(Transformer_NonRecursive):
    """Transforms the Lark parse tree into descriptor types."""

    def field_descriptor(self, items):
        return items[0]

    def method_descriptor(self, items):
        return MethodDescriptor(tuple(items[:-1]), items[-1])

    def base_type(self, items):
        return BaseType(str(items[0]))

    def object_type(self, items):
        return ClassType(str(items[0]))

    def array_type(self, items):
        element = items[0]
        if isinstance(element, ArrayType):
            return ArrayType(element.element_type, element.dimensions + 1)
        return ArrayType(element)

    def void_type(self, items):
        return VOID


@lru_cache(maxsize=None)
def _get_parser() -> Lark:
    with open(GRAMMAR_FILE, "r") as f:
        grammar = f.read()
    return Lark(
        grammar,
        parser="earley",
        start=["field_descriptor", "method_descriptor"],
        maybe_placeholders=False,
    )


def _parse(text: str, start: str):
    if "[" * (MAX_ARRAY_DIMENSIONS + 1) in text:
        raise InvalidDescriptor(
            f"Descriptor {text!r} has more than {MAX_ARRAY_DIMENSIONS} array dimensions")
    try:
        tree = _get_parser().parse(text, start=start)
    except LarkError as e:
        raise InvalidDescriptor(f"Invalid {start.replace('_', ' ')} {text!r}: {e}") from None
    return DescriptorTransformer().transform(tree)


def parse_field_descriptor(text: str) -> FieldType:
    """Parse a field descriptor such as ``[Ljava/lang/String;``."""
    return _parse(text, "field_descriptor")


def parse_method_descriptor(text: str) -> MethodDescriptor:
    """Parse a method descriptor such as ``(I[J)V``."""
    return _parse(text, "method_descriptor")
