"""
StackMapTable frames (JVMS 4.7.4).

The frame shape is chosen by the numeric range of the leading frame_type
byte, and for Chop/Append frames the byte value also determines the payload
size.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Union

from .constants import ConstantPool
from .errors import UnsupportedFrameEncoding, UnsupportedVerificationType
from .reader import ByteReader


SAME_MAX = 63
SAME_LOCALS_1_STACK_ITEM_MAX = 127
SAME_LOCALS_1_STACK_ITEM_EXTENDED = 247
CHOP_MIN = 248
CHOP_MAX = 250
SAME_FRAME_EXTENDED = 251
APPEND_MIN = 252
APPEND_MAX = 254
FULL_FRAME = 255


class VerificationTypeTag(IntEnum):
    TOP = 0
    INTEGER = 1
    FLOAT = 2
    DOUBLE = 3
    LONG = 4
    NULL = 5
    UNINITIALIZED_THIS = 6
    OBJECT = 7
    UNINITIALIZED = 8


@dataclass(frozen=True)
class SimpleVerificationType:
    """A verification type without operand (Top, Integer, Float, ...)."""
    tag: VerificationTypeTag


@dataclass(frozen=True)
class ObjectVariableInfo:
    cpool_index: int
    class_name: str
    tag: ClassVar[VerificationTypeTag] = VerificationTypeTag.OBJECT


@dataclass(frozen=True)
class UninitializedVariableInfo:
    offset: int  # bytecode offset of the `new` instruction
    tag: ClassVar[VerificationTypeTag] = VerificationTypeTag.UNINITIALIZED


VerificationTypeInfo = Union[SimpleVerificationType, ObjectVariableInfo, UninitializedVariableInfo]

# Default numbering: 6 and 7 carry a u2 operand and nothing follows 7
_TAGS = {
    0: VerificationTypeTag.TOP,
    1: VerificationTypeTag.INTEGER,
    2: VerificationTypeTag.FLOAT,
    3: VerificationTypeTag.DOUBLE,
    4: VerificationTypeTag.LONG,
    5: VerificationTypeTag.NULL,
    6: VerificationTypeTag.OBJECT,
    7: VerificationTypeTag.UNINITIALIZED,
}

# JVMS numbering: 6 is UninitializedThis, 7 and 8 carry a u2 operand
_JVMS_TAGS = {tag.value: tag for tag in VerificationTypeTag}


def read_verification_type(reader: ByteReader, cp: ConstantPool, jvms: bool = False) -> VerificationTypeInfo:
    offset = reader.pos
    raw = reader.read_u1()
    tag = (_JVMS_TAGS if jvms else _TAGS).get(raw)
    if tag is None:
        raise UnsupportedVerificationType(raw, offset)
    if tag == VerificationTypeTag.OBJECT:
        operand_offset = reader.pos
        cpool_idx = reader.read_u2()
        return ObjectVariableInfo(cpool_idx, cp.class_name(cpool_idx, operand_offset))
    if tag == VerificationTypeTag.UNINITIALIZED:
        return UninitializedVariableInfo(reader.read_u2())
    return SimpleVerificationType(tag)


@dataclass(frozen=True)
class SameFrame:
    frame_type: int  # 0-63

    @property
    def offset_delta(self) -> int:
        return self.frame_type


@dataclass(frozen=True)
class SameLocals1StackItemFrame:
    frame_type: int  # 64-127
    stack_item: VerificationTypeInfo

    @property
    def offset_delta(self) -> int:
        return self.frame_type - 64


@dataclass(frozen=True)
class SameLocals1StackItemFrameExtended:
    offset_delta: int
    stack_item: VerificationTypeInfo
    frame_type: ClassVar[int] = SAME_LOCALS_1_STACK_ITEM_EXTENDED


@dataclass(frozen=True)
class ChopFrame:
    frame_type: int  # 248-250
    offset_delta: int

    @property
    def chopped(self) -> int:
        """Number of trailing locals removed."""
        return SAME_FRAME_EXTENDED - self.frame_type


@dataclass(frozen=True)
class SameFrameExtended:
    offset_delta: int
    frame_type: ClassVar[int] = SAME_FRAME_EXTENDED


@dataclass(frozen=True)
class AppendFrame:
    frame_type: int  # 252-254, appends frame_type - 251 locals
    offset_delta: int
    locals: tuple[VerificationTypeInfo, ...]


@dataclass(frozen=True)
class FullFrame:
    offset_delta: int
    locals: tuple[VerificationTypeInfo, ...]
    stack: tuple[VerificationTypeInfo, ...]
    frame_type: ClassVar[int] = FULL_FRAME


StackMapFrame = Union[
    SameFrame, SameLocals1StackItemFrame, SameLocals1StackItemFrameExtended,
    ChopFrame, SameFrameExtended, AppendFrame, FullFrame,
]


def read_stack_map_frame(reader: ByteReader, cp: ConstantPool, jvms: bool = False) -> StackMapFrame:
    offset = reader.pos
    frame_type = reader.read_u1()

    if frame_type <= SAME_MAX:
        return SameFrame(frame_type)

    elif frame_type <= SAME_LOCALS_1_STACK_ITEM_MAX:
        return SameLocals1StackItemFrame(frame_type, read_verification_type(reader, cp, jvms))

    elif frame_type == SAME_LOCALS_1_STACK_ITEM_EXTENDED:
        offset_delta = reader.read_u2()
        return SameLocals1StackItemFrameExtended(offset_delta, read_verification_type(reader, cp, jvms))

    elif CHOP_MIN <= frame_type <= CHOP_MAX:
        return ChopFrame(frame_type, reader.read_u2())

    elif frame_type == SAME_FRAME_EXTENDED:
        return SameFrameExtended(reader.read_u2())

    elif APPEND_MIN <= frame_type <= APPEND_MAX:
        offset_delta = reader.read_u2()
        k = frame_type - SAME_FRAME_EXTENDED
        locals_ = tuple(read_verification_type(reader, cp, jvms) for _ in range(k))
        return AppendFrame(frame_type, offset_delta, locals_)

    elif frame_type == FULL_FRAME:
        offset_delta = reader.read_u2()
        num_locals = reader.read_u2()
        locals_ = tuple(read_verification_type(reader, cp, jvms) for _ in range(num_locals))
        num_stack = reader.read_u2()
        stack = tuple(read_verification_type(reader, cp, jvms) for _ in range(num_stack))
        return FullFrame(offset_delta, locals_, stack)

    # 128-246 are reserved
    raise UnsupportedFrameEncoding(frame_type, offset)


def read_stack_map_table(reader: ByteReader, cp: ConstantPool, jvms: bool = False) -> tuple[StackMapFrame, ...]:
    """Read number_of_entries followed by that many frames."""
    number_of_entries = reader.read_u2()
    return tuple(read_stack_map_frame(reader, cp, jvms) for _ in range(number_of_entries))
