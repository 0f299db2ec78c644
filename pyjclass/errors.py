"""
Errors raised while decoding class files.

Every error is fatal to the parse that raised it; no partially decoded
ClassFile is ever returned.
"""

from typing import Optional


class ClassFormatError(ValueError):
    """Malformed or unsupported class file."""

    def __init__(self, message: str, offset: Optional[int] = None):
        self.message = message
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class TruncatedInput(ClassFormatError):
    """The buffer ended in the middle of a read."""

    def __init__(self, offset: int, wanted: int, available: int):
        self.wanted = wanted
        self.available = available
        super().__init__(
            f"Truncated input: wanted {wanted} bytes, {available} available", offset)


class NotAClassFile(ClassFormatError):
    """Magic number is not 0xCAFEBABE."""
    pass


class MalformedConstantPool(ClassFormatError):
    """Unknown constant tag, bad entry contents, or a dereferenced wide-constant gap."""
    pass


class UnresolvedConstantReference(ClassFormatError):
    """A constant pool index has no entry."""

    def __init__(self, index: int, offset: Optional[int] = None):
        self.index = index
        super().__init__(f"Constant pool index {index} is not populated", offset)


class MissingBootstrapMethod(UnresolvedConstantReference):
    """A Dynamic or InvokeDynamic constant names a BootstrapMethods entry that does not exist."""

    def __init__(self, index: int, bootstrap_index: int, table_size: int, offset: Optional[int] = None):
        self.index = index
        self.bootstrap_index = bootstrap_index
        self.table_size = table_size
        ClassFormatError.__init__(
            self,
            f"Constant pool entry {index} refers to bootstrap method {bootstrap_index}, "
            f"but the BootstrapMethods table has {table_size} entries", offset)


class UnexpectedConstantKind(ClassFormatError):
    """A constant pool entry exists but is the wrong kind for its context."""

    def __init__(self, index: int, expected: tuple, found: str, offset: Optional[int] = None):
        self.index = index
        self.expected = expected
        self.found = found
        names = " or ".join(expected)
        super().__init__(f"Expected {names} at constant pool index {index}, got {found}", offset)


class UnsupportedFrameEncoding(ClassFormatError):
    """Stack map frame tag outside the known ranges."""

    def __init__(self, frame_type: int, offset: Optional[int] = None):
        self.frame_type = frame_type
        super().__init__(f"Unsupported stack map frame type: {frame_type}", offset)


class UnsupportedVerificationType(UnsupportedFrameEncoding):
    """Verification type tag outside the known range."""

    def __init__(self, tag: int, offset: Optional[int] = None):
        self.tag = tag
        self.frame_type = None
        ClassFormatError.__init__(self, f"Unsupported verification type: {tag}", offset)


class AttributeLengthMismatch(ClassFormatError):
    """An attribute payload consumed a different byte count than it declared."""

    def __init__(self, attribute: str, declared: int, consumed: Optional[int],
                 offset: Optional[int] = None):
        self.attribute = attribute
        self.declared = declared
        self.consumed = consumed
        if consumed is None:
            detail = "payload reads past its end"
        else:
            detail = f"payload consumed {consumed}"
        super().__init__(
            f"Attribute {attribute!r} declares {declared} bytes but {detail}", offset)


class MalformedAnnotation(ClassFormatError):
    """Unknown annotation element value tag."""
    pass


class TrailingData(ClassFormatError):
    """Bytes remain after the last class attribute."""
    pass


class InvalidDescriptor(ClassFormatError):
    """A field or method descriptor does not follow the descriptor grammar."""
    pass
