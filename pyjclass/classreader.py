"""
Java class file reader.

Decodes a complete class file buffer into a :class:`ClassFile`. Every
constant pool reference is resolved and kind-checked while reading, so a
ClassFile is only ever returned for a fully consistent file.
"""

import logging
from typing import Optional

from .attributes import BootstrapMethodsAttribute, read_attributes
from .classfile import ClassFile, FieldInfo, MethodInfo
from .constants import ClassConstant, DynamicConstant, InvokeDynamicConstant, read_constant_pool
from .errors import MissingBootstrapMethod, NotAClassFile, TrailingData, TruncatedInput
from .flags import ClassAccessFlags
from .options import DEFAULT_OPTIONS, ReaderOptions
from .reader import ByteReader

logger = logging.getLogger(__name__)

# magic, minor_version, major_version, constant_pool_count
HEADER_SIZE = 10


class ClassReader:
    """Reads Java class files."""

    def __init__(self, data: bytes, options: Optional[ReaderOptions] = None):
        self.reader = ByteReader(data)
        self.options = options or DEFAULT_OPTIONS

    def _read_class_index(self, cp, allow_zero: bool = False) -> tuple[int, Optional[ClassConstant]]:
        offset = self.reader.pos
        index = self.reader.read_u2()
        if allow_zero:
            return index, cp.optional(index, ClassConstant, offset=offset)
        return index, cp.get(index, ClassConstant, offset=offset)

    def _check_bootstrap_references(self, cp, attributes):
        """Dynamic constants must name an entry of the BootstrapMethods attribute."""
        table = ()
        for attr in attributes:
            if isinstance(attr.info, BootstrapMethodsAttribute):
                table = attr.info.bootstrap_methods
                break
        for index, entry in cp:
            if isinstance(entry, (DynamicConstant, InvokeDynamicConstant)):
                if entry.bootstrap_method_attr_index >= len(table):
                    raise MissingBootstrapMethod(
                        index, entry.bootstrap_method_attr_index, len(table), cp.offset_of(index))

    def read(self) -> ClassFile:
        """Read the class file and return ClassFile."""
        reader = self.reader
        if reader.remaining < HEADER_SIZE:
            raise TruncatedInput(0, HEADER_SIZE, reader.remaining)

        # Magic number
        magic = reader.read_u4()
        if magic != ClassFile.MAGIC:
            raise NotAClassFile(f"Invalid class file magic: {magic:#010x}", 0)

        # Version
        minor = reader.read_u2()
        major = reader.read_u2()

        # Constant pool
        cp_count = reader.read_u2()
        cp = read_constant_pool(reader, cp_count)

        # Access flags
        access_flags = ClassAccessFlags(reader.read_u2())

        # This/super class; 0 means absent (java/lang/Object, module-info)
        this_class_idx, this_class = self._read_class_index(cp, allow_zero=True)
        super_class_idx, super_class = self._read_class_index(cp, allow_zero=True)

        # Interfaces
        interfaces_count = reader.read_u2()
        interfaces = tuple(self._read_class_index(cp) for _ in range(interfaces_count))

        # Fields
        fields_count = reader.read_u2()
        fields = tuple(FieldInfo.read(reader, cp, self.options) for _ in range(fields_count))

        # Methods
        methods_count = reader.read_u2()
        methods = tuple(MethodInfo.read(reader, cp, self.options) for _ in range(methods_count))

        # Class attributes
        attrs = read_attributes(reader, cp, self.options)
        self._check_bootstrap_references(cp, attrs)

        if reader.remaining and not self.options.allow_trailing_data:
            raise TrailingData(f"{reader.remaining} bytes after the last class attribute", reader.pos)

        class_file = ClassFile(
            magic=magic,
            minor_version=minor,
            major_version=major,
            constant_pool=cp,
            access_flags=access_flags,
            this_class_index=this_class_idx,
            super_class_index=super_class_idx,
            this_class=this_class,
            super_class=super_class,
            interface_indices=tuple(idx for idx, _ in interfaces),
            interfaces=tuple(entry for _, entry in interfaces),
            fields=fields,
            methods=methods,
            attributes=attrs,
        )
        logger.debug(
            "Read class %s (version %d.%d): %d constants, %d fields, %d methods, %d attributes",
            class_file.name, major, minor, len(cp), len(fields), len(methods), len(attrs))
        return class_file


def parse_class(data: bytes, options: Optional[ReaderOptions] = None) -> ClassFile:
    """Decode one class file from ``data``."""
    return ClassReader(data, options).read()
