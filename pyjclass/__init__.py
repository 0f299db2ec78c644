"""pyjclass - a decoder for JVM class files."""

from .annotations import (
    Annotation,
    AnnotationElementValue,
    ArrayElementValue,
    ClassElementValue,
    ConstElementValue,
    ElementValuePair,
    EnumElementValue,
)
from .attributes import (
    AnnotationDefaultAttribute,
    AttributeInfo,
    BootstrapMethod,
    BootstrapMethodsAttribute,
    CodeAttribute,
    ConstantValueAttribute,
    DeprecatedAttribute,
    EnclosingMethodAttribute,
    ExceptionTableEntry,
    ExceptionsAttribute,
    InnerClassInfo,
    InnerClassesAttribute,
    LineNumberEntry,
    LineNumberTableAttribute,
    LocalVariableEntry,
    LocalVariableTableAttribute,
    LocalVariableTypeEntry,
    LocalVariableTypeTableAttribute,
    MethodParameter,
    MethodParametersAttribute,
    RuntimeInvisibleAnnotationsAttribute,
    RuntimeInvisibleParameterAnnotationsAttribute,
    RuntimeVisibleAnnotationsAttribute,
    RuntimeVisibleParameterAnnotationsAttribute,
    SignatureAttribute,
    SourceDebugExtensionAttribute,
    SourceFileAttribute,
    StackMapTableAttribute,
    SyntheticAttribute,
    UnknownAttribute,
)
from .classfile import ClassFile, ClassFileVersion, FieldInfo, MethodInfo
from .classreader import ClassReader, parse_class
from .constants import (
    ClassConstant,
    ConstantPool,
    ConstantPoolTag,
    DoubleConstant,
    DynamicConstant,
    FieldrefConstant,
    FloatConstant,
    IntegerConstant,
    InterfaceMethodrefConstant,
    InvokeDynamicConstant,
    LongConstant,
    MethodHandleConstant,
    MethodHandleKind,
    MethodrefConstant,
    MethodTypeConstant,
    NameAndTypeConstant,
    StringConstant,
    Utf8Constant,
)
from .descriptors import (
    ArrayType,
    BaseType,
    ClassType,
    MethodDescriptor,
    parse_field_descriptor,
    parse_method_descriptor,
)
from .errors import (
    AttributeLengthMismatch,
    ClassFormatError,
    InvalidDescriptor,
    MalformedAnnotation,
    MalformedConstantPool,
    MissingBootstrapMethod,
    NotAClassFile,
    TrailingData,
    TruncatedInput,
    UnexpectedConstantKind,
    UnresolvedConstantReference,
    UnsupportedFrameEncoding,
    UnsupportedVerificationType,
)
from .flags import (
    ClassAccessFlags,
    FieldAccessFlags,
    InnerClassAccessFlags,
    MethodAccessFlags,
    ParameterAccessFlags,
)
from .options import ReaderOptions
from .stackmap import (
    AppendFrame,
    ChopFrame,
    FullFrame,
    ObjectVariableInfo,
    SameFrame,
    SameFrameExtended,
    SameLocals1StackItemFrame,
    SameLocals1StackItemFrameExtended,
    SimpleVerificationType,
    UninitializedVariableInfo,
    VerificationTypeTag,
)

__version__ = "0.1.0"

__all__ = [
    # Entry points
    'parse_class',
    'ClassReader',
    'ReaderOptions',
    # Class model
    'ClassFile',
    'ClassFileVersion',
    'FieldInfo',
    'MethodInfo',
    # Constant pool
    'ConstantPool',
    'ConstantPoolTag',
    'MethodHandleKind',
    'Utf8Constant',
    'IntegerConstant',
    'FloatConstant',
    'LongConstant',
    'DoubleConstant',
    'ClassConstant',
    'StringConstant',
    'FieldrefConstant',
    'MethodrefConstant',
    'InterfaceMethodrefConstant',
    'NameAndTypeConstant',
    'MethodHandleConstant',
    'MethodTypeConstant',
    'DynamicConstant',
    'InvokeDynamicConstant',
    # Attributes
    'AttributeInfo',
    'ConstantValueAttribute',
    'CodeAttribute',
    'ExceptionTableEntry',
    'StackMapTableAttribute',
    'ExceptionsAttribute',
    'InnerClassesAttribute',
    'InnerClassInfo',
    'EnclosingMethodAttribute',
    'SyntheticAttribute',
    'DeprecatedAttribute',
    'SignatureAttribute',
    'SourceFileAttribute',
    'SourceDebugExtensionAttribute',
    'LineNumberTableAttribute',
    'LineNumberEntry',
    'LocalVariableTableAttribute',
    'LocalVariableEntry',
    'LocalVariableTypeTableAttribute',
    'LocalVariableTypeEntry',
    'RuntimeVisibleAnnotationsAttribute',
    'RuntimeInvisibleAnnotationsAttribute',
    'RuntimeVisibleParameterAnnotationsAttribute',
    'RuntimeInvisibleParameterAnnotationsAttribute',
    'AnnotationDefaultAttribute',
    'BootstrapMethodsAttribute',
    'BootstrapMethod',
    'MethodParametersAttribute',
    'MethodParameter',
    'UnknownAttribute',
    # Annotations
    'Annotation',
    'ElementValuePair',
    'ConstElementValue',
    'EnumElementValue',
    'ClassElementValue',
    'AnnotationElementValue',
    'ArrayElementValue',
    # Stack map frames
    'SameFrame',
    'SameLocals1StackItemFrame',
    'SameLocals1StackItemFrameExtended',
    'ChopFrame',
    'SameFrameExtended',
    'AppendFrame',
    'FullFrame',
    'VerificationTypeTag',
    'SimpleVerificationType',
    'ObjectVariableInfo',
    'UninitializedVariableInfo',
    # Descriptors
    'BaseType',
    'ClassType',
    'ArrayType',
    'MethodDescriptor',
    'parse_field_descriptor',
    'parse_method_descriptor',
    # Access flags
    'ClassAccessFlags',
    'FieldAccessFlags',
    'MethodAccessFlags',
    'InnerClassAccessFlags',
    'ParameterAccessFlags',
    # Errors
    'ClassFormatError',
    'TruncatedInput',
    'NotAClassFile',
    'MalformedConstantPool',
    'UnresolvedConstantReference',
    'MissingBootstrapMethod',
    'UnexpectedConstantKind',
    'UnsupportedFrameEncoding',
    'UnsupportedVerificationType',
    'AttributeLengthMismatch',
    'MalformedAnnotation',
    'TrailingData',
    'InvalidDescriptor',
]
