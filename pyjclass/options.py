"""
Options controlling how strictly class files are read.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReaderOptions:
    # Also dispatch the misspelled "RuntimeVisibleParamterAnnotations" name
    # to the parameter annotation reader instead of keeping it as raw bytes.
    legacy_attribute_names: bool = False
    # Read verification types with the JVMS numbering (6 UninitializedThis,
    # 7 Object, 8 Uninitialized) instead of 6 Object and 7 Uninitialized.
    jvms_verification_types: bool = False
    # Accept bytes after the last class attribute.
    allow_trailing_data: bool = False


DEFAULT_OPTIONS = ReaderOptions()
