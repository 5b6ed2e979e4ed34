"""Caramel - a decoder for Java class files."""

from .classfile import (
    ClassFileDecoder, ClassUnit, ClassVersion, DecodeOptions, DecodeState,
    decode_class, read_class_file, java_se_version,
)
from .constants import ConstantPool, ConstantPoolTag
from .errors import (
    ClassFileError, NotAClassFile, UnexpectedEndOfInput, UnknownConstantTag,
    TrailingOrTruncatedData, ConstantReferenceError, UnresolvedUtf8Reference,
)

__version__ = "0.1.0"
__all__ = [
    "ClassFileDecoder", "ClassUnit", "ClassVersion", "DecodeOptions", "DecodeState",
    "decode_class", "read_class_file", "java_se_version",
    "ConstantPool", "ConstantPoolTag",
    "ClassFileError", "NotAClassFile", "UnexpectedEndOfInput", "UnknownConstantTag",
    "TrailingOrTruncatedData", "ConstantReferenceError", "UnresolvedUtf8Reference",
]
