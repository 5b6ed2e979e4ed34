"""
Errors raised while decoding class files.
"""

from typing import Optional


class ClassFileError(ValueError):
    """Base class for malformed class file input."""

    def __init__(self, message: str):
        super().__init__(message)
        # DecodeState active when the error left the decoder
        self.state = None


class NotAClassFile(ClassFileError):
    """The buffer does not start with the 0xCAFEBABE magic number."""

    def __init__(self, magic: int):
        super().__init__(f"Invalid class file magic: {magic:#010x}")
        self.magic = magic


class UnexpectedEndOfInput(ClassFileError):
    """A read would run past the end of the buffer."""

    def __init__(self, offset: int, needed: int, available: int):
        super().__init__(
            f"Unexpected end of input at offset {offset}: "
            f"needed {needed} byte(s), {available} available"
        )
        self.offset = offset
        self.needed = needed
        self.available = available


class UnknownConstantTag(ClassFileError):
    """A constant pool entry has a tag byte outside the known set."""

    def __init__(self, tag: int, offset: int, index: Optional[int] = None):
        where = f" for constant #{index}" if index is not None else ""
        super().__init__(f"Unknown constant pool tag {tag}{where} at offset {offset}")
        self.tag = tag
        self.offset = offset
        self.index = index


class TrailingOrTruncatedData(ClassFileError):
    """The decode finished somewhere other than the end of the buffer."""

    def __init__(self, position: int, length: int):
        super().__init__(
            f"Class file ends at offset {position} but buffer holds {length} byte(s)"
        )
        self.position = position
        self.length = length


class ConstantReferenceError(ClassFileError):
    """A constant pool index does not point at an entry of the expected kind."""

    def __init__(self, index: int, expected: str, found: Optional[str]):
        got = found if found is not None else "nothing"
        super().__init__(f"Expected {expected} at constant #{index}, got {got}")
        self.index = index
        self.expected = expected
        self.found = found


class UnresolvedUtf8Reference(ConstantReferenceError):
    """A name or descriptor index does not point at a Utf8 entry."""

    def __init__(self, index: int, found: Optional[str] = None):
        super().__init__(index, "Utf8", found)
