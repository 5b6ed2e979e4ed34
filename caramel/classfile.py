"""
Class file decoder.

Reads one class file buffer in a single forward pass, section by section in
file order, and returns an immutable ClassUnit. Any structural problem aborts
the whole decode with a ClassFileError subclass.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Optional

from .attributes import AttributeInfo, read_attribute, write_attributes
from .constants import ConstantPool, read_constant_pool
from .cursor import ByteCursor
from .errors import ClassFileError, NotAClassFile, TrailingOrTruncatedData
from .members import FieldInfo, MethodInfo, read_member, write_members

MAGIC = 0xCAFEBABE

# (highest major version, Java SE release), checked in order
_RELEASES = (
    (51, "7"),
    (52, "8"),
    (53, "9"),
    (54, "10"),
    (55, "11"),
)


def java_se_version(major: int) -> str:
    """Map a major version to a Java SE release label (advisory only)."""
    if major < 45:
        return "unknown"
    if major <= 50:
        return "legacy"
    for highest, label in _RELEASES:
        if major <= highest:
            return label
    return "unsupported"


@dataclass(frozen=True)
class ClassVersion:
    major: int
    minor: int = 0

    @property
    def label(self) -> str:
        return java_se_version(self.major)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


@dataclass(frozen=True)
class DecodeOptions:
    """Decoder configuration."""
    # Long/Double constants occupy two pool slots, the second one unusable
    wide_constants_take_two_slots: bool = True
    # Resolve attribute names and member names/descriptors while decoding
    check_utf8_names: bool = True


class DecodeState(IntEnum):
    MAGIC = 0
    VERSION = 1
    CONSTANT_POOL_COUNT = 2
    CONSTANT_POOL = 3
    ACCESS_FLAGS = 4
    THIS_CLASS = 5
    SUPER_CLASS = 6
    INTERFACE_COUNT = 7
    INTERFACES = 8
    FIELD_COUNT = 9
    FIELDS = 10
    METHOD_COUNT = 11
    METHODS = 12
    ATTRIBUTE_COUNT = 13
    ATTRIBUTES = 14
    DONE = 15

    @property
    def description(self) -> str:
        return self.name.lower().replace("_", " ")


@dataclass(frozen=True)
class ClassUnit:
    """A decoded class file."""
    version: ClassVersion
    constant_pool: ConstantPool
    access_flags: int
    this_class: int
    super_class: int
    interfaces: tuple[int, ...] = ()
    fields: tuple[FieldInfo, ...] = ()
    methods: tuple[MethodInfo, ...] = ()
    attributes: tuple[AttributeInfo, ...] = ()

    @property
    def version_label(self) -> str:
        return self.version.label

    @property
    def name(self) -> Optional[str]:
        return self.constant_pool.class_name(self.this_class)

    @property
    def super_name(self) -> Optional[str]:
        return self.constant_pool.class_name(self.super_class)

    @property
    def interface_names(self) -> tuple[Optional[str], ...]:
        return tuple(self.constant_pool.class_name(idx) for idx in self.interfaces)

    def to_bytes(self) -> bytes:
        out = bytearray()
        out.extend(struct.pack(">IHH", MAGIC, self.version.minor, self.version.major))
        self.constant_pool.write(out)
        out.extend(struct.pack(">HHH", self.access_flags, self.this_class, self.super_class))
        out.extend(struct.pack(">H", len(self.interfaces)))
        for idx in self.interfaces:
            out.extend(struct.pack(">H", idx))
        write_members(out, self.fields)
        write_members(out, self.methods)
        write_attributes(out, self.attributes)
        return bytes(out)

    def write(self, path: str | Path):
        with open(path, "wb") as f:
            f.write(self.to_bytes())


class ClassFileDecoder:
    """Decodes one buffer; create a new decoder per buffer."""

    def __init__(self, data: bytes, options: Optional[DecodeOptions] = None):
        self.cursor = ByteCursor(data)
        self.options = options or DecodeOptions()
        self.state = DecodeState.MAGIC

    def _enter(self, state: DecodeState):
        # States run strictly in file order, none skipped or repeated
        if state != self.state + 1:
            raise RuntimeError(f"Cannot move from {self.state.name} to {state.name}")
        self.state = state

    def decode(self) -> ClassUnit:
        try:
            return self._decode()
        except ClassFileError as e:
            if e.state is None:
                e.state = self.state
            raise

    def _decode(self) -> ClassUnit:
        cursor = self.cursor

        magic = cursor.read_u4()
        if magic != MAGIC:
            raise NotAClassFile(magic)

        self._enter(DecodeState.VERSION)
        minor = cursor.read_u2()
        major = cursor.read_u2()

        self._enter(DecodeState.CONSTANT_POOL_COUNT)
        pool_count = cursor.read_u2()

        self._enter(DecodeState.CONSTANT_POOL)
        pool = read_constant_pool(cursor, pool_count, self.options.wide_constants_take_two_slots)
        names = pool if self.options.check_utf8_names else None

        self._enter(DecodeState.ACCESS_FLAGS)
        access_flags = cursor.read_u2()

        self._enter(DecodeState.THIS_CLASS)
        this_class = cursor.read_u2()

        self._enter(DecodeState.SUPER_CLASS)
        super_class = cursor.read_u2()

        self._enter(DecodeState.INTERFACE_COUNT)
        interfaces_count = cursor.read_u2()

        self._enter(DecodeState.INTERFACES)
        interfaces = tuple(cursor.read_u2() for _ in range(interfaces_count))

        self._enter(DecodeState.FIELD_COUNT)
        fields_count = cursor.read_u2()

        self._enter(DecodeState.FIELDS)
        fields = tuple(read_member(cursor, FieldInfo, names) for _ in range(fields_count))

        self._enter(DecodeState.METHOD_COUNT)
        methods_count = cursor.read_u2()

        self._enter(DecodeState.METHODS)
        methods = tuple(read_member(cursor, MethodInfo, names) for _ in range(methods_count))

        self._enter(DecodeState.ATTRIBUTE_COUNT)
        attributes_count = cursor.read_u2()

        self._enter(DecodeState.ATTRIBUTES)
        attributes = tuple(read_attribute(cursor, names) for _ in range(attributes_count))

        self._enter(DecodeState.DONE)
        if not cursor.at_end():
            raise TrailingOrTruncatedData(cursor.pos, len(cursor.data))

        return ClassUnit(
            version=ClassVersion(major, minor),
            constant_pool=pool,
            access_flags=access_flags,
            this_class=this_class,
            super_class=super_class,
            interfaces=interfaces,
            fields=fields,
            methods=methods,
            attributes=attributes,
        )


def decode_class(data: bytes, options: Optional[DecodeOptions] = None) -> ClassUnit:
    """Decode a complete class file buffer."""
    return ClassFileDecoder(data, options).decode()


def read_class_file(path: str | Path, options: Optional[DecodeOptions] = None) -> ClassUnit:
    """Read a single class file."""
    data = Path(path).read_bytes()
    return decode_class(data, options)
