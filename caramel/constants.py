"""
Constant pool entries and the constant pool decoder.

Every entry kind is its own frozen dataclass so that only the fields of the
active kind exist. Entries keep the raw on-disk values (indices and u4 halves);
helpers such as ``value`` and ``text`` interpret them on demand.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Iterator, Optional

from .cursor import ByteCursor
from .errors import ConstantReferenceError, UnknownConstantTag, UnresolvedUtf8Reference


class ConstantPoolTag(IntEnum):
    UTF8 = 1
    INTEGER = 3
    FLOAT = 4
    LONG = 5
    DOUBLE = 6
    CLASS = 7
    STRING = 8
    FIELDREF = 9
    METHODREF = 10
    INTERFACE_METHODREF = 11
    NAME_AND_TYPE = 12
    METHOD_HANDLE = 15  # 51.0
    METHOD_TYPE = 16  # 51.0
    DYNAMIC = 17  # 55.0
    INVOKE_DYNAMIC = 18  # 51.0
    MODULE = 19  # 53.0
    PACKAGE = 20  # 53.0


def decode_modified_utf8(data: bytes) -> str:
    """Decode the JVM's modified UTF-8 (NUL as C0 80, surrogate pairs)."""
    data = data.replace(b"\xc0\x80", b"\x00")
    try:
        text = data.decode("utf-8", errors="surrogatepass")
        return text.encode("utf-16-le", errors="surrogatepass").decode("utf-16-le")
    except UnicodeDecodeError:
        return data.decode("utf-8", errors="replace")


def encode_modified_utf8(text: str) -> bytes:
    out = bytearray()
    for ch in text:
        code = ord(ch)
        if code == 0:
            out.extend(b"\xc0\x80")
        elif code > 0xFFFF:
            code -= 0x10000
            for unit in (0xD800 | (code >> 10), 0xDC00 | (code & 0x3FF)):
                out.extend(chr(unit).encode("utf-8", errors="surrogatepass"))
        else:
            out.extend(ch.encode("utf-8", errors="surrogatepass"))
    return bytes(out)


@dataclass(frozen=True)
class ConstantEntry:
    """Base class for constant pool entries."""
    tag: ClassVar[ConstantPoolTag]
    # Long and Double occupy two pool slots in the two-slot convention
    wide: ClassVar[bool] = False

    @property
    def kind(self) -> str:
        return type(self).__name__[len("Constant"):]

    def write(self, out: bytearray):
        out.append(self.tag)
        self._write_payload(out)

    def _write_payload(self, out: bytearray):
        raise NotImplementedError


@dataclass(frozen=True)
class ConstantUtf8(ConstantEntry):
    tag = ConstantPoolTag.UTF8
    data: bytes

    @classmethod
    def read(cls, cursor: ByteCursor) -> "ConstantUtf8":
        length = cursor.read_u2()
        return cls(cursor.read_bytes(length))

    @classmethod
    def from_text(cls, text: str) -> "ConstantUtf8":
        return cls(encode_modified_utf8(text))

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def text(self) -> str:
        return decode_modified_utf8(self.data)

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">H", len(self.data)))
        out.extend(self.data)


@dataclass(frozen=True)
class ConstantInteger(ConstantEntry):
    tag = ConstantPoolTag.INTEGER
    raw: int

    @classmethod
    def read(cls, cursor: ByteCursor) -> "ConstantInteger":
        return cls(cursor.read_u4())

    @classmethod
    def of(cls, value: int) -> "ConstantInteger":
        return cls(value & 0xFFFFFFFF)

    @property
    def value(self) -> int:
        return struct.unpack(">i", struct.pack(">I", self.raw))[0]

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">I", self.raw))


@dataclass(frozen=True)
class ConstantFloat(ConstantEntry):
    tag = ConstantPoolTag.FLOAT
    raw: int

    @classmethod
    def read(cls, cursor: ByteCursor) -> "ConstantFloat":
        return cls(cursor.read_u4())

    @classmethod
    def of(cls, value: float) -> "ConstantFloat":
        return cls(struct.unpack(">I", struct.pack(">f", value))[0])

    @property
    def value(self) -> float:
        return struct.unpack(">f", struct.pack(">I", self.raw))[0]

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">I", self.raw))


@dataclass(frozen=True)
class _WideConstant(ConstantEntry):
    wide = True
    high_bytes: int
    low_bytes: int

    @classmethod
    def read(cls, cursor: ByteCursor):
        high = cursor.read_u4()
        low = cursor.read_u4()
        return cls(high, low)

    @classmethod
    def _from_packed(cls, packed: bytes):
        high, low = struct.unpack(">II", packed)
        return cls(high, low)

    @property
    def _packed(self) -> bytes:
        return struct.pack(">II", self.high_bytes, self.low_bytes)

    def _write_payload(self, out: bytearray):
        out.extend(self._packed)


@dataclass(frozen=True)
class ConstantLong(_WideConstant):
    tag = ConstantPoolTag.LONG

    @classmethod
    def of(cls, value: int) -> "ConstantLong":
        return cls._from_packed(struct.pack(">q", value))

    @property
    def value(self) -> int:
        return struct.unpack(">q", self._packed)[0]


@dataclass(frozen=True)
class ConstantDouble(_WideConstant):
    tag = ConstantPoolTag.DOUBLE

    @classmethod
    def of(cls, value: float) -> "ConstantDouble":
        return cls._from_packed(struct.pack(">d", value))

    @property
    def value(self) -> float:
        return struct.unpack(">d", self._packed)[0]


@dataclass(frozen=True)
class ConstantClass(ConstantEntry):
    tag = ConstantPoolTag.CLASS
    name_index: int

    @classmethod
    def read(cls, cursor: ByteCursor) -> "ConstantClass":
        return cls(cursor.read_u2())

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">H", self.name_index))


@dataclass(frozen=True)
class ConstantString(ConstantEntry):
    tag = ConstantPoolTag.STRING
    string_index: int

    @classmethod
    def read(cls, cursor: ByteCursor) -> "ConstantString":
        return cls(cursor.read_u2())

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">H", self.string_index))


@dataclass(frozen=True)
class _MemberRef(ConstantEntry):
    class_index: int
    name_and_type_index: int

    @classmethod
    def read(cls, cursor: ByteCursor):
        class_idx = cursor.read_u2()
        nat_idx = cursor.read_u2()
        return cls(class_idx, nat_idx)

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">HH", self.class_index, self.name_and_type_index))


@dataclass(frozen=True)
class ConstantFieldref(_MemberRef):
    tag = ConstantPoolTag.FIELDREF


@dataclass(frozen=True)
class ConstantMethodref(_MemberRef):
    tag = ConstantPoolTag.METHODREF


@dataclass(frozen=True)
class ConstantInterfaceMethodref(_MemberRef):
    tag = ConstantPoolTag.INTERFACE_METHODREF


@dataclass(frozen=True)
class ConstantNameAndType(ConstantEntry):
    tag = ConstantPoolTag.NAME_AND_TYPE
    name_index: int
    descriptor_index: int

    @classmethod
    def read(cls, cursor: ByteCursor) -> "ConstantNameAndType":
        name_idx = cursor.read_u2()
        desc_idx = cursor.read_u2()
        return cls(name_idx, desc_idx)

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">HH", self.name_index, self.descriptor_index))


@dataclass(frozen=True)
class ConstantMethodHandle(ConstantEntry):
    tag = ConstantPoolTag.METHOD_HANDLE
    reference_kind: int
    reference_index: int

    @classmethod
    def read(cls, cursor: ByteCursor) -> "ConstantMethodHandle":
        kind = cursor.read_u1()
        ref_idx = cursor.read_u2()
        return cls(kind, ref_idx)

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">BH", self.reference_kind, self.reference_index))


@dataclass(frozen=True)
class ConstantMethodType(ConstantEntry):
    tag = ConstantPoolTag.METHOD_TYPE
    descriptor_index: int

    @classmethod
    def read(cls, cursor: ByteCursor) -> "ConstantMethodType":
        return cls(cursor.read_u2())

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">H", self.descriptor_index))


@dataclass(frozen=True)
class _BootstrapRef(ConstantEntry):
    bootstrap_method_attr_index: int
    name_and_type_index: int

    @classmethod
    def read(cls, cursor: ByteCursor):
        bootstrap_idx = cursor.read_u2()
        nat_idx = cursor.read_u2()
        return cls(bootstrap_idx, nat_idx)

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">HH", self.bootstrap_method_attr_index, self.name_and_type_index))


@dataclass(frozen=True)
class ConstantDynamic(_BootstrapRef):
    tag = ConstantPoolTag.DYNAMIC


@dataclass(frozen=True)
class ConstantInvokeDynamic(_BootstrapRef):
    tag = ConstantPoolTag.INVOKE_DYNAMIC


@dataclass(frozen=True)
class ConstantModule(ConstantEntry):
    tag = ConstantPoolTag.MODULE
    name_index: int

    @classmethod
    def read(cls, cursor: ByteCursor) -> "ConstantModule":
        return cls(cursor.read_u2())

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">H", self.name_index))


@dataclass(frozen=True)
class ConstantPackage(ConstantEntry):
    tag = ConstantPoolTag.PACKAGE
    name_index: int

    @classmethod
    def read(cls, cursor: ByteCursor) -> "ConstantPackage":
        return cls(cursor.read_u2())

    def _write_payload(self, out: bytearray):
        out.extend(struct.pack(">H", self.name_index))


ENTRY_TYPES: dict[int, type[ConstantEntry]] = {
    entry_type.tag: entry_type
    for entry_type in (
        ConstantUtf8, ConstantInteger, ConstantFloat, ConstantLong, ConstantDouble,
        ConstantClass, ConstantString, ConstantFieldref, ConstantMethodref,
        ConstantInterfaceMethodref, ConstantNameAndType, ConstantMethodHandle,
        ConstantMethodType, ConstantDynamic, ConstantInvokeDynamic,
        ConstantModule, ConstantPackage,
    )
}


@dataclass(frozen=True)
class ConstantPool:
    """Immutable, 1-indexed constant pool.

    ``slots[0]`` is always empty. When Long/Double take two slots, the slot
    after each of them is an empty placeholder too. ``declared_count`` is only
    set when the file declares a count the slots cannot express (zero).
    """
    slots: tuple[Optional[ConstantEntry], ...] = (None,)
    declared_count: Optional[int] = None

    @classmethod
    def of(cls, *entries: ConstantEntry, two_slot_wide: bool = True) -> "ConstantPool":
        """Lay out entries the same way the decoder would."""
        slots: list[Optional[ConstantEntry]] = [None]
        for entry in entries:
            slots.append(entry)
            if two_slot_wide and entry.wide:
                slots.append(None)
        return cls(tuple(slots))

    @property
    def count(self) -> int:
        """The declared constant_pool_count."""
        if self.declared_count is not None:
            return self.declared_count
        return len(self.slots)

    def __len__(self) -> int:
        return sum(1 for entry in self.slots if entry is not None)

    def __iter__(self) -> Iterator[ConstantEntry]:
        return (entry for entry in self.slots if entry is not None)

    def items(self) -> Iterator[tuple[int, ConstantEntry]]:
        for index, entry in enumerate(self.slots):
            if entry is not None:
                yield index, entry

    def get(self, index: int) -> Optional[ConstantEntry]:
        if 0 < index < len(self.slots):
            return self.slots[index]
        return None

    def __getitem__(self, index: int) -> ConstantEntry:
        entry = self.get(index)
        if entry is None:
            raise IndexError(f"No constant pool entry at index {index}")
        return entry

    def utf8(self, index: int) -> str:
        """Get UTF8 string from constant pool."""
        entry = self.get(index)
        if not isinstance(entry, ConstantUtf8):
            raise UnresolvedUtf8Reference(index, entry.kind if entry else None)
        return entry.text

    def class_name(self, index: int) -> Optional[str]:
        """Get class name from constant pool; index 0 means no class."""
        if index == 0:
            return None
        entry = self.get(index)
        if not isinstance(entry, ConstantClass):
            raise ConstantReferenceError(index, "Class", entry.kind if entry else None)
        return self.utf8(entry.name_index)

    def write(self, out: bytearray):
        out.extend(struct.pack(">H", self.count))
        for entry in self:
            entry.write(out)


def read_constant(cursor: ByteCursor, index: Optional[int] = None) -> ConstantEntry:
    """Read one tagged entry."""
    offset = cursor.pos
    tag = cursor.read_u1()
    entry_type = ENTRY_TYPES.get(tag)
    if entry_type is None:
        raise UnknownConstantTag(tag, offset, index)
    return entry_type.read(cursor)


def read_constant_pool(cursor: ByteCursor, count: int, two_slot_wide: bool = True) -> ConstantPool:
    """Read the pool entries that follow a constant_pool_count of ``count``."""
    slots: list[Optional[ConstantEntry]] = [None]  # 1-indexed
    i = 1
    while i < count:
        entry = read_constant(cursor, i)
        slots.append(entry)
        i += 1
        if two_slot_wide and entry.wide and i < count:
            slots.append(None)  # Long/Double take 2 slots
            i += 1
    if count != len(slots):
        return ConstantPool(tuple(slots), count)
    return ConstantPool(tuple(slots))
