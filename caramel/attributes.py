"""
Attribute records: a name index, a u4 length, and an opaque payload.
"""

import struct
from dataclasses import dataclass
from typing import Optional

from .constants import ConstantPool
from .cursor import ByteCursor


@dataclass(frozen=True)
class AttributeInfo:
    """An attribute whose payload is kept as raw bytes."""
    name_index: int
    data: bytes = b""

    @property
    def length(self) -> int:
        return len(self.data)

    def name(self, pool: ConstantPool) -> str:
        return pool.utf8(self.name_index)

    def write(self, out: bytearray):
        out.extend(struct.pack(">HI", self.name_index, len(self.data)))
        out.extend(self.data)


def read_attribute(cursor: ByteCursor, pool: Optional[ConstantPool] = None) -> AttributeInfo:
    """Read one attribute; with a pool, its name must resolve to a Utf8 entry."""
    name_idx = cursor.read_u2()
    if pool is not None:
        pool.utf8(name_idx)
    length = cursor.read_u4()
    return AttributeInfo(name_idx, cursor.read_bytes(length))


def read_attributes(cursor: ByteCursor, pool: Optional[ConstantPool] = None) -> tuple[AttributeInfo, ...]:
    count = cursor.read_u2()
    return tuple(read_attribute(cursor, pool) for _ in range(count))


def write_attributes(out: bytearray, attributes):
    out.extend(struct.pack(">H", len(attributes)))
    for attr in attributes:
        attr.write(out)


def find_attribute(attributes, pool: ConstantPool, name: str) -> Optional[AttributeInfo]:
    """Return the first attribute called ``name``, if any."""
    for attr in attributes:
        if attr.name(pool) == name:
            return attr
    return None
