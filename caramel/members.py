"""
Field and method records.
"""

import struct
from dataclasses import dataclass
from typing import Optional

from .attributes import AttributeInfo, read_attributes, write_attributes
from .constants import ConstantPool
from .cursor import ByteCursor


@dataclass(frozen=True)
class MemberInfo:
    """Shared layout of field_info and method_info."""
    access_flags: int
    name_index: int
    descriptor_index: int
    attributes: tuple[AttributeInfo, ...] = ()

    def name(self, pool: ConstantPool) -> str:
        return pool.utf8(self.name_index)

    def descriptor(self, pool: ConstantPool) -> str:
        return pool.utf8(self.descriptor_index)

    def write(self, out: bytearray):
        out.extend(struct.pack(">HHH", self.access_flags, self.name_index, self.descriptor_index))
        write_attributes(out, self.attributes)


@dataclass(frozen=True)
class FieldInfo(MemberInfo):
    """A decoded field."""


@dataclass(frozen=True)
class MethodInfo(MemberInfo):
    """A decoded method."""


def read_member(cursor: ByteCursor, member_type: type[MemberInfo] = MemberInfo,
                pool: Optional[ConstantPool] = None) -> MemberInfo:
    """Read a field or method; with a pool, name and descriptor must be Utf8."""
    access = cursor.read_u2()
    name_idx = cursor.read_u2()
    desc_idx = cursor.read_u2()
    if pool is not None:
        pool.utf8(name_idx)
        pool.utf8(desc_idx)
    attrs = read_attributes(cursor, pool)
    return member_type(access, name_idx, desc_idx, attrs)


def write_members(out: bytearray, members):
    out.extend(struct.pack(">H", len(members)))
    for member in members:
        member.write(out)
