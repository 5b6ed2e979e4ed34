"""Shared class file fixtures, built in memory through the encoder."""

import pytest

from caramel.attributes import AttributeInfo
from caramel.classfile import ClassUnit, ClassVersion
from caramel.constants import (
    ConstantPool, ConstantUtf8, ConstantClass, ConstantLong,
)
from caramel.members import FieldInfo, MethodInfo

# return
HELLO_CODE = b"\x00\x01\x00\x01\x00\x00\x00\x01\xb1\x00\x00\x00\x00"

# The minimal class from the format description: empty pool, no members
MINIMAL_CLASS = bytes.fromhex(
    "CAFEBABE 0000 0034 0001 0020 0002 0003 0000 0000 0000 0000"
)


def build_hello_pool(two_slot_wide: bool = True) -> ConstantPool:
    return ConstantPool.of(
        ConstantUtf8.from_text("Hello"),                   # 1
        ConstantClass(1),                                  # 2
        ConstantUtf8.from_text("java/lang/Object"),        # 3
        ConstantClass(3),                                  # 4
        ConstantUtf8.from_text("count"),                   # 5
        ConstantUtf8.from_text("I"),                       # 6
        ConstantUtf8.from_text("main"),                    # 7
        ConstantUtf8.from_text("([Ljava/lang/String;)V"),  # 8
        ConstantUtf8.from_text("Code"),                    # 9
        ConstantUtf8.from_text("SourceFile"),              # 10
        ConstantUtf8.from_text("Hello.java"),              # 11
        ConstantUtf8.from_text("java/lang/Runnable"),      # 12
        ConstantClass(12),                                 # 13
        ConstantUtf8.from_text("ConstantValue"),           # 14
        ConstantLong.of(1 << 40),                          # 15 (+16)
        two_slot_wide=two_slot_wide,
    )


def build_hello_unit(pool: ConstantPool = None, **overrides) -> ClassUnit:
    pool = pool or build_hello_pool()
    values = dict(
        version=ClassVersion(52, 0),
        constant_pool=pool,
        access_flags=0x0021,
        this_class=2,
        super_class=4,
        interfaces=(13,),
        fields=(FieldInfo(0x000A, 5, 6, (AttributeInfo(14, b"\x00\x0f"),)),),
        methods=(MethodInfo(0x0009, 7, 8, (AttributeInfo(9, HELLO_CODE),)),),
        attributes=(AttributeInfo(10, b"\x00\x0b"),),
    )
    values.update(overrides)
    return ClassUnit(**values)


@pytest.fixture
def hello_unit():
    return build_hello_unit()


@pytest.fixture
def hello_bytes(hello_unit):
    return hello_unit.to_bytes()


@pytest.fixture
def hello_class_file(tmp_path, hello_unit):
    path = tmp_path / "Hello.class"
    hello_unit.write(path)
    return path
