"""Tests for the class file decoder."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from caramel import (
    ClassFileDecoder, ClassVersion, DecodeOptions, DecodeState,
    decode_class, read_class_file, java_se_version,
    NotAClassFile, UnexpectedEndOfInput, UnknownConstantTag,
    TrailingOrTruncatedData, UnresolvedUtf8Reference,
)
from caramel.attributes import AttributeInfo, find_attribute, read_attribute
from caramel.constants import ConstantPool, ConstantUtf8
from caramel.cursor import ByteCursor
from caramel.members import FieldInfo, MethodInfo, read_member

from conftest import MINIMAL_CLASS, HELLO_CODE, build_hello_pool, build_hello_unit


class TestMinimalClass:
    def test_decode(self):
        unit = decode_class(MINIMAL_CLASS)
        assert unit.version == ClassVersion(52, 0)
        assert unit.version_label == "8"
        assert len(unit.constant_pool) == 0
        assert unit.constant_pool.count == 1
        assert unit.access_flags == 0x0020
        assert unit.this_class == 2
        assert unit.super_class == 3
        assert unit.interfaces == ()
        assert unit.fields == ()
        assert unit.methods == ()
        assert unit.attributes == ()

    def test_trailing_byte(self):
        with pytest.raises(TrailingOrTruncatedData) as exc_info:
            decode_class(MINIMAL_CLASS + b"\x00")
        assert exc_info.value.position == len(MINIMAL_CLASS)
        assert exc_info.value.length == len(MINIMAL_CLASS) + 1
        assert exc_info.value.state == DecodeState.DONE

    def test_declared_pool_count_zero(self):
        data = MINIMAL_CLASS[:8] + b"\x00\x00" + MINIMAL_CLASS[10:]
        unit = decode_class(data)
        assert unit.constant_pool.count == 0
        assert len(unit.constant_pool) == 0
        assert unit.to_bytes() == data

    def test_decoder_finishes_in_done_state(self):
        decoder = ClassFileDecoder(MINIMAL_CLASS)
        decoder.decode()
        assert decoder.state == DecodeState.DONE


class TestMagic:
    @pytest.mark.parametrize("position", range(4))
    def test_bad_magic(self, position, hello_bytes):
        data = bytearray(hello_bytes)
        data[position] ^= 0x01
        with pytest.raises(NotAClassFile) as exc_info:
            decode_class(bytes(data))
        assert exc_info.value.state == DecodeState.MAGIC

    def test_bad_magic_checked_before_anything_else(self):
        with pytest.raises(NotAClassFile) as exc_info:
            decode_class(b"\xca\xfe\xba\xbf")
        assert exc_info.value.magic == 0xCAFEBABF

    def test_empty_buffer(self):
        with pytest.raises(UnexpectedEndOfInput):
            decode_class(b"")


class TestTruncation:
    def test_every_truncation_fails(self, hello_bytes):
        for cut in range(len(hello_bytes)):
            with pytest.raises((UnexpectedEndOfInput, TrailingOrTruncatedData)):
                decode_class(hello_bytes[:cut])

    def test_truncated_attribute_payload(self, hello_bytes):
        # SourceFile payload is the last two bytes
        with pytest.raises(UnexpectedEndOfInput) as exc_info:
            decode_class(hello_bytes[:-1])
        assert exc_info.value.state == DecodeState.ATTRIBUTES

    def test_error_records_section(self):
        with pytest.raises(UnexpectedEndOfInput) as exc_info:
            decode_class(MINIMAL_CLASS[:9])
        assert exc_info.value.state == DecodeState.CONSTANT_POOL_COUNT


class TestConstantPoolSection:
    def test_unknown_tag(self):
        data = bytes.fromhex("CAFEBABE 0000 0034 0002 02") + MINIMAL_CLASS[10:]
        with pytest.raises(UnknownConstantTag) as exc_info:
            decode_class(data)
        assert exc_info.value.tag == 2
        assert exc_info.value.offset == 10
        assert exc_info.value.index == 1
        assert exc_info.value.state == DecodeState.CONSTANT_POOL

    def test_single_slot_mode_misreads_two_slot_file(self, hello_bytes):
        # One entry too many is read, so access_flags' high byte becomes a tag
        options = DecodeOptions(wide_constants_take_two_slots=False)
        with pytest.raises(UnknownConstantTag) as exc_info:
            decode_class(hello_bytes, options)
        assert exc_info.value.tag == 0x00

    def test_single_slot_round_trip(self):
        unit = build_hello_unit(build_hello_pool(two_slot_wide=False))
        options = DecodeOptions(wide_constants_take_two_slots=False)
        assert decode_class(unit.to_bytes(), options) == unit


class TestHelloClass:
    def test_round_trip(self, hello_unit, hello_bytes):
        decoded = decode_class(hello_bytes)
        assert decoded == hello_unit
        assert decoded.to_bytes() == hello_bytes

    def test_names(self, hello_bytes):
        unit = decode_class(hello_bytes)
        assert unit.name == "Hello"
        assert unit.super_name == "java/lang/Object"
        assert unit.interface_names == ("java/lang/Runnable",)

    def test_members(self, hello_bytes):
        unit = decode_class(hello_bytes)
        pool = unit.constant_pool
        (field,) = unit.fields
        (method,) = unit.methods
        assert isinstance(field, FieldInfo)
        assert isinstance(method, MethodInfo)
        assert (field.name(pool), field.descriptor(pool)) == ("count", "I")
        assert (method.name(pool), method.descriptor(pool)) == ("main", "([Ljava/lang/String;)V")
        code = find_attribute(method.attributes, pool, "Code")
        assert code.data == HELLO_CODE
        assert code.length == len(HELLO_CODE)
        assert find_attribute(method.attributes, pool, "LineNumberTable") is None

    def test_class_attributes(self, hello_bytes):
        unit = decode_class(hello_bytes)
        (source_file,) = unit.attributes
        assert source_file.name(unit.constant_pool) == "SourceFile"
        assert source_file.data == b"\x00\x0b"

    def test_read_class_file(self, hello_class_file, hello_unit):
        assert read_class_file(hello_class_file) == hello_unit

    def test_concurrent_decodes_are_independent(self, hello_bytes, hello_unit):
        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(decode_class, [hello_bytes] * 16))
        assert all(unit == hello_unit for unit in results)


class TestAttributes:
    def test_length_is_four_bytes(self):
        payload = bytes(range(256)) * 300
        unit = build_hello_unit(attributes=(AttributeInfo(10, payload),))
        decoded = decode_class(unit.to_bytes())
        assert decoded.attributes[0].length == len(payload) > 0xFFFF
        assert decoded.attributes[0].data == payload

    def test_attribute_consumes_exactly_its_length(self):
        cursor = ByteCursor(b"\x00\x01\x00\x00\x00\x02ab" + b"rest")
        attr = read_attribute(cursor)
        assert attr == AttributeInfo(1, b"ab")
        assert cursor.remaining == 4

    def test_attribute_name_must_be_utf8(self):
        pool = ConstantPool.of(ConstantUtf8(b"Code"))
        with pytest.raises(UnresolvedUtf8Reference) as exc_info:
            read_attribute(ByteCursor(b"\x00\x02\x00\x00\x00\x00"), pool)
        assert exc_info.value.index == 2

    def test_unresolved_class_attribute_name(self):
        unit = build_hello_unit(attributes=(AttributeInfo(0, b""),))
        with pytest.raises(UnresolvedUtf8Reference) as exc_info:
            decode_class(unit.to_bytes())
        assert exc_info.value.index == 0
        assert exc_info.value.state == DecodeState.ATTRIBUTES


class TestMembers:
    def test_read_member(self):
        data = b"\x00\x01\x00\x05\x00\x06\x00\x01" + b"\x00\x09\x00\x00\x00\x01\xb1"
        cursor = ByteCursor(data)
        member = read_member(cursor, MethodInfo)
        assert member == MethodInfo(0x0001, 5, 6, (AttributeInfo(9, b"\xb1"),))
        assert cursor.at_end()

    def test_unresolved_method_name(self):
        method = MethodInfo(0x0001, 2, 8)  # #2 is a Class entry
        unit = build_hello_unit(methods=(method,))
        with pytest.raises(UnresolvedUtf8Reference) as exc_info:
            decode_class(unit.to_bytes())
        assert exc_info.value.found == "Class"
        assert exc_info.value.state == DecodeState.METHODS

    def test_unresolved_field_descriptor(self):
        field = FieldInfo(0x0001, 5, 15)  # #15 is a Long entry
        unit = build_hello_unit(fields=(field,))
        with pytest.raises(UnresolvedUtf8Reference) as exc_info:
            decode_class(unit.to_bytes())
        assert exc_info.value.index == 15
        assert exc_info.value.found == "Long"
        assert exc_info.value.state == DecodeState.FIELDS

    def test_name_check_can_be_disabled(self):
        unit = build_hello_unit(methods=(MethodInfo(0x0001, 2, 8),))
        options = DecodeOptions(check_utf8_names=False)
        assert decode_class(unit.to_bytes(), options) == unit


class TestVersionLabels:
    @pytest.mark.parametrize("major, label", [
        (0, "unknown"),
        (44, "unknown"),
        (45, "legacy"),
        (50, "legacy"),
        (51, "7"),
        (52, "8"),
        (53, "9"),
        (54, "10"),
        (55, "11"),
        (56, "unsupported"),
        (65, "unsupported"),
    ])
    def test_java_se_version(self, major, label):
        assert java_se_version(major) == label
        assert ClassVersion(major, 3).label == label

    def test_label_does_not_affect_decoding(self):
        unit = build_hello_unit(version=ClassVersion(99, 0))
        assert decode_class(unit.to_bytes()).version_label == "unsupported"
