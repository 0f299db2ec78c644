"""Tests for constant pool decoding and typed lookups."""

import math
import struct

import pytest

from pyjclass.constants import (
    ClassConstant, ConstantPool, DoubleConstant, FloatConstant, IntegerConstant,
    LongConstant, MethodHandleConstant, MethodHandleKind, MethodTypeConstant,
    NameAndTypeConstant, StringConstant, Utf8Constant, decode_modified_utf8,
    read_constant_pool,
)
from pyjclass.errors import (
    MalformedConstantPool, TruncatedInput, UnexpectedConstantKind, UnresolvedConstantReference,
)
from pyjclass.reader import ByteReader

from classbuilder import PoolWriter, u2


def utf8(text: str) -> bytes:
    raw = text.encode("utf-8")
    return b"\x01" + u2(len(raw)) + raw


def read_pool(count: int, data: bytes) -> ConstantPool:
    return read_constant_pool(ByteReader(data), count)


def read_written(cp: PoolWriter) -> ConstantPool:
    data = cp.write()
    reader = ByteReader(data)
    return read_constant_pool(reader, reader.read_u2())


class TestWideConstants:
    def test_utf8_after_long_lands_at_index_3(self):
        pool = read_pool(4, b"\x05" + struct.pack(">q", 7) + utf8("hi"))
        assert pool[1] == LongConstant(7)
        assert pool[3] == Utf8Constant("hi")
        assert 2 not in pool
        assert len(pool) == 2

    def test_gap_slot_is_malformed_reference(self):
        pool = read_pool(4, b"\x06" + struct.pack(">d", 1.5) + utf8("x"))
        with pytest.raises(MalformedConstantPool):
            pool.get(2)
        with pytest.raises(MalformedConstantPool):
            pool.utf8(2)

    def test_class_pointing_at_gap_is_rejected(self):
        data = b"\x05" + struct.pack(">q", 1) + b"\x07" + u2(2)
        with pytest.raises(MalformedConstantPool):
            read_pool(4, data)

    def test_wide_constant_in_last_slot(self):
        with pytest.raises(MalformedConstantPool):
            read_pool(2, b"\x05" + struct.pack(">q", 1))

    def test_long_and_double_values(self):
        cp = PoolWriter()
        long_idx = cp.add_long(-(2 ** 40))
        double_idx = cp.add_double(-0.25)
        pool = read_written(cp)
        assert pool[long_idx].value == -(2 ** 40)
        assert pool[double_idx].value == -0.25
        assert double_idx == long_idx + 2


class TestConstantKinds:
    def test_all_kinds(self):
        cp = PoolWriter()
        int_idx = cp.add_integer(-5)
        float_idx = cp.add_float(2.5)
        class_idx = cp.add_class("java/lang/String")
        string_idx = cp.add_string("hello")
        field_idx = cp.add_fieldref("Test", "count", "I")
        method_idx = cp.add_methodref("Test", "run", "()V")
        imethod_idx = cp.add_interface_methodref("java/lang/Runnable", "run", "()V")
        handle_idx = cp.add_method_handle(6, method_idx)
        mtype_idx = cp.add_method_type("(I)V")
        pool = read_written(cp)

        assert pool[int_idx] == IntegerConstant(-5)
        assert pool[float_idx].value == 2.5
        assert pool.class_name(class_idx) == "java/lang/String"
        assert pool.utf8(pool.get(string_idx, StringConstant).string_index) == "hello"
        assert pool.name_and_type(pool[field_idx].name_and_type_index) == ("count", "I")
        assert pool.class_name(pool[method_idx].class_index) == "Test"
        assert pool.class_name(pool[imethod_idx].class_index) == "java/lang/Runnable"
        assert pool[handle_idx] == MethodHandleConstant(MethodHandleKind.INVOKE_STATIC, method_idx)

        # tag 16 has its own constant kind
        assert isinstance(pool[mtype_idx], MethodTypeConstant)
        assert pool.utf8(pool[mtype_idx].descriptor_index) == "(I)V"

    def test_iteration_is_in_index_order(self):
        cp = PoolWriter()
        cp.add_long(1)
        cp.add_utf8("a")
        cp.add_utf8("b")
        pool = read_written(cp)
        assert [idx for idx, _ in pool] == [1, 3, 4]

    def test_nan_floats_compare_equal(self):
        data = b"\x04" + struct.pack(">I", 0x7FC00000)
        first = read_pool(2, data)
        second = read_pool(2, data)
        assert math.isnan(first[1].value)
        assert first == second
        assert first[1] == FloatConstant(0x7FC00000)

    def test_double_bits_are_kept(self):
        pool = read_pool(3, b"\x06" + struct.pack(">d", 3.0))
        assert pool[1] == DoubleConstant(struct.unpack(">Q", struct.pack(">d", 3.0))[0])


class TestMalformedPool:
    def test_unknown_tag(self):
        with pytest.raises(MalformedConstantPool) as exc_info:
            read_pool(3, utf8("a") + b"\x02\x00\x00")
        assert exc_info.value.offset == 4

    @pytest.mark.parametrize("tag", [0, 2, 13, 14, 19, 20, 255])
    def test_unsupported_tags(self, tag):
        with pytest.raises(MalformedConstantPool):
            read_pool(2, bytes([tag]) + b"\x00\x00\x00\x00")

    def test_unknown_method_handle_kind(self):
        cp = PoolWriter()
        method_idx = cp.add_methodref("Test", "run", "()V")
        cp.add_method_handle(10, method_idx)
        with pytest.raises(MalformedConstantPool):
            read_written(cp)

    def test_method_handle_kind_must_match_target(self):
        cp = PoolWriter()
        method_idx = cp.add_methodref("Test", "run", "()V")
        cp.add_method_handle(MethodHandleKind.GET_FIELD, method_idx)
        with pytest.raises(UnexpectedConstantKind):
            read_written(cp)

    def test_class_must_name_utf8(self):
        cp = PoolWriter()
        int_idx = cp.add_integer(1)
        cp.add_raw(7, int_idx)
        with pytest.raises(UnexpectedConstantKind) as exc_info:
            read_written(cp)
        assert exc_info.value.index == int_idx
        assert exc_info.value.expected == ("Utf8Constant",)
        assert exc_info.value.found == "IntegerConstant"

    def test_member_ref_needs_existing_name_and_type(self):
        cp = PoolWriter()
        class_idx = cp.add_class("Test")
        cp.add_raw(9, class_idx, 40)
        with pytest.raises(UnresolvedConstantReference) as exc_info:
            read_written(cp)
        assert exc_info.value.index == 40

    def test_invalid_utf8(self):
        with pytest.raises(MalformedConstantPool):
            read_pool(2, b"\x01\x00\x01\xff")

    def test_truncated_entry(self):
        with pytest.raises(TruncatedInput):
            read_pool(2, b"\x03\x00\x00")


class TestLookups:
    @pytest.fixture
    def pool(self):
        return ConstantPool(4, {
            1: Utf8Constant("Test"),
            2: ClassConstant(1),
            3: NameAndTypeConstant(1, 1),
        })

    def test_index_zero_is_never_populated(self, pool):
        with pytest.raises(UnresolvedConstantReference):
            pool.get(0)
        assert pool.optional(0, ClassConstant) is None

    def test_optional_still_checks_kind(self, pool):
        assert pool.optional(2, ClassConstant) == ClassConstant(1)
        with pytest.raises(UnexpectedConstantKind):
            pool.optional(1, ClassConstant)

    def test_missing_index(self, pool):
        with pytest.raises(UnresolvedConstantReference) as exc_info:
            pool.get(9, offset=12)
        assert exc_info.value.index == 9
        assert exc_info.value.offset == 12
        assert "offset 12" in str(exc_info.value)

    def test_multiple_expected_kinds(self, pool):
        assert pool.get(2, Utf8Constant, ClassConstant) == ClassConstant(1)
        with pytest.raises(UnexpectedConstantKind) as exc_info:
            pool.get(3, Utf8Constant, ClassConstant)
        assert exc_info.value.expected == ("Utf8Constant", "ClassConstant")

    def test_class_name(self, pool):
        assert pool.class_name(2) == "Test"
        with pytest.raises(UnexpectedConstantKind):
            pool.class_name(1)


class TestModifiedUtf8:
    def test_encoded_nul(self):
        assert decode_modified_utf8(b"a\xc0\x80b") == "a\x00b"

    def test_surrogate_pair_is_joined(self):
        # U+1F600 as two 3-byte surrogates
        assert decode_modified_utf8(b"\xed\xa0\xbd\xed\xb8\x80") == "\U0001F600"

    def test_plain_ascii_and_bmp(self):
        assert decode_modified_utf8("café".encode("utf-8")) == "café"
