"""Tests for 256-bit word arithmetic."""

import pytest

from zkevm.vm import word
from zkevm.vm.word import UINT256_MAX, to_signed, to_unsigned

MINUS_ONE = UINT256_MAX
INT256_MIN = 1 << 255


def neg(value: int) -> int:
    return to_unsigned(-value)


class TestSignedView:
    def test_positive(self):
        assert to_signed(5) == 5

    def test_negative(self):
        assert to_signed(UINT256_MAX) == -1
        assert to_signed(INT256_MIN) == -(1 << 255)

    def test_to_unsigned(self):
        assert to_unsigned(-1) == UINT256_MAX
        assert to_unsigned(-(1 << 255)) == INT256_MIN


class TestArithmetic:
    @pytest.mark.parametrize(
        "a,b",
        [(0, 0), (1, 2), (UINT256_MAX, 1), (UINT256_MAX, UINT256_MAX), (2**200, 2**100)],
    )
    def test_add_sub_mul_wrap(self, a, b):
        assert word.add(a, b) == (a + b) % 2**256
        assert word.sub(a, b) == (a - b) % 2**256
        assert word.mul(a, b) == (a * b) % 2**256

    def test_sub_underflow_wraps(self):
        assert word.sub(0, 1) == UINT256_MAX

    def test_div_by_zero(self):
        assert word.div(10, 0) == 0
        assert word.mod(10, 0) == 0
        assert word.sdiv(neg(10), 0) == 0
        assert word.smod(neg(10), 0) == 0

    def test_div(self):
        assert word.div(10, 3) == 3

    def test_sdiv_truncates_toward_zero(self):
        assert word.sdiv(neg(7), 2) == neg(3)
        assert word.sdiv(7, neg(2)) == neg(3)
        assert word.sdiv(neg(7), neg(2)) == 3

    def test_sdiv_overflow(self):
        assert word.sdiv(INT256_MIN, MINUS_ONE) == INT256_MIN

    def test_smod_sign_follows_dividend(self):
        assert word.smod(neg(8), 3) == neg(2)
        assert word.smod(8, neg(3)) == 2
        assert word.smod(neg(8), neg(3)) == neg(2)

    def test_addmod_does_not_wrap_intermediate(self):
        assert word.addmod(UINT256_MAX, 2, 2) == (UINT256_MAX + 2) % 2
        assert word.addmod(UINT256_MAX, UINT256_MAX, 7) == (2 * UINT256_MAX) % 7

    def test_mulmod(self):
        assert word.mulmod(UINT256_MAX, UINT256_MAX, 12) == (UINT256_MAX * UINT256_MAX) % 12
        assert word.mulmod(3, 4, 0) == 0

    def test_exp(self):
        assert word.exp(2, 255) == 2**255
        assert word.exp(2, 256) == 0
        assert word.exp(0, 0) == 1
        assert word.exp(3, 3) == 27

    def test_signextend(self):
        assert word.signextend(0, 0xFF) == UINT256_MAX
        assert word.signextend(0, 0x7F) == 0x7F
        assert word.signextend(1, 0x8000) == UINT256_MAX - 0x7FFF
        assert word.signextend(0, 0x1FF) == UINT256_MAX

    def test_signextend_wide_index_is_identity(self):
        assert word.signextend(31, 0x80) == 0x80
        assert word.signextend(2**255, 0xFF) == 0xFF


class TestComparison:
    def test_unsigned(self):
        assert word.lt(1, 2) == 1
        assert word.gt(1, 2) == 0
        assert word.eq(5, 5) == 1
        assert word.iszero(0) == 1
        assert word.iszero(7) == 0

    def test_signed(self):
        assert word.slt(MINUS_ONE, 0) == 1
        assert word.sgt(MINUS_ONE, 0) == 0
        assert word.lt(MINUS_ONE, 0) == 0


class TestBitwise:
    def test_logic(self):
        assert word.and_(0b1100, 0b1010) == 0b1000
        assert word.or_(0b1100, 0b1010) == 0b1110
        assert word.xor(0b1100, 0b1010) == 0b0110
        assert word.not_(0) == UINT256_MAX

    def test_byte(self):
        x = int.from_bytes(bytes(range(32)), "big")
        assert word.byte(0, x) == 0
        assert word.byte(31, x) == 31
        assert word.byte(32, x) == 0

    @pytest.mark.parametrize("shift", [256, 257, 2**255, UINT256_MAX])
    def test_logical_shift_past_width(self, shift):
        assert word.shl(shift, UINT256_MAX) == 0
        assert word.shr(shift, UINT256_MAX) == 0

    @pytest.mark.parametrize("shift", [256, 300, UINT256_MAX])
    def test_arithmetic_shift_past_width(self, shift):
        assert word.sar(shift, INT256_MIN) == UINT256_MAX
        assert word.sar(shift, INT256_MIN - 1) == 0

    def test_sar_sign_extends(self):
        assert word.sar(4, neg(16)) == neg(1)
        assert word.sar(1, 16) == 8


class TestConversions:
    def test_to_bytes(self):
        assert word.to_bytes(1) == b"\x00" * 31 + b"\x01"
        assert word.to_bytes(2**160 + 5, 20) == b"\x00" * 19 + b"\x05"

    def test_from_bytes(self):
        assert word.from_bytes(b"\x01\x00") == 256
        assert word.from_bytes(b"") == 0
        assert word.from_bytes(b"\xff" * 32) == UINT256_MAX
