"""
256-bit word arithmetic.

All values are Python ints in [0, 2**256). Signed operations reinterpret
the word as two's complement over 256 bits.
"""

from __future__ import annotations

UINT256_MAX = (1 << 256) - 1
UINT256_CEIL = 1 << 256
SIGN_BIT = 1 << 255


def to_signed(value: int) -> int:
    """Convert uint256 to signed int256."""
    if value & SIGN_BIT:
        return value - UINT256_CEIL
    return value


def to_unsigned(value: int) -> int:
    """Convert signed int256 to uint256."""
    return value % UINT256_CEIL


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

def add(a: int, b: int) -> int:
    return (a + b) & UINT256_MAX


def sub(a: int, b: int) -> int:
    return (a - b) & UINT256_MAX


def mul(a: int, b: int) -> int:
    return (a * b) & UINT256_MAX


def div(a: int, b: int) -> int:
    if b == 0:
        return 0
    return a // b


def sdiv(a: int, b: int) -> int:
    """Signed division, truncating toward zero."""
    if b == 0:
        return 0
    sa, sb = to_signed(a), to_signed(b)
    # -2**255 / -1 overflows back to -2**255
    if sa == -SIGN_BIT and sb == -1:
        return SIGN_BIT
    quotient = abs(sa) // abs(sb)
    if (sa < 0) != (sb < 0):
        quotient = -quotient
    return to_unsigned(quotient)


def mod(a: int, b: int) -> int:
    if b == 0:
        return 0
    return a % b


def smod(a: int, b: int) -> int:
    """Signed modulo; the result takes the sign of the dividend."""
    if b == 0:
        return 0
    sa, sb = to_signed(a), to_signed(b)
    remainder = abs(sa) % abs(sb)
    return to_unsigned(-remainder if sa < 0 else remainder)


def addmod(a: int, b: int, n: int) -> int:
    if n == 0:
        return 0
    return (a + b) % n


def mulmod(a: int, b: int, n: int) -> int:
    if n == 0:
        return 0
    return (a * b) % n


def exp(base: int, exponent: int) -> int:
    return pow(base, exponent, UINT256_CEIL)


def signextend(b: int, x: int) -> int:
    """Extend the sign of the (b+1)-byte value x to the full word."""
    if b >= 31:
        return x
    bit = b * 8 + 7
    mask = (1 << bit) - 1
    if x & (1 << bit):
        return x | (UINT256_MAX ^ mask)
    return x & mask


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

def lt(a: int, b: int) -> int:
    return 1 if a < b else 0


def gt(a: int, b: int) -> int:
    return 1 if a > b else 0


def slt(a: int, b: int) -> int:
    return 1 if to_signed(a) < to_signed(b) else 0


def sgt(a: int, b: int) -> int:
    return 1 if to_signed(a) > to_signed(b) else 0


def eq(a: int, b: int) -> int:
    return 1 if a == b else 0


def iszero(a: int) -> int:
    return 1 if a == 0 else 0


# ---------------------------------------------------------------------------
# Bitwise
# ---------------------------------------------------------------------------

def and_(a: int, b: int) -> int:
    return a & b


def or_(a: int, b: int) -> int:
    return a | b


def xor(a: int, b: int) -> int:
    return a ^ b


def not_(a: int) -> int:
    return a ^ UINT256_MAX


def byte(i: int, x: int) -> int:
    """The i-th byte of x, counting from the most significant."""
    if i >= 32:
        return 0
    return (x >> (248 - i * 8)) & 0xFF


def shl(shift: int, value: int) -> int:
    if shift >= 256:
        return 0
    return (value << shift) & UINT256_MAX


def shr(shift: int, value: int) -> int:
    if shift >= 256:
        return 0
    return value >> shift


def sar(shift: int, value: int) -> int:
    signed = to_signed(value)
    if shift >= 256:
        return UINT256_MAX if signed < 0 else 0
    return to_unsigned(signed >> shift)


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------

def from_bytes(data: bytes) -> int:
    """Big-endian bytes (at most 32) to a word."""
    return int.from_bytes(data, "big")


def to_bytes(value: int, length: int = 32) -> bytes:
    return (value & UINT256_MAX).to_bytes(32, "big")[32 - length:]
