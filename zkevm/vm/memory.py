"""
EVM memory: byte-addressable, auto-expanding in 32-byte words.

Length is always a multiple of 32 and never shrinks. Accesses whose end
would pass ``limit`` raise MemoryOutOfBounds before anything is touched.
"""

from __future__ import annotations

from zkevm.vm.errors import MemoryOutOfBounds
from zkevm.vm.word import UINT256_MAX

WORD_SIZE = 32
DEFAULT_MEMORY_LIMIT = 1 << 25  # 32 MiB
MAX_MEMORY_LIMIT = 1 << 30  # 1 GiB


def ceil32(value: int) -> int:
    return ((value + WORD_SIZE - 1) // WORD_SIZE) * WORD_SIZE


class Memory:
    """Linear memory owned by a single execution context."""

    __slots__ = ("_data", "_limit")

    def __init__(self, limit: int = DEFAULT_MEMORY_LIMIT) -> None:
        self._data = bytearray()
        self._limit = limit

    def expand(self, offset: int, size: int) -> None:
        """Expand memory to cover [offset, offset+size)."""
        if size == 0:
            return
        end = offset + size
        if end > self._limit:
            raise MemoryOutOfBounds(
                f"Memory access [{offset}, {end}) exceeds limit {self._limit}"
            )
        if end > len(self._data):
            new_size = ceil32(end)
            self._data.extend(b"\x00" * (new_size - len(self._data)))

    def load(self, offset: int, size: int) -> bytes:
        """Read ``size`` bytes starting at ``offset``, expanding if needed."""
        if size == 0:
            return b""
        self.expand(offset, size)
        return bytes(self._data[offset : offset + size])

    def load_word(self, offset: int) -> int:
        return int.from_bytes(self.load(offset, WORD_SIZE), "big")

    def store(self, offset: int, data: bytes) -> None:
        if len(data) == 0:
            return
        self.expand(offset, len(data))
        self._data[offset : offset + len(data)] = data

    def store_word(self, offset: int, value: int) -> None:
        self.store(offset, (value & UINT256_MAX).to_bytes(WORD_SIZE, "big"))

    def store_byte(self, offset: int, value: int) -> None:
        self.expand(offset, 1)
        self._data[offset] = value & 0xFF

    def copy(self, dst: int, src: int, length: int) -> None:
        """Copy ``length`` bytes from ``src`` to ``dst``; regions may overlap."""
        if length == 0:
            return
        self.expand(max(dst, src), length)
        data = bytes(self._data[src : src + length])
        self._data[dst : dst + length] = data

    def to_bytes(self) -> bytes:
        return bytes(self._data)

    @property
    def size(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)
