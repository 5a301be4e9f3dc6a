"""
EVM operand stack: bounded LIFO of 256-bit words.
"""

from __future__ import annotations

from zkevm.vm.errors import StackOverflow, StackUnderflow
from zkevm.vm.word import UINT256_MAX

MAX_STACK_DEPTH = 1024


class Stack:
    """Operand stack, at most ``limit`` items.

    ``checkpoint()`` marks the state at the start of an instruction and
    ``restore()`` puts it back, so a faulting instruction leaves no trace.
    """

    __slots__ = ("_data", "_limit", "_base", "_taken")

    def __init__(self, limit: int = MAX_STACK_DEPTH) -> None:
        self._data: list[int] = []
        self._limit = limit
        self._base = 0
        self._taken: list[int] = []

    def push(self, value: int) -> None:
        if len(self._data) >= self._limit:
            raise StackOverflow(f"Stack overflow (max {self._limit})")
        self._data.append(value & UINT256_MAX)

    def pop(self) -> int:
        if not self._data:
            raise StackUnderflow("Stack underflow")
        value = self._data.pop()
        if len(self._data) < self._base:
            self._base = len(self._data)
            self._taken.append(value)
        return value

    def pop_many(self, count: int) -> list[int]:
        """Pop ``count`` items, top first. Nothing is removed on underflow."""
        if count > len(self._data):
            raise StackUnderflow(
                f"Stack underflow: need {count}, have {len(self._data)}"
            )
        return [self.pop() for _ in range(count)]

    def peek(self, depth: int = 0) -> int:
        if depth >= len(self._data):
            raise StackUnderflow(f"Stack underflow: peek({depth})")
        return self._data[-(depth + 1)]

    def swap(self, depth: int) -> None:
        """Swap top with the item ``depth`` below it (SWAP1 uses depth=1)."""
        if depth >= len(self._data):
            raise StackUnderflow(f"Stack underflow: swap({depth})")
        idx = -(depth + 1)
        if len(self._data) + idx < self._base:
            # Swapped slots below the checkpoint must be restorable too
            self._release(len(self._data) + idx)
        self._data[-1], self._data[idx] = self._data[idx], self._data[-1]

    def dup(self, depth: int) -> None:
        """Push a copy of the ``depth``-th item (DUP1 uses depth=1)."""
        if depth > len(self._data):
            raise StackUnderflow(f"Stack underflow: dup({depth})")
        if len(self._data) >= self._limit:
            raise StackOverflow("Stack overflow on DUP")
        self._data.append(self._data[-depth])

    # -- Instruction checkpoints --

    def checkpoint(self) -> None:
        self._base = len(self._data)
        self._taken = []

    def restore(self) -> None:
        """Undo every change since the last checkpoint."""
        del self._data[self._base:]
        self._data.extend(reversed(self._taken))
        self._taken = []

    def _release(self, index: int) -> None:
        # Treat the items from ``index`` up to the base as taken
        while self._base > index:
            self._base -= 1
            self._taken.append(self._data[self._base])

    # -- Views --

    def to_list(self) -> list[int]:
        """Items bottom-to-top."""
        return list(self._data)

    @property
    def size(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Stack({self._data!r})"
