"""
Execution context: the state of one running frame.

Owns the stack and memory; holds the immutable code, calldata and
environment; tracks the program counter and the halt state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from zkevm.common.config import DEFAULT_CONFIG, InterpreterConfig
from zkevm.vm.environment import AccountRegistry, Environment, NullRegistry
from zkevm.vm.memory import Memory
from zkevm.vm.stack import Stack

logger = logging.getLogger(__name__)

JUMPDEST = 0x5B
PUSH1 = 0x60
PUSH32 = 0x7F


class HaltReason(Enum):
    RUNNING = "running"
    STOPPED = "stopped"
    RETURNED = "returned"
    REVERTED = "reverted"
    INVALID = "invalid"

    @property
    def is_terminal(self) -> bool:
        return self is not HaltReason.RUNNING

    @property
    def is_success(self) -> bool:
        return self in (HaltReason.STOPPED, HaltReason.RETURNED)


@dataclass(frozen=True)
class Log:
    address: bytes
    topics: tuple[bytes, ...]
    data: bytes


@dataclass
class ExecutionContext:
    """A single frame of execution."""

    code: bytes = b""
    calldata: bytes = b""
    env: Environment = field(default_factory=Environment)
    registry: AccountRegistry = field(default_factory=NullRegistry)
    config: InterpreterConfig = DEFAULT_CONFIG

    pc: int = 0

    stack: Stack = field(init=False)
    memory: Memory = field(init=False)

    # Return data of the last sub-call; no sub-calls run in a single frame
    return_data: bytes = field(default=b"", init=False)
    # Data handed back by RETURN/REVERT
    output: bytes = field(default=b"", init=False)

    halt_reason: HaltReason = field(default=HaltReason.RUNNING, init=False)
    error: Optional[str] = field(default=None, init=False)
    steps: int = field(default=0, init=False)

    # Frame-local storage, never written through to a state database
    storage: dict[int, int] = field(default_factory=dict, init=False)
    transient_storage: dict[int, int] = field(default_factory=dict, init=False)
    logs: list[Log] = field(default_factory=list, init=False)

    valid_jumpdests: frozenset[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.code = bytes(self.code)
        self.calldata = bytes(self.calldata)
        self.stack = Stack(self.config.stack_limit)
        self.memory = Memory(self.config.memory_limit)
        self.valid_jumpdests = compute_valid_jumpdests(self.code)
        logger.debug(
            "New context: %d bytes of code, %d bytes of calldata, %d jumpdests",
            len(self.code), len(self.calldata), len(self.valid_jumpdests),
        )

    @property
    def is_halted(self) -> bool:
        return self.halt_reason.is_terminal

    def halt(self, reason: HaltReason, output: bytes = b"", error: Optional[str] = None) -> None:
        self.halt_reason = reason
        self.output = output
        self.error = error


def compute_valid_jumpdests(code: bytes) -> frozenset[int]:
    """Positions of JUMPDEST bytes that are not PUSH immediate data."""
    valid = set()
    i = 0
    while i < len(code):
        op = code[i]
        if op == JUMPDEST:
            valid.add(i)
        elif PUSH1 <= op <= PUSH32:
            i += op - PUSH1 + 1
        i += 1
    return frozenset(valid)
