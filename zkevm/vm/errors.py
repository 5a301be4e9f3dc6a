"""
Interpreter exceptions.

Faults end the frame with halt reason INVALID. Halts are not errors: they
signal STOP, RETURN and REVERT from a handler to the interpreter loop.
"""

from __future__ import annotations


class EvmError(Exception):
    """Base class for everything raised during execution."""
    pass


class ConfigError(ValueError):
    """Invalid interpreter configuration or environment input."""
    pass


# ---------------------------------------------------------------------------
# Faults
# ---------------------------------------------------------------------------

class ExecutionFault(EvmError):
    pass


class StackUnderflow(ExecutionFault):
    pass


class StackOverflow(ExecutionFault):
    pass


class InvalidJumpDestination(ExecutionFault):
    pass


class MemoryOutOfBounds(ExecutionFault):
    pass


class InvalidOpcode(ExecutionFault):
    pass


class ReturnDataOutOfBounds(ExecutionFault):
    pass


class StepLimitExceeded(ExecutionFault):
    pass


# ---------------------------------------------------------------------------
# Halts
# ---------------------------------------------------------------------------

class Halt(EvmError):
    pass


class StopExecution(Halt):
    """STOP opcode, or running off the end of the code."""
    pass


class ReturnData(Halt):
    """RETURN opcode."""
    def __init__(self, data: bytes = b""):
        self.data = data
        super().__init__()


class Revert(Halt):
    """REVERT opcode."""
    def __init__(self, data: bytes = b""):
        self.data = data
        super().__init__()
