"""
Execution hook system.

Hooks observe the interpreter without changing it. DefaultHook does
nothing; TraceHook records the state before every dispatched instruction,
which is the step-by-step trace a proving layer consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zkevm.vm.context import ExecutionContext
    from zkevm.vm.interpreter import ExecutionResult


class ExecutionHook:
    """Base hook interface. Override methods to observe execution."""

    def before_step(self, ctx: ExecutionContext, opcode: int) -> None:
        """Called before an instruction is dispatched."""
        pass

    def after_step(self, ctx: ExecutionContext, opcode: int) -> None:
        """Called after an instruction completed without halting."""
        pass

    def on_halt(self, ctx: ExecutionContext, result: ExecutionResult) -> None:
        """Called once when the context reaches a terminal state."""
        pass


class DefaultHook(ExecutionHook):
    pass


@dataclass(frozen=True)
class TraceStep:
    step: int
    pc: int
    opcode: int
    name: str
    stack: tuple[int, ...]
    memory_size: int

    def to_json(self) -> dict:
        return {
            "step": self.step,
            "pc": self.pc,
            "op": self.name,
            "stack": [hex(v) for v in self.stack],
            "memSize": self.memory_size,
        }


class TraceHook(ExecutionHook):
    """Collects a TraceStep per instruction."""

    def __init__(self) -> None:
        self.steps: list[TraceStep] = []

    def before_step(self, ctx: ExecutionContext, opcode: int) -> None:
        from zkevm.vm.opcodes import opcode_name
        self.steps.append(TraceStep(
            step=ctx.steps,
            pc=ctx.pc,
            opcode=opcode,
            name=opcode_name(opcode),
            stack=tuple(ctx.stack.to_list()),
            memory_size=ctx.memory.size,
        ))
