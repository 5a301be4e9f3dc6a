"""
Interpreter main loop.

run() is the fetch-decode-execute loop over one ExecutionContext.
execute() builds the context and runs it in one call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from eth_utils import encode_hex, to_checksum_address

from zkevm.common.config import DEFAULT_CONFIG, InterpreterConfig
from zkevm.vm.context import ExecutionContext, HaltReason, Log
from zkevm.vm.environment import AccountRegistry, Environment, NullRegistry
from zkevm.vm.errors import (
    ExecutionFault,
    InvalidOpcode,
    ReturnData,
    Revert,
    StepLimitExceeded,
    StopExecution,
)
from zkevm.vm.hooks import DefaultHook, ExecutionHook
from zkevm.vm.opcodes import OPCODE_TABLE, UNSUPPORTED

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    halt_reason: HaltReason
    stack: list[int] = field(default_factory=list)  # bottom-to-top
    memory: bytes = b""
    return_data: bytes = b""
    error: Optional[str] = None
    storage: dict[int, int] = field(default_factory=dict)
    logs: list[Log] = field(default_factory=list)
    steps: int = 0

    @property
    def success(self) -> bool:
        return self.halt_reason.is_success

    @classmethod
    def from_context(cls, ctx: ExecutionContext) -> ExecutionResult:
        # Storage writes and logs only survive a successful halt
        keep = ctx.halt_reason.is_success
        return cls(
            halt_reason=ctx.halt_reason,
            stack=ctx.stack.to_list(),
            memory=ctx.memory.to_bytes(),
            return_data=ctx.output,
            error=ctx.error,
            storage=dict(ctx.storage) if keep else {},
            logs=list(ctx.logs) if keep else [],
            steps=ctx.steps,
        )

    def to_json(self) -> dict:
        return {
            "haltReason": self.halt_reason.value,
            "success": self.success,
            "stack": [str(v) for v in self.stack],
            "memory": encode_hex(self.memory),
            "returnData": encode_hex(self.return_data),
            "error": self.error,
            "storage": {hex(k): hex(v) for k, v in sorted(self.storage.items())},
            "logs": [
                {
                    "address": to_checksum_address(log.address),
                    "topics": [encode_hex(t) for t in log.topics],
                    "data": encode_hex(log.data),
                }
                for log in self.logs
            ],
            "steps": self.steps,
        }


def run(ctx: ExecutionContext, hook: Optional[ExecutionHook] = None) -> ExecutionResult:
    """Execute ``ctx`` until it halts and return the outcome.

    A context that already halted is not dispatched again.
    """
    if ctx.is_halted:
        return ExecutionResult.from_context(ctx)

    hook = hook or DefaultHook()
    max_steps = ctx.config.max_steps

    try:
        while ctx.pc < len(ctx.code):
            ctx.stack.checkpoint()
            if max_steps is not None and ctx.steps >= max_steps:
                raise StepLimitExceeded(f"Step limit {max_steps} reached")

            opcode = ctx.code[ctx.pc]
            hook.before_step(ctx, opcode)
            ctx.steps += 1

            entry = OPCODE_TABLE.get(opcode)
            if entry is None:
                if opcode in UNSUPPORTED:
                    logger.warning(
                        "Unsupported opcode %s at pc=%d", UNSUPPORTED[opcode], ctx.pc
                    )
                    raise InvalidOpcode(f"Unsupported opcode: {UNSUPPORTED[opcode]}")
                raise InvalidOpcode(f"Unknown opcode: 0x{opcode:02x}")

            entry.handler(ctx)
            hook.after_step(ctx, opcode)

        # Fell off the end of code: implicit STOP
        ctx.halt(HaltReason.STOPPED)

    except StopExecution:
        ctx.halt(HaltReason.STOPPED)

    except ReturnData as ret:
        ctx.halt(HaltReason.RETURNED, ret.data)

    except Revert as rev:
        ctx.halt(HaltReason.REVERTED, rev.data)

    except ExecutionFault as fault:
        # Leave the stack as it was before the faulting instruction
        ctx.stack.restore()
        ctx.halt(HaltReason.INVALID, error=f"{type(fault).__name__}: {fault}")
        logger.debug("Fault at pc=%d: %s", ctx.pc, ctx.error)

    result = ExecutionResult.from_context(ctx)
    logger.debug(
        "Halted: %s after %d steps (stack depth %d, memory %d bytes)",
        result.halt_reason.value, result.steps, len(result.stack), len(result.memory),
    )
    hook.on_halt(ctx, result)
    return result


def execute(
    code: bytes,
    calldata: bytes = b"",
    env: Optional[Environment] = None,
    registry: Optional[AccountRegistry] = None,
    config: InterpreterConfig = DEFAULT_CONFIG,
    hook: Optional[ExecutionHook] = None,
) -> ExecutionResult:
    """Run ``code`` with ``calldata`` in a fresh context.

    Args:
        code: bytecode to execute
        calldata: input data
        env: environment snapshot (all-zero defaults if omitted)
        registry: account-state collaborator (knows no accounts if omitted)
        config: resource bounds
        hook: optional execution hook, e.g. TraceHook
    """
    ctx = ExecutionContext(
        code=code,
        calldata=calldata,
        env=env or Environment(),
        registry=registry or NullRegistry(),
        config=config,
    )
    return run(ctx, hook)
