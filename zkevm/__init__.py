"""Single-frame EVM bytecode interpreter with a deterministic execution trace."""

from .vm.context import ExecutionContext, HaltReason, Log
from .vm.environment import AccountRegistry, Environment, InMemoryRegistry, NullRegistry
from .vm.hooks import ExecutionHook, TraceHook, TraceStep
from .vm.interpreter import ExecutionResult, execute, run
from .common.config import InterpreterConfig

__all__ = [
    "AccountRegistry",
    "Environment",
    "ExecutionContext",
    "ExecutionHook",
    "ExecutionResult",
    "HaltReason",
    "InMemoryRegistry",
    "InterpreterConfig",
    "Log",
    "NullRegistry",
    "TraceHook",
    "TraceStep",
    "execute",
    "run",
]
