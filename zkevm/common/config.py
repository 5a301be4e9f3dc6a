"""
Interpreter configuration.

Resource bounds for a single execution, plus loading of a JSON run
description (environment, limits) as used by the CLI.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from zkevm.vm.environment import Environment, parse_int
from zkevm.vm.errors import ConfigError
from zkevm.vm.memory import DEFAULT_MEMORY_LIMIT, MAX_MEMORY_LIMIT
from zkevm.vm.stack import MAX_STACK_DEPTH


@dataclass(frozen=True)
class InterpreterConfig:
    stack_limit: int = MAX_STACK_DEPTH
    memory_limit: int = DEFAULT_MEMORY_LIMIT
    max_steps: Optional[int] = None  # None = run until halt

    def __post_init__(self) -> None:
        if not 0 < self.stack_limit <= MAX_STACK_DEPTH:
            raise ConfigError(
                f"stack_limit must be in 1..{MAX_STACK_DEPTH}, got {self.stack_limit}"
            )
        if not 0 <= self.memory_limit <= MAX_MEMORY_LIMIT or self.memory_limit % 32:
            raise ConfigError(
                f"memory_limit must be a multiple of 32 in 0..{MAX_MEMORY_LIMIT}, "
                f"got {self.memory_limit}"
            )
        if self.max_steps is not None and self.max_steps <= 0:
            raise ConfigError(f"max_steps must be positive, got {self.max_steps}")

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> InterpreterConfig:
        kwargs: dict[str, Any] = {}
        if "stackLimit" in data:
            kwargs["stack_limit"] = parse_int(data["stackLimit"])
        if "memoryLimit" in data:
            kwargs["memory_limit"] = parse_int(data["memoryLimit"])
        if data.get("maxSteps") is not None:
            kwargs["max_steps"] = parse_int(data["maxSteps"])
        return cls(**kwargs)


DEFAULT_CONFIG = InterpreterConfig()


def load_run_file(path: Path) -> tuple[Environment, InterpreterConfig]:
    """Load ``{"env": {...}, "config": {...}}`` from a JSON file.

    Both sections are optional. A file without either key is read as a
    bare environment.
    """
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"File not found: {path}") from None
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from None

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {path}")

    if "env" in data or "config" in data:
        env = Environment.from_json(data.get("env") or {})
        config = InterpreterConfig.from_json(data.get("config") or {})
    else:
        env = Environment.from_json(data)
        config = DEFAULT_CONFIG
    return env, config
