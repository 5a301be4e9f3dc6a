"""Pytest configuration and shared fixtures for all tests."""

import pytest

from zkevm.vm.context import ExecutionContext
from zkevm.vm.environment import Environment, InMemoryRegistry
from zkevm.vm.interpreter import execute, run

from tests.fixtures.environments import (
    CALLER_ADDRESS,
    COINBASE_ADDRESS,
    CONTRACT_ADDRESS,
    TEST_ENV,
)


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture
def env():
    """Environment used by the conformance table."""
    return TEST_ENV


@pytest.fixture
def empty_env():
    """All-zero environment."""
    return Environment()


@pytest.fixture
def caller_address():
    return CALLER_ADDRESS


@pytest.fixture
def contract_address():
    return CONTRACT_ADDRESS


@pytest.fixture
def coinbase_address():
    return COINBASE_ADDRESS


@pytest.fixture
def registry(contract_address):
    """Registry with a funded contract and one code-only account."""
    return InMemoryRegistry(
        balances={contract_address: 10**18, b"\x22" * 20: 5},
        code={b"\x33" * 20: bytes.fromhex("6001600101")},
        block_hashes={0: b"\xaa" * 32},
    )


# =============================================================================
# Execution Fixtures
# =============================================================================

@pytest.fixture
def run_code(env):
    """Factory: execute bytecode in the test environment."""
    def _run_code(code, calldata=b"", **kwargs):
        kwargs.setdefault("env", env)
        return execute(code, calldata, **kwargs)
    return _run_code


@pytest.fixture
def run_context(env):
    """Factory: build a context, run it and hand both back."""
    def _run_context(code, calldata=b"", **kwargs):
        kwargs.setdefault("env", env)
        ctx = ExecutionContext(code=code, calldata=calldata, **kwargs)
        return ctx, run(ctx)
    return _run_context
