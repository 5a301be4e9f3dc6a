"""
Read-only execution environment and the account registry collaborator.

Environment is the block/transaction snapshot captured when a context is
created. AccountRegistry answers the account-state questions an opcode may
ask (BALANCE, EXTCODESIZE, ...); the interpreter never mutates it.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Union

from eth_utils import is_hex_address, to_canonical_address

from zkevm.common.crypto import keccak256
from zkevm.vm.errors import ConfigError

ZERO_ADDRESS = b"\x00" * 20
EMPTY_HASH = b"\x00" * 32


@dataclass(frozen=True)
class Environment:
    """Block and call context visible to the running code."""

    address: bytes = ZERO_ADDRESS
    caller: bytes = ZERO_ADDRESS
    origin: bytes = ZERO_ADDRESS
    value: int = 0

    # Block context
    chain_id: int = 1
    block_number: int = 0
    timestamp: int = 0
    coinbase: bytes = ZERO_ADDRESS
    gas_limit: int = 0
    prevrandao: int = 0
    base_fee: int = 0
    blob_base_fee: int = 0

    # Transaction context
    gas_price: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Environment:
        """Build an environment from a JSON-style dict.

        Keys are camelCase or snake_case field names. Integers may be given
        as ints or as decimal/``0x`` strings; addresses as hex strings or
        ints.
        """
        known = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, raw in data.items():
            name = _snake_case(key)
            if name not in known:
                raise ConfigError(f"Unknown environment field: {key}")
            if known[name].type in ("bytes", bytes):
                kwargs[name] = parse_address(raw)
            else:
                kwargs[name] = parse_int(raw)
        return cls(**kwargs)


def _snake_case(key: str) -> str:
    out = []
    for ch in key:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def parse_int(val: Union[str, int]) -> int:
    if isinstance(val, bool):
        raise ConfigError(f"Expected integer, got {val!r}")
    if isinstance(val, int):
        value = val
    elif isinstance(val, str):
        try:
            value = int(val, 0) if val else 0
        except ValueError:
            raise ConfigError(f"Invalid integer: {val!r}") from None
    else:
        raise ConfigError(f"Expected integer, got {val!r}")
    if not 0 <= value < 1 << 256:
        raise ConfigError(f"Integer out of uint256 range: {val!r}")
    return value


def parse_address(val: Union[str, int, bytes]) -> bytes:
    if isinstance(val, bytes):
        if len(val) != 20:
            raise ConfigError(f"Address must be 20 bytes, got {len(val)}")
        return val
    if isinstance(val, int) and not isinstance(val, bool):
        if not 0 <= val < 1 << 160:
            raise ConfigError(f"Address out of range: {val}")
        return val.to_bytes(20, "big")
    if isinstance(val, str) and is_hex_address(val):
        return to_canonical_address(val)
    raise ConfigError(f"Invalid address: {val!r}")


# ---------------------------------------------------------------------------
# Account registry
# ---------------------------------------------------------------------------

class AccountRegistry:
    """Lookup interface for account state owned outside the interpreter.

    Subclass to connect a real state backend. The base implementation
    knows no accounts and answers every query with zero or empty.
    """

    def get_balance(self, address: bytes) -> int:
        return 0

    def get_code(self, address: bytes) -> bytes:
        return b""

    def get_code_size(self, address: bytes) -> int:
        return len(self.get_code(address))

    def get_code_hash(self, address: bytes) -> bytes:
        # Non-existent accounts hash to zero
        return EMPTY_HASH

    def get_block_hash(self, block_number: int) -> bytes:
        return EMPTY_HASH


class NullRegistry(AccountRegistry):
    """Registry with no accounts."""
    pass


class InMemoryRegistry(AccountRegistry):
    """Dict-backed registry for callers that hold account state in memory."""

    def __init__(
        self,
        balances: dict[bytes, int] | None = None,
        code: dict[bytes, bytes] | None = None,
        block_hashes: dict[int, bytes] | None = None,
    ) -> None:
        self._balances = dict(balances or {})
        self._code = dict(code or {})
        self._block_hashes = dict(block_hashes or {})

    def get_balance(self, address: bytes) -> int:
        return self._balances.get(address, 0)

    def get_code(self, address: bytes) -> bytes:
        return self._code.get(address, b"")

    def get_code_hash(self, address: bytes) -> bytes:
        if address not in self._balances and address not in self._code:
            return EMPTY_HASH
        return keccak256(self.get_code(address))

    def get_block_hash(self, block_number: int) -> bytes:
        return self._block_hashes.get(block_number, EMPTY_HASH)
