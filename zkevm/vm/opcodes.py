"""
Opcode definitions and handlers.

Each handler takes the ExecutionContext, mutates its stack/memory/pc and
either returns normally or raises a Halt/ExecutionFault. Handlers advance
the program counter themselves. Opcodes are registered in OPCODE_TABLE.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from zkevm.common.crypto import keccak256
from zkevm.vm import word
from zkevm.vm.context import ExecutionContext, Log
from zkevm.vm.errors import (
    InvalidJumpDestination,
    InvalidOpcode,
    ReturnData,
    ReturnDataOutOfBounds,
    Revert,
    StopExecution,
)

Handler = Callable[[ExecutionContext], None]


# fmt: off
class Op:
    STOP            = 0x00
    ADD             = 0x01
    MUL             = 0x02
    SUB             = 0x03
    DIV             = 0x04
    SDIV            = 0x05
    MOD             = 0x06
    SMOD            = 0x07
    ADDMOD          = 0x08
    MULMOD          = 0x09
    EXP             = 0x0A
    SIGNEXTEND      = 0x0B
    LT              = 0x10
    GT              = 0x11
    SLT             = 0x12
    SGT             = 0x13
    EQ              = 0x14
    ISZERO          = 0x15
    AND             = 0x16
    OR              = 0x17
    XOR             = 0x18
    NOT             = 0x19
    BYTE            = 0x1A
    SHL             = 0x1B
    SHR             = 0x1C
    SAR             = 0x1D
    SHA3            = 0x20
    ADDRESS         = 0x30
    BALANCE         = 0x31
    ORIGIN          = 0x32
    CALLER          = 0x33
    CALLVALUE       = 0x34
    CALLDATALOAD    = 0x35
    CALLDATASIZE    = 0x36
    CALLDATACOPY    = 0x37
    CODESIZE        = 0x38
    CODECOPY        = 0x39
    GASPRICE        = 0x3A
    EXTCODESIZE     = 0x3B
    EXTCODECOPY     = 0x3C
    RETURNDATASIZE  = 0x3D
    RETURNDATACOPY  = 0x3E
    EXTCODEHASH     = 0x3F
    BLOCKHASH       = 0x40
    COINBASE        = 0x41
    TIMESTAMP       = 0x42
    NUMBER          = 0x43
    PREVRANDAO      = 0x44
    GASLIMIT        = 0x45
    CHAINID         = 0x46
    SELFBALANCE     = 0x47
    BASEFEE         = 0x48
    BLOBHASH        = 0x49
    BLOBBASEFEE     = 0x4A
    POP             = 0x50
    MLOAD           = 0x51
    MSTORE          = 0x52
    MSTORE8         = 0x53
    SLOAD           = 0x54
    SSTORE          = 0x55
    JUMP            = 0x56
    JUMPI           = 0x57
    PC              = 0x58
    MSIZE           = 0x59
    GAS             = 0x5A
    JUMPDEST        = 0x5B
    TLOAD           = 0x5C
    TSTORE          = 0x5D
    MCOPY           = 0x5E
    PUSH0           = 0x5F
    PUSH1           = 0x60
    PUSH32          = 0x7F
    DUP1            = 0x80
    DUP16           = 0x8F
    SWAP1           = 0x90
    SWAP16          = 0x9F
    LOG0            = 0xA0
    LOG4            = 0xA4
    CREATE          = 0xF0
    CALL            = 0xF1
    CALLCODE        = 0xF2
    RETURN          = 0xF3
    DELEGATECALL    = 0xF4
    CREATE2         = 0xF5
    STATICCALL      = 0xFA
    REVERT          = 0xFD
    INVALID         = 0xFE
    SELFDESTRUCT    = 0xFF
# fmt: on

# Defined by Ethereum but needing collaborators this interpreter does not model
UNSUPPORTED: dict[int, str] = {
    Op.CREATE: "CREATE",
    Op.CALL: "CALL",
    Op.CALLCODE: "CALLCODE",
    Op.DELEGATECALL: "DELEGATECALL",
    Op.CREATE2: "CREATE2",
    Op.STATICCALL: "STATICCALL",
    Op.SELFDESTRUCT: "SELFDESTRUCT",
}


def _address_word(address: bytes) -> int:
    return word.from_bytes(address)


def _padded_slice(data: bytes, offset: int, size: int) -> bytes:
    """``data[offset:offset+size]`` zero-padded on the right to ``size``."""
    chunk = data[offset : offset + size] if offset < len(data) else b""
    return chunk.ljust(size, b"\x00")


# ---------------------------------------------------------------------------
# Handler factories for pure word operators
# ---------------------------------------------------------------------------

def _unary(fn: Callable[[int], int]) -> Handler:
    def handler(ctx: ExecutionContext) -> None:
        a = ctx.stack.pop()
        ctx.stack.push(fn(a))
        ctx.pc += 1
    return handler


def _binary(fn: Callable[[int, int], int]) -> Handler:
    def handler(ctx: ExecutionContext) -> None:
        a, b = ctx.stack.pop_many(2)
        ctx.stack.push(fn(a, b))
        ctx.pc += 1
    return handler


def _ternary(fn: Callable[[int, int, int], int]) -> Handler:
    def handler(ctx: ExecutionContext) -> None:
        a, b, c = ctx.stack.pop_many(3)
        ctx.stack.push(fn(a, b, c))
        ctx.pc += 1
    return handler


def _push_value(getter: Callable[[ExecutionContext], int]) -> Handler:
    """Handler that pushes a value read from the context."""
    def handler(ctx: ExecutionContext) -> None:
        ctx.stack.push(getter(ctx))
        ctx.pc += 1
    return handler


# ---------------------------------------------------------------------------
# Halting
# ---------------------------------------------------------------------------

def op_stop(ctx):
    raise StopExecution()


def op_return(ctx):
    offset, size = ctx.stack.pop_many(2)
    raise ReturnData(ctx.memory.load(offset, size))


def op_revert(ctx):
    offset, size = ctx.stack.pop_many(2)
    raise Revert(ctx.memory.load(offset, size))


def op_invalid(ctx):
    raise InvalidOpcode("INVALID opcode (0xFE)")


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------

def op_sha3(ctx):
    offset, size = ctx.stack.pop_many(2)
    data = ctx.memory.load(offset, size)
    ctx.stack.push(word.from_bytes(keccak256(data)))
    ctx.pc += 1


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

def op_balance(ctx):
    address = word.to_bytes(ctx.stack.pop(), 20)
    ctx.stack.push(ctx.registry.get_balance(address))
    ctx.pc += 1


def op_selfbalance(ctx):
    ctx.stack.push(ctx.registry.get_balance(ctx.env.address))
    ctx.pc += 1


def op_calldataload(ctx):
    offset = ctx.stack.pop()
    ctx.stack.push(word.from_bytes(_padded_slice(ctx.calldata, offset, 32)))
    ctx.pc += 1


def op_calldatacopy(ctx):
    dest_offset, data_offset, size = ctx.stack.pop_many(3)
    if size:
        ctx.memory.expand(dest_offset, size)
        ctx.memory.store(dest_offset, _padded_slice(ctx.calldata, data_offset, size))
    ctx.pc += 1


def op_codecopy(ctx):
    dest_offset, code_offset, size = ctx.stack.pop_many(3)
    if size:
        ctx.memory.expand(dest_offset, size)
        ctx.memory.store(dest_offset, _padded_slice(ctx.code, code_offset, size))
    ctx.pc += 1


def op_extcodesize(ctx):
    address = word.to_bytes(ctx.stack.pop(), 20)
    ctx.stack.push(ctx.registry.get_code_size(address))
    ctx.pc += 1


def op_extcodecopy(ctx):
    addr_int, dest_offset, code_offset, size = ctx.stack.pop_many(4)
    if size:
        ctx.memory.expand(dest_offset, size)
        code = ctx.registry.get_code(word.to_bytes(addr_int, 20))
        ctx.memory.store(dest_offset, _padded_slice(code, code_offset, size))
    ctx.pc += 1


def op_extcodehash(ctx):
    address = word.to_bytes(ctx.stack.pop(), 20)
    ctx.stack.push(word.from_bytes(ctx.registry.get_code_hash(address)))
    ctx.pc += 1


def op_returndatacopy(ctx):
    dest_offset, data_offset, size = ctx.stack.pop_many(3)
    if data_offset + size > len(ctx.return_data):
        raise ReturnDataOutOfBounds(
            f"RETURNDATACOPY [{data_offset}, {data_offset + size}) "
            f"beyond {len(ctx.return_data)} bytes"
        )
    ctx.memory.store(dest_offset, ctx.return_data[data_offset : data_offset + size])
    ctx.pc += 1


# ---------------------------------------------------------------------------
# Block information
# ---------------------------------------------------------------------------

def op_blockhash(ctx):
    block_num = ctx.stack.pop()
    current = ctx.env.block_number
    # Only the 256 most recent complete blocks are visible
    if block_num >= current or current - block_num > 256:
        ctx.stack.push(0)
    else:
        ctx.stack.push(word.from_bytes(ctx.registry.get_block_hash(block_num)))
    ctx.pc += 1


def op_blobhash(ctx):
    ctx.stack.pop()
    ctx.stack.push(0)
    ctx.pc += 1


# ---------------------------------------------------------------------------
# Stack, memory, storage
# ---------------------------------------------------------------------------

def op_pop(ctx):
    ctx.stack.pop()
    ctx.pc += 1


def op_mload(ctx):
    offset = ctx.stack.pop()
    ctx.stack.push(ctx.memory.load_word(offset))
    ctx.pc += 1


def op_mstore(ctx):
    offset, value = ctx.stack.pop_many(2)
    ctx.memory.store_word(offset, value)
    ctx.pc += 1


def op_mstore8(ctx):
    offset, value = ctx.stack.pop_many(2)
    ctx.memory.store_byte(offset, value & 0xFF)
    ctx.pc += 1


def op_msize(ctx):
    ctx.stack.push(ctx.memory.size)
    ctx.pc += 1


def op_mcopy(ctx):
    dest, src, size = ctx.stack.pop_many(3)
    ctx.memory.copy(dest, src, size)
    ctx.pc += 1


def op_sload(ctx):
    key = ctx.stack.pop()
    ctx.stack.push(ctx.storage.get(key, 0))
    ctx.pc += 1


def op_sstore(ctx):
    key, value = ctx.stack.pop_many(2)
    ctx.storage[key] = value
    ctx.pc += 1


def op_tload(ctx):
    key = ctx.stack.pop()
    ctx.stack.push(ctx.transient_storage.get(key, 0))
    ctx.pc += 1


def op_tstore(ctx):
    key, value = ctx.stack.pop_many(2)
    ctx.transient_storage[key] = value
    ctx.pc += 1


# ---------------------------------------------------------------------------
# Control flow
# ---------------------------------------------------------------------------

def op_jump(ctx):
    dest = ctx.stack.pop()
    if dest not in ctx.valid_jumpdests:
        raise InvalidJumpDestination(f"Invalid JUMP destination: {dest}")
    ctx.pc = dest


def op_jumpi(ctx):
    dest, cond = ctx.stack.pop_many(2)
    if cond == 0:
        ctx.pc += 1
        return
    if dest not in ctx.valid_jumpdests:
        raise InvalidJumpDestination(f"Invalid JUMPI destination: {dest}")
    ctx.pc = dest


def op_pc(ctx):
    ctx.stack.push(ctx.pc)
    ctx.pc += 1


def op_jumpdest(ctx):
    ctx.pc += 1


# ---------------------------------------------------------------------------
# PUSH / DUP / SWAP / LOG
# ---------------------------------------------------------------------------

def op_push0(ctx):
    ctx.stack.push(0)
    ctx.pc += 1


def _make_push(n: int) -> Handler:
    def op_push(ctx):
        # Immediates cut off by the end of code read as zero
        data = ctx.code[ctx.pc + 1 : ctx.pc + 1 + n]
        ctx.stack.push(word.from_bytes(data.ljust(n, b"\x00")))
        ctx.pc += 1 + n
    return op_push


def _make_dup(n: int) -> Handler:
    def op_dup(ctx):
        ctx.stack.dup(n)
        ctx.pc += 1
    return op_dup


def _make_swap(n: int) -> Handler:
    def op_swap(ctx):
        ctx.stack.swap(n)
        ctx.pc += 1
    return op_swap


def _make_log(topic_count: int) -> Handler:
    def op_log(ctx):
        offset, size, *topics = ctx.stack.pop_many(2 + topic_count)
        data = ctx.memory.load(offset, size)
        ctx.logs.append(Log(
            address=ctx.env.address,
            topics=tuple(t.to_bytes(32, "big") for t in topics),
            data=data,
        ))
        ctx.pc += 1
    return op_log


# ---------------------------------------------------------------------------
# Opcode table: opcode -> OpcodeInfo
# ---------------------------------------------------------------------------

class OpcodeInfo(NamedTuple):
    name: str
    handler: Handler


OPCODE_TABLE: dict[int, OpcodeInfo] = {}


def _register():
    t = OPCODE_TABLE

    def reg(opcode: int, name: str, handler: Handler) -> None:
        t[opcode] = OpcodeInfo(name, handler)

    reg(Op.STOP, "STOP", op_stop)
    reg(Op.ADD, "ADD", _binary(word.add))
    reg(Op.MUL, "MUL", _binary(word.mul))
    reg(Op.SUB, "SUB", _binary(word.sub))
    reg(Op.DIV, "DIV", _binary(word.div))
    reg(Op.SDIV, "SDIV", _binary(word.sdiv))
    reg(Op.MOD, "MOD", _binary(word.mod))
    reg(Op.SMOD, "SMOD", _binary(word.smod))
    reg(Op.ADDMOD, "ADDMOD", _ternary(word.addmod))
    reg(Op.MULMOD, "MULMOD", _ternary(word.mulmod))
    reg(Op.EXP, "EXP", _binary(word.exp))
    reg(Op.SIGNEXTEND, "SIGNEXTEND", _binary(word.signextend))

    reg(Op.LT, "LT", _binary(word.lt))
    reg(Op.GT, "GT", _binary(word.gt))
    reg(Op.SLT, "SLT", _binary(word.slt))
    reg(Op.SGT, "SGT", _binary(word.sgt))
    reg(Op.EQ, "EQ", _binary(word.eq))
    reg(Op.ISZERO, "ISZERO", _unary(word.iszero))
    reg(Op.AND, "AND", _binary(word.and_))
    reg(Op.OR, "OR", _binary(word.or_))
    reg(Op.XOR, "XOR", _binary(word.xor))
    reg(Op.NOT, "NOT", _unary(word.not_))
    reg(Op.BYTE, "BYTE", _binary(word.byte))
    reg(Op.SHL, "SHL", _binary(word.shl))
    reg(Op.SHR, "SHR", _binary(word.shr))
    reg(Op.SAR, "SAR", _binary(word.sar))

    reg(Op.SHA3, "SHA3", op_sha3)

    reg(Op.ADDRESS, "ADDRESS", _push_value(lambda ctx: _address_word(ctx.env.address)))
    reg(Op.BALANCE, "BALANCE", op_balance)
    reg(Op.ORIGIN, "ORIGIN", _push_value(lambda ctx: _address_word(ctx.env.origin)))
    reg(Op.CALLER, "CALLER", _push_value(lambda ctx: _address_word(ctx.env.caller)))
    reg(Op.CALLVALUE, "CALLVALUE", _push_value(lambda ctx: ctx.env.value))
    reg(Op.CALLDATALOAD, "CALLDATALOAD", op_calldataload)
    reg(Op.CALLDATASIZE, "CALLDATASIZE", _push_value(lambda ctx: len(ctx.calldata)))
    reg(Op.CALLDATACOPY, "CALLDATACOPY", op_calldatacopy)
    reg(Op.CODESIZE, "CODESIZE", _push_value(lambda ctx: len(ctx.code)))
    reg(Op.CODECOPY, "CODECOPY", op_codecopy)
    reg(Op.GASPRICE, "GASPRICE", _push_value(lambda ctx: ctx.env.gas_price))
    reg(Op.EXTCODESIZE, "EXTCODESIZE", op_extcodesize)
    reg(Op.EXTCODECOPY, "EXTCODECOPY", op_extcodecopy)
    reg(Op.RETURNDATASIZE, "RETURNDATASIZE", _push_value(lambda ctx: len(ctx.return_data)))
    reg(Op.RETURNDATACOPY, "RETURNDATACOPY", op_returndatacopy)
    reg(Op.EXTCODEHASH, "EXTCODEHASH", op_extcodehash)

    reg(Op.BLOCKHASH, "BLOCKHASH", op_blockhash)
    reg(Op.COINBASE, "COINBASE", _push_value(lambda ctx: _address_word(ctx.env.coinbase)))
    reg(Op.TIMESTAMP, "TIMESTAMP", _push_value(lambda ctx: ctx.env.timestamp))
    reg(Op.NUMBER, "NUMBER", _push_value(lambda ctx: ctx.env.block_number))
    reg(Op.PREVRANDAO, "PREVRANDAO", _push_value(lambda ctx: ctx.env.prevrandao))
    reg(Op.GASLIMIT, "GASLIMIT", _push_value(lambda ctx: ctx.env.gas_limit))
    reg(Op.CHAINID, "CHAINID", _push_value(lambda ctx: ctx.env.chain_id))
    reg(Op.SELFBALANCE, "SELFBALANCE", op_selfbalance)
    reg(Op.BASEFEE, "BASEFEE", _push_value(lambda ctx: ctx.env.base_fee))
    reg(Op.BLOBHASH, "BLOBHASH", op_blobhash)
    reg(Op.BLOBBASEFEE, "BLOBBASEFEE", _push_value(lambda ctx: ctx.env.blob_base_fee))

    reg(Op.POP, "POP", op_pop)
    reg(Op.MLOAD, "MLOAD", op_mload)
    reg(Op.MSTORE, "MSTORE", op_mstore)
    reg(Op.MSTORE8, "MSTORE8", op_mstore8)
    reg(Op.SLOAD, "SLOAD", op_sload)
    reg(Op.SSTORE, "SSTORE", op_sstore)
    reg(Op.JUMP, "JUMP", op_jump)
    reg(Op.JUMPI, "JUMPI", op_jumpi)
    reg(Op.PC, "PC", op_pc)
    reg(Op.MSIZE, "MSIZE", op_msize)
    # Gas is not metered
    reg(Op.GAS, "GAS", _push_value(lambda ctx: 0))
    reg(Op.JUMPDEST, "JUMPDEST", op_jumpdest)
    reg(Op.TLOAD, "TLOAD", op_tload)
    reg(Op.TSTORE, "TSTORE", op_tstore)
    reg(Op.MCOPY, "MCOPY", op_mcopy)

    reg(Op.PUSH0, "PUSH0", op_push0)
    for i in range(1, 33):
        reg(Op.PUSH1 + i - 1, f"PUSH{i}", _make_push(i))

    for i in range(1, 17):
        reg(Op.DUP1 + i - 1, f"DUP{i}", _make_dup(i))

    for i in range(1, 17):
        reg(Op.SWAP1 + i - 1, f"SWAP{i}", _make_swap(i))

    for i in range(5):
        reg(Op.LOG0 + i, f"LOG{i}", _make_log(i))

    reg(Op.RETURN, "RETURN", op_return)
    reg(Op.REVERT, "REVERT", op_revert)
    reg(Op.INVALID, "INVALID", op_invalid)


_register()


def opcode_name(opcode: int) -> str:
    info = OPCODE_TABLE.get(opcode)
    if info is not None:
        return info.name
    if opcode in UNSUPPORTED:
        return UNSUPPORTED[opcode]
    return f"UNKNOWN_0x{opcode:02x}"
