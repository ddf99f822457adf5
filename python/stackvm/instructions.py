"""Instruction model: operation tags and their payloads."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .errors import InstructionError

INT32_MIN = -0x80000000
INT32_MAX = 0x7FFFFFFF


def to_int32(value: int) -> int:
    """Wrap an arbitrary Python int to a signed 32-bit value."""
    value &= 0xFFFFFFFF
    return value if value < 0x80000000 else value - 0x100000000


class Payload(enum.Enum):
    NONE = "none"
    INT = "int"
    ADDRESS = "address"
    SIZE = "size"
    LABEL = "label"
    TEXT = "text"
    FLAG = "flag"


class Op(enum.Enum):
    # Stack
    PUSH = "push"
    POP = "pop"
    DUP = "dup"
    SWAP = "swap"
    ROT = "rot"
    CLEAR = "clear"
    # Arithmetic
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    REM = "rem"
    NEG = "neg"
    INC = "inc"
    DEC = "dec"
    # Comparison
    EQ = "eq"
    NE = "ne"
    LE = "le"
    GE = "ge"
    LT = "lt"
    GT = "gt"
    # Control flow
    JUMP = "jump"
    BRT = "brt"
    BRZ = "brz"
    CALL = "call"
    RET = "ret"
    RETV = "retv"
    LABEL = "label"
    HALT = "halt"
    # Memory
    LOAD = "load"
    STORE = "store"
    ALLOC = "alloc"
    FREE = "free"
    # I/O
    PRINT = "print"
    READ = "read"
    WRITE = "write"
    SCAN = "scan"
    # Bitwise / logical
    AND = "and"
    OR = "or"
    XOR = "xor"
    NOT = "not"
    SHL = "shl"
    SHR = "shr"
    BOOL = "bool"
    # Debugging
    DUMP = "dump"
    TRACE = "trace"


OP_PAYLOADS: Dict[Op, Payload] = {
    Op.PUSH: Payload.INT,
    Op.RETV: Payload.INT,
    Op.JUMP: Payload.LABEL,
    Op.BRT: Payload.LABEL,
    Op.BRZ: Payload.LABEL,
    Op.CALL: Payload.LABEL,
    Op.LABEL: Payload.LABEL,
    Op.LOAD: Payload.ADDRESS,
    Op.STORE: Payload.ADDRESS,
    Op.FREE: Payload.ADDRESS,
    Op.ALLOC: Payload.SIZE,
    Op.WRITE: Payload.TEXT,
    Op.TRACE: Payload.FLAG,
}

# Ops whose payload names a jump target.
BRANCH_OPS = frozenset({Op.JUMP, Op.BRT, Op.BRZ, Op.CALL})


def payload_kind(op: Op) -> Payload:
    return OP_PAYLOADS.get(op, Payload.NONE)


def _check_payload(op: Op, arg: Any) -> None:
    kind = payload_kind(op)
    if kind is Payload.NONE:
        if arg is not None:
            raise InstructionError(f"{op.name} takes no operand (got {arg!r})")
        return
    if arg is None:
        raise InstructionError(f"{op.name} requires an operand ({kind.value})")
    if kind in (Payload.INT, Payload.ADDRESS, Payload.SIZE):
        if isinstance(arg, bool) or not isinstance(arg, int):
            raise InstructionError(f"{op.name} operand must be an integer (got {arg!r})")
        if not INT32_MIN <= arg <= INT32_MAX:
            raise InstructionError(f"{op.name} operand {arg} outside 32-bit signed range")
    elif kind in (Payload.LABEL, Payload.TEXT):
        if not isinstance(arg, str):
            raise InstructionError(f"{op.name} operand must be a string (got {arg!r})")
        if kind is Payload.LABEL and not arg:
            raise InstructionError(f"{op.name} label name must not be empty")
    elif kind is Payload.FLAG:
        if not isinstance(arg, bool):
            raise InstructionError(f"{op.name} operand must be a bool (got {arg!r})")


@dataclass(frozen=True)
class Instruction:
    """One tagged instruction; ``arg`` is ``None`` for operand-less ops."""

    op: Op
    arg: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.op, Op):
            raise InstructionError(f"unknown operation {self.op!r}")
        _check_payload(self.op, self.arg)

    @property
    def target(self) -> Optional[str]:
        return self.arg if self.op in BRANCH_OPS else None

    def __str__(self) -> str:
        kind = payload_kind(self.op)
        if kind is Payload.NONE:
            return self.op.name
        if kind is Payload.TEXT:
            return f'{self.op.name} "{self.arg}"'
        if kind is Payload.FLAG:
            return f"{self.op.name} {'on' if self.arg else 'off'}"
        if self.op is Op.LABEL:
            return f"{self.arg}:"
        return f"{self.op.name} {self.arg}"


Program = Tuple[Instruction, ...]


def make_program(instructions) -> Program:
    """Freeze an iterable of instructions into a program tuple."""
    program = tuple(instructions)
    for index, ins in enumerate(program):
        if not isinstance(ins, Instruction):
            raise InstructionError(f"program entry {index} is not an Instruction: {ins!r}")
    return program


__all__ = [
    "INT32_MIN",
    "INT32_MAX",
    "to_int32",
    "Payload",
    "Op",
    "OP_PAYLOADS",
    "BRANCH_OPS",
    "payload_kind",
    "Instruction",
    "Program",
    "make_program",
]
