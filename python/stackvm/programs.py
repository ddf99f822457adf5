"""Built-in sample programs used by the CLIs and the test-suite."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

from .instructions import Instruction as I, Op, Program, make_program


def arithmetic() -> Program:
    """10 + 20, print, minus 20, print: prints 30 then 10."""
    return make_program([
        I(Op.PUSH, 10),
        I(Op.PUSH, 20),
        I(Op.ADD),
        I(Op.PRINT),
        I(Op.PUSH, 20),
        I(Op.SUB),
        I(Op.PRINT),
    ])


def gcd(a: int = 48, b: int = 18) -> Program:
    """Recursive Euclid; leaves gcd(a, b) as the only stack value.

    ``a mod b`` is built from DIV/MUL/SUB as ``a - (a / b) * b``.
    """
    return make_program([
        I(Op.PUSH, a),
        I(Op.PUSH, b),
        I(Op.CALL, "gcd"),
        I(Op.PRINT),
        I(Op.HALT),
        I(Op.LABEL, "gcd"),          # [a, b]
        I(Op.DUP),
        I(Op.BRZ, "gcd_done"),
        I(Op.DUP),
        I(Op.ROT),
        I(Op.ROT),
        I(Op.DUP),
        I(Op.ROT),
        I(Op.ROT),                   # [b, a, a, b]
        I(Op.DIV),                   # [b, a, q]
        I(Op.ROT),
        I(Op.ROT),                   # [a, q, b]
        I(Op.DUP),
        I(Op.ROT),                   # [a, b, q, b]
        I(Op.MUL),                   # [a, b, q*b]
        I(Op.ROT),
        I(Op.ROT),
        I(Op.SWAP),                  # [b, a, q*b]
        I(Op.SUB),                   # [b, a mod b]
        I(Op.CALL, "gcd"),
        I(Op.RET),
        I(Op.LABEL, "gcd_done"),     # [a, 0]
        I(Op.POP),
        I(Op.RET),
    ])


def countdown(start: int = 3) -> Program:
    """Print start, start-1, ..., 1."""
    return make_program([
        I(Op.PUSH, start),
        I(Op.LABEL, "loop"),
        I(Op.DUP),
        I(Op.BRZ, "end"),
        I(Op.PRINT),
        I(Op.DEC),
        I(Op.JUMP, "loop"),
        I(Op.LABEL, "end"),
        I(Op.POP),
        I(Op.WRITE, "liftoff"),
    ])


def echo() -> Program:
    """Read an integer, print it doubled."""
    return make_program([
        I(Op.WRITE, "enter a number"),
        I(Op.READ),
        I(Op.DUP),
        I(Op.ADD),
        I(Op.PRINT),
    ])


def memory() -> Program:
    """Exercise ALLOC/STORE/LOAD/FREE and dump the machine."""
    return make_program([
        I(Op.ALLOC, 4),
        I(Op.PUSH, 42),
        I(Op.STORE, 5),
        I(Op.LOAD, 5),
        I(Op.PRINT),
        I(Op.DUMP),
        I(Op.FREE, 5),
        I(Op.LOAD, 5),
        I(Op.PRINT),
    ])


def greet() -> Program:
    """Ask for a name with SCAN; the reply is shown and discarded."""
    return make_program([
        I(Op.WRITE, "what is your name?"),
        I(Op.SCAN),
        I(Op.WRITE, "bye"),
    ])


@dataclass(frozen=True)
class SampleProgram:
    name: str
    description: str
    build: Callable[[], Program]


SAMPLES: Dict[str, SampleProgram] = {
    sample.name: sample
    for sample in (
        SampleProgram("arithmetic", "push/add/print/sub/print", arithmetic),
        SampleProgram("gcd", "recursive gcd(48, 18) via CALL/RET", gcd),
        SampleProgram("countdown", "loop with BRZ/JUMP", countdown),
        SampleProgram("echo", "READ a number and print it doubled", echo),
        SampleProgram("memory", "ALLOC/STORE/LOAD/FREE/DUMP", memory),
        SampleProgram("greet", "WRITE and SCAN", greet),
    )
}


def sample_names() -> List[str]:
    return sorted(SAMPLES)


def get_sample(name: str) -> Program:
    try:
        sample = SAMPLES[name]
    except KeyError:
        raise KeyError(f"unknown program '{name}' (choose from {', '.join(sample_names())})") from None
    return sample.build()
