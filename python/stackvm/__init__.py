"""
stackvm: a small stack-based bytecode virtual machine.

Build a program from :class:`Instruction` values, load it into a
:class:`StackMachine`, then either ``execute()`` it to completion or drive it
one ``step()`` at a time.  ``python -m stackvm`` runs the sample programs and
``python -m stackvm_dbg`` starts the interactive debugger.
"""

from __future__ import annotations

from .console import BufferConsole, Console, StdConsole
from .errors import (
    ArithmeticFault,
    CallStackOverflow,
    CallStackUnderflow,
    DuplicateLabel,
    ExecutionError,
    InputError,
    InputExhausted,
    InputParseError,
    InstructionError,
    LinkError,
    NoPendingInput,
    StackUnderflow,
    StackVMError,
    UnknownLabel,
)
from .instructions import Instruction, Op, Program, make_program
from .labels import resolve_labels
from .machine import StackMachine
from .state import InputKind, InputRequest, MachineState

__all__ = [
    "ArithmeticFault",
    "BufferConsole",
    "CallStackOverflow",
    "CallStackUnderflow",
    "Console",
    "DuplicateLabel",
    "ExecutionError",
    "InputError",
    "InputExhausted",
    "InputKind",
    "InputParseError",
    "InputRequest",
    "Instruction",
    "InstructionError",
    "LinkError",
    "MachineState",
    "NoPendingInput",
    "Op",
    "Program",
    "StackMachine",
    "StackUnderflow",
    "StackVMError",
    "StdConsole",
    "UnknownLabel",
    "make_program",
    "resolve_labels",
]
__version__ = "0.1.0"
