"""Error taxonomy for the stack machine.

Load-time problems derive from :class:`LinkError`, faults raised while an
instruction executes derive from :class:`ExecutionError` and carry the index
of the offending instruction. Input errors are recoverable: the pending
request survives and the caller may try again.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .instructions import Instruction


class StackVMError(RuntimeError):
    """Base class for every error raised by the machine."""


class InstructionError(ValueError):
    """Raised when an instruction is built with an invalid payload."""


class LinkError(StackVMError):
    """Raised when a program cannot be loaded."""


class DuplicateLabel(LinkError):
    def __init__(self, name: str, first: int, second: int) -> None:
        super().__init__(f"Duplicate label: {name} (at {first} and {second})")
        self.name = name
        self.first = first
        self.second = second


class ExecutionError(StackVMError):
    """Fatal fault while executing the instruction at ``pc``."""

    kind = "execution_error"

    def __init__(self, message: str, *, pc: Optional[int] = None, instruction: Optional["Instruction"] = None) -> None:
        super().__init__(message)
        self.message = message
        self.pc = pc
        self.instruction = instruction

    def __str__(self) -> str:
        if self.pc is None:
            return self.message
        if self.instruction is None:
            return f"{self.message} @ {self.pc}"
        return f"{self.message} @ {self.pc} ({self.instruction})"

    def to_dict(self) -> dict:
        return {
            "error": self.kind,
            "message": self.message,
            "pc": self.pc,
            "instruction": str(self.instruction) if self.instruction is not None else None,
        }


class StackUnderflow(ExecutionError):
    kind = "stack_underflow"


class ArithmeticFault(ExecutionError):
    kind = "arithmetic_error"


class UnknownLabel(ExecutionError):
    kind = "unknown_label"

    def __init__(self, name: str, **kwargs) -> None:
        super().__init__(f"Unknown label: {name}", **kwargs)
        self.name = name


class CallStackUnderflow(ExecutionError):
    kind = "call_stack_underflow"


class CallStackOverflow(ExecutionError):
    kind = "call_stack_overflow"


class InputError(StackVMError):
    """Base class for problems delivering a value to a pending request."""


class InputParseError(InputError, ValueError):
    def __init__(self, text: str, reason: str = "not an integer") -> None:
        super().__init__(f"Invalid input {text!r}: {reason}")
        self.text = text
        self.reason = reason


class NoPendingInput(InputError):
    """Raised when a value is delivered while nothing is waiting for one."""


class InputExhausted(InputError):
    """Raised when the console runs out of input during a batch run."""


__all__ = [
    "StackVMError",
    "InstructionError",
    "LinkError",
    "DuplicateLabel",
    "ExecutionError",
    "StackUnderflow",
    "ArithmeticFault",
    "UnknownLabel",
    "CallStackUnderflow",
    "CallStackOverflow",
    "InputError",
    "InputParseError",
    "NoPendingInput",
    "InputExhausted",
]
