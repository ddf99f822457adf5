"""Mutable execution state owned by a single machine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .instructions import Program


class MachineState(enum.Enum):
    READY = "ready"
    AWAITING_INPUT = "awaiting_input"
    HALTED = "halted"
    FAULTED = "faulted"


class InputKind(enum.Enum):
    INT = "int"
    LINE = "line"


@dataclass(frozen=True)
class InputRequest:
    """Outstanding request for an externally supplied value."""

    kind: InputKind
    pc: int

    def describe(self) -> str:
        if self.kind is InputKind.INT:
            return f"integer requested by READ @ {self.pc}"
        return f"line requested by SCAN @ {self.pc}"


@dataclass
class ExecutionState:
    """Architectural state of one run: stack, memory, labels, counters."""

    program: Program = ()
    labels: Dict[str, int] = field(default_factory=dict)
    stack: List[int] = field(default_factory=list)
    memory: Dict[int, int] = field(default_factory=dict)
    call_stack: List[int] = field(default_factory=list)
    pc: int = 0
    pending_input: Optional[InputRequest] = None
    trace: bool = False
    steps: int = 0
    faulted: bool = False

    @property
    def halted(self) -> bool:
        return self.pc >= len(self.program)

    @property
    def status(self) -> MachineState:
        if self.faulted:
            return MachineState.FAULTED
        if self.pending_input is not None:
            return MachineState.AWAITING_INPUT
        if self.halted:
            return MachineState.HALTED
        return MachineState.READY


def state_to_dict(state: ExecutionState) -> Dict[str, Any]:
    pending = state.pending_input
    return {
        "state": state.status.value,
        "pc": state.pc,
        "program_length": len(state.program),
        "stack": list(state.stack),
        "memory": {addr: state.memory[addr] for addr in sorted(state.memory)},
        "call_stack": list(state.call_stack),
        "labels": dict(state.labels),
        "pending_input": None if pending is None else {"kind": pending.kind.value, "pc": pending.pc},
        "trace": state.trace,
        "steps": state.steps,
    }
