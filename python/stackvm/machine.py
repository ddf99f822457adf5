"""Stack machine engine: fetch/decode/execute plus the debug surface.

Usage::

    vm = StackMachine(console=BufferConsole())
    vm.load([Instruction(Op.PUSH, 10), Instruction(Op.PRINT)])
    vm.execute()

``step()`` runs exactly one instruction and returns the resulting
:class:`MachineState`. READ and SCAN never block inside ``step()``: they park
the machine in ``AWAITING_INPUT`` until :meth:`StackMachine.provide_input`
delivers a value. ``execute()`` satisfies such requests from the console when
the console can supply input, otherwise it hands control back to the caller.
"""

from __future__ import annotations

import logging
import operator
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Set, Tuple

from .console import Console, StdConsole
from .errors import (
    ArithmeticFault,
    CallStackOverflow,
    CallStackUnderflow,
    ExecutionError,
    InputExhausted,
    InputParseError,
    NoPendingInput,
    StackUnderflow,
    UnknownLabel,
)
from .instructions import INT32_MAX, INT32_MIN, Instruction, Op, Program, make_program, to_int32
from .labels import resolve_labels, unresolved_targets
from .state import ExecutionState, InputKind, InputRequest, MachineState, state_to_dict

LOG = logging.getLogger("stackvm.machine")

DEFAULT_MAX_CALL_DEPTH = 4096
# Oldest events are dropped once this many are waiting to be consumed.
MAX_PENDING_EVENTS = 256
EMPTY_STACK_TEXT = "Stack is empty"


def div_trunc(a: int, b: int) -> int:
    if b == 0:
        raise ArithmeticFault("division by zero")
    abs_q = abs(a) // abs(b)
    return -abs_q if (a < 0) ^ (b < 0) else abs_q


def rem_trunc(a: int, b: int) -> int:
    if b == 0:
        raise ArithmeticFault("remainder by zero")
    return a - b * div_trunc(a, b)


BINARY_OPS: Dict[Op, Callable[[int, int], int]] = {
    Op.ADD: operator.add,
    Op.SUB: operator.sub,
    Op.MUL: operator.mul,
    Op.DIV: div_trunc,
    Op.REM: rem_trunc,
    Op.EQ: lambda a, b: int(a == b),
    Op.NE: lambda a, b: int(a != b),
    Op.LE: lambda a, b: int(a <= b),
    Op.GE: lambda a, b: int(a >= b),
    Op.LT: lambda a, b: int(a < b),
    Op.GT: lambda a, b: int(a > b),
    Op.AND: operator.and_,
    Op.OR: operator.or_,
    Op.XOR: operator.xor,
    Op.SHL: lambda a, b: a << (b & 0x1F),
    Op.SHR: lambda a, b: a >> (b & 0x1F),
}

UNARY_OPS: Dict[Op, Callable[[int], int]] = {
    Op.NEG: operator.neg,
    Op.INC: lambda a: a + 1,
    Op.DEC: lambda a: a - 1,
    Op.NOT: operator.invert,
    Op.BOOL: lambda a: int(a != 0),
}


def parse_int_input(value: Any) -> int:
    """Parse a value delivered for READ into an int32."""
    if isinstance(value, bool):
        raise InputParseError(repr(value), "booleans are not integers")
    if isinstance(value, int):
        number = value
        text = str(value)
    else:
        text = str(value)
        try:
            number = int(text.strip(), 10)
        except ValueError:
            raise InputParseError(text) from None
    if not INT32_MIN <= number <= INT32_MAX:
        raise InputParseError(text, "outside 32-bit signed range")
    return number


def format_memory(memory: Dict[int, int]) -> str:
    body = ", ".join(f"{addr}: {memory[addr]}" for addr in sorted(memory))
    return "{" + body + "}"


class StackMachine:
    def __init__(
        self,
        program: Optional[Iterable[Instruction]] = None,
        *,
        console: Optional[Console] = None,
        trace: bool = False,
        max_call_depth: Optional[int] = DEFAULT_MAX_CALL_DEPTH,
        on_trace: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> None:
        self.console: Console = console if console is not None else StdConsole()
        self.max_call_depth = max_call_depth
        self.trace_default = bool(trace)
        self._state = ExecutionState(trace=self.trace_default)
        self._current_pc = 0
        self.last_error: Optional[ExecutionError] = None
        self.last_stop: Optional[Dict[str, Any]] = None
        self.on_trace = on_trace
        self.pending_events: Deque[Dict[str, Any]] = deque(maxlen=MAX_PENDING_EVENTS)
        self.debug_enabled = False
        self.debug_breakpoints: Set[int] = set()
        self._dispatch = self._build_dispatch()
        if program is not None:
            self.load(program)

    # ------------------------------------------------------------------
    # Loading

    def load(self, program: Iterable[Instruction]) -> None:
        """Replace the program, rebuild the label table and reset run state."""
        frozen = make_program(program)
        labels = resolve_labels(frozen)
        missing = unresolved_targets(frozen, labels)
        if missing:
            LOG.warning("program references undefined labels: %s", ", ".join(missing))
        self._state = ExecutionState(program=frozen, labels=labels, trace=self.trace_default)
        self._current_pc = 0
        self.last_error = None
        self.last_stop = None
        self.pending_events.clear()
        self.debug_breakpoints = {bp for bp in self.debug_breakpoints if bp < len(frozen)}
        LOG.info("loaded program: %d instructions, %d labels", len(frozen), len(labels))

    def reset(self) -> None:
        self.load(self._state.program)

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def program(self) -> Program:
        return self._state.program

    @property
    def stack(self) -> Tuple[int, ...]:
        return tuple(self._state.stack)

    @property
    def memory(self) -> Dict[int, int]:
        return dict(self._state.memory)

    @property
    def call_stack(self) -> Tuple[int, ...]:
        return tuple(self._state.call_stack)

    @property
    def labels(self) -> Dict[str, int]:
        return dict(self._state.labels)

    @property
    def pc(self) -> int:
        return self._state.pc

    @property
    def state(self) -> MachineState:
        return self._state.status

    @property
    def pending_input(self) -> Optional[InputRequest]:
        return self._state.pending_input

    @property
    def trace_enabled(self) -> bool:
        return self._state.trace

    @property
    def steps(self) -> int:
        return self._state.steps

    @property
    def halted(self) -> bool:
        return self._state.status is MachineState.HALTED

    @property
    def current_instruction(self) -> Optional[Instruction]:
        st = self._state
        if 0 <= st.pc < len(st.program):
            return st.program[st.pc]
        return None

    def snapshot_state(self) -> Dict[str, Any]:
        snapshot = state_to_dict(self._state)
        snapshot["breakpoints"] = sorted(self.debug_breakpoints)
        snapshot["last_error"] = self.last_error.to_dict() if self.last_error else None
        snapshot["last_stop"] = dict(self.last_stop) if self.last_stop else None
        return snapshot

    # ------------------------------------------------------------------
    # Events

    def emit_event(self, event: Dict[str, Any]) -> None:
        self.pending_events.append(event)

    def consume_events(self) -> List[Dict[str, Any]]:
        events = list(self.pending_events)
        self.pending_events.clear()
        return events

    # ------------------------------------------------------------------
    # Debug controls

    def configure_debug(self, *, enabled: bool, breakpoints: Optional[Iterable[int]] = None) -> None:
        self.debug_enabled = bool(enabled)
        if not enabled:
            self.debug_breakpoints.clear()
            self.last_stop = None
            return
        if breakpoints is not None:
            self.debug_breakpoints = set()
            for index in breakpoints:
                self.add_breakpoint(index)

    def add_breakpoint(self, index: int) -> None:
        if not 0 <= index < len(self._state.program):
            raise ValueError(f"breakpoint {index} outside program (length {len(self._state.program)})")
        self.debug_enabled = True
        self.debug_breakpoints.add(index)

    def remove_breakpoint(self, index: int) -> bool:
        if index in self.debug_breakpoints:
            self.debug_breakpoints.discard(index)
            return True
        return False

    @property
    def breakpoints(self) -> Tuple[int, ...]:
        return tuple(sorted(self.debug_breakpoints))

    def _debug_stop(self, reason: str) -> MachineState:
        info: Dict[str, Any] = {
            "type": "debug_stop",
            "reason": reason,
            "pc": self._state.pc,
            "steps": self._state.steps,
        }
        self.last_stop = info
        self.emit_event(info)
        LOG.debug("debug stop (%s) @ %d", reason, self._state.pc)
        return self._state.status

    # ------------------------------------------------------------------
    # Execution

    def step(self) -> MachineState:
        """Execute one instruction; a no-op unless the machine is READY."""
        st = self._state
        status = st.status
        if status is not MachineState.READY:
            return status
        pc = st.pc
        ins = st.program[pc]
        self._current_pc = pc
        self.last_stop = None
        st.pc = pc + 1
        st.steps += 1
        if st.trace:
            LOG.debug("[TRACE] %04d: %s", pc, ins)
            event = {"type": "trace", "pc": pc, "instruction": str(ins), "stack": list(st.stack)}
            self.emit_event(event)
            if self.on_trace is not None:
                self.on_trace(event)
        try:
            self._dispatch[ins.op](ins)
        except ExecutionError as exc:
            self._fault(exc, pc, ins)
            raise
        status = st.status
        if status is MachineState.HALTED:
            self.emit_event({"type": "halted", "pc": st.pc, "steps": st.steps})
        return status

    def _fault(self, exc: ExecutionError, pc: int, ins: Instruction) -> None:
        if exc.pc is None:
            exc.pc = pc
        if exc.instruction is None:
            exc.instruction = ins
        st = self._state
        st.pc = pc
        st.faulted = True
        self.last_error = exc
        LOG.warning("fault: %s", exc)
        event = {"type": "fault"}
        event.update(exc.to_dict())
        self.emit_event(event)

    def execute(self, *, max_steps: Optional[int] = None) -> MachineState:
        """Run until halted, faulted, stopped at a breakpoint or out of input.

        Pending input requests are satisfied from the console when it can
        supply input; otherwise ``AWAITING_INPUT`` is returned to the caller.
        """
        executed = 0
        skip_break_at = None
        stop = self.last_stop
        if self.debug_enabled and stop is not None and stop.get("pc") == self._state.pc:
            skip_break_at = self._state.pc
        while True:
            status = self._state.status
            if status is MachineState.AWAITING_INPUT:
                if not self._satisfy_from_console():
                    return status
                continue
            if status is not MachineState.READY:
                return status
            if max_steps is not None and executed >= max_steps:
                LOG.info("max steps %d reached @ %d", max_steps, self._state.pc)
                return status
            pc = self._state.pc
            if self.debug_enabled and pc in self.debug_breakpoints and pc != skip_break_at:
                return self._debug_stop("breakpoint")
            skip_break_at = None
            self.step()
            executed += 1

    def _satisfy_from_console(self) -> bool:
        if not self.console.interactive_input:
            return False
        request = self._state.pending_input
        prompt = "? " if request.kind is InputKind.INT else "> "
        while True:
            line = self.console.read_line(prompt)
            if line is None:
                raise InputExhausted(f"end of input while {request.describe()}")
            try:
                self.provide_input(line)
            except InputParseError as exc:
                LOG.debug("rejected input: %s", exc)
                self.console.write_line(f"error: {exc}")
                continue
            return True

    def provide_input(self, value: Any) -> MachineState:
        """Deliver a value to the pending READ or SCAN request."""
        st = self._state
        request = st.pending_input
        if request is None:
            raise NoPendingInput("no input request is pending")
        if request.kind is InputKind.INT:
            number = parse_int_input(value)
            st.stack.append(number)
            delivered: Any = number
        else:
            delivered = str(value).strip()
            self.console.write_line(f"Scanned: {delivered}")
        st.pending_input = None
        self.emit_event({"type": "input_delivered", "pc": request.pc, "kind": request.kind.value, "value": delivered})
        status = st.status
        if status is MachineState.HALTED:
            self.emit_event({"type": "halted", "pc": st.pc, "steps": st.steps})
        return status

    # ------------------------------------------------------------------
    # Dispatch

    def _build_dispatch(self) -> Dict[Op, Callable[[Instruction], None]]:
        table: Dict[Op, Callable[[Instruction], None]] = {
            Op.PUSH: self._op_push,
            Op.POP: self._op_pop,
            Op.DUP: self._op_dup,
            Op.SWAP: self._op_swap,
            Op.ROT: self._op_rot,
            Op.CLEAR: self._op_clear,
            Op.JUMP: self._op_jump,
            Op.BRT: self._op_brt,
            Op.BRZ: self._op_brz,
            Op.CALL: self._op_call,
            Op.RET: self._op_ret,
            Op.RETV: self._op_retv,
            Op.LABEL: self._op_nop,
            Op.HALT: self._op_halt,
            Op.LOAD: self._op_load,
            Op.STORE: self._op_store,
            Op.ALLOC: self._op_alloc,
            Op.FREE: self._op_free,
            Op.PRINT: self._op_print,
            Op.READ: self._op_read,
            Op.WRITE: self._op_write,
            Op.SCAN: self._op_scan,
            Op.DUMP: self._op_dump,
            Op.TRACE: self._op_trace,
        }
        for op in BINARY_OPS:
            table[op] = self._op_binary
        for op in UNARY_OPS:
            table[op] = self._op_unary
        missing = [op.name for op in Op if op not in table]
        if missing:
            raise RuntimeError(f"no handler for {', '.join(missing)}")
        return table

    def _require(self, depth: int) -> None:
        have = len(self._state.stack)
        if have < depth:
            raise StackUnderflow(f"stack underflow: need {depth}, have {have}")

    def _pop(self) -> int:
        self._require(1)
        return self._state.stack.pop()

    def _push(self, value: int) -> None:
        self._state.stack.append(to_int32(value))

    def _resolve(self, name: str) -> int:
        try:
            return self._state.labels[name]
        except KeyError:
            raise UnknownLabel(name) from None

    # Stack

    def _op_push(self, ins: Instruction) -> None:
        self._push(ins.arg)

    def _op_pop(self, ins: Instruction) -> None:
        self._pop()

    def _op_dup(self, ins: Instruction) -> None:
        self._require(1)
        self._state.stack.append(self._state.stack[-1])

    def _op_swap(self, ins: Instruction) -> None:
        self._require(2)
        stack = self._state.stack
        stack[-1], stack[-2] = stack[-2], stack[-1]

    def _op_rot(self, ins: Instruction) -> None:
        # [c, b, a] -> [a, c, b]
        self._require(3)
        stack = self._state.stack
        c, b, a = stack[-3:]
        stack[-3:] = [a, c, b]

    def _op_clear(self, ins: Instruction) -> None:
        self._state.stack.clear()

    # Arithmetic / comparison / bitwise

    def _op_binary(self, ins: Instruction) -> None:
        self._require(2)
        stack = self._state.stack
        result = BINARY_OPS[ins.op](stack[-2], stack[-1])
        del stack[-2:]
        self._push(result)

    def _op_unary(self, ins: Instruction) -> None:
        self._require(1)
        stack = self._state.stack
        result = UNARY_OPS[ins.op](stack[-1])
        stack.pop()
        self._push(result)

    # Control flow

    def _op_jump(self, ins: Instruction) -> None:
        self._state.pc = self._resolve(ins.arg)

    def _op_brt(self, ins: Instruction) -> None:
        target = self._resolve(ins.arg)
        if self._pop() != 0:
            self._state.pc = target

    def _op_brz(self, ins: Instruction) -> None:
        target = self._resolve(ins.arg)
        if self._pop() == 0:
            self._state.pc = target

    def _op_call(self, ins: Instruction) -> None:
        st = self._state
        target = self._resolve(ins.arg)
        if self.max_call_depth is not None and len(st.call_stack) >= self.max_call_depth:
            raise CallStackOverflow(f"call depth limit {self.max_call_depth} exceeded")
        st.call_stack.append(st.pc)
        st.pc = target

    def _return_address(self) -> int:
        if not self._state.call_stack:
            raise CallStackUnderflow("return with empty call stack")
        return self._state.call_stack.pop()

    def _op_ret(self, ins: Instruction) -> None:
        self._state.pc = self._return_address()

    def _op_retv(self, ins: Instruction) -> None:
        address = self._return_address()
        self._push(ins.arg)
        self._state.pc = address

    def _op_nop(self, ins: Instruction) -> None:
        pass

    def _op_halt(self, ins: Instruction) -> None:
        self._state.pc = len(self._state.program)

    # Memory

    def _op_load(self, ins: Instruction) -> None:
        self._push(self._state.memory.get(ins.arg, 0))

    def _op_store(self, ins: Instruction) -> None:
        self._state.memory[ins.arg] = self._pop()

    def _op_alloc(self, ins: Instruction) -> None:
        memory = self._state.memory
        for address in range(ins.arg):
            memory[address] = 0

    def _op_free(self, ins: Instruction) -> None:
        self._state.memory.pop(ins.arg, None)

    # I/O

    def _op_print(self, ins: Instruction) -> None:
        stack = self._state.stack
        self.console.write_line(str(stack[-1]) if stack else EMPTY_STACK_TEXT)

    def _request_input(self, kind: InputKind) -> None:
        request = InputRequest(kind, self._current_pc)
        self._state.pending_input = request
        self.emit_event({"type": "input_request", "kind": kind.value, "pc": request.pc})

    def _op_read(self, ins: Instruction) -> None:
        self._request_input(InputKind.INT)

    def _op_write(self, ins: Instruction) -> None:
        self.console.write_line(ins.arg)

    def _op_scan(self, ins: Instruction) -> None:
        self._request_input(InputKind.LINE)

    # Debugging

    def _op_dump(self, ins: Instruction) -> None:
        self.console.write_line(f"Stack: {list(self._state.stack)}")
        self.console.write_line(f"Memory: {format_memory(self._state.memory)}")

    def _op_trace(self, ins: Instruction) -> None:
        self._state.trace = ins.arg
        self.console.write_line("Tracing enabled" if ins.arg else "Tracing disabled")


__all__ = [
    "DEFAULT_MAX_CALL_DEPTH",
    "MAX_PENDING_EVENTS",
    "EMPTY_STACK_TEXT",
    "BINARY_OPS",
    "UNARY_OPS",
    "StackMachine",
    "div_trunc",
    "rem_trunc",
    "parse_int_input",
    "format_memory",
]
