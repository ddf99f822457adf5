"""Output helpers for stackvm-dbg."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from stackvm import Instruction, StackMachine

from .context import DebuggerContext


def _json_dump(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, indent=2, sort_keys=True, default=str)


def emit_result(ctx: DebuggerContext, *, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
    """Emit a successful command result."""
    if ctx.json_output:
        payload: Dict[str, Any] = {"status": "ok"}
        if data is not None:
            payload["result"] = data
        else:
            payload["message"] = message
        print(_json_dump(payload))
    else:
        print(message)


def emit_error(ctx: DebuggerContext, *, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
    """Emit an error message respecting JSON mode."""
    payload: Dict[str, Any] = {"status": "error", "error": message}
    if data:
        payload["details"] = dict(data)
    if ctx.json_output:
        print(_json_dump(payload))
    else:
        print(f"error: {message}")


def format_listing_line(index: int, ins: Instruction, *, pc: int, breakpoints: Iterable[int] = ()) -> str:
    marker = "=>" if index == pc else "  "
    bp = "*" if index in breakpoints else " "
    text = str(ins)
    if not text.endswith(":"):
        text = "    " + text
    return f"{bp}{marker} {index:04d}  {text}"


def render_listing(machine: StackMachine, *, start: int = 0, count: Optional[int] = None) -> None:
    """Print the program listing with the current instruction highlighted."""
    program = machine.program
    if not program:
        print("  (empty program)")
        return
    end = len(program) if count is None else min(len(program), start + count)
    breakpoints = set(machine.breakpoints)
    for index in range(max(0, start), end):
        print(format_listing_line(index, program[index], pc=machine.pc, breakpoints=breakpoints))
    if machine.pc >= len(program) and end == len(program):
        print(f"  => {len(program):04d}  <end>")


def render_stack(stack: Sequence[int], *, label: str = "stack") -> None:
    """Print the operand stack, top first."""
    if not stack:
        print(f"  {label}: (empty)")
        return
    print(f"  {label}: depth={len(stack)}")
    for depth, value in enumerate(reversed(stack)):
        marker = "top" if depth == 0 else f"{depth:>3}"
        print(f"    {marker:>4}: {value:>11}  0x{value & 0xFFFFFFFF:08X}")


def render_call_stack(call_stack: Sequence[int]) -> None:
    if not call_stack:
        print("  call stack: (empty)")
        return
    print(f"  call stack: depth={len(call_stack)}")
    for frame, address in enumerate(reversed(call_stack)):
        print(f"    #{frame:<3} return -> {address:04d}")


def render_memory(memory: Mapping[int, int]) -> None:
    if not memory:
        print("  memory: (empty)")
        return
    print("  memory:")
    for address in sorted(memory):
        value = memory[address]
        print(f"    [{address:>6}] = {value:>11}  0x{value & 0xFFFFFFFF:08X}")


def describe_event(event: Mapping[str, Any]) -> Optional[str]:
    """One-line summary for an engine event, or None for events not shown."""
    kind = event.get("type")
    if kind == "debug_stop":
        return f"stopped: {event.get('reason')} @ {event.get('pc', 0):04d}"
    if kind == "input_request":
        what = "integer" if event.get("kind") == "int" else "line"
        return f"input requested ({what}) by {event.get('pc', 0):04d}; use 'input VALUE'"
    if kind == "fault":
        return f"fault: {event.get('error')}: {event.get('message')} @ {event.get('pc')}"
    if kind == "halted":
        return f"halted after {event.get('steps')} steps"
    if kind == "trace":
        return f"trace {event.get('pc', 0):04d}: {event.get('instruction')} stack={event.get('stack')}"
    return None


def report_events(ctx: DebuggerContext, machine: StackMachine, *, skip: Iterable[str] = ()) -> list:
    """Drain machine events and print their summaries (text mode only).

    Event types in ``skip`` are drained without being printed.
    """
    events = machine.consume_events()
    if not ctx.json_output:
        for event in events:
            if event.get("type") in skip:
                continue
            line = describe_event(event)
            if line:
                print(line)
    return events


__all__ = [
    "emit_result",
    "emit_error",
    "format_listing_line",
    "render_listing",
    "render_stack",
    "render_call_stack",
    "render_memory",
    "describe_event",
    "report_events",
]
