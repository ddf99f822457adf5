"""Execution control commands (step/continue/input)."""

from __future__ import annotations

import argparse
from typing import Any, Dict

from stackvm import ExecutionError, InputKind, InputParseError, MachineState, StackMachine

from .base import Command
from ..context import DebuggerContext, DebuggerError
from ..output import emit_error, emit_result, format_listing_line, report_events
from ..parser import parse_int


def _position(machine: StackMachine) -> str:
    ins = machine.current_instruction
    if ins is None:
        return f"pc={machine.pc:04d} <end>"
    return format_listing_line(machine.pc, ins, pc=machine.pc, breakpoints=machine.breakpoints).strip()


def _summary(machine: StackMachine, **extra: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "state": machine.state.value,
        "pc": machine.pc,
        "steps": machine.steps,
        "stack": list(machine.stack),
    }
    data.update(extra)
    return data


def _fault(ctx: DebuggerContext, machine: StackMachine, exc: ExecutionError) -> int:
    report_events(ctx, machine, skip=("fault",))
    emit_error(ctx, message=f"{exc.kind}: {exc}", data=exc.to_dict())
    return 2


class StepCommand(Command):
    def __init__(self) -> None:
        super().__init__("step", "Execute N instructions (default 1)", aliases=("s", "next"))

    def configure(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("count", nargs="?", type=int, default=1, help="Instruction count (default 1)")

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        machine = ctx.ensure_machine()
        state = machine.state
        if state is not MachineState.READY:
            raise DebuggerError(f"cannot step: machine is {state.value}")
        executed = 0
        try:
            for _ in range(max(1, args.count)):
                executed += 1
                state = machine.step()
                if state is not MachineState.READY:
                    break
        except ExecutionError as exc:
            return _fault(ctx, machine, exc)
        report_events(ctx, machine)
        emit_result(
            ctx,
            message=f"Stepped {executed} instruction(s); {_position(machine)}",
            data=_summary(machine, executed=executed),
        )
        return 0


class ContinueCommand(Command):
    def __init__(self) -> None:
        super().__init__("continue", "Run until halt, breakpoint or input request", aliases=("c", "run"))

    def configure(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--max-steps", type=int, default=None, help="Stop after this many instructions")

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        machine = ctx.ensure_machine()
        before = machine.steps
        try:
            state = machine.execute(max_steps=args.max_steps)
        except ExecutionError as exc:
            return _fault(ctx, machine, exc)
        report_events(ctx, machine)
        emit_result(
            ctx,
            message=f"{state.value}: {_position(machine)}",
            data=_summary(machine, executed=machine.steps - before),
        )
        return 0


class InputCommand(Command):
    def __init__(self) -> None:
        super().__init__("input", "Deliver a value to a pending READ/SCAN", aliases=("i",))

    def configure(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("value", nargs="+", help="Integer for READ, text for SCAN")

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        machine = ctx.ensure_machine()
        request = machine.pending_input
        if request is None:
            raise DebuggerError("no input request is pending")
        text = " ".join(args.value)
        if request.kind is InputKind.INT:
            value = parse_int(text)
            if value is None:
                raise DebuggerError(f"not a number: {text!r}")
        else:
            value = text
        try:
            machine.provide_input(value)
        except InputParseError as exc:
            raise DebuggerError(str(exc)) from None
        report_events(ctx, machine)
        emit_result(ctx, message=f"Delivered {value!r}; {_position(machine)}", data=_summary(machine, value=value))
        return 0
