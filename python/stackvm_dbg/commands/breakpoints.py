"""Breakpoint management command."""

from __future__ import annotations

import argparse

from .base import Command
from ..context import DebuggerContext, DebuggerError
from ..output import emit_result


class BreakpointCommand(Command):
    def __init__(self) -> None:
        super().__init__("break", "Manage breakpoints (add/clear/clearall/list)", aliases=("bp",))

    def configure(self, parser: argparse.ArgumentParser) -> None:
        sub = parser.add_subparsers(dest="subcmd")
        sub.required = True
        add = sub.add_parser("add")
        add.add_argument("spec", help="Program index or label name")
        clear = sub.add_parser("clear")
        clear.add_argument("spec", help="Program index or label name")
        sub.add_parser("clearall")
        sub.add_parser("list")

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        machine = ctx.ensure_machine()
        action = args.subcmd
        if action == "add":
            index = ctx.resolve_location(args.spec)
            try:
                machine.add_breakpoint(index)
            except ValueError as exc:
                raise DebuggerError(str(exc)) from None
            emit_result(ctx, message=f"Breakpoint at {index:04d}", data={"breakpoints": list(machine.breakpoints)})
            return 0
        if action == "clear":
            index = ctx.resolve_location(args.spec)
            if not machine.remove_breakpoint(index):
                raise DebuggerError(f"no breakpoint at {index:04d}")
            emit_result(ctx, message=f"Cleared breakpoint at {index:04d}", data={"breakpoints": list(machine.breakpoints)})
            return 0
        if action == "clearall":
            for index in machine.breakpoints:
                machine.remove_breakpoint(index)
            emit_result(ctx, message="Cleared all breakpoints", data={"breakpoints": []})
            return 0
        breakpoints = list(machine.breakpoints)
        if ctx.json_output:
            emit_result(ctx, message="breakpoints", data={"breakpoints": breakpoints})
        elif not breakpoints:
            print("No breakpoints")
        else:
            print("Breakpoints:")
            for index in breakpoints:
                print(f"  {index:04d}  {machine.program[index]}")
        return 0
