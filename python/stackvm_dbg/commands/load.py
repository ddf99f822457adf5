"""Program selection commands (load/programs/reset)."""

from __future__ import annotations

import argparse

from stackvm.programs import SAMPLES

from .base import Command
from ..context import DebuggerContext, DebuggerError
from ..output import emit_result, render_listing


class LoadCommand(Command):
    def __init__(self) -> None:
        super().__init__("load", "Load a sample program into a fresh machine")

    def configure(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("program", help="Sample program name (see 'programs')")

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        try:
            machine = ctx.load_program(args.program)
        except KeyError as exc:
            raise DebuggerError(exc.args[0]) from None
        emit_result(
            ctx,
            message=f"Loaded {args.program} ({len(machine.program)} instructions)",
            data={"program": args.program, "length": len(machine.program), "labels": machine.labels},
        )
        if not ctx.json_output:
            render_listing(machine, count=8)
        return 0


class ProgramsCommand(Command):
    def __init__(self) -> None:
        super().__init__("programs", "List sample programs")

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        names = ctx.program_names()
        if ctx.json_output:
            emit_result(ctx, message="programs", data={name: SAMPLES[name].description for name in names})
            return 0
        for name in names:
            marker = "*" if name == ctx.program_name else " "
            print(f"  {marker} {name:<12} {SAMPLES[name].description}")
        return 0


class ResetCommand(Command):
    def __init__(self) -> None:
        super().__init__("reset", "Reload the current program (keeps breakpoints)")

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        machine = ctx.reset()
        emit_result(ctx, message=f"Reset {ctx.program_name}", data=machine.snapshot_state())
        return 0
