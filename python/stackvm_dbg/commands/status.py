"""Status command."""

from __future__ import annotations

import argparse

from .base import Command
from ..context import DebuggerContext
from ..output import emit_result


class StatusCommand(Command):
    def __init__(self) -> None:
        super().__init__("status", "Show machine state, pc and pending input", aliases=("info",))

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        machine = ctx.machine
        if machine is None:
            emit_result(ctx, message="No program loaded", data={"program": None})
            return 0
        snapshot = machine.snapshot_state()
        snapshot["program"] = ctx.program_name
        if ctx.json_output:
            emit_result(ctx, message="status", data=snapshot)
            return 0
        print("status:")
        print(f"  program  : {ctx.program_name} ({snapshot['program_length']} instructions)")
        print(f"  state    : {snapshot['state']}")
        print(f"  pc       : {snapshot['pc']:04d}  steps: {snapshot['steps']}  trace: {snapshot['trace']}")
        print(f"  stack    : {snapshot['stack']}")
        print(f"  calls    : {snapshot['call_stack']}")
        pending = machine.pending_input
        if pending is not None:
            print(f"  input    : {pending.describe()}")
        if snapshot["breakpoints"]:
            print(f"  breaks   : {', '.join(f'{bp:04d}' for bp in snapshot['breakpoints'])}")
        if machine.last_error is not None:
            print(f"  error    : {machine.last_error.kind}: {machine.last_error}")
        return 0
