"""State inspection commands (list/stack/mem)."""

from __future__ import annotations

import argparse

from .base import Command
from ..context import DebuggerContext
from ..output import emit_result, render_call_stack, render_listing, render_memory, render_stack


class ListCommand(Command):
    def __init__(self) -> None:
        super().__init__("list", "Show the program listing", aliases=("l", "ls"))

    def configure(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("start", nargs="?", help="First index or label (default: whole program)")
        parser.add_argument("count", nargs="?", type=int, help="Number of instructions")

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        machine = ctx.ensure_machine()
        start = ctx.resolve_location(args.start) if args.start is not None else 0
        if ctx.json_output:
            end = len(machine.program) if args.count is None else start + args.count
            listing = [
                {"index": idx, "instruction": str(machine.program[idx])}
                for idx in range(max(0, start), min(end, len(machine.program)))
            ]
            emit_result(ctx, message="listing", data={"pc": machine.pc, "listing": listing})
            return 0
        render_listing(machine, start=start, count=args.count)
        return 0


class StackCommand(Command):
    def __init__(self) -> None:
        super().__init__("stack", "Show operand stack and call stack", aliases=("st",))

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        machine = ctx.ensure_machine()
        if ctx.json_output:
            emit_result(ctx, message="stack", data={"stack": list(machine.stack), "call_stack": list(machine.call_stack)})
            return 0
        render_stack(machine.stack)
        render_call_stack(machine.call_stack)
        return 0


class MemoryCommand(Command):
    def __init__(self) -> None:
        super().__init__("mem", "Show memory entries", aliases=("memory",))

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        machine = ctx.ensure_machine()
        memory = machine.memory
        if ctx.json_output:
            emit_result(ctx, message="memory", data={"memory": {str(k): memory[k] for k in sorted(memory)}})
            return 0
        render_memory(memory)
        return 0
