"""Exit command."""

from __future__ import annotations

import argparse

from .base import Command
from ..context import DebuggerContext


class ExitCommand(Command):
    def __init__(self) -> None:
        super().__init__("exit", "Exit the debugger", aliases=("quit", "q"))

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        ctx.disconnect()
        raise SystemExit(0)
