"""Help command."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING

from .base import Command
from ..context import DebuggerContext, DebuggerError

if TYPE_CHECKING:  # pragma: no cover
    from . import CommandRegistry


class HelpCommand(Command):
    def __init__(self) -> None:
        super().__init__("help", "Show available commands", aliases=("?",))
        self._registry: CommandRegistry | None = None

    def configure(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("command", nargs="?", help="Command to describe")

    def bind(self, registry: "CommandRegistry") -> None:
        self._registry = registry

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        registry = self._registry
        if not registry:
            return 1
        if args.command:
            command = registry.get(ctx.resolve_alias(args.command))
            if command is None:
                raise DebuggerError(f"unknown command: {args.command}")
            print(command.format_help())
            print(f"  {command.usage()}")
            return 0
        for command in registry.list_commands():
            print(command.format_help())
        return 0
