"""Command base class for stackvm-dbg."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from stackvm import StackVMError

from ..context import DebuggerContext, DebuggerError
from ..output import emit_error


class _ArgumentParser(argparse.ArgumentParser):
    """argparse variant that reports errors instead of exiting the REPL."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise DebuggerError(f"{self.prog}: {message}")


@dataclass
class Command:
    """A named debugger command with an argparse front."""

    name: str
    description: str
    aliases: Sequence[str] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        self._parser = _ArgumentParser(prog=self.name, description=self.description, add_help=False)
        self.configure(self._parser)

    def configure(self, parser: argparse.ArgumentParser) -> None:
        """Add arguments to ``parser``; commands without arguments skip this."""

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        try:
            args = self._parser.parse_args(argv)
            return self.execute(ctx, args)
        except DebuggerError as exc:
            emit_error(ctx, message=str(exc))
            return 1
        except StackVMError as exc:
            emit_error(ctx, message=str(exc), data=_error_details(exc))
            return 2

    def execute(self, ctx: DebuggerContext, args: argparse.Namespace) -> int:
        raise NotImplementedError("Command must implement execute()")

    def format_help(self) -> str:
        names = self.name
        if self.aliases:
            names += f" ({', '.join(self.aliases)})"
        return f"{names:<24} {self.description}"

    def usage(self) -> str:
        return self._parser.format_usage().strip()


def _error_details(exc: StackVMError) -> Optional[dict]:
    to_dict = getattr(exc, "to_dict", None)
    return to_dict() if callable(to_dict) else None
