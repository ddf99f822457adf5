"""Interactive REPL for stackvm-dbg."""

from __future__ import annotations

import logging
import sys
from typing import Callable, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from .commands import CommandRegistry
from .completion import DebuggerCompleter
from .context import DebuggerContext
from .history import HistoryStore
from .parser import PARSE_ERROR, split_command

LOGGER = logging.getLogger("stackvm_dbg.repl")


class DebuggerREPL:
    """prompt_toolkit REPL; plain input() when stdin is not a terminal."""

    def __init__(
        self,
        ctx: DebuggerContext,
        registry: CommandRegistry,
        *,
        history_store: Optional[HistoryStore] = None,
        interactive: Optional[bool] = None,
    ) -> None:
        self.ctx = ctx
        self.registry = registry
        self.history_store = history_store
        self.interactive = sys.stdin.isatty() if interactive is None else interactive

    def prompt_text(self) -> str:
        machine = self.ctx.machine
        if machine is None:
            return "(stackvm) "
        if machine.pending_input is not None:
            return f"(stackvm {machine.pc:04d} input) "
        return f"(stackvm {machine.pc:04d}) "

    def run(self) -> int:
        if not self.interactive:
            return self._loop(input)
        history = self.history_store if self.history_store is not None else InMemoryHistory()
        session = PromptSession(
            history=history,
            completer=DebuggerCompleter(self.ctx, self.registry),
            complete_while_typing=True,
        )
        return self._loop(lambda prompt: session.prompt(prompt))

    def _loop(self, read: Callable[[str], str]) -> int:
        buffer: list[str] = []
        while True:
            try:
                line = read(self.prompt_text())
            except (EOFError, KeyboardInterrupt):
                print()
                return 0
            if self._handle_multiline(buffer, line):
                continue
            payload = " ".join(buffer) if buffer else line
            buffer.clear()
            if not self.interactive:
                self._record_history(payload)
            self.dispatch(payload)

    def dispatch(self, line: str) -> int:
        stripped = line.strip()
        if not stripped:
            return 0
        argv = split_command(stripped)
        if not argv:
            return 0
        cmd_name, *cmd_args = argv
        if cmd_name == PARSE_ERROR:
            print(f"Parse error: {cmd_args[-1] if cmd_args else stripped}")
            return 1
        cmd_name = self.ctx.resolve_alias(cmd_name)
        command = self.registry.get(cmd_name)
        if not command:
            print(f"Unknown command: {cmd_name}")
            return 1
        try:
            return command.run(self.ctx, cmd_args)
        except SystemExit:
            raise
        except Exception as exc:  # pragma: no cover - unexpected command bug
            LOGGER.exception("command failed")
            print(f"Command '{cmd_name}' failed: {exc}")
            return 1

    @staticmethod
    def _handle_multiline(buffer: list[str], line: str) -> bool:
        stripped = line.rstrip()
        if stripped.endswith("\\"):
            buffer.append(stripped[:-1])
            return True
        if buffer:
            buffer.append(stripped)
        return False

    def _record_history(self, entry: str) -> None:
        if self.history_store is not None:
            self.history_store.append(entry)
