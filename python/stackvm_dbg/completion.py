"""prompt_toolkit completer for stackvm-dbg."""

from __future__ import annotations

import shlex
from typing import Iterable, List

from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

from .commands import CommandRegistry
from .context import DebuggerContext

_LOCATION_COMMANDS = {"list"}
_BREAK_SUBCMDS = ("add", "clear", "clearall", "list")


def _normalise_tokens(text: str) -> List[str]:
    if not text:
        return []
    try:
        tokens = shlex.split(text, posix=True)
    except ValueError:
        tokens = text.strip().split()
    if text[-1].isspace():
        tokens.append("")
    return tokens


def _matching(candidates: Iterable[str], prefix: str) -> List[str]:
    needle = prefix.lower()
    return sorted(dict.fromkeys(c for c in candidates if c.lower().startswith(needle)))


class DebuggerCompleter(Completer):
    """Completes command names, sample programs and label names."""

    def __init__(self, ctx: DebuggerContext, registry: CommandRegistry) -> None:
        self.ctx = ctx
        self.registry = registry

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterable[Completion]:
        tokens = _normalise_tokens(document.text_before_cursor)
        prefix = tokens[-1] if tokens else ""
        for entry in self._candidates(tokens):
            yield Completion(entry, start_position=-len(prefix))

    def _candidates(self, tokens: List[str]) -> List[str]:
        if len(tokens) <= 1:
            return _matching(self.registry.names(), tokens[0] if tokens else "")
        prefix = tokens[-1]
        command = self.registry.get(self.ctx.resolve_alias(tokens[0]))
        name = command.name if command else tokens[0]
        if name == "load" and len(tokens) == 2:
            return _matching(self.ctx.program_names(), prefix)
        if name == "help" and len(tokens) == 2:
            return _matching(self.registry.names(), prefix)
        if name == "break":
            if len(tokens) == 2:
                return _matching(_BREAK_SUBCMDS, prefix)
            if len(tokens) == 3 and tokens[1] in ("add", "clear"):
                return self.ctx.label_names(prefix)
            return []
        if name in _LOCATION_COMMANDS and len(tokens) == 2:
            return self.ctx.label_names(prefix)
        return []
