"""Debugger context: the machine under control plus shared CLI state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from stackvm import StackMachine, StdConsole
from stackvm.console import Console
from stackvm.programs import get_sample, sample_names

LOGGER = logging.getLogger("stackvm_dbg.context")


class DebuggerError(RuntimeError):
    """Raised when a command cannot run against the current session."""


@dataclass
class DebuggerContext:
    """Holds shared CLI debugger state."""

    json_output: bool = False
    console: Console = field(default_factory=lambda: StdConsole(read_input=False))
    max_call_depth: Optional[int] = None
    aliases: Dict[str, str] = field(default_factory=dict)
    program_name: Optional[str] = None
    _machine: Optional[StackMachine] = field(default=None, init=False, repr=False)

    @property
    def machine(self) -> Optional[StackMachine]:
        return self._machine

    def ensure_machine(self) -> StackMachine:
        if self._machine is None:
            raise DebuggerError("no program loaded (use 'load NAME')")
        return self._machine

    def load_program(self, name: str) -> StackMachine:
        """Load a sample program into a fresh machine."""
        program = get_sample(name)
        kwargs = {}
        if self.max_call_depth is not None:
            kwargs["max_call_depth"] = self.max_call_depth
        machine = StackMachine(console=self.console, **kwargs)
        machine.load(program)
        machine.configure_debug(enabled=True)
        self._machine = machine
        self.program_name = name
        LOGGER.info("loaded sample program %s", name)
        return machine

    def reset(self) -> StackMachine:
        machine = self.ensure_machine()
        machine.reset()
        return machine

    def program_names(self) -> List[str]:
        return sample_names()

    def label_names(self, prefix: str = "") -> List[str]:
        machine = self._machine
        if machine is None:
            return []
        needle = prefix.lower()
        return sorted(name for name in machine.labels if name.lower().startswith(needle))

    def resolve_location(self, spec: str) -> int:
        """Turn an index (``5``, ``0x05``) or a label name into a program index."""
        machine = self.ensure_machine()
        spec = spec.strip()
        try:
            return int(spec, 0)
        except ValueError:
            pass
        labels = machine.labels
        if spec in labels:
            return labels[spec]
        raise DebuggerError(f"unknown location '{spec}'")

    def resolve_alias(self, name: str) -> str:
        return self.aliases.get(name, name)

    def set_alias(self, alias: str, command: str) -> None:
        if alias == command:
            self.aliases.pop(alias, None)
            return
        self.aliases[alias] = command

    def list_aliases(self) -> Dict[str, str]:
        return dict(self.aliases)

    def disconnect(self) -> None:
        self._machine = None
        self.program_name = None
