"""Line-oriented I/O capabilities handed to the machine.

The engine only needs "write a line" and "obtain a line"; ``read_line``
returns ``None`` when no more input is available.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable, List, Optional, TextIO


class Console:
    """Output-only console; ``read_line`` always reports no input."""

    interactive_input = False

    def write_line(self, text: str) -> None:
        raise NotImplementedError("Console must implement write_line()")

    def read_line(self, prompt: str = "") -> Optional[str]:
        return None


class StdConsole(Console):
    """Console bound to the process streams."""

    interactive_input = True

    def __init__(self, *, stream: Optional[TextIO] = None, read_input: bool = True) -> None:
        self.stream = stream
        self.interactive_input = read_input

    def write_line(self, text: str) -> None:
        print(text, file=self.stream, flush=True)

    def read_line(self, prompt: str = "") -> Optional[str]:
        if not self.interactive_input:
            return None
        try:
            return input(prompt)
        except EOFError:
            return None


class BufferConsole(Console):
    """Records output and serves scripted input lines."""

    def __init__(self, lines: Optional[Iterable[str]] = None) -> None:
        self.output: List[str] = []
        self.pending = deque(lines or [])
        self.prompts: List[str] = []
        self.interactive_input = lines is not None

    def write_line(self, text: str) -> None:
        self.output.append(text)

    def read_line(self, prompt: str = "") -> Optional[str]:
        self.prompts.append(prompt)
        if not self.pending:
            return None
        return self.pending.popleft()
