"""Command-line tokenising and value parsing for stackvm-dbg."""

from __future__ import annotations

import shlex
from typing import List, Optional

PARSE_ERROR = "#parse-error"


def split_command(line: str) -> List[str]:
    """Split a command line into argv tokens using shlex rules.

    Unbalanced quotes yield ``[PARSE_ERROR, message]``.
    """
    if not line:
        return []
    try:
        return shlex.split(line, comments=False, posix=True)
    except ValueError as exc:
        return [PARSE_ERROR, str(exc)]


def parse_int(text: str) -> Optional[int]:
    """Parse a decimal (or 0x/0o/0b prefixed) integer, None if it is not one."""
    text = text.strip()
    if not text:
        return None
    try:
        return int(text, 0)
    except ValueError:
        pass
    try:
        return int(text, 10)
    except ValueError:
        return None
