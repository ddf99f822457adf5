"""
stackvm-dbg CLI package.

Interactive debugger for the stack machine: load a sample program, single-step
it, inspect the listing, stack and memory, set breakpoints and answer input
requests.  Use ``python -m stackvm_dbg`` or the ``stackvm-dbg`` script.
"""

from __future__ import annotations

from .cli import main

__all__ = ["main"]
__version__ = "0.1.0"
