"""stackvm-dbg CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List

from .commands import build_registry
from .context import DebuggerContext
from .history import HistoryStore
from .repl import DebuggerREPL

LOG = logging.getLogger("stackvm_dbg.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stackvm-dbg", description="Stack machine interactive debugger")
    parser.add_argument("program", nargs="?", help="Sample program to load at start-up")
    parser.add_argument("--json", action="store_true", help="Emit JSON output when supported")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("STACKVM_DBG_LOG", "WARNING"),
        help="Logging level (default WARNING)",
    )
    parser.add_argument(
        "-c",
        "--command",
        action="append",
        help="Execute a command non-interactively (repeatable; quote the command string)",
    )
    parser.add_argument(
        "--history",
        type=Path,
        default=Path(os.environ.get("STACKVM_DBG_HISTORY", Path.home() / ".stackvm-dbg-history")),
        help="Path to command history file",
    )
    parser.add_argument("--max-call-depth", type=int, default=None, help="Call stack limit for loaded programs")
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    ctx = DebuggerContext(json_output=args.json, max_call_depth=args.max_call_depth)
    registry = build_registry()
    repl = DebuggerREPL(ctx, registry, history_store=HistoryStore(str(args.history)))
    if args.program:
        rc = repl.dispatch(f"load {args.program}")
        if rc:
            return rc
    if args.command:
        return _run_commands(repl, args.command)
    try:
        return repl.run()
    except SystemExit as exc:
        return int(exc.code or 0)
    except KeyboardInterrupt:
        print()
        return 0


def _run_commands(repl: DebuggerREPL, commands: List[str]) -> int:
    rc = 0
    for command_line in commands:
        try:
            rc = repl.dispatch(command_line)
        except SystemExit as exc:
            return int(exc.code or 0)
        if rc:
            LOG.debug("command %r returned %d", command_line, rc)
            return rc
    return rc


__all__ = ["main", "build_arg_parser"]


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
