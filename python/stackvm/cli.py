"""Batch runner: execute a built-in sample program on the console."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .console import BufferConsole, Console, StdConsole
from .errors import ExecutionError, InputExhausted, LinkError
from .machine import DEFAULT_MAX_CALL_DEPTH, StackMachine
from .programs import SAMPLES, get_sample, sample_names
from .state import MachineState

LOG = logging.getLogger("stackvm.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class _ScriptConsole(StdConsole):
    """Prints output, reads input lines from a prepared script."""

    def __init__(self, lines: List[str]) -> None:
        super().__init__()
        self._script = BufferConsole(lines)

    def read_line(self, prompt: str = "") -> Optional[str]:
        return self._script.read_line(prompt)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stackvm", description="Stack machine batch runner")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("STACKVM_LOG", "WARNING"),
        help="Logging level (default WARNING)",
    )
    sub = parser.add_subparsers(dest="cmd")
    sub.required = True

    run = sub.add_parser("run", help="Run a sample program")
    run.add_argument("program", choices=sample_names(), help="sample program name")
    run.add_argument("--trace", action="store_true", help="start with tracing enabled")
    run.add_argument("--max-steps", type=int, default=None, help="safety cap on executed steps")
    run.add_argument(
        "--max-call-depth",
        type=int,
        default=os.environ.get("STACKVM_MAX_CALL_DEPTH", str(DEFAULT_MAX_CALL_DEPTH)),
        help=f"call stack limit (default {DEFAULT_MAX_CALL_DEPTH}, 0 for unlimited)",
    )
    run.add_argument("--input", type=Path, help="read READ/SCAN input lines from a file")
    run.add_argument("--dump", action="store_true", help="print final machine state as JSON")

    sub.add_parser("list", help="List sample programs")
    return parser


def _make_console(args: argparse.Namespace) -> Console:
    if args.input is None:
        return StdConsole()
    lines = args.input.read_text(encoding="utf-8").splitlines()
    return _ScriptConsole(lines)


def _log_trace(event: dict) -> None:
    LOG.info("trace %04d: %s stack=%s", event["pc"], event["instruction"], event["stack"])


def _cmd_list() -> int:
    for name in sample_names():
        print(f"{name:<12} {SAMPLES[name].description}")
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    try:
        console = _make_console(args)
    except OSError as exc:
        print(f"error: cannot read input file: {exc}", file=sys.stderr)
        return 2
    depth = args.max_call_depth if args.max_call_depth > 0 else None
    vm = StackMachine(console=console, trace=args.trace, max_call_depth=depth, on_trace=_log_trace)
    try:
        vm.load(get_sample(args.program))
    except LinkError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    max_steps = args.max_steps if args.max_steps is not None and args.max_steps > 0 else None
    rc = 0
    try:
        state = vm.execute(max_steps=max_steps)
    except ExecutionError as exc:
        print(f"error: {exc.kind}: {exc}", file=sys.stderr)
        state = vm.state
        rc = 1
    except InputExhausted as exc:
        print(f"error: {exc}", file=sys.stderr)
        state = vm.state
        rc = 1
    if state is MachineState.READY and rc == 0:
        print(f"[VM] Max steps {max_steps} reached; stopping @ {vm.pc}", file=sys.stderr)
    if args.dump:
        print(json.dumps(vm.snapshot_state(), indent=2, sort_keys=True, default=str))
    return rc


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    if args.cmd == "list":
        return _cmd_list()
    return _cmd_run(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
