"""
Pytest configuration and fixtures for stackvm tests.
"""
import sys
from pathlib import Path

import pytest

PYTHON_SRC = Path(__file__).resolve().parents[1]
if str(PYTHON_SRC) not in sys.path:
    sys.path.insert(0, str(PYTHON_SRC))

from stackvm import BufferConsole, StackMachine  # noqa: E402


@pytest.fixture
def console():
    return BufferConsole()


@pytest.fixture
def make_vm(console):
    """Build a machine with a recording console and load ``program``."""

    def _make(program, **kwargs):
        vm = StackMachine(console=kwargs.pop("console", console), **kwargs)
        vm.load(program)
        return vm

    return _make
