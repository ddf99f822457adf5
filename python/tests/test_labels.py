import pytest

from stackvm import DuplicateLabel, LinkError, StackMachine
from stackvm.instructions import Instruction as I, Op
from stackvm.labels import resolve_labels, unresolved_targets


def test_labels_map_to_marker_index():
    program = [I(Op.PUSH, 1), I(Op.LABEL, "a"), I(Op.POP), I(Op.LABEL, "b")]
    assert resolve_labels(program) == {"a": 1, "b": 3}


def test_duplicate_label_raises_clear_error():
    program = [I(Op.LABEL, "dup"), I(Op.RET), I(Op.LABEL, "dup"), I(Op.RET)]
    with pytest.raises(DuplicateLabel, match="Duplicate label: dup") as info:
        resolve_labels(program)
    assert (info.value.first, info.value.second) == (0, 2)
    assert isinstance(info.value, LinkError)


def test_failed_load_keeps_previous_program(console):
    vm = StackMachine(console=console)
    vm.load([I(Op.PUSH, 1)])
    with pytest.raises(DuplicateLabel):
        vm.load([I(Op.LABEL, "x"), I(Op.LABEL, "x")])
    assert len(vm.program) == 1
    assert vm.steps == 0


def test_unresolved_targets_listed_once():
    program = [I(Op.JUMP, "nowhere"), I(Op.CALL, "nowhere"), I(Op.LABEL, "here"), I(Op.BRT, "here")]
    assert unresolved_targets(program, resolve_labels(program)) == ["nowhere"]
