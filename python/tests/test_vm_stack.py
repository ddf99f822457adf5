import pytest

from stackvm import MachineState, StackUnderflow
from stackvm.instructions import Instruction as I, Op


def test_push_pop_depth(make_vm):
    vm = make_vm([I(Op.PUSH, 1), I(Op.PUSH, 2), I(Op.PUSH, 3), I(Op.POP), I(Op.PUSH, 4), I(Op.POP)])
    assert vm.execute() is MachineState.HALTED
    assert vm.stack == (1, 2)


def test_pop_past_empty_is_stack_underflow(make_vm):
    vm = make_vm([I(Op.PUSH, 1), I(Op.POP), I(Op.POP)])
    with pytest.raises(StackUnderflow) as info:
        vm.execute()
    assert info.value.pc == 2
    assert vm.state is MachineState.FAULTED
    assert vm.pc == 2
    assert vm.last_error is info.value


def test_dup_swap_rot_clear(make_vm):
    vm = make_vm([I(Op.PUSH, 1), I(Op.PUSH, 2), I(Op.PUSH, 3)])
    vm.execute()
    assert vm.stack == (1, 2, 3)

    vm = make_vm([I(Op.PUSH, 7), I(Op.DUP)])
    vm.execute()
    assert vm.stack == (7, 7)

    vm = make_vm([I(Op.PUSH, 1), I(Op.PUSH, 2), I(Op.SWAP)])
    vm.execute()
    assert vm.stack == (2, 1)

    # [c, b, a] -> [a, c, b]
    vm = make_vm([I(Op.PUSH, 1), I(Op.PUSH, 2), I(Op.PUSH, 3), I(Op.ROT)])
    vm.execute()
    assert vm.stack == (3, 1, 2)

    vm = make_vm([I(Op.PUSH, 1), I(Op.PUSH, 2), I(Op.CLEAR)])
    vm.execute()
    assert vm.stack == ()


@pytest.mark.parametrize(
    "program",
    [
        [I(Op.DUP)],
        [I(Op.PUSH, 1), I(Op.SWAP)],
        [I(Op.PUSH, 1), I(Op.PUSH, 2), I(Op.ROT)],
    ],
)
def test_insufficient_depth_faults_without_touching_stack(make_vm, program):
    vm = make_vm(program)
    before = len(program) - 1
    with pytest.raises(StackUnderflow):
        vm.execute()
    assert len(vm.stack) == before
    assert vm.pc == len(program) - 1


def test_faulted_machine_does_not_resume(make_vm):
    vm = make_vm([I(Op.POP), I(Op.PUSH, 1)])
    with pytest.raises(StackUnderflow):
        vm.step()
    assert vm.step() is MachineState.FAULTED
    assert vm.execute() is MachineState.FAULTED
    assert vm.stack == ()
    events = vm.consume_events()
    assert events[-1]["type"] == "fault"
    assert events[-1]["error"] == "stack_underflow"
