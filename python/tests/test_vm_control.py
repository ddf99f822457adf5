import pytest

from stackvm import CallStackOverflow, CallStackUnderflow, MachineState, StackUnderflow, UnknownLabel
from stackvm.instructions import Instruction as I, Op


def test_jump_skips_instructions(make_vm, console):
    vm = make_vm([
        I(Op.JUMP, "skip"),
        I(Op.WRITE, "never"),
        I(Op.LABEL, "skip"),
        I(Op.WRITE, "after"),
    ])
    vm.execute()
    assert console.output == ["after"]


@pytest.mark.parametrize("op,value,taken", [(Op.BRT, 5, True), (Op.BRT, 0, False), (Op.BRZ, 0, True), (Op.BRZ, -1, False)])
def test_conditional_branch_consumes_value(make_vm, console, op, value, taken):
    vm = make_vm([
        I(Op.PUSH, 99),
        I(Op.PUSH, value),
        I(op, "target"),
        I(Op.WRITE, "fallthrough"),
        I(Op.LABEL, "target"),
    ])
    vm.execute()
    assert vm.stack == (99,)
    assert console.output == ([] if taken else ["fallthrough"])


def test_branch_on_empty_stack_underflows(make_vm):
    vm = make_vm([I(Op.BRT, "x"), I(Op.LABEL, "x")])
    with pytest.raises(StackUnderflow):
        vm.execute()


def test_call_and_ret_return_after_call_site(make_vm, console):
    vm = make_vm([
        I(Op.CALL, "sub"),
        I(Op.WRITE, "back"),
        I(Op.HALT),
        I(Op.LABEL, "sub"),
        I(Op.WRITE, "in sub"),
        I(Op.RET),
    ])
    vm.step()
    assert vm.call_stack == (1,)
    assert vm.pc == 3
    vm.execute()
    assert console.output == ["in sub", "back"]
    assert vm.call_stack == ()
    assert vm.halted


def test_retv_pushes_value(make_vm):
    vm = make_vm([I(Op.CALL, "f"), I(Op.HALT), I(Op.LABEL, "f"), I(Op.RETV, 7)])
    vm.execute()
    assert vm.stack == (7,)
    assert vm.call_stack == ()


@pytest.mark.parametrize("op", [I(Op.RET), I(Op.RETV, 1)])
def test_return_without_call_is_call_stack_underflow(make_vm, op):
    vm = make_vm([op])
    with pytest.raises(CallStackUnderflow) as info:
        vm.execute()
    assert info.value.pc == 0
    assert vm.stack == ()
    assert vm.state is MachineState.FAULTED


@pytest.mark.parametrize("op", [Op.JUMP, Op.CALL])
def test_unknown_label_faults_at_use(make_vm, op):
    vm = make_vm([I(Op.PUSH, 1), I(op, "nowhere")])
    with pytest.raises(UnknownLabel, match="Unknown label: nowhere") as info:
        vm.execute()
    assert info.value.pc == 1
    assert info.value.name == "nowhere"
    assert vm.call_stack == ()


def test_unknown_branch_target_faults_even_when_not_taken(make_vm):
    vm = make_vm([I(Op.PUSH, 0), I(Op.BRT, "nowhere")])
    with pytest.raises(UnknownLabel):
        vm.execute()
    assert vm.stack == (0,)


def test_halt_stops_and_further_steps_are_noops(make_vm, console):
    vm = make_vm([I(Op.HALT), I(Op.WRITE, "unreachable")])
    assert vm.step() is MachineState.HALTED
    assert vm.step() is MachineState.HALTED
    assert vm.steps == 1
    assert console.output == []


def test_empty_program_is_halted():
    from stackvm import BufferConsole, StackMachine

    vm = StackMachine([], console=BufferConsole())
    assert vm.state is MachineState.HALTED
    assert vm.execute() is MachineState.HALTED


def test_runaway_recursion_hits_call_depth_limit(make_vm):
    vm = make_vm([I(Op.LABEL, "f"), I(Op.CALL, "f")], max_call_depth=8)
    with pytest.raises(CallStackOverflow) as info:
        vm.execute()
    assert len(vm.call_stack) == 8
    assert info.value.pc == 1


def test_labels_execute_as_no_ops(make_vm):
    vm = make_vm([I(Op.LABEL, "a"), I(Op.LABEL, "b"), I(Op.PUSH, 1)])
    vm.execute()
    assert vm.stack == (1,)
    assert vm.steps == 3
