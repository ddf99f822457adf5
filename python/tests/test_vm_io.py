import pytest

from stackvm import BufferConsole, InputExhausted, InputKind, InputParseError, MachineState, NoPendingInput
from stackvm.instructions import INT32_MAX, Instruction as I, Op
from stackvm.programs import echo, greet


def test_print_on_empty_stack(make_vm, console):
    vm = make_vm([I(Op.PRINT)])
    assert vm.execute() is MachineState.HALTED
    assert console.output == ["Stack is empty"]


def test_write_prints_literal_text(make_vm, console):
    vm = make_vm([I(Op.WRITE, "hello, world"), I(Op.WRITE, "")])
    vm.execute()
    assert console.output == ["hello, world", ""]
    assert vm.stack == ()


def test_dump_is_sorted_and_does_not_change_state(make_vm, console):
    vm = make_vm([
        I(Op.PUSH, 1),
        I(Op.PUSH, 2),
        I(Op.PUSH, 5),
        I(Op.STORE, 10),
        I(Op.PUSH, 6),
        I(Op.STORE, 3),
        I(Op.DUMP),
        I(Op.DUMP),
    ])
    vm.execute()
    assert console.output == [
        "Stack: [1, 2]",
        "Memory: {3: 6, 10: 5}",
        "Stack: [1, 2]",
        "Memory: {3: 6, 10: 5}",
    ]
    assert vm.stack == (1, 2)


def test_dump_on_fresh_machine(make_vm, console):
    make_vm([I(Op.DUMP)]).execute()
    assert console.output == ["Stack: []", "Memory: {}"]


def test_trace_toggles_and_emits_events(make_vm, console):
    vm = make_vm([I(Op.TRACE, True), I(Op.PUSH, 1), I(Op.TRACE, False), I(Op.PUSH, 2)])
    vm.execute()
    assert console.output == ["Tracing enabled", "Tracing disabled"]
    traced = [event for event in vm.consume_events() if event["type"] == "trace"]
    assert [event["pc"] for event in traced] == [1, 2]
    assert traced[0]["instruction"] == "PUSH 1"
    assert traced[1]["stack"] == [1]
    assert not vm.trace_enabled


def test_trace_flag_from_constructor(make_vm):
    vm = make_vm([I(Op.PUSH, 1)], trace=True)
    vm.execute()
    assert [event["type"] for event in vm.consume_events()] == ["trace", "halted"]


def test_read_parks_machine_until_input(make_vm, console):
    vm = make_vm(echo())
    assert vm.execute() is MachineState.AWAITING_INPUT
    assert vm.pending_input.kind is InputKind.INT
    assert vm.pending_input.pc == 1
    assert vm.pc == 2

    assert vm.step() is MachineState.AWAITING_INPUT
    assert vm.steps == 2

    assert vm.provide_input("21") is MachineState.READY
    assert vm.stack == (21,)
    assert vm.execute() is MachineState.HALTED
    assert console.output == ["enter a number", "42"]


def test_read_accepts_int_values(make_vm):
    vm = make_vm([I(Op.READ)])
    vm.execute()
    assert vm.provide_input(-5) is MachineState.HALTED
    assert vm.stack == (-5,)


@pytest.mark.parametrize("bad", ["abc", "", "1.5", str(INT32_MAX + 1), True])
def test_bad_read_input_keeps_request_pending(make_vm, bad):
    vm = make_vm([I(Op.READ)])
    vm.execute()
    with pytest.raises(InputParseError):
        vm.provide_input(bad)
    assert vm.state is MachineState.AWAITING_INPUT
    assert vm.stack == ()
    vm.provide_input(" 12 ")
    assert vm.stack == (12,)


def test_provide_input_without_request(make_vm):
    vm = make_vm([I(Op.PUSH, 1)])
    with pytest.raises(NoPendingInput):
        vm.provide_input("1")
    vm.execute()
    with pytest.raises(NoPendingInput):
        vm.provide_input("1")


def test_scan_reports_and_discards_line(make_vm, console):
    vm = make_vm(greet())
    assert vm.execute() is MachineState.AWAITING_INPUT
    assert vm.pending_input.kind is InputKind.LINE
    vm.provide_input("  Ada Lovelace ")
    vm.execute()
    assert console.output == ["what is your name?", "Scanned: Ada Lovelace", "bye"]
    assert vm.stack == ()


def test_input_events(make_vm):
    vm = make_vm([I(Op.READ)])
    vm.execute()
    vm.provide_input("3")
    types = [event["type"] for event in vm.consume_events()]
    assert types == ["input_request", "input_delivered", "halted"]


def test_execute_reads_from_console_and_reprompts(make_vm):
    scripted = BufferConsole(["abc", "21"])
    vm = make_vm(echo(), console=scripted)
    assert vm.execute() is MachineState.HALTED
    assert scripted.output == [
        "enter a number",
        "error: Invalid input 'abc': not an integer",
        "42",
    ]
    assert scripted.prompts == ["? ", "? "]


def test_execute_scan_from_console(make_vm):
    scripted = BufferConsole(["Grace"])
    vm = make_vm(greet(), console=scripted)
    vm.execute()
    assert scripted.output == ["what is your name?", "Scanned: Grace", "bye"]
    assert scripted.prompts == ["> "]


def test_console_running_dry_raises_input_exhausted(make_vm):
    scripted = BufferConsole([])
    vm = make_vm(echo(), console=scripted)
    with pytest.raises(InputExhausted, match="READ @ 1"):
        vm.execute()
    assert vm.state is MachineState.AWAITING_INPUT
