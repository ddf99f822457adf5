from stackvm.instructions import Instruction as I, Op


def test_store_then_load(make_vm):
    vm = make_vm([I(Op.PUSH, 42), I(Op.STORE, 5), I(Op.LOAD, 5)])
    vm.execute()
    assert vm.stack == (42,)
    assert vm.memory == {5: 42}


def test_unwritten_address_reads_zero(make_vm):
    vm = make_vm([I(Op.LOAD, 123), I(Op.LOAD, -4)])
    vm.execute()
    assert vm.stack == (0, 0)
    assert vm.memory == {}


def test_free_reverts_address_to_zero(make_vm):
    vm = make_vm([I(Op.PUSH, 9), I(Op.STORE, 1), I(Op.FREE, 1), I(Op.FREE, 2), I(Op.LOAD, 1)])
    vm.execute()
    assert vm.stack == (0,)
    assert vm.memory == {}


def test_alloc_zeroes_low_addresses(make_vm):
    vm = make_vm([I(Op.PUSH, 7), I(Op.STORE, 2), I(Op.ALLOC, 4)])
    vm.execute()
    assert vm.memory == {0: 0, 1: 0, 2: 0, 3: 0}


def test_alloc_zero_does_nothing(make_vm):
    vm = make_vm([I(Op.ALLOC, 0)])
    vm.execute()
    assert vm.memory == {}


def test_memory_view_is_a_copy(make_vm):
    vm = make_vm([I(Op.PUSH, 1), I(Op.STORE, 0)])
    vm.execute()
    view = vm.memory
    view[0] = 99
    assert vm.memory == {0: 1}
