import pytest

from nodegrad.node import (
    Node,
    NodeArena,
    Op,
    add,
    default_arena,
    leaf,
    local_backward,
    multiply,
)


@pytest.fixture
def arena():
    return NodeArena()


def test_leaf_starts_with_zero_grad_and_no_parents(arena):
    x = arena.leaf(2.5, label="x")
    assert x.data == 2.5
    assert x.grad == 0.0
    assert x.parents == ()
    assert x.op is Op.LEAF
    assert x.label == "x"
    assert len(arena) == 1


def test_leaf_without_arena_uses_default_arena():
    x = leaf(1.0)
    assert x.arena is default_arena()


def test_leaf_rejects_non_numeric_values(arena):
    with pytest.raises(TypeError):
        arena.leaf("1.0")
    with pytest.raises(TypeError):
        arena.leaf(True)


def test_add_records_parents_in_order(arena):
    a = arena.leaf(1.0)
    b = arena.leaf(2.0)
    out = add(a, b)
    assert out.data == 3.0
    assert out.op is Op.ADD
    assert out.parents == (a, b)


def test_multiply_records_parents_in_order(arena):
    a = arena.leaf(3.0)
    b = arena.leaf(5.0)
    out = multiply(b, a)
    assert out.data == 15.0
    assert out.op is Op.MUL
    assert out.parents == (b, a)


def test_operations_do_not_touch_operands(arena):
    a = arena.leaf(3.0)
    b = arena.leaf(5.0)
    multiply(a, b)
    add(a, b)
    assert (a.data, a.grad, a.parents) == (3.0, 0.0, ())
    assert (b.data, b.grad, b.parents) == (5.0, 0.0, ())


def test_nodes_with_equal_values_are_distinct(arena):
    a = arena.leaf(1.0)
    b = arena.leaf(1.0)
    assert a != b
    assert len({a, b}) == 2


def test_handles_to_the_same_slot_are_equal(arena):
    a = arena.leaf(1.0)
    same = Node(arena, a.index)
    assert same == a
    assert hash(same) == hash(a)


def test_same_index_in_another_arena_is_a_different_node(arena):
    other = NodeArena()
    assert arena.leaf(1.0) != other.leaf(1.0)


def test_operators_build_add_and_multiply_nodes(arena):
    a = arena.leaf(2.0)
    b = arena.leaf(4.0)
    assert (a + b).op is Op.ADD
    assert (a * b).op is Op.MUL
    assert (a * b + a).data == 10.0


def test_numbers_become_leaves_in_the_operand_arena(arena):
    a = arena.leaf(2.0)
    out = 3 * a + 1
    assert out.data == 7.0
    assert out.arena is arena
    assert all(p.arena is arena for p in out.parents)


def test_mixing_arenas_is_rejected(arena):
    a = arena.leaf(1.0)
    b = NodeArena().leaf(2.0)
    with pytest.raises(ValueError):
        add(a, b)
    with pytest.raises(ValueError):
        multiply(a, b)


def test_multiply_local_backward_applies_product_rule(arena):
    a = arena.leaf(3.0)
    b = arena.leaf(5.0)
    bystander = arena.leaf(7.0)
    out = multiply(a, b)

    out.grad = 1.0
    local_backward(out)

    assert a.grad == 5.0
    assert b.grad == 3.0
    assert bystander.grad == 0.0


def test_add_local_backward_passes_gradient_through(arena):
    a = arena.leaf(3.0)
    b = arena.leaf(5.0)
    out = add(a, b)

    out.grad = 2.0
    local_backward(out)

    assert a.grad == 2.0
    assert b.grad == 2.0


def test_local_backward_accumulates(arena):
    a = arena.leaf(3.0)
    b = arena.leaf(5.0)
    out = multiply(a, b)
    a.grad = 10.0

    out.grad = 1.0
    local_backward(out)

    assert a.grad == 15.0


def test_square_receives_both_contributions(arena):
    x = arena.leaf(3.0)
    out = x * x

    out.grad = 1.0
    local_backward(out)

    assert x.grad == 6.0


def test_leaf_local_backward_is_a_no_op(arena):
    x = arena.leaf(3.0)
    x.grad = 4.0
    local_backward(x)
    assert x.grad == 4.0


def test_truncate_drops_nodes_after_the_mark(arena):
    a = arena.leaf(2.0)
    b = arena.leaf(3.0)
    mark = len(arena)
    out = multiply(add(a, b), a)
    out.grad = 1.0
    local_backward(out)

    arena.truncate(mark)

    assert len(arena) == 2
    assert (a.data, a.grad) == (2.0, 5.0)
    assert b.data == 3.0
    assert arena.leaf(7.0).index == 2


def test_truncate_rejects_marks_outside_the_arena(arena):
    arena.leaf(1.0)
    with pytest.raises(ValueError):
        arena.truncate(2)
    with pytest.raises(ValueError):
        arena.truncate(-1)
