import pytest

from taskflow.errors import ValidationError
from taskflow.services.ordering import InsertPlan, append_position, apply_insert_plan, plan_insert


def test_append_position_on_empty_collection_is_zero():
    assert append_position([]) == 0


def test_append_position_follows_the_largest_value():
    assert append_position([0, 4, 2]) == 5


def test_plan_insert_takes_the_slot_and_shifts_the_tail():
    plan = plan_insert([0, 1, 2], 1)
    assert plan == InsertPlan(position=1, shift_from=1)


def test_plan_insert_uses_sorted_order_with_gaps():
    plan = plan_insert([10, 3, 7], 1)
    assert plan == InsertPlan(position=7, shift_from=7)


def test_plan_insert_at_or_past_the_end_appends():
    assert plan_insert([0, 1], 2) == InsertPlan(position=2)
    assert plan_insert([0, 1], 50) == InsertPlan(position=2)
    assert plan_insert([], 0) == InsertPlan(position=0)


def test_plan_insert_rejects_negative_index():
    with pytest.raises(ValidationError):
        plan_insert([0, 1], -1)


def test_apply_insert_plan_keeps_positions_distinct():
    positions = {"a": 0, "b": 1, "c": 2}
    apply_insert_plan(positions, "x", plan_insert(positions.values(), 0))

    assert positions == {"x": 0, "a": 1, "b": 2, "c": 3}
    assert len(set(positions.values())) == len(positions)


def test_apply_insert_plan_append_leaves_siblings_alone():
    positions = {"a": 0, "b": 5}
    apply_insert_plan(positions, "x", plan_insert(positions.values(), 9))

    assert positions == {"a": 0, "b": 5, "x": 6}
