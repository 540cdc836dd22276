import pytest
from pydantic import ValidationError

from collab_canvas.protocol.operations import (
    OPERATIONS,
    AddStroke,
    CommittedAddStroke,
    CommittedRemoveStroke,
    Point,
    Stroke,
    visible_strokes,
)

from .conftest import add, make_stroke, remove


def test_point_pressure_defaults_to_half():
    pt = Point(x=1, y=2)
    assert pt.p == 0.5
    assert pt.t == 0


def test_point_pressure_out_of_range_rejected():
    with pytest.raises(ValidationError):
        Point(x=0, y=0, p=1.5)


def test_stroke_is_immutable():
    s = make_stroke("s1")
    with pytest.raises(ValidationError):
        s.color = "#fff"


def test_stroke_size_must_be_positive():
    with pytest.raises(ValidationError):
        Stroke(id="s", color="#000", size=0, points=())


def test_draft_has_no_seq_and_committed_requires_one():
    draft = add("s1")
    assert not hasattr(draft, "seq")
    with pytest.raises(ValidationError):
        CommittedAddStroke(id="s1", stroke=draft.stroke)


def test_commit_keeps_payload():
    op = remove("r1", "s1").commit(7)
    assert isinstance(op, CommittedRemoveStroke)
    assert (op.id, op.stroke_id, op.seq) == ("r1", "s1", 7)


def test_fold_add_then_remove():
    ops = [add("a").commit(1), add("b").commit(2), remove("r", "a").commit(3)]
    assert [s.id for s in visible_strokes(ops)] == ["b"]


def test_fold_duplicate_remove_is_noop():
    once = [add("x").commit(1), remove("r1", "x").commit(2)]
    twice = once + [remove("r2", "x").commit(3)]
    assert visible_strokes(once) == visible_strokes(twice) == []


def test_fold_id_collision_overwrites():
    first = AddStroke(id="o1", stroke=make_stroke("s", n=1))
    second = AddStroke(id="o2", stroke=make_stroke("s", n=3))
    strokes = visible_strokes([first.commit(1), second.commit(2)])
    assert len(strokes) == 1
    assert len(strokes[0].points) == 3


def test_operations_adapter_round_trips_mixed_history():
    ops = [add("a").commit(1), remove("r", "a").commit(2)]
    data = OPERATIONS.dump_json(ops)
    assert OPERATIONS.validate_json(data) == ops
