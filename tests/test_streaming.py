from collab_canvas.protocol.operations import Point
from collab_canvas.server.streaming import BufferKey, StreamBuffer

P0 = Point(x=0, y=0)


def test_start_move_finish_builds_stroke():
    buf = StreamBuffer()
    buf.start("c1", "s1", "#f00", 3, P0)
    assert buf.extend("c1", "s1", [Point(x=1, y=1), Point(x=2, y=2)])
    stroke = buf.finish("c1", "s1")
    assert stroke.id == "s1"
    assert stroke.color == "#f00"
    assert [pt.x for pt in stroke.points] == [0, 1, 2]
    assert len(buf) == 0


def test_unknown_key_is_noop():
    buf = StreamBuffer()
    assert buf.extend("c1", "nope", [P0]) is False
    assert buf.finish("c1", "nope") is None
    assert len(buf) == 0


def test_concurrent_strokes_same_connection_are_isolated():
    buf = StreamBuffer()
    buf.start("c1", "a", "#000", 1, P0)
    buf.start("c1", "b", "#000", 1, P0)
    buf.extend("c1", "a", [Point(x=1, y=0)])
    buf.extend("c1", "b", [Point(x=9, y=9), Point(x=8, y=8)])
    a = buf.finish("c1", "a")
    assert len(a.points) == 2
    assert BufferKey("c1", "b") in buf
    assert len(buf.get("c1", "b").points) == 3


def test_same_stroke_id_on_two_connections_does_not_collide():
    buf = StreamBuffer()
    buf.start("c1", "s", "#000", 1, P0)
    buf.start("c2", "s", "#fff", 1, P0)
    buf.extend("c2", "s", [Point(x=5, y=5)])
    assert len(buf.finish("c1", "s").points) == 1
    assert buf.finish("c2", "s").color == "#fff"


def test_key_with_separator_characters_is_structural():
    buf = StreamBuffer()
    buf.start("a:b", "c", "#000", 1, P0)
    assert buf.finish("a", "b:c") is None
    assert buf.finish("a:b", "c") is not None


def test_drop_connection_discards_only_its_entries():
    buf = StreamBuffer()
    buf.start("c1", "a", "#000", 1, P0)
    buf.start("c1", "b", "#000", 1, P0)
    buf.start("c2", "a", "#000", 1, P0)
    assert buf.drop_connection("c1") == 2
    assert len(buf) == 1
    assert buf.finish("c1", "a") is None


def test_drop_stale_uses_start_time():
    buf = StreamBuffer()
    old = buf.start("c1", "old", "#000", 1, P0)
    new = buf.start("c1", "new", "#000", 1, P0)
    old.started_at = 100.0
    new.started_at = 195.0
    assert buf.drop_stale(30.0, now=200.0) == 1
    assert buf.get("c1", "old") is None
    assert buf.get("c1", "new") is not None
