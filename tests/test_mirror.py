from collab_canvas.client.connection import CanvasClient
from collab_canvas.client.mirror import OperationMirror
from collab_canvas.protocol.messages import (
    CommitOperation,
    CursorBroadcast,
    RedoBroadcast,
    Sync,
    UndoBroadcast,
)

from .conftest import add


def test_replace_append_remove():
    m = OperationMirror()
    a, b = add("a").commit(1), add("b").commit(2)
    m.replace_all([a])
    m.append(b)
    assert m.snapshot() == (a, b)
    m.remove_by_id("a")
    assert m.snapshot() == (b,)
    m.remove_by_id("missing")
    assert len(m) == 1


def test_apply_undo_with_lower_seq_removes_by_id():
    m = OperationMirror()
    a, b = add("a").commit(1), add("b").commit(2)
    m.apply(Sync(session="r1", conn_id="c", operations=[a, b]))
    assert m.apply(UndoBroadcast(session="r1", operation=a))
    assert [op.id for op in m.snapshot()] == ["b"]
    assert m.apply(RedoBroadcast(session="r1", operation=a.model_copy(update={"seq": 3})))
    assert [op.seq for op in m.snapshot()] == [2, 3]


def test_apply_ignores_non_history_messages():
    m = OperationMirror()
    m.apply(CommitOperation(session="r1", operation=add("a").commit(1)))
    assert m.apply(CursorBroadcast(session="r1", author="x", x=0, y=0, color="#000")) is False
    assert len(m) == 1


def test_client_dispatch_feeds_mirror_and_listeners():
    client = CanvasClient("ws://example.invalid/", "r1")
    assert client.url == "ws://example.invalid/ws/r1"
    seen = []
    client.on("operation", seen.append)
    client.dispatch(Sync(session="r1", conn_id="me", operations=[]).model_dump_json())
    msg = client.dispatch(CommitOperation(session="r1", operation=add("a").commit(1)).model_dump_json())
    assert client.conn_id == "me"
    assert seen == [msg]
    assert [s.id for s in client.mirror.visible_strokes()] == ["a"]
