from __future__ import annotations

from collections.abc import Iterable

from collab_canvas.protocol.messages import (
    CommitOperation,
    OutboundMsg,
    RedoBroadcast,
    Sync,
    UndoBroadcast,
)
from collab_canvas.protocol.operations import (
    CommittedAddStroke,
    CommittedRemoveStroke,
    Stroke,
    visible_strokes,
)

Committed = CommittedAddStroke | CommittedRemoveStroke


class OperationMirror:
    """
    Client-side copy of a session's authoritative log.

    Holds no decision logic and never assigns seq: it only applies what the
    server sends. Undo is applied by id, not by popping the tail, because an
    undo carries the removed op's original seq.
    """

    def __init__(self) -> None:
        self._operations: list[Committed] = []

    def __len__(self) -> int:
        return len(self._operations)

    def replace_all(self, ops: Iterable[Committed]) -> None:
        self._operations = list(ops)

    def append(self, op: Committed) -> None:
        self._operations.append(op)

    def remove_by_id(self, op_id: str) -> None:
        self._operations = [op for op in self._operations if op.id != op_id]

    def snapshot(self) -> tuple[Committed, ...]:
        return tuple(self._operations)

    def visible_strokes(self) -> list[Stroke]:
        return visible_strokes(self._operations)

    def apply(self, msg: OutboundMsg) -> bool:
        """Apply one server message. Returns False for messages that don't touch history."""
        if isinstance(msg, Sync):
            self.replace_all(msg.operations)
        elif isinstance(msg, (CommitOperation, RedoBroadcast)):
            self.append(msg.operation)
        elif isinstance(msg, UndoBroadcast):
            self.remove_by_id(msg.operation.id)
        else:
            return False
        return True
