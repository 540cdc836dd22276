from __future__ import annotations

import logging

from collab_canvas.protocol.operations import (
    AddStroke,
    CommittedAddStroke,
    CommittedRemoveStroke,
    RemoveStroke,
    Stroke,
    visible_strokes,
)

logger = logging.getLogger(__name__)

Committed = CommittedAddStroke | CommittedRemoveStroke


class OperationLog:
    """
    Authoritative history of one session.

    - `operations` grows only by append and shrinks only by pop, so it stays
      sorted by seq
    - any fresh append clears the redo stack (branching timeline)
    - a redone operation is re-appended with a new seq, never its old one
    """

    def __init__(self) -> None:
        self._operations: list[Committed] = []
        self._redo: list[Committed] = []
        self._next_seq = 1

    def __len__(self) -> int:
        return len(self._operations)

    @property
    def next_seq(self) -> int:
        return self._next_seq

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def _mint_seq(self) -> int:
        seq = self._next_seq
        self._next_seq += 1
        return seq

    def append(self, draft: AddStroke | RemoveStroke) -> Committed:
        op = draft.commit(self._mint_seq())
        self._operations.append(op)
        self._redo.clear()
        return op

    def undo(self) -> Committed | None:
        """Pop the newest operation onto the redo stack; it keeps its original seq."""
        if not self._operations:
            return None
        op = self._operations.pop()
        self._redo.append(op)
        return op

    def redo(self) -> Committed | None:
        """Re-append the last undone operation under a fresh seq."""
        if not self._redo:
            return None
        op = self._redo.pop()
        redone = op.model_copy(update={"seq": self._mint_seq()})
        self._operations.append(redone)
        logger.debug("redo id=%s seq %d -> %d", op.id, op.seq, redone.seq)
        return redone

    def snapshot(self) -> list[Committed]:
        return list(self._operations)

    def visible_strokes(self) -> list[Stroke]:
        return visible_strokes(self._operations)
