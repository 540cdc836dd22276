from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple

from collab_canvas.protocol.operations import Point, Stroke

logger = logging.getLogger(__name__)


class BufferKey(NamedTuple):
    conn_id: str
    stroke_id: str


@dataclass
class PendingStroke:
    stroke_id: str
    color: str
    size: float
    points: list[Point]
    started_at: float = field(default_factory=time.monotonic)

    def freeze(self) -> Stroke:
        return Stroke(id=self.stroke_id, color=self.color, size=self.size, points=tuple(self.points))


class StreamBuffer:
    """
    In-progress strokes of one session, keyed by (connection, stroke).

    Entries never reach the operation log directly: `finish` turns one into an
    immutable Stroke and forgets it. Unknown keys on `extend`/`finish` are
    protocol violations that get logged and ignored.
    """

    def __init__(self) -> None:
        self._pending: dict[BufferKey, PendingStroke] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, key: object) -> bool:
        return key in self._pending

    def get(self, conn_id: str, stroke_id: str) -> PendingStroke | None:
        return self._pending.get(BufferKey(conn_id, stroke_id))

    def start(self, conn_id: str, stroke_id: str, color: str, size: float, point: Point) -> PendingStroke:
        key = BufferKey(conn_id, stroke_id)
        if key in self._pending:
            logger.warning("restarting stroke %s from %s; dropping %d buffered points",
                           stroke_id, conn_id, len(self._pending[key].points))
        entry = PendingStroke(stroke_id=stroke_id, color=color, size=size, points=[point])
        self._pending[key] = entry
        return entry

    def extend(self, conn_id: str, stroke_id: str, points: Iterable[Point]) -> bool:
        entry = self._pending.get(BufferKey(conn_id, stroke_id))
        if entry is None:
            logger.warning("move for unknown stroke %s from %s", stroke_id, conn_id)
            return False
        entry.points.extend(points)
        return True

    def finish(self, conn_id: str, stroke_id: str) -> Stroke | None:
        entry = self._pending.pop(BufferKey(conn_id, stroke_id), None)
        if entry is None:
            logger.warning("end for unknown stroke %s from %s", stroke_id, conn_id)
            return None
        return entry.freeze()

    def drop_connection(self, conn_id: str) -> int:
        keys = [k for k in self._pending if k.conn_id == conn_id]
        for k in keys:
            del self._pending[k]
        if keys:
            logger.info("discarded %d unfinished stroke(s) from %s", len(keys), conn_id)
        return len(keys)

    def drop_stale(self, max_age_s: float, now: float | None = None) -> int:
        """Discard strokes started more than `max_age_s` ago (abandoned streams)."""
        now = time.monotonic() if now is None else now
        keys = [k for k, e in self._pending.items() if now - e.started_at > max_age_s]
        for k in keys:
            del self._pending[k]
        if keys:
            logger.info("discarded %d stale stroke(s)", len(keys))
        return len(keys)
