from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Callable, Sequence

import websockets
from pydantic import BaseModel

from collab_canvas.protocol.messages import (
    CursorMove,
    OutboundMsg,
    Redo,
    StrokeEnd,
    StrokeMove,
    StrokeStart,
    Sync,
    Undo,
    dump_message,
    parse_server_message,
)
from collab_canvas.protocol.operations import Point

from .mirror import OperationMirror

logger = logging.getLogger(__name__)

Listener = Callable[[OutboundMsg], None]


class CanvasClient:
    """
    Thin protocol wrapper over one WebSocket connection to a session.

    Every received message is applied to `mirror` first, then handed to the
    listeners registered for its `t`. No drawing or undo decisions here.
    """

    def __init__(self, base_url: str, session: str) -> None:
        self.session = session
        self.url = f"{base_url.rstrip('/')}/ws/{session}"
        self.mirror = OperationMirror()
        self.conn_id: str | None = None
        self._ws = None
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    async def connect(self) -> None:
        self._ws = await websockets.connect(self.url, max_size=2**22)
        logger.info("connected to %s", self.url)

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()
            self._ws = None

    async def __aenter__(self) -> CanvasClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    def on(self, t: str, callback: Listener) -> None:
        self._listeners[t].append(callback)

    def dispatch(self, raw: str | bytes) -> OutboundMsg:
        msg = parse_server_message(raw)
        if isinstance(msg, Sync):
            self.conn_id = msg.conn_id
        self.mirror.apply(msg)
        for cb in self._listeners.get(msg.t, ()):
            cb(msg)
        return msg

    async def recv(self) -> OutboundMsg:
        if self._ws is None:
            raise RuntimeError("not connected")
        return self.dispatch(await self._ws.recv())

    async def run(self) -> None:
        """Consume messages until the server closes the connection."""
        if self._ws is None:
            raise RuntimeError("not connected")
        async for raw in self._ws:
            self.dispatch(raw)

    async def _send(self, msg: BaseModel) -> None:
        if self._ws is None:
            raise RuntimeError("not connected")
        await self._ws.send(dump_message(msg))

    # --- emitters ---

    async def stroke_start(self, stroke_id: str, color: str, size: float, start_point: Point) -> None:
        await self._send(
            StrokeStart(session=self.session, id=stroke_id, color=color, size=size, start_point=start_point)
        )

    async def stroke_move(self, stroke_id: str, points: Sequence[Point]) -> None:
        await self._send(StrokeMove(session=self.session, id=stroke_id, points=list(points)))

    async def stroke_end(self, stroke_id: str) -> None:
        await self._send(StrokeEnd(session=self.session, id=stroke_id))

    async def undo(self) -> None:
        await self._send(Undo(session=self.session))

    async def redo(self) -> None:
        await self._send(Redo(session=self.session))

    async def cursor(self, x: float, y: float) -> None:
        await self._send(CursorMove(session=self.session, x=x, y=y))

    async def draw_stroke(
        self, points: Sequence[Point], *, color: str = "#000000", size: float = 4.0, batch: int = 16
    ) -> str:
        """Stream a whole stroke (start, batched moves, end). Returns the new stroke id."""
        if not points:
            raise ValueError("a stroke needs at least one point")
        stroke_id = uuid.uuid4().hex
        await self.stroke_start(stroke_id, color, size, points[0])
        rest = list(points[1:])
        for i in range(0, len(rest), batch):
            await self.stroke_move(stroke_id, rest[i : i + batch])
        await self.stroke_end(stroke_id)
        return stroke_id
