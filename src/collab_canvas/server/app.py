from __future__ import annotations

import itertools
import logging
import uuid

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect, status
from fastapi.responses import Response
from pydantic import ValidationError

from collab_canvas.protocol.messages import parse_client_message
from collab_canvas.protocol.operations import OPERATIONS

from .config import Settings, get_settings
from .rendering import render_strokes_png
from .sessions import REGISTRY, Session, SessionRegistry
from .sync import handle, join, leave

logger = logging.getLogger(__name__)


def create_app(registry: SessionRegistry | None = None, settings: Settings | None = None) -> FastAPI:
    registry = registry if registry is not None else REGISTRY
    app = FastAPI(title="collab-canvas")
    joins = itertools.count()

    def cfg() -> Settings:
        return settings or get_settings()

    def existing(session_id: str) -> Session:
        # Introspection never creates sessions.
        session = registry.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"unknown session {session_id!r}")
        return session

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    @app.get("/sessions/{session_id}/operations")
    def operations(session_id: str):
        return OPERATIONS.dump_python(existing(session_id).log.snapshot(), mode="json")

    @app.get("/sessions/{session_id}/strokes")
    def strokes(session_id: str):
        return [s.model_dump(mode="json") for s in existing(session_id).log.visible_strokes()]

    @app.get("/sessions/{session_id}/render.png")
    def render(session_id: str):
        png = render_strokes_png(
            strokes=existing(session_id).log.visible_strokes(),
            max_px=cfg().render_size_px,
        )
        return Response(content=png, media_type="image/png")

    async def serve(ws: WebSocket, session_id: str | None) -> None:
        if not session_id or not session_id.strip():
            logger.warning("refusing connection from %s: no session id", getattr(ws.client, "host", None))
            await ws.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        await ws.accept()
        settings_ = cfg()
        session = await registry.get_or_create(session_id)
        conn_id = uuid.uuid4().hex[:10]
        palette = settings_.cursor_palette
        color = palette[next(joins) % len(palette)]

        try:
            await join(session, conn_id, ws, color)
            while True:
                frame = await ws.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))
                # Binary frames go through the same validation as text.
                raw = frame["text"] if frame.get("text") is not None else frame.get("bytes") or b""
                try:
                    msg = parse_client_message(raw)
                except ValidationError as e:
                    # Malformed frames are rejected here; the connection stays up.
                    logger.warning("[ws:%s] dropping malformed message from %s (%d errors)",
                                   session_id, conn_id, e.error_count())
                    continue
                await handle(session, conn_id, msg, settings_)
                if conn_id not in session.clients:
                    # Dropped after a failed send: it would miss broadcasts from here on.
                    logger.warning("[ws:%s] closing %s, no longer a member", session_id, conn_id)
                    await ws.close(code=status.WS_1011_INTERNAL_ERROR)
                    break
        except WebSocketDisconnect:
            pass
        finally:
            await leave(session, conn_id)
            await registry.release(session)

    @app.websocket("/ws")
    async def ws_query(ws: WebSocket, session: str | None = None):
        await serve(ws, session)

    @app.websocket("/ws/{session_id}")
    async def ws_path(ws: WebSocket, session_id: str):
        await serve(ws, session_id)

    return app


app = create_app()
