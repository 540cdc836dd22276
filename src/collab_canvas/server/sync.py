from __future__ import annotations

import logging

from pydantic import BaseModel

from collab_canvas.protocol.messages import (
    CommitOperation,
    CursorBroadcast,
    CursorMove,
    InboundMsg,
    Redo,
    RedoBroadcast,
    StreamEnd,
    StreamMove,
    StreamStart,
    StrokeEnd,
    StrokeMove,
    StrokeStart,
    Sync,
    Undo,
    UndoBroadcast,
    dump_message,
)
from collab_canvas.protocol.operations import AddStroke

from .config import Settings, get_settings
from .sessions import Member, Peer, Session, broadcast

logger = logging.getLogger(__name__)

# All handlers run under the session lock, so each connection sees commits,
# undos and redos in the order the log produced them.


async def join(session: Session, conn_id: str, peer: Peer, color: str) -> None:
    async with session.lock:
        session.clients[conn_id] = Member(peer=peer, color=color)
        sync = Sync(session=session.session_id, conn_id=conn_id, operations=session.log.snapshot())
        await send_to(session, conn_id, sync)
    logger.info("%s joined %s (%d ops, %d clients)",
                conn_id, session.session_id, len(session.log), len(session.clients))


async def send_to(session: Session, conn_id: str, msg: BaseModel) -> None:
    member = session.clients.get(conn_id)
    if member is None:
        return
    await member.peer.send_text(dump_message(msg))


async def leave(session: Session, conn_id: str) -> None:
    async with session.lock:
        session.clients.pop(conn_id, None)
        session.buffer.drop_connection(conn_id)
    logger.info("%s left %s (%d clients)", conn_id, session.session_id, len(session.clients))


async def handle(session: Session, conn_id: str, msg: InboundMsg, settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    sid = session.session_id
    if msg.session != sid:
        logger.warning("%s sent %s for session %s while joined to %s", conn_id, msg.t, msg.session, sid)
        return
    if settings.debug_log_msgs:
        logger.info("[ws:%s] in t=%s from=%s", sid, msg.t, conn_id)

    async with session.lock:
        if conn_id not in session.clients:
            logger.warning("ignoring %s from %s: not a member of %s", msg.t, conn_id, sid)
            return

        if isinstance(msg, StrokeStart):
            if settings.stroke_idle_timeout_s is not None:
                session.buffer.drop_stale(settings.stroke_idle_timeout_s)
            session.buffer.start(conn_id, msg.id, msg.color, msg.size, msg.start_point)
            out = StreamStart(
                session=sid,
                author=conn_id,
                id=msg.id,
                color=msg.color,
                size=msg.size,
                start_point=msg.start_point,
            )
            await broadcast(session, out, exclude=conn_id)

        elif isinstance(msg, StrokeMove):
            if session.buffer.extend(conn_id, msg.id, msg.points):
                await broadcast(
                    session,
                    StreamMove(session=sid, author=conn_id, id=msg.id, points=msg.points),
                    exclude=conn_id,
                )

        elif isinstance(msg, StrokeEnd):
            stroke = session.buffer.finish(conn_id, msg.id)
            if stroke is None:
                return
            # Stroke ids are client-minted UUIDs, good enough as operation ids.
            op = session.log.append(AddStroke(id=stroke.id, stroke=stroke))
            logger.info("commit %s seq=%d in %s (%d points)", op.id, op.seq, sid, len(stroke.points))
            # The originator gets the commit too, to reconcile its optimistic stroke.
            await broadcast(session, CommitOperation(session=sid, operation=op))
            await broadcast(session, StreamEnd(session=sid, author=conn_id, id=msg.id), exclude=conn_id)

        elif isinstance(msg, Undo):
            op = session.log.undo()
            if op is None:
                logger.debug("undo in %s: nothing to undo", sid)
                return
            await broadcast(session, UndoBroadcast(session=sid, operation=op))

        elif isinstance(msg, Redo):
            op = session.log.redo()
            if op is None:
                logger.debug("redo in %s: nothing to redo", sid)
                return
            await broadcast(session, RedoBroadcast(session=sid, operation=op))

        elif isinstance(msg, CursorMove):
            color = session.clients[conn_id].color
            await broadcast(
                session,
                CursorBroadcast(session=sid, author=conn_id, x=msg.x, y=msg.y, color=color),
                exclude=conn_id,
            )
