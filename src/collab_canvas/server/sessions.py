from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import BaseModel

from collab_canvas.protocol.messages import dump_message

from .history import OperationLog
from .streaming import StreamBuffer

logger = logging.getLogger(__name__)


class Peer(Protocol):
    async def send_text(self, data: str) -> None: ...


@dataclass
class Member:
    peer: Peer
    color: str


@dataclass
class Session:
    session_id: str
    log: OperationLog = field(default_factory=OperationLog)
    buffer: StreamBuffer = field(default_factory=StreamBuffer)
    # conn_id -> member, in join order
    clients: dict[str, Member] = field(default_factory=dict)
    # One boundary for log, buffer and fan-out: a handler holds it from
    # mutation until every peer has been sent the result.
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class EvictionPolicy(Protocol):
    def should_evict(self, session: Session) -> bool: ...


class KeepForever:
    """Sessions live for the process lifetime; memory grows with session count."""

    def should_evict(self, session: Session) -> bool:
        return False


class EvictWhenEmpty:
    """Forget a session (and its history) once its last client leaves."""

    def should_evict(self, session: Session) -> bool:
        return not session.clients


class SessionRegistry:
    def __init__(self, eviction: EvictionPolicy | None = None) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()
        self.eviction: EvictionPolicy = eviction or KeepForever()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    async def get_or_create(self, session_id: str) -> Session:
        async with self._lock:
            if session_id not in self._sessions:
                logger.info("creating session %s", session_id)
                self._sessions[session_id] = Session(session_id=session_id)
            return self._sessions[session_id]

    async def release(self, session: Session) -> bool:
        """Consult the eviction policy after a client left. Returns True if evicted."""
        async with self._lock:
            if self._sessions.get(session.session_id) is not session:
                return False
            if not self.eviction.should_evict(session):
                return False
            del self._sessions[session.session_id]
        logger.info("evicted session %s", session.session_id)
        return True


REGISTRY = SessionRegistry()


async def broadcast(session: Session, msg: BaseModel, exclude: str | None = None) -> None:
    dead: list[str] = []
    data = dump_message(msg)
    for conn_id, member in list(session.clients.items()):
        if exclude == conn_id:
            continue
        try:
            await member.peer.send_text(data)
        except Exception:
            logger.warning("send to %s in %s failed; dropping peer", conn_id, session.session_id)
            dead.append(conn_id)
    for conn_id in dead:
        session.clients.pop(conn_id, None)
        session.buffer.drop_connection(conn_id)
