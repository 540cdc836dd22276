from __future__ import annotations

from typing import Annotated, Literal, TypeAlias, Union

from pydantic import BaseModel, Field, TypeAdapter

from .operations import Operation, Point

# Every message is a JSON object tagged by `t`. Client messages name the
# session they target; the server ignores any that disagree with the
# session the connection joined.


# --- client -> server ---


class StrokeStart(BaseModel):
    t: Literal["stroke_start"] = "stroke_start"
    session: str
    id: str
    color: str
    size: Annotated[float, Field(gt=0)]
    start_point: Point


class StrokeMove(BaseModel):
    t: Literal["stroke_move"] = "stroke_move"
    session: str
    id: str
    points: list[Point]


class StrokeEnd(BaseModel):
    t: Literal["stroke_end"] = "stroke_end"
    session: str
    id: str


class Undo(BaseModel):
    t: Literal["undo"] = "undo"
    session: str


class Redo(BaseModel):
    t: Literal["redo"] = "redo"
    session: str


class CursorMove(BaseModel):
    t: Literal["cursor"] = "cursor"
    session: str
    x: float
    y: float


# --- server -> clients ---


class Sync(BaseModel):
    t: Literal["sync"] = "sync"
    session: str
    conn_id: str
    operations: list[Operation]


class StreamStart(BaseModel):
    t: Literal["stream_start"] = "stream_start"
    session: str
    author: str
    id: str
    color: str
    size: float
    start_point: Point


class StreamMove(BaseModel):
    t: Literal["stream_move"] = "stream_move"
    session: str
    author: str
    id: str
    points: list[Point]


class StreamEnd(BaseModel):
    t: Literal["stream_end"] = "stream_end"
    session: str
    author: str
    id: str


class CommitOperation(BaseModel):
    t: Literal["operation"] = "operation"
    session: str
    operation: Operation


class UndoBroadcast(BaseModel):
    """Carries the removed operation with its original seq; receivers drop it by id."""

    t: Literal["undo"] = "undo"
    session: str
    operation: Operation


class RedoBroadcast(BaseModel):
    """Carries the re-added operation with its new seq."""

    t: Literal["redo"] = "redo"
    session: str
    operation: Operation


class CursorBroadcast(BaseModel):
    t: Literal["cursor"] = "cursor"
    session: str
    author: str
    x: float
    y: float
    color: str


InboundMsg: TypeAlias = Annotated[
    Union[StrokeStart, StrokeMove, StrokeEnd, Undo, Redo, CursorMove],
    Field(discriminator="t"),
]
OutboundMsg: TypeAlias = Annotated[
    Union[
        Sync,
        StreamStart,
        StreamMove,
        StreamEnd,
        CommitOperation,
        UndoBroadcast,
        RedoBroadcast,
        CursorBroadcast,
    ],
    Field(discriminator="t"),
]

_INBOUND: TypeAdapter[InboundMsg] = TypeAdapter(InboundMsg)
_OUTBOUND: TypeAdapter[OutboundMsg] = TypeAdapter(OutboundMsg)


def parse_client_message(raw: str | bytes) -> InboundMsg:
    """Validate one client frame. Raises pydantic.ValidationError if malformed."""
    return _INBOUND.validate_json(raw)


def parse_server_message(raw: str | bytes) -> OutboundMsg:
    return _OUTBOUND.validate_json(raw)


def dump_message(msg: BaseModel) -> str:
    return msg.model_dump_json()
