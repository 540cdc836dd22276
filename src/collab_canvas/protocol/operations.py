from __future__ import annotations

from collections.abc import Iterable
from typing import Annotated, Literal, TypeAlias, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .constants import DEFAULT_PRESSURE, OP_ADD_STROKE, OP_REMOVE_STROKE


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Point(_Frozen):
    """One input sample in canvas coordinates. `t` is a ms timestamp."""

    x: float
    y: float
    p: Annotated[float, Field(ge=0.0, le=1.0, description="pressure")] = DEFAULT_PRESSURE
    t: int = 0


class Stroke(_Frozen):
    """A completed freehand path. Built once, when its stream ends."""

    id: str
    color: str
    size: Annotated[float, Field(gt=0)]
    points: tuple[Point, ...]


# Draft operations: client intent, no ordering information.


class AddStroke(_Frozen):
    type: Literal["ADD_STROKE"] = OP_ADD_STROKE
    id: str
    stroke: Stroke

    def commit(self, seq: int) -> CommittedAddStroke:
        return CommittedAddStroke(id=self.id, stroke=self.stroke, seq=seq)


class RemoveStroke(_Frozen):
    type: Literal["REMOVE_STROKE"] = OP_REMOVE_STROKE
    id: str
    stroke_id: str

    def commit(self, seq: int) -> CommittedRemoveStroke:
        return CommittedRemoveStroke(id=self.id, stroke_id=self.stroke_id, seq=seq)


# Authoritative operations: the only shape a log stores or replays.
# `seq` is minted by OperationLog and nowhere else.


class CommittedAddStroke(_Frozen):
    type: Literal["ADD_STROKE"] = OP_ADD_STROKE
    id: str
    stroke: Stroke
    seq: Annotated[int, Field(ge=1)]


class CommittedRemoveStroke(_Frozen):
    type: Literal["REMOVE_STROKE"] = OP_REMOVE_STROKE
    id: str
    stroke_id: str
    seq: Annotated[int, Field(ge=1)]


DraftOperation: TypeAlias = Annotated[Union[AddStroke, RemoveStroke], Field(discriminator="type")]
Operation: TypeAlias = Annotated[
    Union[CommittedAddStroke, CommittedRemoveStroke], Field(discriminator="type")
]

OPERATIONS: TypeAdapter[list[Operation]] = TypeAdapter(list[Operation])


def visible_strokes(operations: Iterable[CommittedAddStroke | CommittedRemoveStroke]) -> list[Stroke]:
    """
    Fold an operation sequence, left to right, into the strokes on the canvas.

    - ADD_STROKE inserts by stroke id (a colliding id overwrites)
    - REMOVE_STROKE deletes by stroke id; removing an absent id is a no-op

    Two replicas folding the same sequence get the same list, in the same order.
    """
    visible: dict[str, Stroke] = {}
    for op in operations:
        if isinstance(op, CommittedAddStroke):
            visible[op.stroke.id] = op.stroke
        else:
            visible.pop(op.stroke_id, None)
    return list(visible.values())
