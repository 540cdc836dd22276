from .constants import (
    T_CURSOR,
    T_OPERATION,
    T_REDO,
    T_STREAM_END,
    T_STREAM_MOVE,
    T_STREAM_START,
    T_STROKE_END,
    T_STROKE_MOVE,
    T_STROKE_START,
    T_SYNC,
    T_UNDO,
)
from .operations import (
    AddStroke,
    CommittedAddStroke,
    CommittedRemoveStroke,
    DraftOperation,
    Operation,
    Point,
    RemoveStroke,
    Stroke,
    visible_strokes,
)

__all__ = [
    "T_CURSOR",
    "T_OPERATION",
    "T_REDO",
    "T_STREAM_END",
    "T_STREAM_MOVE",
    "T_STREAM_START",
    "T_STROKE_END",
    "T_STROKE_MOVE",
    "T_STROKE_START",
    "T_SYNC",
    "T_UNDO",
    "AddStroke",
    "CommittedAddStroke",
    "CommittedRemoveStroke",
    "DraftOperation",
    "Operation",
    "Point",
    "RemoveStroke",
    "Stroke",
    "visible_strokes",
]
