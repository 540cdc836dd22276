from __future__ import annotations

import json

from collab_canvas.protocol.operations import AddStroke, Point, RemoveStroke, Stroke


class FakePeer:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def send_text(self, data: str) -> None:
        self.sent.append(json.loads(data))

    def types(self) -> list[str]:
        return [m["t"] for m in self.sent]

    def clear(self) -> None:
        self.sent.clear()


class DeadPeer:
    async def send_text(self, data: str) -> None:
        raise ConnectionResetError("gone")


def make_stroke(stroke_id: str, n: int = 2, color: str = "#000", size: float = 5) -> Stroke:
    pts = tuple(Point(x=float(i), y=float(i), p=0.5, t=i) for i in range(n))
    return Stroke(id=stroke_id, color=color, size=size, points=pts)


def add(stroke_id: str, n: int = 2) -> AddStroke:
    return AddStroke(id=stroke_id, stroke=make_stroke(stroke_id, n))


def remove(op_id: str, stroke_id: str) -> RemoveStroke:
    return RemoveStroke(id=op_id, stroke_id=stroke_id)


class FlakyPeer(FakePeer):
    """Fails its first `failures` sends, then behaves."""

    def __init__(self, failures: int = 1) -> None:
        super().__init__()
        self.failures = failures

    async def send_text(self, data: str) -> None:
        if self.failures:
            self.failures -= 1
            raise ConnectionResetError("blip")
        await super().send_text(data)
