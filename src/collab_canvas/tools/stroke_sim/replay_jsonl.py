from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

import websockets

from collab_canvas.protocol.constants import (
    T_OPERATION,
    T_STREAM_END,
    T_STREAM_MOVE,
    T_STREAM_START,
    T_STROKE_END,
    T_STROKE_MOVE,
    T_STROKE_START,
    T_SYNC,
)
from collab_canvas.protocol.messages import dump_message, parse_client_message


def load_events(jsonl_path: Path) -> list[tuple[int | None, dict]]:
    """
    Read recorded messages from JSONL.

    Accepted line formats:
      - record_jsonl.py style: {"ts": <ms>, "msg": {...}}
      - or raw messages per line: {...}
    """
    events: list[tuple[int | None, dict]] = []
    for line in jsonl_path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        obj = json.loads(line)
        if isinstance(obj, dict) and isinstance(obj.get("msg"), dict):
            ts = obj.get("ts")
            events.append((int(ts) if isinstance(ts, (int, float)) else None, obj["msg"]))
        elif isinstance(obj, dict):
            events.append((None, obj))
    return events


# Recorded server traffic maps back onto the client messages that caused it.
# Commits and syncs are consequences, not inputs: they are skipped.
_FROM_SERVER = {
    T_STREAM_START: T_STROKE_START,
    T_STREAM_MOVE: T_STROKE_MOVE,
    T_STREAM_END: T_STROKE_END,
}
_SKIP = {T_SYNC, T_OPERATION}


def retarget(msg: dict, session: str) -> str | None:
    """
    Turn a recorded message into a client frame for `session`.

    Returns None for messages with no client-side counterpart. Raises
    pydantic.ValidationError if the result is not a valid client message.
    """
    t = msg.get("t")
    if t in _SKIP:
        return None
    # Extra fields (author, operation, cursor colour) are ignored by validation.
    out = {**msg, "t": _FROM_SERVER.get(t, t), "session": session}
    return dump_message(parse_client_message(json.dumps(out)))


async def replay(
    base_url: str,
    session: str,
    jsonl_path: Path,
    *,
    speed: float = 1.0,
    default_dt_ms: int = 0,
    only_t_prefix: str | None = None,
) -> int:
    """Replay recorded client messages into a session. Returns the number sent."""
    events = load_events(jsonl_path)
    sent = 0
    url = f"{base_url.rstrip('/')}/ws/{session}"
    async with websockets.connect(url, max_size=2**22) as ws:
        await ws.recv()  # sync
        prev_ts: int | None = None
        for ts, msg in events:
            t = msg.get("t")
            if only_t_prefix and (not isinstance(t, str) or not t.startswith(only_t_prefix)):
                continue

            if ts is not None and prev_ts is not None:
                dt_ms = max(0, ts - prev_ts)
            else:
                dt_ms = default_dt_ms

            prev_ts = ts if ts is not None else prev_ts
            if dt_ms:
                await asyncio.sleep((dt_ms / 1000.0) / max(0.01, speed))

            frame = retarget(msg, session)
            if frame is None:
                continue
            await ws.send(frame)
            sent += 1
    return sent


def main() -> None:
    ap = argparse.ArgumentParser(description="Replay client messages from JSONL into a session.")
    ap.add_argument("--url", default="ws://127.0.0.1:8000", help="Server base URL, e.g. ws://127.0.0.1:8000")
    ap.add_argument("--session", required=True, help="Target session id")
    ap.add_argument("--in", dest="inp", required=True, help="Input JSONL path")
    ap.add_argument("--speed", type=float, default=1.0, help="Speed multiplier (2.0 = 2x faster)")
    ap.add_argument("--default-dt-ms", type=int, default=0, help="Delay between messages if no timestamps")
    ap.add_argument(
        "--only-t-prefix",
        default=None,
        help="If set, only replay messages whose 't' starts with this prefix (e.g. 'stroke_').",
    )
    args = ap.parse_args()

    asyncio.run(
        replay(
            args.url,
            args.session,
            Path(args.inp),
            speed=args.speed,
            default_dt_ms=args.default_dt_ms,
            only_t_prefix=args.only_t_prefix,
        )
    )


if __name__ == "__main__":
    main()
