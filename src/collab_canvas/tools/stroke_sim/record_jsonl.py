from __future__ import annotations

import argparse
import asyncio
import json
import time
from pathlib import Path

from collab_canvas.client.connection import CanvasClient


def _now_ms() -> int:
    return int(time.time() * 1000)


async def record(base_url: str, session: str, out_path: Path, *, echo: bool) -> None:
    """Join a session as a passive client and append every server message to JSONL."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    client = CanvasClient(base_url, session)
    with out_path.open("a", encoding="utf-8") as f:
        async with client:
            while True:
                msg = await client.recv()
                if echo:
                    print(f"[record] t={msg.t} ops={len(client.mirror)}")
                f.write(json.dumps({"ts": _now_ms(), "msg": msg.model_dump(mode="json")}, ensure_ascii=False) + "\n")
                f.flush()


def main() -> None:
    ap = argparse.ArgumentParser(description="Record a session's server traffic to a JSONL file.")
    ap.add_argument("--url", default="ws://127.0.0.1:8000", help="Server base URL, e.g. ws://127.0.0.1:8000")
    ap.add_argument("--session", required=True, help="Session id to join")
    ap.add_argument("--out", required=True, help="Output JSONL path")
    ap.add_argument("--print", action="store_true", help="Print received message types to stdout")
    args = ap.parse_args()

    asyncio.run(record(args.url, args.session, Path(args.out), echo=args.print))


if __name__ == "__main__":
    main()
