from __future__ import annotations

import argparse
import logging

import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Run the collab-canvas session server.")
    ap.add_argument("--host", default=settings.host)
    ap.add_argument("--port", type=int, default=settings.port)
    ap.add_argument("--log-level", default=settings.log_level)
    args = ap.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("collab_canvas.server.app:app", host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
